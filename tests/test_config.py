import json
from pathlib import Path

import pytest

from servermon.config import (
    AppConfig,
    ConfigError,
    config_from_json,
    config_to_json,
    default_config_path,
    export_config,
    import_config,
)
from servermon.server import ServerConfig


@pytest.fixture
def sample():
    return AppConfig(
        [
            ServerConfig("Server A", "192.1.1.1", [80, 22]),
            ServerConfig("Server B", "192.1.1.2", [443]),
        ],
        600,
    )


def test_default_config_path():
    path = default_config_path()
    assert path.name == ".servermon.cfg"
    assert path.parent == Path.home()


def test_default_interval():
    assert AppConfig().refresh_interval_secs == 600
    assert AppConfig().servers == []


def test_json_structure(sample):
    document = json.loads(config_to_json(sample))
    assert document == {
        "servers": [
            {"name": "Server A", "ip": "192.1.1.1", "ports": [22, 80]},
            {"name": "Server B", "ip": "192.1.1.2", "ports": [443]},
        ],
        "refresh_interval_secs": 600,
    }


def test_json_is_pretty_with_field_order(sample):
    text = config_to_json(sample)
    assert text.startswith('{\n  "servers": [\n    {\n      "name": "Server A"')
    assert text.index('"servers"') < text.index('"refresh_interval_secs"')


def test_json_round_trip(sample):
    assert config_from_json(config_to_json(sample)) == sample


def test_from_json_sorts_ports():
    text = json.dumps(
        {"servers": [{"name": "a", "ip": "10.0.0.1", "ports": [443, 22]}],
         "refresh_interval_secs": 30}
    )
    config = config_from_json(text)
    assert config.servers[0].ports == [22, 443]
    assert config.refresh_interval_secs == 30


def test_from_json_ignores_unknown_fields():
    text = json.dumps(
        {"servers": [{"name": "a", "ip": "10.0.0.1", "ports": [], "extra": 1}],
         "refresh_interval_secs": 0, "theme": "dark"}
    )
    config = config_from_json(text)
    assert config == AppConfig([ServerConfig("a", "10.0.0.1", [])], 0)


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        '{"servers": []}',
        '{"refresh_interval_secs": 5}',
        '{"servers": [{"name": "a", "ip": "1.1.1.1"}], "refresh_interval_secs": 5}',
        '{"servers": [{"name": "a", "ip": "1.1.1.1", "ports": [70000]}], "refresh_interval_secs": 5}',
        '{"servers": [{"name": "a", "ip": "1.1.1.1", "ports": [-1]}], "refresh_interval_secs": 5}',
        '{"servers": [{"name": 3, "ip": "1.1.1.1", "ports": []}], "refresh_interval_secs": 5}',
        '{"servers": [], "refresh_interval_secs": -5}',
        '{"servers": [], "refresh_interval_secs": 5.0}',
        '{"servers": [], "refresh_interval_secs": true}',
        '{"servers": {}, "refresh_interval_secs": 5}',
    ],
)
def test_from_json_rejects_bad_documents(text):
    with pytest.raises(ConfigError):
        config_from_json(text)


def test_export_then_import(tmp_path, sample):
    path = tmp_path / "servermon.cfg"
    export_config(sample, path)
    assert import_config(path) == sample
    assert import_config(str(path)) == sample


def test_export_writes_json_text(tmp_path, sample):
    path = tmp_path / "servermon.cfg"
    export_config(sample, path)
    assert path.read_text(encoding="utf-8") == config_to_json(sample)


def test_import_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        import_config(tmp_path / "absent.cfg")


def test_import_malformed_file(tmp_path):
    path = tmp_path / "bad.cfg"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError):
        import_config(path)


def test_export_to_directory_fails(tmp_path, sample):
    with pytest.raises(ConfigError):
        export_config(sample, tmp_path)