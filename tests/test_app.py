from unittest import mock

import pytest

from servermon.app import AppState
from servermon.config import AppConfig, ConfigError, config_from_json, export_config
from servermon.server import ServerConfig


@pytest.fixture
def offline():
    with mock.patch("socket.socket", side_effect=OSError), mock.patch(
        "socket.create_connection", side_effect=OSError
    ):
        yield


@pytest.fixture
def state(tmp_path):
    return AppState(tmp_path / "servermon.cfg", load=False)


def test_defaults(state):
    assert [s.name for s in state.servers] == ["Server A", "Server B"]
    assert [s.ip for s in state.servers] == ["192.1.1.1", "192.1.1.2"]
    assert [s.ports for s in state.servers] == [[22, 80], [443]]
    assert state.refresh_interval == 600


def test_refresh_due_immediately(state, offline):
    now = state.last_refresh + 601
    assert state.refresh_if_due(now) is True
    assert state.last_refresh == now
    assert all(s.last_checked is not None for s in state.servers)
    assert all(s.is_online is False for s in state.servers)
    assert state.refresh_if_due(now + 1) is False
    assert state.refresh_if_due(now + state.refresh_interval) is True


def test_refresh_disabled(state):
    state.refresh_interval = 0
    assert state.refresh_if_due(state.last_refresh + 10_000) is False
    assert state.seconds_until_refresh() is None


def test_seconds_until_refresh(state):
    state.last_refresh = 100.0
    assert state.seconds_until_refresh(100.0) == 600
    assert state.seconds_until_refresh(110.5) == 589
    assert state.seconds_until_refresh(5000.0) == 0


def test_set_refresh_interval(state):
    assert state.set_refresh_interval("30") is True
    assert state.refresh_interval == 30
    for bad in ["abc", "-5", "", " 5", "1.5"]:
        assert state.set_refresh_interval(bad) is False
        assert state.refresh_interval == 30
    assert state.set_refresh_interval("0") is True
    assert state.refresh_interval == 0


def test_add_server(state):
    server = state.add_server("web", "10.0.0.5", "80, 22,foo,70000")
    assert state.servers[-1] is server
    assert server.ports == [22, 80]
    assert server.is_online is False
    assert len(state.servers) == 3


def test_add_server_accepts_integer_ports(state):
    server = state.add_server("v6", "::1", [443, 8080, 22])
    assert server.ports == [22, 443, 8080]


def test_add_server_rejects_bad_ip(state):
    with pytest.raises(ValueError):
        state.add_server("bad", "not-an-ip", "22")
    assert len(state.servers) == 2


def test_edit_server(state):
    server = state.edit_server(1, "renamed", "10.1.2.3", "9000,443")
    assert state.servers[1] is server
    assert (server.name, server.ip, server.ports) == ("renamed", "10.1.2.3", [443, 9000])


def test_edit_server_errors(state):
    with pytest.raises(ValueError):
        state.edit_server(0, "x", "999.1.1.1", "22")
    assert state.servers[0].ip == "192.1.1.1"
    with pytest.raises(IndexError):
        state.edit_server(7, "x", "10.0.0.1", "22")


def test_remove_server(state):
    removed = state.remove_server(0)
    assert removed.name == "Server A"
    assert [s.name for s in state.servers] == ["Server B"]
    with pytest.raises(IndexError):
        state.remove_server(5)


def test_export_import_round_trip(tmp_path, state, offline):
    state.add_server("db", "10.0.0.9", "5432,22")
    state.set_refresh_interval("45")
    path = tmp_path / "exported.cfg"
    state.export_config(path)

    other = AppState(tmp_path / "elsewhere.cfg", load=False)
    other.import_config(path)
    assert [s.to_config() for s in other.servers] == [s.to_config() for s in state.servers]
    assert other.refresh_interval == 45
    assert all(s.last_checked is not None for s in other.servers)
    assert all(s.open_ports == [] for s in other.servers)


def test_loads_config_on_start(tmp_path, offline):
    path = tmp_path / "servermon.cfg"
    export_config(AppConfig([ServerConfig("solo", "127.0.0.1", [80])], 15), path)
    state = AppState(path)
    assert [s.name for s in state.servers] == ["solo"]
    assert state.refresh_interval == 15


def test_corrupt_config_keeps_defaults(tmp_path):
    path = tmp_path / "servermon.cfg"
    path.write_text("{ not json", encoding="utf-8")
    state = AppState(path)
    assert [s.name for s in state.servers] == ["Server A", "Server B"]
    assert state.refresh_interval == 600


def test_import_missing_file_raises(tmp_path, state):
    with pytest.raises(ConfigError):
        state.import_config(tmp_path / "absent.cfg")
    assert len(state.servers) == 2


def test_update_status_records_open_ports(tmp_path):
    state = AppState(tmp_path / "servermon.cfg", load=False)
    state.servers = []
    state.add_server("local", "127.0.0.1", "22,80")
    with mock.patch("socket.socket", side_effect=OSError), mock.patch(
        "socket.create_connection", return_value=mock.MagicMock()
    ):
        state.update_status()
    server = state.servers[0]
    assert server.open_ports == [22, 80]
    assert server.is_online is False


def test_save_on_exit(state):
    state.remove_server(1)
    state.save_on_exit()
    saved = config_from_json(state.config_path.read_text(encoding="utf-8"))
    assert saved.servers == [ServerConfig("Server A", "192.1.1.1", [22, 80])]
    assert saved.refresh_interval_secs == 600