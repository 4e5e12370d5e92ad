"""Reading and writing the monitor's JSON configuration file."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from servermon.server import MAX_PORT, ServerConfig

CONFIG_FILE_NAME = ".servermon.cfg"
DEFAULT_REFRESH_INTERVAL_SECS = 600
_MAX_U64 = 2**64 - 1

PathLike = Union[str, Path]


class ConfigError(Exception):
    """Raised when a configuration cannot be read, parsed or written."""


@dataclass
class AppConfig:
    """The saved list of servers and the refresh interval in seconds."""

    servers: list[ServerConfig] = field(default_factory=list)
    refresh_interval_secs: int = DEFAULT_REFRESH_INTERVAL_SECS


def default_config_path() -> Path:
    """Return the configuration file in the user's home directory."""
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ConfigError("could not find home directory") from exc
    return home / CONFIG_FILE_NAME


def config_to_json(config: AppConfig) -> str:
    """Serialise a configuration as indented JSON, ports sorted."""
    document = {
        "servers": [
            {"name": server.name, "ip": server.ip, "ports": sorted(server.ports)}
            for server in config.servers
        ],
        "refresh_interval_secs": config.refresh_interval_secs,
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def _field(mapping: dict[str, Any], key: str, where: str) -> Any:
    if key not in mapping:
        raise ConfigError(f"missing field `{key}` in {where}")
    return mapping[key]


def _integer(value: Any, upper: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= upper:
        raise ConfigError(f"invalid {what}: {value!r}")
    return value


def _string(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"invalid {what}: {value!r}")
    return value


def _server_from(entry: Any) -> ServerConfig:
    if not isinstance(entry, dict):
        raise ConfigError(f"invalid server entry: {entry!r}")
    name = _string(_field(entry, "name", "server"), "server name")
    ip = _string(_field(entry, "ip", "server"), "server ip")
    ports = _field(entry, "ports", "server")
    if not isinstance(ports, list):
        raise ConfigError(f"invalid port list: {ports!r}")
    return ServerConfig(name, ip, [_integer(port, MAX_PORT, "port") for port in ports])


def config_from_json(text: str) -> AppConfig:
    """Parse configuration JSON; unknown fields are ignored."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"JSON parse error: {exc}") from exc
    if not isinstance(document, dict):
        raise ConfigError("configuration must be a JSON object")
    servers = _field(document, "servers", "configuration")
    if not isinstance(servers, list):
        raise ConfigError(f"invalid server list: {servers!r}")
    interval = _integer(
        _field(document, "refresh_interval_secs", "configuration"),
        _MAX_U64,
        "refresh interval",
    )
    return AppConfig([_server_from(entry) for entry in servers], interval)


def export_config(config: AppConfig, path: PathLike) -> None:
    """Write the configuration to path."""
    try:
        Path(path).write_text(config_to_json(config), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to write config file {path}: {exc}") from exc


def import_config(path: PathLike) -> AppConfig:
    """Read and parse the configuration stored at path."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"file read error: {exc}") from exc
    return config_from_json(text)