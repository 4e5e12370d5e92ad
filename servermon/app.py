"""The monitor's state: the server list, the refresh schedule and persistence."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, Optional, Union

from servermon.config import (
    DEFAULT_REFRESH_INTERVAL_SECS,
    AppConfig,
    ConfigError,
    default_config_path,
)
from servermon.config import export_config as _write_config
from servermon.config import import_config as _read_config
from servermon.server import Server, check_server_status, is_valid_ip, parse_ports

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
PortsLike = Union[str, Iterable[int]]

_MAX_U64 = 2**64 - 1


def _default_servers() -> list[Server]:
    return [
        Server("Server A", "192.1.1.1", [22, 80]),
        Server("Server B", "192.1.1.2", [443]),
    ]


def _parse_seconds(text: str) -> Optional[int]:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    value = int(digits)
    return value if value <= _MAX_U64 else None


def _ports_from(ports: PortsLike) -> list[int]:
    if isinstance(ports, str):
        return parse_ports(ports)
    return sorted(ports)


class AppState:
    """Everything the monitor window shows and edits.

    Times are seconds on the ``time.monotonic`` clock; the refresh interval is
    a whole number of seconds, and zero disables automatic refreshing.
    """

    def __init__(self, config_path: Optional[PathLike] = None, load: bool = True) -> None:
        self.config_path = Path(config_path) if config_path is not None else default_config_path()
        self.servers: list[Server] = _default_servers()
        self.refresh_interval: int = DEFAULT_REFRESH_INTERVAL_SECS
        # Start overdue so that the first frame triggers a check.
        self.last_refresh: float = time.monotonic() - (DEFAULT_REFRESH_INTERVAL_SECS + 1)
        if load and self.config_path.exists():
            try:
                self.import_config(self.config_path)
            except ConfigError as exc:
                logger.error("! %s", exc)

    def update_status(self) -> None:
        """Check every server now."""
        for server in self.servers:
            check_server_status(server)

    def refresh_if_due(self, now: Optional[float] = None) -> bool:
        """Check all servers if the refresh interval has elapsed; report whether it did."""
        if now is None:
            now = time.monotonic()
        if self.refresh_interval > 0 and now - self.last_refresh >= self.refresh_interval:
            self.update_status()
            self.last_refresh = now
            return True
        return False

    def refresh_now(self, now: Optional[float] = None) -> None:
        """Check all servers immediately and restart the refresh countdown."""
        self.update_status()
        self.last_refresh = time.monotonic() if now is None else now

    def seconds_until_refresh(self, now: Optional[float] = None) -> Optional[int]:
        """Whole seconds left before the next automatic refresh, or None when disabled."""
        if self.refresh_interval == 0:
            return None
        if now is None:
            now = time.monotonic()
        remaining = self.refresh_interval - (now - self.last_refresh)
        return int(remaining) if remaining > 0 else 0

    def set_refresh_interval(self, text: str) -> bool:
        """Set the interval from user text; invalid text leaves it unchanged."""
        value = _parse_seconds(text)
        if value is None:
            return False
        self.refresh_interval = value
        return True

    def add_server(self, name: str, ip: str, ports: PortsLike) -> Server:
        """Append a new server; ports may be comma-separated text or integers."""
        if not is_valid_ip(ip):
            raise ValueError(f"invalid IP address: {ip!r}")
        server = Server(name, ip, _ports_from(ports))
        self.servers.append(server)
        return server

    def edit_server(self, index: int, name: str, ip: str, ports: PortsLike) -> Server:
        """Replace the name, address and ports of the server at index."""
        if not is_valid_ip(ip):
            raise ValueError(f"invalid IP address: {ip!r}")
        server = self.servers[index]
        server.name = name
        server.ip = ip
        server.ports = _ports_from(ports)
        return server

    def remove_server(self, index: int) -> Server:
        """Remove and return the server at index."""
        return self.servers.pop(index)

    def to_config(self) -> AppConfig:
        """Return the persistable part of this state."""
        return AppConfig([server.to_config() for server in self.servers], self.refresh_interval)

    def export_config(self, path: Optional[PathLike] = None) -> None:
        """Write the servers and refresh interval to path (the config file by default)."""
        target = self.config_path if path is None else Path(path)
        _write_config(self.to_config(), target)
        logger.info("> Exported config to %s", target)

    def import_config(self, path: Optional[PathLike] = None) -> None:
        """Replace the servers and interval with those stored at path, then check them."""
        source = self.config_path if path is None else Path(path)
        config = _read_config(source)
        self.servers = [entry.to_server() for entry in config.servers]
        self.refresh_interval = config.refresh_interval_secs
        self.update_status()
        logger.info("< Imported config from %s", source)

    def save_on_exit(self) -> None:
        """Save the configuration to the config file."""
        self.export_config(self.config_path)