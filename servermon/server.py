"""Monitored servers and the network checks run against them."""

from __future__ import annotations

import ipaddress
import os
import random
import socket
import struct
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

DEFAULT_PING_TIMEOUT = 4.0
DEFAULT_PORT_TIMEOUT = 0.5
MAX_PORT = 0xFFFF

_ICMP_ECHO_REQUEST = 8
_ICMP_ECHO_REPLY = 0
_ICMPV6_ECHO_REQUEST = 128
_ICMPV6_ECHO_REPLY = 129
_PING_PAYLOAD = b"servermon-echo-payload--"

IpLike = Union[str, ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass
class ServerConfig:
    """The persisted description of a server: name, address and ports."""

    name: str
    ip: str
    ports: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.ports = sorted(self.ports)

    def to_server(self) -> Server:
        """Build a fresh, unchecked server from this description."""
        return Server(self.name, self.ip, list(self.ports))


@dataclass
class Server:
    """A server being monitored, together with the results of its last check."""

    name: str
    ip: str
    ports: list[int] = field(default_factory=list)
    last_checked: Optional[float] = None
    is_online: bool = False
    open_ports: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.ports = sorted(self.ports)

    def to_config(self) -> ServerConfig:
        """Return the persistable part of this server."""
        return ServerConfig(self.name, self.ip, list(self.ports))


def _parse_port(text: str) -> Optional[int]:
    digits = text.strip()
    if digits.startswith("+"):
        digits = digits[1:]
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    value = int(digits)
    return value if value <= MAX_PORT else None


def parse_ports(text: str) -> list[int]:
    """Parse a comma-separated port list, dropping entries that are not ports."""
    ports = (_parse_port(part) for part in text.split(","))
    return sorted(port for port in ports if port is not None)


def format_ports(ports: Iterable[int]) -> str:
    """Render ports as the comma-separated form accepted by parse_ports."""
    return ",".join(str(port) for port in ports)


def _parse_ip(text: IpLike) -> Optional[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
    if isinstance(text, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return text
    if "%" in text:
        return None
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


def is_valid_ip(text: str) -> bool:
    """Tell whether text is a literal IPv4 or IPv6 address."""
    return _parse_ip(text) is not None


def _checksum(data: bytes) -> int:
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack(f"!{len(data) // 2}H", data))
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


def _build_echo_request(ident: int, sequence: int, payload: bytes, v6: bool) -> bytes:
    kind = _ICMPV6_ECHO_REQUEST if v6 else _ICMP_ECHO_REQUEST
    header = struct.pack("!BBHHH", kind, 0, 0, ident, sequence)
    if v6:
        # The kernel fills in the ICMPv6 checksum, which covers a pseudo-header.
        return header + payload
    checksum = _checksum(header + payload)
    return struct.pack("!BBHHH", kind, 0, checksum, ident, sequence) + payload


def _is_matching_reply(
    data: bytes, v6: bool, raw: bool, ident: int, sequence: int
) -> bool:
    if not v6 and len(data) >= 20 and data[0] >> 4 == 4:
        data = data[(data[0] & 0x0F) * 4:]
    if len(data) < 8:
        return False
    kind, _code, _sum, reply_ident, reply_sequence = struct.unpack("!BBHHH", data[:8])
    if kind != (_ICMPV6_ECHO_REPLY if v6 else _ICMP_ECHO_REPLY):
        return False
    if raw and reply_ident != ident:
        return False
    return reply_sequence == sequence and data[8:] == _PING_PAYLOAD


def _exchange(sock: socket.socket, address: str, v6: bool, raw: bool, timeout: float) -> bool:
    ident = os.getpid() & 0xFFFF
    sequence = random.randrange(0x10000)
    packet = _build_echo_request(ident, sequence, _PING_PAYLOAD, v6)
    deadline = time.monotonic() + timeout
    try:
        sock.sendto(packet, (address, 0))
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            sock.settimeout(remaining)
            data, _ = sock.recvfrom(65535)
            if _is_matching_reply(data, v6, raw, ident, sequence):
                return True
    except OSError:
        return False


def ping(ip: IpLike, timeout: float = DEFAULT_PING_TIMEOUT) -> bool:
    """Send one ICMP echo request and report whether a reply arrived in time."""
    address = _parse_ip(ip)
    if address is None:
        return False
    v6 = address.version == 6
    family = socket.AF_INET6 if v6 else socket.AF_INET
    proto = socket.IPPROTO_ICMPV6 if v6 else socket.IPPROTO_ICMP
    for sock_type in (socket.SOCK_DGRAM, socket.SOCK_RAW):
        try:
            sock = socket.socket(family, sock_type, proto)
        except OSError:
            continue
        with sock:
            return _exchange(sock, str(address), v6, sock_type == socket.SOCK_RAW, timeout)
    return False


def probe_port(ip: IpLike, port: int, timeout: float = DEFAULT_PORT_TIMEOUT) -> bool:
    """Tell whether a TCP connection to ip:port succeeds within the timeout."""
    address = _parse_ip(ip)
    if address is None:
        return False
    try:
        with socket.create_connection((str(address), port), timeout=timeout):
            return True
    except OSError:
        return False


def check_server_status(server: Server) -> None:
    """Ping the server and probe each of its ports, recording the results.

    A server whose address does not parse is left untouched.
    """
    address = _parse_ip(server.ip)
    if address is None:
        return
    server.is_online = ping(address)
    server.last_checked = time.monotonic()
    server.open_ports = [port for port in server.ports if probe_port(address, port)]