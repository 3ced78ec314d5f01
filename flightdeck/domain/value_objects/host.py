"""
Host Value Object

Architectural Intent:
- Immutable value object describing one remote host of a target
- Validates hostname format (DNS, IPv4, IPv6) and port bounds
- Supports nesting: a host may be reached through a tunnel host, recursively
- Supports IPv6 bracket notation in parse() (e.g., user@[::1]:22)
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

# RFC 1123 hostname: labels of alnum/hyphens, dot-separated
_HOSTNAME_RE = re.compile(
    r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63})*$"
)

_IPV4_RE = re.compile(
    r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$"
)

# IPv6 pattern (simplified, accepts common forms including ::1, fe80::1)
_IPV6_RE = re.compile(r"^[0-9a-fA-F:]+$")

# Accepted spellings for mapping keys, first one is canonical
_KEY_ALIASES = {
    "username": ("username", "user"),
    "private_key": ("private_key", "private_key_path", "privateKey"),
    "exec_options": ("exec_options", "execOptions"),
}


def _is_valid_hostname(host: str) -> bool:
    """Validate hostname as DNS name, IPv4, or IPv6."""
    if not host:
        return False

    m = _IPV4_RE.match(host)
    if m:
        return all(0 <= int(g) <= 255 for g in m.groups())

    if _IPV6_RE.match(host) and ":" in host:
        return True

    if _HOSTNAME_RE.match(host) and len(host) <= 253:
        return True

    return False


def _pick(data: Mapping[str, Any], name: str, default: Any = None) -> Any:
    for key in _KEY_ALIASES.get(name, (name,)):
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class Host:
    """
    Value Object representing a host a flight runs against.
    """
    host: str
    port: int = 22
    username: Optional[str] = None
    private_key: Optional[str] = None
    failsafe: bool = False
    tunnel: Optional["Host"] = None
    exec_options: Mapping[str, Any] = field(
        default_factory=dict, hash=False, compare=False
    )

    def __post_init__(self) -> None:
        if not (1 <= self.port <= 65535):
            raise ValueError(f"Port must be 1-65535, got {self.port}")
        if not _is_valid_hostname(self.host):
            raise ValueError(f"Invalid hostname: {self.host!r}")
        if self.username is not None and not self.username:
            raise ValueError("Host username cannot be empty")

    def __str__(self) -> str:
        return self.host

    @property
    def address(self) -> str:
        """`user@host` when a username is set, otherwise `host`."""
        if self.username:
            return f"{self.username}@{self.host}"
        return self.host

    def with_username(self, username: str) -> "Host":
        return replace(self, username=username)

    def tunnel_chain(self) -> list["Host"]:
        """Hosts to hop through before reaching this one, outermost first."""
        chain: list[Host] = []
        hop = self.tunnel
        while hop is not None:
            chain.insert(0, hop)
            hop = hop.tunnel
        return chain

    @staticmethod
    def parse(connection_string: str) -> "Host":
        """
        Parses a string like 'user@host:port', 'host', or 'user@[::1]:port'.
        """
        username = None
        port = 22
        host = connection_string.strip()

        if "@" in host:
            username, host = host.split("@", 1)

        if host.startswith("["):
            bracket_end = host.find("]")
            if bracket_end == -1:
                raise ValueError(f"Unterminated IPv6 bracket in: {connection_string}")
            remainder = host[bracket_end + 1:]
            if remainder.startswith(":"):
                port = int(remainder[1:])
            host = host[1:bracket_end]
        elif host.count(":") == 1:
            name, _, port_part = host.partition(":")
            try:
                port = int(port_part)
                host = name
            except ValueError:
                pass

        return Host(host=host, port=port, username=username)

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "Host":
        if "host" not in data:
            raise ValueError(f"Host configuration without 'host': {dict(data)!r}")
        tunnel = _pick(data, "tunnel")
        return Host(
            host=data["host"],
            port=int(data.get("port") or 22),
            username=_pick(data, "username"),
            private_key=_pick(data, "private_key"),
            failsafe=bool(data.get("failsafe", False)),
            tunnel=Host.coerce(tunnel) if tunnel is not None else None,
            exec_options=dict(_pick(data, "exec_options") or {}),
        )

    @staticmethod
    def coerce(value: Any) -> "Host":
        """Accepts a Host, a connection string or a mapping."""
        if isinstance(value, Host):
            return value
        if isinstance(value, str):
            return Host.parse(value)
        if isinstance(value, Mapping):
            return Host.from_mapping(value)
        raise TypeError(f"Cannot build a host from {type(value).__name__}")
