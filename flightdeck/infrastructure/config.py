"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to SSH, shell and transfer settings
- Falls back to sensible defaults when the config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import dataclasses
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SSHConfig:
    """Remote session settings."""
    connect_timeout: int = 30
    allow_agent: bool = True
    look_for_keys: bool = True
    try_keyboard: bool = True


@dataclass(frozen=True)
class ShellConfig:
    """Local process settings."""
    max_buffer: int = 1000 * 1024
    shell: str = ""


@dataclass(frozen=True)
class TransferConfig:
    """Bulk file transfer settings."""
    tool: str = "rsync"
    flags: str = "-az"


@dataclass(frozen=True)
class FlightdeckConfig:
    """Root configuration for the flightdeck application."""
    ssh: SSHConfig = field(default_factory=SSHConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    transfer: TransferConfig = field(default_factory=TransferConfig)
    log_level: str = "INFO"
    debug: bool = False
    color: bool = True


def _env_override(data: dict, prefix: str = "FLIGHTDECK") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern FLIGHTDECK_SECTION_KEY.
    For example: FLIGHTDECK_SSH_CONNECT_TIMEOUT=10, FLIGHTDECK_DEBUG=1
    """
    sections = {"ssh", "shell", "transfer"}
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        name = key[len(prefix) + 1:].lower()
        section, _, field_name = name.partition("_")
        if section in sections and field_name:
            data.setdefault(section, {})
            if isinstance(data[section], dict):
                data[section][field_name] = value
        else:
            data[name] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _coerce(value, type_name: str):
    if not isinstance(value, str):
        return value
    if type_name == "int":
        return int(value)
    if type_name == "bool":
        return value.lower() in ("true", "1", "yes")
    return value


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name: f for f in dataclasses.fields(cls)}
    filtered = {
        k: _coerce(v, valid_fields[k].type)
        for k, v in data.items()
        if k in valid_fields
    }
    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "FLIGHTDECK",
) -> FlightdeckConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (FLIGHTDECK_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to flightdeck.json in CWD.
        env_prefix: Environment variable prefix. Defaults to FLIGHTDECK.
    """
    config_path = Path(path) if path else Path("flightdeck.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    return FlightdeckConfig(
        ssh=_build_sub_config(SSHConfig, data.get("ssh", {})),
        shell=_build_sub_config(ShellConfig, data.get("shell", {})),
        transfer=_build_sub_config(TransferConfig, data.get("transfer", {})),
        log_level=str(data.get("log_level", "INFO")).upper(),
        debug=_coerce(data.get("debug", False), "bool"),
        color=_coerce(data.get("color", True), "bool"),
    )
