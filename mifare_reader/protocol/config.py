"""
Reader configuration.

``ProtocolTable`` holds the vendor byte sequences for each command and
expected response. ``ReaderConfig`` holds link and timing settings.
Both can be built from plain dictionaries or JSON files.
"""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .constants import (
    DEFAULT_BAUDRATE, DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT,
    OPEN_PORT_TIMEOUT, RETRY_DELAY, KeyMode,
)
from .exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProtocolTable:
    """Command prefixes, fixed commands and expected responses."""
    open_port_prefix: bytes = bytes.fromhex("aabb060000000101")
    open_port_expected_response: bytes = bytes.fromhex("aabb0600000001010000")
    select_card_command: bytes = bytes.fromhex("aabb05000000020200")
    rf_authen_command_prefix: bytes = bytes.fromhex("aabb0c000000070204")
    rf_authen_expected_response: bytes = bytes.fromhex("aabb0600000007020005")
    read_card_command: bytes = bytes.fromhex("aabb060000000802040e")
    led_command_prefix: bytes = bytes.fromhex("aabb060000000701")
    led_expected_response: bytes = bytes.fromhex("aabb0600000007010006")
    beep_command: bytes = bytes.fromhex("aabb0600000006010a0d")
    expected_beep_response: bytes = bytes.fromhex("aabb0600000006010007")
    key_mode_a: bytes = bytes([0x60])
    key_mode_b: bytes = bytes([0x61])

    def __post_init__(self):
        for f in fields(self):
            if not isinstance(getattr(self, f.name), bytes):
                raise ConfigError(f"{f.name} must be bytes")
        for name in ("key_mode_a", "key_mode_b"):
            if len(getattr(self, name)) != 1:
                raise ConfigError(f"{name} must be exactly one byte")

    def key_mode_byte(self, mode: Union[KeyMode, str]) -> bytes:
        """Get the one-byte code for a key mode."""
        if KeyMode.parse(mode) is KeyMode.B:
            return self.key_mode_b
        return self.key_mode_a

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProtocolTable":
        """
        Build table from a dictionary of hex strings.

        Fields missing from ``data`` keep their defaults.

        Raises:
            ConfigError: On unknown field names or malformed hex
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown protocol fields: {sorted(unknown)}")

        values = {}
        for name, value in data.items():
            if isinstance(value, (bytes, bytearray)):
                values[name] = bytes(value)
                continue
            try:
                values[name] = bytes.fromhex(str(value))
            except ValueError as e:
                raise ConfigError(f"Invalid hex for {name}: {value!r}") from e
        return replace(cls(), **values)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ProtocolTable":
        """Load table from a JSON file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load protocol table {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Protocol table {path} must contain an object")
        logger.info(f"Loaded protocol table from {path}")
        return cls.from_dict(data)


DEFAULT_PROTOCOL = ProtocolTable()


@dataclass
class ReaderConfig:
    """Link and timing settings (seconds)."""
    baudrate: int = int(DEFAULT_BAUDRATE)
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: float = DEFAULT_TIMEOUT
    open_timeout: float = OPEN_PORT_TIMEOUT
    retry_delay: float = RETRY_DELAY
    idle_gap: Optional[float] = None
    protocol: ProtocolTable = field(default=DEFAULT_PROTOCOL)

    def __post_init__(self):
        if self.max_retries < 1:
            raise ConfigError("max_retries must be at least 1")
        for name in ("timeout", "open_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if self.retry_delay < 0:
            raise ConfigError("retry_delay must not be negative")
        if self.idle_gap is not None and self.idle_gap <= 0:
            raise ConfigError("idle_gap must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReaderConfig":
        """
        Build config from a dictionary.

        Unknown keys are ignored. ``protocol_file`` loads a ProtocolTable
        from JSON, ``protocol`` may be a dict of hex strings.
        """
        kwargs: Dict[str, Any] = {}
        for name in ("baudrate", "max_retries"):
            if data.get(name) is not None:
                kwargs[name] = int(data[name])
        for name in ("timeout", "open_timeout", "retry_delay", "idle_gap"):
            if data.get(name) is not None:
                kwargs[name] = float(data[name])

        if data.get("protocol_file"):
            kwargs["protocol"] = ProtocolTable.from_json(data["protocol_file"])
        elif isinstance(data.get("protocol"), dict):
            kwargs["protocol"] = ProtocolTable.from_dict(data["protocol"])

        return cls(**kwargs)
