"""Tests for protocol table and reader configuration loading."""

import json

import pytest

from mifare_reader.protocol import (
    DEFAULT_PROTOCOL, ConfigError, KeyMode, ProtocolTable, ReaderConfig,
)


def test_protocol_table_defaults():
    assert DEFAULT_PROTOCOL.open_port_prefix == bytes.fromhex("aabb060000000101")
    assert DEFAULT_PROTOCOL.key_mode_byte(KeyMode.A) == b"\x60"
    assert DEFAULT_PROTOCOL.key_mode_byte("B") == b"\x61"


def test_protocol_table_from_dict_overrides_fields():
    table = ProtocolTable.from_dict({
        "beep_command": "aa bb 06 00 00 00 06 01 14 13",
        "key_mode_b": b"\x62",
    })
    assert table.beep_command == bytes.fromhex("aabb0600000006011413")
    assert table.key_mode_b == b"\x62"
    assert table.led_command_prefix == DEFAULT_PROTOCOL.led_command_prefix


def test_protocol_table_rejects_unknown_field():
    with pytest.raises(ConfigError, match="Unknown protocol fields"):
        ProtocolTable.from_dict({"no_such_command": "00"})


def test_protocol_table_rejects_bad_hex():
    with pytest.raises(ConfigError, match="Invalid hex"):
        ProtocolTable.from_dict({"beep_command": "zz"})


def test_protocol_table_rejects_wide_key_mode():
    with pytest.raises(ConfigError):
        ProtocolTable.from_dict({"key_mode_a": "6061"})


def test_protocol_table_from_json(tmp_path):
    path = tmp_path / "protocol.json"
    path.write_text(json.dumps({"select_card_command": "aabb05000000010200"}))

    table = ProtocolTable.from_json(path)

    assert table.select_card_command == bytes.fromhex("aabb05000000010200")


def test_protocol_table_from_missing_json(tmp_path):
    with pytest.raises(ConfigError, match="Could not load"):
        ProtocolTable.from_json(tmp_path / "missing.json")


def test_protocol_table_json_must_be_object(tmp_path):
    path = tmp_path / "protocol.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigError, match="must contain an object"):
        ProtocolTable.from_json(path)


def test_reader_config_defaults():
    config = ReaderConfig()
    assert config.baudrate == 19200
    assert config.max_retries == 20
    assert config.timeout == 5.0
    assert config.open_timeout == 3.0
    assert config.retry_delay == 0.5
    assert config.idle_gap is None
    assert config.protocol is DEFAULT_PROTOCOL


def test_reader_config_from_dict(tmp_path):
    path = tmp_path / "protocol.json"
    path.write_text(json.dumps({"beep_command": "0102"}))

    config = ReaderConfig.from_dict({
        "port": "COM5",
        "baudrate": "115200",
        "max_retries": 5,
        "timeout": 2,
        "idle_gap": 0.1,
        "protocol_file": str(path),
    })

    assert config.baudrate == 115200
    assert config.max_retries == 5
    assert config.timeout == 2.0
    assert config.idle_gap == 0.1
    assert config.protocol.beep_command == b"\x01\x02"


def test_reader_config_inline_protocol():
    config = ReaderConfig.from_dict({"protocol": {"led_command_prefix": "0a0b"}})
    assert config.protocol.led_command_prefix == b"\x0a\x0b"


@pytest.mark.parametrize("kwargs", [
    {"max_retries": 0},
    {"timeout": 0},
    {"open_timeout": -1},
    {"retry_delay": -0.1},
    {"idle_gap": 0},
])
def test_reader_config_validation(kwargs):
    with pytest.raises(ConfigError):
        ReaderConfig(**kwargs)
