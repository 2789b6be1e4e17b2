"""
Command building and response validation.

Command Format: [PREFIX...][PARAMS...]
- PREFIX: command family bytes from the ProtocolTable
- PARAMS: baud code pair, color code pair, key + key mode byte, or nothing

Response checks are either full-buffer equality against an expected
response, or a positional marker at MARKER_OFFSET followed by a payload
slice.
"""

from typing import Optional, Union

from .config import DEFAULT_PROTOCOL, ProtocolTable
from .constants import (
    BAUD_CODES, COLOR_CODES, DEFAULT_BAUD_CODE, DEFAULT_COLOR_CODE,
    KEY_LENGTH, MARKER_OFFSET, READ_PAYLOAD_END, READ_PAYLOAD_START,
    READ_SUCCESS_MARKER, SELECT_PAYLOAD_OFFSET, SELECT_SUCCESS_MARKER,
    BaudRate, Color, CommandKind, KeyMode,
)
from .exceptions import KeyFormatError

KeyType = Union[bytes, bytearray, str]


def normalize_key(key: KeyType) -> bytes:
    """
    Convert an authentication key to raw bytes.

    Args:
        key: 6 raw bytes or a 12 character hex string

    Returns:
        6 key bytes

    Raises:
        KeyFormatError: If the key is not exactly 6 bytes
    """
    if isinstance(key, str):
        try:
            raw = bytes.fromhex(key)
        except ValueError as e:
            raise KeyFormatError(f"Key is not valid hex: {key!r}") from e
    elif isinstance(key, (bytes, bytearray)):
        raw = bytes(key)
    else:
        raise KeyFormatError(f"Unsupported key type: {type(key).__name__}")

    if len(raw) != KEY_LENGTH:
        raise KeyFormatError(f"Key must be exactly {KEY_LENGTH} bytes, got {len(raw)}")
    return raw


def baud_code_pair(baudrate: int) -> bytes:
    """Get open-port parameter bytes, default pair for unsupported rates."""
    try:
        return BAUD_CODES[BaudRate(baudrate)]
    except (TypeError, ValueError):
        return DEFAULT_BAUD_CODE


def color_code_pair(color: Union[Color, str]) -> bytes:
    """Get LED parameter bytes, OFF pair for unknown colors."""
    return COLOR_CODES.get(Color.parse(color), DEFAULT_COLOR_CODE)


class CommandBuilder:
    """Builds command bytes for transmission."""

    def __init__(self, protocol: ProtocolTable = DEFAULT_PROTOCOL):
        self.protocol = protocol

    def build_open_port(self, baudrate: int) -> bytes:
        """Build open-port command for the given baud rate."""
        return self.protocol.open_port_prefix + baud_code_pair(baudrate)

    def build_select_card(self) -> bytes:
        """Build select-card command."""
        return self.protocol.select_card_command

    def build_authen(self, key: KeyType, mode: Union[KeyMode, str] = KeyMode.A) -> bytes:
        """
        Build authenticate command.

        Raises:
            KeyFormatError: If key does not normalize to 6 bytes
        """
        return (
            self.protocol.rf_authen_command_prefix
            + normalize_key(key)
            + self.protocol.key_mode_byte(mode)
        )

    def build_read_card(self) -> bytes:
        """Build read-card command."""
        return self.protocol.read_card_command

    def build_led(self, color: Union[Color, str]) -> bytes:
        """Build LED color command."""
        return self.protocol.led_command_prefix + color_code_pair(color)

    def build_beep(self) -> bytes:
        """Build beep command."""
        return self.protocol.beep_command

    def encode(self, kind: CommandKind, *params) -> bytes:
        """Build any command from its kind and parameters."""
        if kind is CommandKind.OPEN_PORT:
            return self.build_open_port(*params)
        if kind is CommandKind.SELECT_CARD:
            return self.build_select_card()
        if kind is CommandKind.AUTHEN:
            return self.build_authen(*params)
        if kind is CommandKind.READ_CARD:
            return self.build_read_card()
        if kind is CommandKind.LED:
            return self.build_led(*params)
        if kind is CommandKind.BEEP:
            return self.build_beep()
        raise ValueError(f"Unknown command kind: {kind!r}")


class ResponseParser:
    """Validates responses and extracts payloads."""

    def __init__(self, protocol: ProtocolTable = DEFAULT_PROTOCOL):
        self.protocol = protocol

    def is_open_port_ok(self, response: bytes) -> bool:
        return bytes(response) == self.protocol.open_port_expected_response

    def is_authen_ok(self, response: bytes) -> bool:
        return bytes(response) == self.protocol.rf_authen_expected_response

    def is_led_ok(self, response: bytes) -> bool:
        return bytes(response) == self.protocol.led_expected_response

    def is_beep_ok(self, response: bytes) -> bool:
        return bytes(response) == self.protocol.expected_beep_response

    @staticmethod
    def select_payload(response: bytes) -> Optional[bytes]:
        """Get card UID bytes, None if no card was selected."""
        if len(response) <= MARKER_OFFSET or response[MARKER_OFFSET] != SELECT_SUCCESS_MARKER:
            return None
        return bytes(response[SELECT_PAYLOAD_OFFSET:])

    @staticmethod
    def read_payload(response: bytes) -> Optional[bytes]:
        """Get 16 block bytes, None if the read marker is missing."""
        if len(response) <= MARKER_OFFSET or response[MARKER_OFFSET] != READ_SUCCESS_MARKER:
            return None
        return bytes(response[READ_PAYLOAD_START:READ_PAYLOAD_END])
