"""
Protocol constants for the MIFARE serial card reader.

Frame Format (vendor 'AA BB' protocol):
    [AA BB][LEN lo][LEN hi][NODE 2][CMD lo][CMD hi][DATA...][XOR]

The byte tables for each command are held in ``config.ProtocolTable``;
this module carries the fixed parameter codes, markers and timing.
"""

from enum import Enum, IntEnum


class BaudRate(IntEnum):
    """Supported serial link speeds."""
    B9600 = 9600
    B19200 = 19200
    B57600 = 57600
    B115200 = 115200


class Color(Enum):
    """LED colors."""
    GREEN = "GREEN"
    RED = "RED"
    YELLOW = "YELLOW"
    OFF = "OFF"

    @classmethod
    def parse(cls, value) -> "Color":
        """Get color from enum member or name, OFF when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.OFF


class KeyMode(Enum):
    """MIFARE authentication key slot."""
    A = "A"
    B = "B"

    @classmethod
    def parse(cls, value) -> "KeyMode":
        """Get key mode from enum member or name, A when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.A


class CommandKind(Enum):
    """Command families understood by the reader."""
    OPEN_PORT = "open_port"
    SELECT_CARD = "select_card"
    AUTHEN = "authen"
    READ_CARD = "read_card"
    LED = "led"
    BEEP = "beep"


# Open-port parameter: (baud code, checksum)
BAUD_CODES = {
    BaudRate.B9600: bytes([0x01, 0x01]),
    BaudRate.B19200: bytes([0x03, 0x03]),
    BaudRate.B57600: bytes([0x06, 0x06]),
    BaudRate.B115200: bytes([0x07, 0x07]),
}
DEFAULT_BAUD_CODE = bytes([0x01, 0x01])

# LED parameter: (color code, checksum)
COLOR_CODES = {
    Color.GREEN: bytes([0x02, 0x04]),
    Color.RED: bytes([0x01, 0x07]),
    Color.YELLOW: bytes([0x03, 0x05]),
    Color.OFF: bytes([0x00, 0x06]),
}
DEFAULT_COLOR_CODE = COLOR_CODES[Color.OFF]

# Response markers (byte at MARKER_OFFSET is the frame length field)
MARKER_OFFSET = 2
SELECT_SUCCESS_MARKER = 0x0A
READ_SUCCESS_MARKER = 0x16

SELECT_PAYLOAD_OFFSET = 6
READ_PAYLOAD_START = 9
READ_PAYLOAD_END = 25

KEY_LENGTH = 6
DEFAULT_KEY = "FFFFFFFFFFFF"

# Timing (seconds)
DEFAULT_TIMEOUT = 5.0
OPEN_PORT_TIMEOUT = 3.0
RETRY_DELAY = 0.5
DEFAULT_MAX_RETRIES = 20
DEFAULT_BAUDRATE = BaudRate.B19200
