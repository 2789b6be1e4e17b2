"""
Custom exceptions for the card reader protocol.
"""


class ReaderProtocolError(Exception):
    """Base exception for card reader protocol errors."""
    pass


class ConfigError(ReaderProtocolError):
    """Invalid reader or protocol configuration."""
    pass


class ConnectionError(ReaderProtocolError):
    """Serial connection error."""
    pass


class NotOpenError(ConnectionError):
    """Operation attempted before the port was opened."""

    def __init__(self, message: str = "Port is not open"):
        super().__init__(message)


class ConnectionClosedError(ConnectionError):
    """Port was closed while a command was awaiting its response."""
    pass


class WriteFailureError(ConnectionError):
    """Transport rejected the write."""
    pass


class BusyError(ReaderProtocolError):
    """A command is already awaiting a response on this connection."""

    def __init__(self):
        super().__init__("Another command is awaiting a response")


class NoResponseError(ReaderProtocolError):
    """No byte received before the quiet-period timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"No response within {timeout}s")


class ValidationMismatchError(ReaderProtocolError):
    """Response received but failed the operation's success rule."""

    def __init__(self, response: bytes, expected: bytes = b""):
        self.response = bytes(response)
        self.expected = bytes(expected)
        msg = f"Unexpected response: {self.response.hex(' ')}"
        if expected:
            msg += f" (expected {self.expected.hex(' ')})"
        super().__init__(msg)


class KeyFormatError(ReaderProtocolError):
    """Authentication key does not normalize to 6 bytes."""
    pass


class ReadCardError(ReaderProtocolError):
    """Card read failed (authentication or transport)."""
    pass
