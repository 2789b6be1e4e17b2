"""
Reader Protocol - Python implementation of the MIFARE serial card reader protocol.

This package provides:
- Protocol constants and parameter code tables
- Configurable command/response byte table
- Command building and response validation
- Serial transport layer
- Quiet-period response collection
- Connection handshake with bounded retry
- High-level reader client
"""

from .constants import (
    BAUD_CODES, COLOR_CODES, DEFAULT_KEY, DEFAULT_TIMEOUT, OPEN_PORT_TIMEOUT,
    RETRY_DELAY, DEFAULT_MAX_RETRIES,
    BaudRate, Color, CommandKind, KeyMode,
)
from .config import DEFAULT_PROTOCOL, ProtocolTable, ReaderConfig
from .exceptions import (
    ReaderProtocolError, ConfigError, ConnectionError, NotOpenError,
    ConnectionClosedError, WriteFailureError, BusyError, NoResponseError,
    ValidationMismatchError, KeyFormatError, ReadCardError,
)
from .frame import CommandBuilder, ResponseParser, normalize_key
from .results import Outcome, ReaderResult
from .transport import SerialTransport
from .collector import CollectorState, ResponseCollector
from .connection import ReaderConnection
from .client import MifareReader

__all__ = [
    # Constants
    "BAUD_CODES", "COLOR_CODES", "DEFAULT_KEY", "DEFAULT_TIMEOUT",
    "OPEN_PORT_TIMEOUT", "RETRY_DELAY", "DEFAULT_MAX_RETRIES",
    "BaudRate", "Color", "CommandKind", "KeyMode",
    # Config
    "DEFAULT_PROTOCOL", "ProtocolTable", "ReaderConfig",
    # Exceptions
    "ReaderProtocolError", "ConfigError", "ConnectionError", "NotOpenError",
    "ConnectionClosedError", "WriteFailureError", "BusyError",
    "NoResponseError", "ValidationMismatchError", "KeyFormatError",
    "ReadCardError",
    # Frame
    "CommandBuilder", "ResponseParser", "normalize_key",
    # Results
    "Outcome", "ReaderResult",
    # Transport
    "SerialTransport",
    # Collector
    "CollectorState", "ResponseCollector",
    # Connection
    "ReaderConnection",
    # Client
    "MifareReader",
]
