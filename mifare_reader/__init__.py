"""
MIFARE Reader Package

Driver for contactless card readers speaking the vendor 'AA BB' serial
protocol: link handshake, card selection, authenticated block reads,
LED and beeper control.
"""

from .protocol import (
    MifareReader, ReaderConfig, ProtocolTable, Color, KeyMode, BaudRate,
    ReaderProtocolError, ReadCardError,
)
from .drivers.mifare import MifareReaderDriver

__version__ = "1.0.0"
__all__ = [
    "MifareReader", "MifareReaderDriver",
    "ReaderConfig", "ProtocolTable",
    "Color", "KeyMode", "BaudRate",
    "ReaderProtocolError", "ReadCardError",
]
