"""Hardware drivers wrapping the reader protocol client."""

from .base import BaseReaderDriver
from .mifare import MifareReaderDriver

__all__ = ["BaseReaderDriver", "MifareReaderDriver"]
