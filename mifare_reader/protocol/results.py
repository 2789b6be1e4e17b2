"""
Operation result structures.

Every reader operation produces a ReaderResult; the public MifareReader
methods translate it into their bool / None / exception contracts.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import ReaderProtocolError


class Outcome(Enum):
    """Operation outcome codes."""
    SUCCESS = 0
    NO_CARD = 1
    NO_DATA = 2
    NOT_AUTHENTICATED = 3
    MISMATCH = 4
    TRANSPORT_ERROR = 5


@dataclass(frozen=True)
class ReaderResult:
    """Outcome of a single reader operation."""
    outcome: Outcome
    payload: bytes = b""
    error: Optional[ReaderProtocolError] = None

    @classmethod
    def success(cls, payload: bytes = b"") -> "ReaderResult":
        return cls(Outcome.SUCCESS, bytes(payload))

    @classmethod
    def failure(cls, outcome: Outcome, error: Optional[ReaderProtocolError] = None) -> "ReaderResult":
        return cls(outcome, b"", error)

    @classmethod
    def transport_error(cls, error: ReaderProtocolError) -> "ReaderResult":
        return cls(Outcome.TRANSPORT_ERROR, b"", error)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    def hex(self) -> Optional[str]:
        """Payload as lowercase hex, None unless successful."""
        return self.payload.hex() if self.ok else None

    def __str__(self) -> str:
        if self.ok:
            return f"SUCCESS({self.payload.hex()})"
        if self.error is not None:
            return f"{self.outcome.name}({self.error})"
        return self.outcome.name
