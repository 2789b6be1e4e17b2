"""
Response collection.

The reader protocol has no length-delimited framing on the host side and
no terminator byte, so a response is whatever arrives between writing a
command and a quiet-period timeout.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from .constants import DEFAULT_TIMEOUT
from .exceptions import (
    BusyError, ConnectionClosedError, NoResponseError, NotOpenError,
    WriteFailureError,
)

logger = logging.getLogger(__name__)


class CollectorState(Enum):
    """Per-connection command state."""
    IDLE = 0
    AWAITING_RESPONSE = 1


class ResponseCollector:
    """Writes one command and accumulates its response bytes."""

    def __init__(self, transport=None):
        """
        Initialize collector.

        Args:
            transport: Byte-stream transport exposing ``is_open``, ``send``,
                ``subscribe`` and ``unsubscribe``
        """
        self.transport = transport
        self.state = CollectorState.IDLE

    async def send_and_await(
        self,
        command: bytes,
        timeout: float = DEFAULT_TIMEOUT,
        idle_gap: Optional[float] = None
    ) -> bytes:
        """
        Send command and collect the response.

        Args:
            command: Command bytes to write
            timeout: Quiet-period timeout in seconds
            idle_gap: If set, return as soon as bytes were received and
                none arrived for this many seconds

        Returns:
            All bytes received (possibly a partial frame)

        Raises:
            NotOpenError: If there is no open transport
            BusyError: If another command is still awaiting its response
            WriteFailureError: If the transport rejects the write
            NoResponseError: If nothing arrived before the timeout
            ConnectionClosedError: If the port closed while waiting
        """
        transport = self.transport
        if transport is None or not transport.is_open:
            raise NotOpenError()
        if self.state is CollectorState.AWAITING_RESPONSE:
            raise BusyError()

        self.state = CollectorState.AWAITING_RESPONSE
        loop = asyncio.get_running_loop()
        buffer = bytearray()
        activity = asyncio.Event()
        closed = asyncio.Event()

        def append(chunk: bytes) -> None:
            buffer.extend(chunk)
            activity.set()

        def on_data(chunk: bytes) -> None:
            loop.call_soon_threadsafe(append, bytes(chunk))

        def on_close() -> None:
            loop.call_soon_threadsafe(closed.set)

        transport.subscribe(on_data, on_close)
        try:
            try:
                transport.send(command)
            except OSError as e:
                raise WriteFailureError(f"Write failed: {e}") from e

            await self._wait(loop, buffer, activity, closed, timeout, idle_gap)
        finally:
            transport.unsubscribe(on_data)
            self.state = CollectorState.IDLE

        if closed.is_set():
            raise ConnectionClosedError("Port closed while awaiting response")
        if not buffer:
            raise NoResponseError(timeout)
        logger.debug(f"Collected {len(buffer)} bytes for command {bytes(command[:8]).hex(' ')}")
        return bytes(buffer)

    @staticmethod
    async def _wait(loop, buffer, activity, closed, timeout, idle_gap) -> None:
        """Wait until timeout, idle gap after data, or port closure."""
        deadline = loop.time() + timeout
        close_waiter = asyncio.ensure_future(closed.wait())
        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    return
                if idle_gap is not None and buffer:
                    remaining = min(remaining, idle_gap)

                activity.clear()
                activity_waiter = asyncio.ensure_future(activity.wait())
                done, _ = await asyncio.wait(
                    {activity_waiter, close_waiter},
                    timeout=remaining,
                    return_when=asyncio.FIRST_COMPLETED
                )
                activity_waiter.cancel()

                if close_waiter in done:
                    return
                if not done and idle_gap is not None and buffer:
                    return
        finally:
            close_waiter.cancel()
