"""
Reader connection lifecycle.

Opens the serial stream, performs the open-port handshake with bounded
retry, and owns the response collector for the link.
"""

import asyncio
import logging
from typing import Callable, Optional

from .config import DEFAULT_PROTOCOL, ProtocolTable
from .constants import (
    DEFAULT_BAUDRATE, DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT,
    OPEN_PORT_TIMEOUT, RETRY_DELAY,
)
from .collector import CollectorState, ResponseCollector
from .frame import CommandBuilder, ResponseParser
from .exceptions import ReaderProtocolError
from .transport import SerialTransport

logger = logging.getLogger(__name__)


class ReaderConnection:
    """Serial link to the card reader."""

    def __init__(
        self,
        transport_factory: Callable[[str, int], object] = SerialTransport,
        protocol: ProtocolTable = DEFAULT_PROTOCOL,
        timeout: float = DEFAULT_TIMEOUT,
        open_timeout: float = OPEN_PORT_TIMEOUT,
        retry_delay: float = RETRY_DELAY,
        idle_gap: Optional[float] = None
    ):
        """
        Initialize connection.

        Args:
            transport_factory: Called as ``factory(port, baudrate)`` to
                create the byte-stream transport
            protocol: Command/response byte table
            timeout: Default response timeout in seconds
            open_timeout: Response timeout for the open-port handshake
            retry_delay: Delay between handshake attempts
            idle_gap: Optional early-completion quiet window
        """
        self.transport_factory = transport_factory
        self.protocol = protocol
        self.timeout = timeout
        self.open_timeout = open_timeout
        self.retry_delay = retry_delay
        self.idle_gap = idle_gap

        self.port: Optional[str] = None
        self.baudrate: int = int(DEFAULT_BAUDRATE)
        self._transport = None
        self._collector = ResponseCollector()
        self._builder = CommandBuilder(protocol)
        self._parser = ResponseParser(protocol)
        self._open = False

    async def initialize(
        self,
        port: str,
        baudrate: int,
        max_retries: int = DEFAULT_MAX_RETRIES
    ) -> bool:
        """
        Open the port and verify the reader answers the open-port command.

        Failures are logged and retried; this method does not raise for
        transport errors.

        Args:
            port: Serial port name
            baudrate: One of 9600, 19200, 57600, 115200
            max_retries: Maximum number of handshake attempts

        Returns:
            True if the reader answered with the expected response
        """
        self.close_port()

        self.port = port
        self.baudrate = baudrate
        self._transport = self.transport_factory(port, baudrate)
        self._collector = ResponseCollector(self._transport)
        command = self._builder.build_open_port(baudrate)

        for attempt in range(1, max_retries + 1):
            try:
                if not self._transport.is_open:
                    self._transport.open()

                response = await self._collector.send_and_await(
                    command, self.open_timeout, self.idle_gap
                )
                if self._parser.is_open_port_ok(response):
                    self._open = True
                    logger.info(f"Card reader initialized on {port} at {baudrate} bps "
                                f"(attempt {attempt})")
                    return True

                logger.warning(f"Attempt {attempt}: Invalid response {response.hex(' ')}, retrying...")

            except ReaderProtocolError as e:
                logger.warning(f"Attempt {attempt}: Error occurred, retrying... {e}")

            if attempt < max_retries:
                await asyncio.sleep(self.retry_delay)

        logger.error(f"Card reader failed to initialize after {max_retries} attempts")
        self.close_port()
        return False

    async def send_and_await(self, command: bytes, timeout: Optional[float] = None) -> bytes:
        """Send command on this link and collect the response."""
        return await self._collector.send_and_await(
            command, timeout if timeout is not None else self.timeout, self.idle_gap
        )

    def close_port(self) -> None:
        """
        Close the port. Safe to call repeatedly or before initialize.

        Blocks while the receive thread is joined (up to 1 s), so async
        callers hold the event loop for that long.
        """
        self._open = False
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()
            logger.info(f"Card reader port {self.port} closed")

    @property
    def is_open(self) -> bool:
        """True after a successful handshake while the stream is open."""
        return self._open and self._transport is not None and self._transport.is_open

    @property
    def state(self) -> CollectorState:
        return self._collector.state

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"ReaderConnection({self.port}, {self.baudrate}, {status})"
