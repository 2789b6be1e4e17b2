"""
MIFARE Reader Driver Module

Config-dict driven driver for the serial card reader.
Wraps the reader protocol client for host application integration.
"""

import logging
from typing import Any, Callable, Dict, Optional, Union

from .base import BaseReaderDriver
from ..protocol import (
    Color,
    DEFAULT_KEY,
    KeyMode,
    MifareReader,
    ReaderConfig,
    SerialTransport,
)

logger = logging.getLogger(__name__)


class MifareReaderDriver(BaseReaderDriver):
    """
    Driver for the MIFARE serial card reader.

    Attributes:
        port: Serial port path
        baudrate: Communication speed
        reader: Underlying MifareReader client
    """

    def __init__(
        self,
        name: str = "MifareReaderDriver",
        config: Optional[Dict[str, Any]] = None,
        transport_factory: Callable[[str, int], object] = SerialTransport
    ):
        """
        Initialize reader driver.

        Args:
            name: Driver name
            config: Configuration with keys:
                - port: Serial port (default: "/dev/ttyUSB0")
                - baudrate: Baud rate (default: 19200)
                - max_retries: Handshake attempts (default: 20)
                - timeout: Response timeout in seconds (default: 5.0)
                - open_timeout: Handshake response timeout (default: 3.0)
                - retry_delay: Delay between attempts (default: 0.5)
                - idle_gap: Early completion quiet window (default: off)
                - protocol_file: JSON file overriding the byte table
            transport_factory: Called as ``factory(port, baudrate)``
        """
        super().__init__(name=name, config=config)

        self.port: str = self.config.get("port", "/dev/ttyUSB0")
        reader_config = ReaderConfig.from_dict(self.config)
        self.baudrate: int = reader_config.baudrate

        self.reader = MifareReader(reader_config, transport_factory=transport_factory)

    async def connect(self) -> bool:
        """
        Open the port and run the handshake.

        Returns:
            bool: True if the reader answered
        """
        logger.info(f"Connecting to card reader on {self.port} at {self.baudrate} bps")
        self._connected = await self.reader.initialize(self.port, self.baudrate)
        if not self._connected:
            logger.error(f"Failed to connect to card reader on {self.port}")
        return self._connected

    async def disconnect(self) -> None:
        """Close the reader port."""
        self.reader.close_port()
        self._connected = False
        logger.info("Disconnected from card reader")

    async def reset(self) -> None:
        """Re-run the handshake on the same port."""
        if not self._connected:
            raise RuntimeError("Not connected to card reader")

        self._connected = await self.reader.initialize(self.port, self.baudrate)
        if not self._connected:
            raise RuntimeError(f"Card reader did not answer on {self.port}")

    async def identify(self) -> str:
        return f"MifareReader,{self.port},{self.baudrate}"

    async def is_connected(self) -> bool:
        return self._connected and self.reader.is_open

    # === Reader Operations ===

    async def select_card(self) -> Optional[str]:
        return await self.reader.select_card()

    async def read_card(
        self,
        key: Union[bytes, str] = DEFAULT_KEY,
        key_mode: Union[KeyMode, str] = KeyMode.A
    ) -> Optional[str]:
        return await self.reader.read_card(key, key_mode)

    async def change_led_color(self, color: Union[Color, str]) -> bool:
        return await self.reader.change_led_color(color)

    async def beep(self) -> bool:
        return await self.reader.beep()
