"""
Base Driver Module

Abstract base class for card reader drivers. Subclasses supply the device
operations; the polling and feedback flows built on them live here.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class BaseReaderDriver(ABC):
    """
    Abstract card reader driver.

    Attributes:
        name: Driver identifier name
        config: Configuration dictionary (port, baudrate, timing, ...)
    """

    def __init__(
        self,
        name: str = "BaseReaderDriver",
        config: Optional[Dict[str, Any]] = None
    ):
        self.name = name
        self.config = config or {}
        self._connected = False

    # === Link ===

    @abstractmethod
    async def connect(self) -> bool:
        """Open the link and verify the reader answers. Never raises."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the link. Safe to call when not connected."""
        ...

    @abstractmethod
    async def reset(self) -> None:
        """Re-establish the link with the current settings."""
        ...

    async def identify(self) -> str:
        return f"{self.__class__.__name__},{self.config.get('port', 'unknown')}"

    async def is_connected(self) -> bool:
        return self._connected

    # === Device Operations ===

    @abstractmethod
    async def select_card(self) -> Optional[str]:
        """Return the UID hex string of the card in the field, or None."""
        ...

    @abstractmethod
    async def change_led_color(self, color) -> bool:
        ...

    @abstractmethod
    async def beep(self) -> bool:
        ...

    # === Flows ===

    async def wait_for_card(self, attempts: int = 20, interval: float = 0.5) -> Optional[str]:
        """
        Poll until a card is presented.

        Args:
            attempts: Maximum select attempts
            interval: Delay between attempts in seconds

        Returns:
            Card UID hex string, or None if no card appeared
        """
        for attempt in range(1, attempts + 1):
            uid = await self.select_card()
            if uid:
                logger.info(f"{self.name}: card detected on attempt {attempt}: {uid}")
                return uid
            if attempt < attempts:
                await asyncio.sleep(interval)

        logger.info(f"{self.name}: no card detected after {attempts} attempts")
        return None

    async def indicate(self, color, beeps: int = 1, interval: float = 0.3) -> bool:
        """
        Set LED color, then beep ``beeps`` times ``interval`` seconds apart.

        Returns:
            bool: True if every step was acknowledged
        """
        ok = await self.change_led_color(color)
        for _ in range(beeps):
            await asyncio.sleep(interval)
            ok = await self.beep() and ok
        return ok

    async def __aenter__(self) -> "BaseReaderDriver":
        if not await self.connect():
            raise RuntimeError(f"{self.name}: connection failed")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, connected={self._connected})"
