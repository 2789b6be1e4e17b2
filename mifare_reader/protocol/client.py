"""
High-level reader client.

Provides the public API for the MIFARE serial card reader.

Failure shapes differ per operation and are part of the contract:

- ``initialize``, ``authen``, ``change_led_color``, ``beep`` return False
  and never raise.
- ``select_card`` returns None when no card answers and raises on
  transport errors.
- ``read_card`` returns None when the read marker is missing and raises
  ReadCardError when authentication or the transport fails.
"""

import logging
from typing import Callable, Optional, Union

from .config import ReaderConfig
from .connection import ReaderConnection
from .constants import DEFAULT_KEY, Color, KeyMode
from .exceptions import (
    KeyFormatError, NotOpenError, ReadCardError, ReaderProtocolError,
    ValidationMismatchError,
)
from .frame import CommandBuilder, KeyType, ResponseParser
from .results import Outcome, ReaderResult
from .transport import SerialTransport

logger = logging.getLogger(__name__)


class MifareReader:
    """Client for the MIFARE serial card reader."""

    def __init__(
        self,
        config: Optional[ReaderConfig] = None,
        transport_factory: Callable[[str, int], object] = SerialTransport
    ):
        """
        Initialize reader client.

        Args:
            config: Link, timing and protocol table settings
            transport_factory: Called as ``factory(port, baudrate)``
        """
        self.config = config or ReaderConfig()
        self.connection = ReaderConnection(
            transport_factory=transport_factory,
            protocol=self.config.protocol,
            timeout=self.config.timeout,
            open_timeout=self.config.open_timeout,
            retry_delay=self.config.retry_delay,
            idle_gap=self.config.idle_gap,
        )
        self._builder = CommandBuilder(self.config.protocol)
        self._parser = ResponseParser(self.config.protocol)

    @property
    def is_open(self) -> bool:
        return self.connection.is_open

    async def initialize(
        self,
        port: str,
        baudrate: Optional[int] = None,
        max_retries: Optional[int] = None
    ) -> bool:
        """
        Open the port and perform the open-port handshake.

        Args:
            port: Serial port (e.g., 'COM5', '/dev/ttyUSB0')
            baudrate: Link speed (default from config)
            max_retries: Handshake attempts (default from config)

        Returns:
            True if the reader answered correctly
        """
        return await self.connection.initialize(
            port,
            baudrate if baudrate is not None else self.config.baudrate,
            max_retries if max_retries is not None else self.config.max_retries,
        )

    def close_port(self) -> None:
        """Close the port."""
        self.connection.close_port()

    async def select_card(self) -> Optional[str]:
        """
        Select the card in the field.

        Returns:
            Hex string of the response from offset 6, or None if no card

        Raises:
            NotOpenError: If the port is not open
            ReaderProtocolError: On transport failure
        """
        if not self.is_open:
            raise NotOpenError()

        result = await self._select_card_result()
        if result.outcome is Outcome.TRANSPORT_ERROR:
            raise result.error
        return result.hex()

    async def authen(
        self,
        key: KeyType = DEFAULT_KEY,
        key_mode: Union[KeyMode, str] = KeyMode.A
    ) -> bool:
        """
        Authenticate against the selected card.

        Args:
            key: 6 raw bytes or 12 hex characters
            key_mode: Key slot A or B

        Returns:
            True if the reader accepted the key
        """
        result = await self._authen_result(key, key_mode)
        return result.ok

    async def read_card(
        self,
        key: KeyType = DEFAULT_KEY,
        key_mode: Union[KeyMode, str] = KeyMode.A
    ) -> Optional[str]:
        """
        Authenticate, then read one 16-byte block.

        Returns:
            Hex string of the block data, or None if no data was returned

        Raises:
            ReadCardError: If authentication or the transport fails
        """
        result = await self._read_card_result(key, key_mode)
        if result.outcome is Outcome.NOT_AUTHENTICATED:
            raise ReadCardError("Failed to authenticate") from result.error
        if result.outcome is Outcome.TRANSPORT_ERROR:
            raise ReadCardError(f"Read failed: {result.error}") from result.error
        return result.hex()

    async def change_led_color(self, color: Union[Color, str]) -> bool:
        """
        Set LED color.

        Returns:
            True if the reader acknowledged the change
        """
        result = await self._exchange(
            self._builder.build_led(color), self._parser.is_led_ok,
            self.config.protocol.led_expected_response
        )
        logger.info(f"LED {Color.parse(color).name}: {result}")
        return result.ok

    async def beep(self) -> bool:
        """
        Sound the beeper.

        Returns:
            True if the reader acknowledged the beep
        """
        result = await self._exchange(
            self._builder.build_beep(), self._parser.is_beep_ok,
            self.config.protocol.expected_beep_response
        )
        logger.info(f"Beep: {result}")
        return result.ok

    # === Result Methods ===

    async def _select_card_result(self) -> ReaderResult:
        try:
            response = await self.connection.send_and_await(self._builder.build_select_card())
        except ReaderProtocolError as e:
            logger.warning(f"Select card failed: {e}")
            return ReaderResult.transport_error(e)

        uid = self._parser.select_payload(response)
        if uid is None:
            logger.debug(f"No card selected: {response.hex(' ')}")
            return ReaderResult.failure(Outcome.NO_CARD, ValidationMismatchError(response))

        logger.info(f"Card selected: {uid.hex()}")
        return ReaderResult.success(uid)

    async def _authen_result(self, key: KeyType, key_mode: Union[KeyMode, str]) -> ReaderResult:
        if not self.is_open:
            return ReaderResult.transport_error(NotOpenError())

        try:
            command = self._builder.build_authen(key, key_mode)
        except KeyFormatError as e:
            logger.warning(f"Authentication rejected: {e}")
            return ReaderResult.failure(Outcome.NOT_AUTHENTICATED, e)

        try:
            response = await self.connection.send_and_await(command)
        except ReaderProtocolError as e:
            logger.warning(f"Authentication failed: {e}")
            return ReaderResult.transport_error(e)

        if not self._parser.is_authen_ok(response):
            error = ValidationMismatchError(
                response, self.config.protocol.rf_authen_expected_response
            )
            logger.warning(f"Authentication failed: {error}")
            return ReaderResult.failure(Outcome.NOT_AUTHENTICATED, error)

        logger.debug(f"Authenticated with key {KeyMode.parse(key_mode).name}")
        return ReaderResult.success()

    async def _read_card_result(self, key: KeyType, key_mode: Union[KeyMode, str]) -> ReaderResult:
        auth = await self._authen_result(key, key_mode)
        if not auth.ok:
            return ReaderResult.failure(Outcome.NOT_AUTHENTICATED, auth.error)

        try:
            response = await self.connection.send_and_await(self._builder.build_read_card())
        except ReaderProtocolError as e:
            logger.warning(f"Read card failed: {e}")
            return ReaderResult.transport_error(e)

        data = self._parser.read_payload(response)
        if data is None:
            logger.debug(f"No block data: {response.hex(' ')}")
            return ReaderResult.failure(Outcome.NO_DATA, ValidationMismatchError(response))

        return ReaderResult.success(data)

    async def _exchange(
        self,
        command: bytes,
        check: Callable[[bytes], bool],
        expected: bytes
    ) -> ReaderResult:
        """Send command and compare the whole response to ``expected``."""
        if not self.is_open:
            return ReaderResult.transport_error(NotOpenError())

        try:
            response = await self.connection.send_and_await(command)
        except ReaderProtocolError as e:
            return ReaderResult.transport_error(e)

        if not check(response):
            return ReaderResult.failure(Outcome.MISMATCH, ValidationMismatchError(response, expected))
        return ReaderResult.success(response)

    def __repr__(self) -> str:
        return f"MifareReader({self.connection!r})"
