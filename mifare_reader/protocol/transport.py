"""
Serial transport layer.

Byte-stream transport with a background receive thread that delivers
each received chunk to subscribed callbacks.
"""

import serial
import threading
import logging
from typing import Callable, List, Optional, Tuple

from .exceptions import ConnectionError, NotOpenError, WriteFailureError

logger = logging.getLogger(__name__)

DataCallback = Callable[[bytes], None]
CloseCallback = Callable[[], None]


class SerialTransport:
    """Serial communication transport layer."""

    def __init__(
        self,
        port: str,
        baudrate: int = 19200,
        read_timeout: float = 0.05,
        write_timeout: float = 1.0
    ):
        """
        Initialize serial transport.

        Args:
            port: Serial port name (e.g., '/dev/ttyUSB0' or 'COM5')
            baudrate: Baud rate (default: 19200)
            read_timeout: Internal read timeout for background thread
            write_timeout: Timeout for a single write call
        """
        self.port = port
        self.baudrate = baudrate
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self._serial: Optional[serial.Serial] = None
        self._rx_thread: Optional[threading.Thread] = None
        self._running = False
        self._lock = threading.Lock()
        self._subscribers: List[Tuple[DataCallback, Optional[CloseCallback]]] = []

    def open(self) -> None:
        """Open serial port and start receive thread."""
        if self.is_open:
            return
        try:
            self._serial = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.read_timeout,
                write_timeout=self.write_timeout
            )
            logger.info(f"Opened serial port {self.port} at {self.baudrate} bps")

            self._running = True
            self._rx_thread = threading.Thread(target=self._rx_loop, daemon=True)
            self._rx_thread.start()

        except (serial.SerialException, ValueError) as e:
            self._serial = None
            raise ConnectionError(f"Failed to open {self.port}: {e}") from e

    def close(self) -> None:
        """Close serial port, stop receive thread and notify subscribers."""
        self._running = False

        if self._rx_thread:
            if self._rx_thread is not threading.current_thread():
                self._rx_thread.join(timeout=1.0)
            self._rx_thread = None

        if self._serial is None:
            return

        try:
            self._serial.close()
        except serial.SerialException as e:
            logger.warning(f"Error closing {self.port}: {e}")
        self._serial = None
        logger.info(f"Closed serial port {self.port}")

        with self._lock:
            listeners = [on_close for _, on_close in self._subscribers if on_close]
        for on_close in listeners:
            on_close()

    def send(self, data: bytes) -> int:
        """
        Send data over serial port.

        Args:
            data: Bytes to send

        Returns:
            Number of bytes sent

        Raises:
            NotOpenError: If port is not open
            WriteFailureError: If the port rejects the write
        """
        if not self.is_open:
            raise NotOpenError("Serial port not open")

        try:
            count = self._serial.write(data)
            logger.debug(f"TX ({count} bytes): {bytes(data).hex(' ')}")
            return count
        except serial.SerialException as e:
            raise WriteFailureError(f"Write failed: {e}") from e

    def subscribe(self, on_data: DataCallback, on_close: Optional[CloseCallback] = None) -> None:
        """
        Register callbacks for received chunks and port closure.

        Callbacks run on the receive thread.
        """
        with self._lock:
            self._subscribers.append((on_data, on_close))

    def unsubscribe(self, on_data: DataCallback) -> None:
        """Remove callbacks registered with ``on_data``."""
        with self._lock:
            self._subscribers = [s for s in self._subscribers if s[0] is not on_data]

    def _rx_loop(self) -> None:
        """Background receive thread."""
        while self._running and self._serial and self._serial.is_open:
            try:
                data = self._serial.read(self._serial.in_waiting or 1)
                if data:
                    logger.debug(f"RX ({len(data)} bytes): {data.hex(' ')}")
                    with self._lock:
                        callbacks = [on_data for on_data, _ in self._subscribers]
                    for on_data in callbacks:
                        try:
                            on_data(data)
                        except Exception as e:
                            logger.error(f"RX subscriber error on {self.port}: {e}")
            except serial.SerialException as e:
                if self._running:
                    logger.error(f"RX error on {self.port}: {e}")
                break

    @property
    def is_open(self) -> bool:
        """Check if port is open."""
        return self._serial is not None and self._serial.is_open

    def __enter__(self) -> 'SerialTransport':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"SerialTransport({self.port}, {self.baudrate}, {status})"
