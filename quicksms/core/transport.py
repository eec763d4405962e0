"""
Transport layer abstraction for modem communication.

Provides abstractions for serial communication with dependency injection support.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Optional, Sequence, Union
import serial
from serial import SerialException

from ..config import SerialSettings
from ..exceptions import (
    DeviceDisconnectedError,
    PortUnavailableError,
    TransportClosedError,
    TransportError,
)

logger = logging.getLogger(__name__)

# Longest a serial read blocks before checking for close()
POLL_INTERVAL = 0.05

DISCONNECT_PHRASES = (
    "device disconnected",
    "device reports readiness to read but returned no data",
    "no such device",
    "device not configured",
    "input/output error",
)


class PortClaims:
    """
    Process-wide table of ports held by open transports.

    A port can be claimed by one transport at a time.
    """

    def __init__(self) -> None:
        self._owners: dict[str, object] = {}
        self._lock = threading.Lock()

    def claim(self, port: str, owner: object) -> None:
        """
        Claim a port for an owner.

        Raises:
            PortUnavailableError: If another owner holds the port
        """
        with self._lock:
            current = self._owners.get(port)
            if current is not None and current is not owner:
                raise PortUnavailableError(f"Port {port} is already open")
            self._owners[port] = owner

    def release(self, port: str, owner: object) -> None:
        with self._lock:
            if self._owners.get(port) is owner:
                del self._owners[port]

    def is_claimed(self, port: str) -> bool:
        with self._lock:
            return port in self._owners


port_claims = PortClaims()


class Transport(ABC):
    """Abstract base class for modem transport."""

    port: Optional[str] = None
    baudrate: Optional[int] = None
    line_terminator: bytes = b"\r\n"

    @abstractmethod
    def open(self) -> None:
        """
        Open the transport.

        Raises:
            PortUnavailableError: If the port cannot be opened
        """
        pass

    @abstractmethod
    def write(self, data: bytes) -> int:
        """
        Write data to the transport.

        Args:
            data: Bytes to write

        Returns:
            Number of bytes written

        Raises:
            TransportError: If write fails
        """
        pass

    def write_line(self, data: bytes) -> int:
        """Write data followed by the line terminator."""
        return self.write(data + self.line_terminator)

    @abstractmethod
    def read_line(self, terminators: Sequence[bytes] = (b"\r\n",), timeout: float = 1.0) -> bytes:
        """
        Read from transport until one of the terminators is found.

        Args:
            terminators: Byte sequences marking the end of a line
            timeout: Longest time to wait in seconds

        Returns:
            Bytes read including terminator, partial bytes if the
            timeout elapsed mid-line, or b"" if nothing arrived

        Raises:
            TransportClosedError: If the transport is closed, or closed while waiting
            TransportError: If read fails
        """
        pass

    @abstractmethod
    def reset_input_buffer(self) -> None:
        """Clear the input buffer."""
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """Check if transport is open."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the transport. Closing a closed transport is a no-op."""
        pass


class SerialTransport(Transport):
    """Serial port transport implementation."""

    def __init__(self, settings: SerialSettings, claims: PortClaims = port_claims) -> None:
        """
        Initialize serial transport.

        The port is not touched until open() is called.

        Args:
            settings: Port, baud rate and framing configuration
            claims: Port claim table (process-wide by default)
        """
        self.settings = settings
        self.port = settings.port
        self.baudrate = settings.baudrate
        self.line_terminator = settings.line_terminator
        self._claims = claims
        self._serial: Optional[serial.Serial] = None
        self._closing = threading.Event()

    def open(self) -> None:
        """Open the serial port."""
        if self.is_open():
            return

        self._claims.claim(self.port, self)
        try:
            self._serial = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                timeout=POLL_INTERVAL
            )
        except (SerialException, ValueError) as e:
            self._claims.release(self.port, self)
            logger.error(f"Failed to open serial port {self.port}: {e}")
            raise PortUnavailableError(f"Failed to open serial port {self.port}: {e}") from e

        self._closing.clear()
        logger.info(f"Opened serial port {self.port} at {self.baudrate} baud")

    def write(self, data: bytes) -> int:
        """Write data to serial port."""
        port = self._require_open()
        try:
            written = port.write(data)
            logger.debug(f"Wrote {written} bytes: {data}")
            return written
        except SerialException as e:
            self._raise_io_error("write", e)

    def read_line(self, terminators: Sequence[bytes] = (b"\r\n",), timeout: float = 1.0) -> bytes:
        """
        Read from serial port until a terminator.

        The wait is sliced into POLL_INTERVAL reads so close() from another
        thread aborts it promptly.
        """
        port = self._require_open()
        buffer = bytearray()
        end_time = time.monotonic() + timeout

        try:
            while True:
                if self._closing.is_set():
                    raise TransportClosedError(f"Read on {self.port} aborted by close")

                remaining = end_time - time.monotonic()
                if remaining <= 0:
                    break

                port.timeout = min(remaining, POLL_INTERVAL)
                chunk = port.read(1)
                if not chunk:
                    continue

                buffer += chunk
                if any(buffer.endswith(t) for t in terminators):
                    break
        except SerialException as e:
            if self._closing.is_set():
                raise TransportClosedError(f"Read on {self.port} aborted by close") from e
            self._raise_io_error("read", e)

        if buffer:
            logger.debug(f"Read {len(buffer)} bytes: {bytes(buffer)}")
        return bytes(buffer)

    def reset_input_buffer(self) -> None:
        """Clear the serial input buffer."""
        port = self._require_open()
        try:
            port.reset_input_buffer()
            logger.debug("Reset input buffer")
        except SerialException as e:
            self._raise_io_error("reset input buffer", e)

    def is_open(self) -> bool:
        """Check if serial port is open."""
        return bool(self._serial and self._serial.is_open)

    def close(self) -> None:
        """Close the serial port and release the port claim."""
        self._closing.set()
        if self._serial is not None:
            if self._serial.is_open:
                self._serial.close()
                logger.info(f"Closed serial port {self.port}")
            self._serial = None
        self._claims.release(self.port, self)

    def _require_open(self) -> serial.Serial:
        if not self.is_open():
            raise TransportClosedError(f"Serial port {self.port} is not open")
        return self._serial

    def _raise_io_error(self, operation: str, e: SerialException) -> None:
        error_str = str(e).lower()

        # Detect device disconnection
        if any(phrase in error_str for phrase in DISCONNECT_PHRASES):
            logger.error(f"Device disconnected: {e}")
            self.close()
            raise DeviceDisconnectedError(
                f"Serial device disconnected: {e}",
                response=[str(e)]
            ) from e

        logger.error(f"Serial {operation} failed: {e}")
        raise TransportError(f"Serial {operation} failed: {e}") from e


Responder = Callable[[bytes], Optional[Sequence[Union[str, bytes]]]]


class MockTransport(Transport):
    """
    Mock transport for testing.

    Simulates modem responses without requiring hardware. Responses are
    queued with add_response() and delivered after the next write, or
    produced per command by a responder callable. Each delivered item is
    returned by one read_line() call: strings get the line terminator
    appended, bytes are delivered verbatim (use them for partial lines or
    prompts).
    """

    def __init__(
        self,
        port: Optional[str] = None,
        baudrate: int = 115200,
        responder: Optional[Responder] = None,
        claims: PortClaims = port_claims
    ) -> None:
        """
        Initialize mock transport.

        Args:
            port: Port name; when given the port is claimed like a real one
            baudrate: Reported baud rate
            responder: Optional callable mapping written bytes to response lines
            claims: Port claim table
        """
        self.port = port
        self.baudrate = baudrate
        self.responder = responder
        self._claims = claims
        self._open = False
        self._input: deque[bytes] = deque()
        self._response_queue: deque[list[Union[str, bytes]]] = deque()
        self._cond = threading.Condition()
        self.written: list[bytes] = []
        self.open_count = 0
        self.reset_count = 0
        logger.info("Initialized MockTransport")

    def open(self) -> None:
        """Simulate opening the port."""
        if self._open:
            return
        if self.port is not None:
            self._claims.claim(self.port, self)
        with self._cond:
            self._open = True
            self.open_count += 1
        logger.info(f"Opened MockTransport {self.port}")

    def add_response(self, lines: Sequence[Union[str, bytes]]) -> None:
        """
        Queue a response to be delivered after the next write.

        Args:
            lines: Response lines (e.g., ["+CSQ: 24,99", "OK"])
        """
        with self._cond:
            self._response_queue.append(list(lines))
            logger.debug(f"Added mock response: {lines}")

    def feed(self, *chunks: Union[str, bytes]) -> None:
        """Make data readable immediately, as if the device sent it unprompted."""
        with self._cond:
            for chunk in chunks:
                self._input.append(self._encode(chunk))
            self._cond.notify_all()

    def write(self, data: bytes) -> int:
        """Simulate writing data."""
        if not self._open:
            raise TransportClosedError(
                "MockTransport is closed",
                response=["MockTransport closed"]
            )

        logger.debug(f"Mock write: {data}")
        with self._cond:
            self.written.append(data)
            lines = None
            if self._response_queue:
                lines = self._response_queue.popleft()
            elif self.responder is not None:
                lines = self.responder(data)
            for line in lines or ():
                self._input.append(self._encode(line))
            self._cond.notify_all()
        return len(data)

    def read_line(self, terminators: Sequence[bytes] = (b"\r\n",), timeout: float = 1.0) -> bytes:
        """
        Simulate reading from modem.

        Blocks up to timeout for the next delivered line; close() wakes the
        reader with TransportClosedError.
        """
        end_time = time.monotonic() + timeout
        with self._cond:
            while True:
                if not self._open:
                    raise TransportClosedError(
                        "MockTransport is closed",
                        response=["MockTransport closed"]
                    )
                if self._input:
                    result = self._input.popleft()
                    logger.debug(f"Mock read: {result}")
                    return result
                remaining = end_time - time.monotonic()
                if remaining <= 0:
                    return b""
                self._cond.wait(remaining)

    def reset_input_buffer(self) -> None:
        """Clear delivered but unread data."""
        with self._cond:
            self._input.clear()
            self.reset_count += 1
            logger.debug("Reset mock input buffer")

    def is_open(self) -> bool:
        """Check if mock transport is open."""
        return self._open

    def close(self) -> None:
        """Close mock transport and wake any pending reader."""
        with self._cond:
            was_open = self._open
            self._open = False
            self._cond.notify_all()
        if self.port is not None:
            self._claims.release(self.port, self)
        if was_open:
            logger.info("Closed MockTransport")

    def clear_responses(self) -> None:
        """Clear all queued responses (useful for testing)."""
        with self._cond:
            self._response_queue.clear()
            logger.debug("Cleared mock response queue")

    @property
    def sent_lines(self) -> list[str]:
        """Written data decoded with line terminators removed."""
        return [w.decode("utf-8", errors="replace").rstrip("\r\n") for w in self.written]

    def _encode(self, line: Union[str, bytes]) -> bytes:
        if isinstance(line, bytes):
            return line
        return (line + "\r\n").encode("utf-8")
