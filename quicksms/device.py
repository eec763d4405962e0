"""
SMS device.

Binds a driver to a transport and exposes status fields, SMS sending and
raw command execution.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Union

from .codec import CTRL_Z, ESC, calculate_sms_parts, text_to_hex
from .config import SerialSettings
from .core import (
    CommandProtocol,
    LineEventBus,
    LineListener,
    PROMPT,
    RAW,
    SerialTransport,
    Transport,
)
from .drivers.base import Driver, StatusField
from .exceptions import (
    DeviceClosedError,
    FieldError,
    ParseError,
    SendError,
    SmsDeviceError,
)
from .parsers.base import find_prefixed
from .template import device_tokens, message_tokens, render_template
from .types import CommandEncoding, ContentEncoding, FieldResult, LineEvent

logger = logging.getLogger(__name__)


def _reason(error: Exception) -> str:
    """Error message without the context suffix added by SmsDeviceError.__str__."""
    return str(error.args[0]) if error.args else str(error)


class SmsDevice:
    """
    A driver bound to a serial port.

    All transport operations on one device are serialized. close() may be
    called from any thread and aborts an operation that is waiting for the
    device.

    Example usage with context manager:

    .. code-block:: python

        registry = default_registry()
        with registry.create("sim900", SerialSettings("/dev/ttyUSB0")) as device:
            device.add_line_listener(print)
            for name, result in device.read_all_fields().items():
                print(f"{name}: {result.display}")
            device.send("+8613800000000", "{device} on {portName} at {time}")
    """

    def __init__(
        self,
        driver: Driver,
        settings: SerialSettings,
        transport: Optional[Transport] = None,
        events: Optional[LineEventBus] = None
    ) -> None:
        """
        Initialize device.

        The port is not opened until open() is called.

        Args:
            driver: Driver describing the device dialect
            settings: Port configuration
            transport: Custom transport instance (for testing)
            events: Bus receiving sent/received lines
        """
        self.driver = driver
        self.settings = settings
        self.transport = transport if transport is not None else SerialTransport(settings)
        self.events = events if events is not None else LineEventBus()
        self._engine = CommandProtocol(
            self.transport,
            events=self.events,
            default_timeout=settings.timeout,
            text_encoding=settings.text_encoding
        )

        self._lock = threading.RLock()
        self._status_lock = threading.Lock()
        self._status: dict[str, FieldResult] = self._empty_status()
        self._open = False

        logger.debug(f"Initialized {driver.name} device on {settings.port}")

    @property
    def name(self) -> str:
        """Display name of the bound driver."""
        return self.driver.name

    @property
    def port(self) -> str:
        return self.settings.port

    @property
    def baudrate(self) -> int:
        return self.settings.baudrate

    @property
    def is_open(self) -> bool:
        return self._open and self.transport.is_open()

    def open(self) -> "SmsDevice":
        """
        Open the transport and reset the status cache.

        Opening an open device is a no-op; a closed device can be opened again.

        Raises:
            PortUnavailableError: If the port cannot be opened
        """
        with self._lock:
            if self.is_open:
                return self

            self.transport.open()
            with self._status_lock:
                self._status = self._empty_status()
            self._open = True

        logger.info(f"Opened {self.name} on {self.port} at {self.baudrate} baud")
        return self

    def close(self) -> None:
        """
        Close the transport.

        Safe to call repeatedly and from another thread. The status cache
        is kept so the last known values stay readable.
        """
        was_open = self._open
        self._open = False
        self.transport.close()
        if was_open:
            logger.info(f"Closed {self.name} on {self.port}")

    def status_fields(self) -> tuple[str, ...]:
        """Names of the driver's status fields, in display order."""
        return self.driver.field_names

    @property
    def status(self) -> dict[str, FieldResult]:
        """Copy of the status cache."""
        with self._status_lock:
            return dict(self._status)

    def read_field(self, name: str) -> FieldResult:
        """
        Read one status field and cache the result.

        Device errors are returned in the result instead of raised.

        Args:
            name: Status field name

        Returns:
            FieldResult holding the parsed value or the error

        Raises:
            UnknownFieldError: If the driver has no such field
            DeviceClosedError: If the device is not open

        Example:

        .. code-block:: python

            result = device.read_field("Signal Quality")
            if result.ok:
                print(result.value)
        """
        status_field = self.driver.get_field(name)
        with self._lock:
            self._ensure_open()
            return self._read(status_field)

    def read_all_fields(self) -> dict[str, FieldResult]:
        """
        Read every status field in order.

        Each field is read independently; a failing field is reported in its
        result and does not stop the others.

        Raises:
            DeviceClosedError: If the device is not open
        """
        with self._lock:
            self._ensure_open()
            results = {f.name: self._read(f) for f in self.driver.fields}

        failed = [name for name, result in results.items() if result.error is not None]
        if failed:
            logger.warning(f"Read {len(results) - len(failed)}/{len(results)} fields; failed: {', '.join(failed)}")
        return results

    def write_field(self, name: str, value: str) -> FieldResult:
        """
        Write a status field.

        On success the cache holds exactly the written value; on failure
        the cache keeps its previous value and the error is returned.

        Args:
            name: Status field name
            value: New value, substituted for {value} in the write template

        Returns:
            FieldResult with the written value or the error

        Raises:
            UnknownFieldError: If the driver has no such field
            DeviceClosedError: If the device is not open

        Example:

        .. code-block:: python

            result = device.write_field("SMS Center", "+8613800100500")
            result.unwrap()  # raise if the write failed
        """
        status_field = self.driver.get_field(name)
        value = str(value)

        with self._lock:
            self._ensure_open()

            if not status_field.writable:
                return FieldResult.failure(
                    name, FieldError(f"{name} is read-only", field=name)
                )

            command = render_template(status_field.write_command, self._tokens(value=value))
            logger.info(f"Writing {name} = {value!r}")
            try:
                self._engine.execute(command)
            except SmsDeviceError as e:
                logger.warning(f"Writing {name} failed: {e}")
                return FieldResult.failure(name, self._field_error("write", name, command, e))

            result = FieldResult.success(name, value)
            self._store(result)
            return result

    def render_content(self, template: str, now: Optional[datetime] = None) -> str:
        """
        Substitute {device}, {portName}, {baudRate}, {time} and {guid} in a template.

        Unrecognized tokens are left as written.
        """
        return render_template(template, message_tokens(self.name, self.port, self.baudrate, now))

    def send(self, destination: str, template: str) -> Optional[int]:
        """
        Send an SMS.

        Args:
            destination: Recipient phone number
            template: Message content; tokens are substituted first

        Returns:
            Message reference reported by the network, or None if the
            device did not report one

        Raises:
            ValueError: If destination is empty
            DeviceClosedError: If the device is not open
            SendError: If any step of the submission fails

        Example:

        .. code-block:: python

            ref = device.send("+8613800000000", "Test from {device} at {time}")
        """
        if not destination:
            raise ValueError("Destination number is required")

        content = self.render_content(template)
        profile = self.driver.send_profile
        ucs2 = profile.encoding is ContentEncoding.UCS2

        with self._lock:
            self._ensure_open()

            parts = calculate_sms_parts(content, ucs2=ucs2)
            if parts > 1:
                logger.warning(f"Message needs {parts} parts; only the first part may be delivered")

            logger.info(f"Sending SMS to {destination} via {self.name}")
            command = None
            prompted = False
            try:
                for command in profile.setup_commands:
                    self._engine.execute(command)

                command = render_template(
                    profile.submit_command,
                    self._tokens(destination=profile.encode(destination))
                )
                prompted = True
                self._engine.execute(command, policy=PROMPT)

                command = profile.encode(content) + CTRL_Z
                response = self._engine.execute(
                    command,
                    timeout=self.settings.send_timeout,
                    strip_ok=True,
                    terminate=False
                )
            except SmsDeviceError as e:
                if prompted:
                    self._abort_prompt()
                self._teardown(profile.teardown_commands)
                raise SendError(
                    f"Failed to send SMS to {destination}: {_reason(e)}",
                    command=command,
                    response=e.response
                ) from e

            self._teardown(profile.teardown_commands)

        try:
            reference = int(find_prefixed(response, "+CMGS:"))
        except (ParseError, ValueError) as e:
            logger.warning(f"SMS sent but could not parse reference: {e}")
            return None

        logger.info(f"SMS sent successfully, reference: {reference}")
        return reference

    def execute_command(
        self,
        payload: str,
        encoding: Union[CommandEncoding, str] = CommandEncoding.TEXT,
        timeout: Optional[float] = None
    ) -> list[str]:
        """
        Send a raw command without interpreting the response.

        The reply arrives through line events; the lines seen before the
        device went quiet (or sent a final result code) are also returned.

        Args:
            payload: Command text
            encoding: CommandEncoding.TEXT sends it as-is, HEX sends its hex rendering
            timeout: How long to collect response lines (uses default if None)

        Returns:
            Lines received, unparsed

        Raises:
            DeviceClosedError: If the device is not open
            TransportError: If the transport fails

        Example:

        .. code-block:: python

            device.execute_command("AT+CSQ")
            device.execute_command("AT", encoding=CommandEncoding.HEX)  # sends "4154"
        """
        encoding = CommandEncoding(encoding)
        with self._lock:
            self._ensure_open()
            if encoding is CommandEncoding.HEX:
                payload = text_to_hex(payload, self.settings.text_encoding)
            return self._engine.execute(payload, policy=RAW, timeout=timeout)

    def add_line_listener(self, listener: LineListener) -> None:
        """
        Register a listener for every sent and received line.

        Args:
            listener: Function called with each LineEvent.
                     Signature: listener(event: LineEvent) -> None
        """
        self.events.subscribe(listener)

    def remove_line_listener(self, listener: LineListener) -> bool:
        return self.events.unsubscribe(listener)

    def on_sent(self, callback: Callable[[str, datetime], None]) -> LineListener:
        """Call callback(line, timestamp) for every line sent."""
        return self.events.on_sent(callback)

    def on_received(self, callback: Callable[[str, datetime], None]) -> LineListener:
        """Call callback(line, timestamp) for every line received."""
        return self.events.on_received(callback)

    def line_history(self, limit: Optional[int] = None) -> list[LineEvent]:
        """Recent line events, oldest first."""
        return self.events.history(limit)

    def supports(self, capability: str) -> bool:
        return self.driver.supports(capability)

    def _read(self, status_field: StatusField) -> FieldResult:
        name = status_field.name

        if not status_field.readable:
            # Write-only fields keep reporting what was last written
            cached = self.status.get(name)
            if cached is not None and cached.ok:
                return cached
            return FieldResult.failure(
                name, FieldError(f"{name} is write-only and has not been written", field=name)
            )

        command = render_template(status_field.read_command, self._tokens())
        try:
            response = self._engine.execute(command, strip_ok=True)
            value = status_field.parser.parse(response)
        except SmsDeviceError as e:
            logger.warning(f"Reading {name} failed: {e}")
            result = FieldResult.failure(name, self._field_error("read", name, command, e))
        else:
            logger.debug(f"{name}: {value}")
            previous = self.status.get(name)
            if status_field.echoes and previous is not None and previous.ok and previous.value != value:
                logger.info(f"{name} changed on the device: {previous.value!r} -> {value!r}")
            result = FieldResult.success(name, value)

        self._store(result)
        return result

    def _store(self, result: FieldResult) -> None:
        with self._status_lock:
            self._status[result.name] = result

    def _empty_status(self) -> dict[str, FieldResult]:
        return {f.name: FieldResult.empty(f.name) for f in self.driver.fields}

    def _tokens(self, **extra: object) -> dict[str, object]:
        tokens = device_tokens(self.name, self.port, self.baudrate)
        tokens.update(extra)
        return tokens

    def _field_error(self, action: str, name: str, command: str, cause: SmsDeviceError) -> FieldError:
        error = FieldError(
            f"Failed to {action} {name}: {_reason(cause)}",
            command=command,
            response=cause.response,
            field=name
        )
        error.__cause__ = cause
        return error

    def _ensure_open(self) -> None:
        if not self.is_open:
            raise DeviceClosedError(f"{self.name} on {self.port} is not open")

    def _abort_prompt(self) -> None:
        """Leave SMS body entry so later commands are not taken as text."""
        if not self.transport.is_open():
            return
        try:
            self.transport.write(ESC.encode())
            self.events.sent(ESC)
        except SmsDeviceError as e:
            logger.error(f"Failed to cancel SMS prompt: {e}")

    def _teardown(self, commands: tuple[str, ...]) -> None:
        for command in commands:
            if not self.transport.is_open():
                return
            try:
                self._engine.execute(command)
            except SmsDeviceError as e:
                logger.error(f"Send teardown command {command} failed: {e}")

    def __enter__(self):
        """Context manager entry: open the device."""
        return self.open()

    def __exit__(self, *exc):
        """Context manager exit: close the device."""
        self.close()

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"<SmsDevice {self.driver.id} port={self.port} status={status}>"
