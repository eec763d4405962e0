"""
Driver detection.

Opens a short-lived transport on a port and tries each registered driver's
probe until one matches.
"""

import logging
from typing import Callable, Optional

from .config import DEFAULT_BAUDRATE, SerialSettings
from .core import CommandProtocol, LineEventBus, SerialTransport, Transport
from .drivers import DriverRegistry
from .exceptions import (
    CommandError,
    CommandTimeoutError,
    FramingError,
    NoDriverMatchedError,
    ScanTimeoutError,
)
from .types import ScanResult

logger = logging.getLogger(__name__)

TransportFactory = Callable[[SerialSettings], Transport]


class Scanner:
    """
    Identifies which driver fits the device on a port.

    Each scan is its own transport session: the port is opened for the scan
    and always closed before scan() returns. Callers must not open a device
    on the same port while a scan is running.

    Example:

    .. code-block:: python

        scanner = Scanner(default_registry())
        result = scanner.scan("/dev/ttyUSB0", 115200)
        print(f"Found {result.name} ({result.driver_id})")
    """

    def __init__(
        self,
        registry: DriverRegistry,
        transport_factory: TransportFactory = SerialTransport,
        events: Optional[LineEventBus] = None,
        defaults: Optional[SerialSettings] = None
    ) -> None:
        """
        Initialize scanner.

        Args:
            registry: Drivers to try, in registration order
            transport_factory: Builds an unopened transport from settings
            events: Bus receiving probe traffic
            defaults: Settings template (timeouts, framing) for scan sessions
        """
        self.registry = registry
        self.transport_factory = transport_factory
        self.events = events if events is not None else LineEventBus()
        self.defaults = defaults

    def scan(self, port: str, baudrate: Optional[int] = None) -> ScanResult:
        """
        Probe a port with every registered driver.

        Args:
            port: Serial port path
            baudrate: Baud rate (defaults to the settings template or 115200)

        Returns:
            ScanResult of the first matching driver

        Raises:
            PortUnavailableError: If the port cannot be opened
            NoDriverMatchedError: If something answered but no probe matched
            ScanTimeoutError: If no probe got any response at all
            TransportError: If the port fails during the scan
        """
        if self.defaults is not None:
            settings = self.defaults.with_port(port, baudrate)
        else:
            settings = SerialSettings(port=port, baudrate=baudrate or DEFAULT_BAUDRATE)

        logger.info(f"Scanning {settings.port} at {settings.baudrate} baud with {len(self.registry)} driver(s)")

        transport = self.transport_factory(settings)
        transport.open()
        engine = CommandProtocol(
            transport,
            events=self.events,
            default_timeout=settings.probe_timeout,
            text_encoding=settings.text_encoding
        )

        answered = False
        tried: list[str] = []
        try:
            for driver in self.registry:
                tried.append(driver.id)
                # Drop anything a previous probe left behind
                transport.reset_input_buffer()

                try:
                    response = engine.execute(driver.probe_command)
                except CommandTimeoutError as e:
                    answered = answered or bool(e.response)
                    logger.debug(f"Probe for {driver.id} timed out")
                    continue
                except (CommandError, FramingError) as e:
                    answered = True
                    logger.debug(f"Probe for {driver.id} failed: {e}")
                    continue

                answered = True
                if driver.matches(response):
                    logger.info(f"Identified {driver.name} ({driver.id}) on {settings.port}")
                    return ScanResult(driver_id=driver.id, name=driver.name)
                logger.debug(f"Probe for {driver.id} did not match: {response}")
        finally:
            transport.close()

        if answered or not tried:
            raise NoDriverMatchedError(
                f"No driver matched the device on {settings.port}; tried {', '.join(tried) or 'nothing'}"
            )
        raise ScanTimeoutError(
            f"No response on {settings.port} at {settings.baudrate} baud; tried {', '.join(tried)}"
        )
