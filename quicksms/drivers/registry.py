"""
Driver registry.

Maps driver identifiers to drivers and the factories that bind them to a
port. A registry is an ordinary value: build one at startup and pass it to
the scanner and the device manager.
"""

import logging
from typing import TYPE_CHECKING, Callable, Iterator, Optional

from .base import Driver
from ..config import SerialSettings
from ..exceptions import UnknownDriverError

if TYPE_CHECKING:
    from ..core.transport import Transport
    from ..device import SmsDevice

logger = logging.getLogger(__name__)

DeviceFactory = Callable[[Driver, SerialSettings, Optional["Transport"]], "SmsDevice"]


def _default_factory(
    driver: Driver,
    settings: SerialSettings,
    transport: Optional["Transport"] = None
) -> "SmsDevice":
    from ..device import SmsDevice
    return SmsDevice(driver, settings, transport=transport)


class DriverRegistry:
    """
    Ordered collection of drivers.

    Registration order is the order in which the scanner tries probes.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[Driver, DeviceFactory]] = {}

    def register(self, driver: Driver, factory: Optional[DeviceFactory] = None) -> None:
        """
        Register a driver.

        Args:
            driver: Driver to register under driver.id
            factory: Builds a device from (driver, settings, transport);
                defaults to SmsDevice

        Raises:
            ValueError: If the identifier is already registered
        """
        if driver.id in self._entries:
            raise ValueError(f"Driver {driver.id!r} is already registered")
        self._entries[driver.id] = (driver, factory or _default_factory)
        logger.debug(f"Registered driver {driver.id} ({driver.name})")

    def get(self, identifier: str) -> Driver:
        """
        Look up a driver.

        Raises:
            UnknownDriverError: If the identifier is not registered
        """
        try:
            return self._entries[identifier][0]
        except KeyError:
            raise UnknownDriverError(
                f"Unknown driver {identifier!r}; registered: {', '.join(self._entries) or 'none'}"
            ) from None

    def create(
        self,
        identifier: str,
        settings: SerialSettings,
        transport: Optional["Transport"] = None
    ) -> "SmsDevice":
        """
        Build an unopened device bound to a driver.

        Args:
            identifier: Driver identifier
            settings: Port configuration
            transport: Custom transport instance (for testing)

        Raises:
            UnknownDriverError: If the identifier is not registered
        """
        driver = self.get(identifier)
        factory = self._entries[identifier][1]
        logger.info(f"Creating {driver.name} device on {settings.port}")
        return factory(driver, settings, transport)

    def drivers(self) -> list[Driver]:
        """Registered drivers in registration order."""
        return [driver for driver, _ in self._entries.values()]

    def __iter__(self) -> Iterator[Driver]:
        return iter(self.drivers())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def default_registry() -> DriverRegistry:
    """
    Build a registry with the bundled drivers.

    Vendor drivers come first; the generic driver matches any responsive
    modem and is tried last.
    """
    from .generic import GENERIC
    from .quectel import QUECTEL_EC2X
    from .simcom import SIM900

    registry = DriverRegistry()
    for driver in (SIM900, QUECTEL_EC2X, GENERIC):
        registry.register(driver)
    return registry
