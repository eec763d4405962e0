"""
Serial connection settings.

Settings are plain constructor arguments; the CLI and examples can also pull
defaults from QUICKSMS_* environment variables.
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 115200


@dataclass(frozen=True)
class SerialSettings:
    """
    Port configuration shared by transports, the scanner and devices.

    Attributes:
        port: Serial port path (e.g., /dev/ttyUSB2, COM3)
        baudrate: Baud rate for serial communication
        timeout: Default command timeout in seconds
        probe_timeout: Per-driver probe timeout used while scanning
        send_timeout: Time allowed for the network to accept an SMS
        line_terminator: Bytes appended to every command line
        text_encoding: Codec used to decode response lines
    """
    port: str
    baudrate: int = DEFAULT_BAUDRATE
    timeout: float = 1.0
    probe_timeout: float = 1.0
    send_timeout: float = 30.0
    line_terminator: bytes = b"\r\n"
    text_encoding: str = "utf-8"

    def with_port(self, port: str, baudrate: Optional[int] = None) -> "SerialSettings":
        """Copy of these settings bound to another port/baud rate."""
        return replace(self, port=port, baudrate=baudrate or self.baudrate)

    @classmethod
    def from_env(cls, port: Optional[str] = None, **overrides) -> "SerialSettings":
        """
        Build settings from QUICKSMS_PORT, QUICKSMS_BAUDRATE and QUICKSMS_TIMEOUT.

        Explicit arguments win over the environment.

        Raises:
            ValueError: If no port is given and QUICKSMS_PORT is unset,
                or a numeric variable is malformed
        """
        port = port or os.environ.get("QUICKSMS_PORT")
        if not port:
            raise ValueError("No serial port given and QUICKSMS_PORT is not set")

        values = {}
        if "QUICKSMS_BAUDRATE" in os.environ:
            values["baudrate"] = int(os.environ["QUICKSMS_BAUDRATE"])
        if "QUICKSMS_TIMEOUT" in os.environ:
            values["timeout"] = float(os.environ["QUICKSMS_TIMEOUT"])
        values.update({k: v for k, v in overrides.items() if v is not None})

        settings = cls(port=port, **values)
        logger.debug(f"Loaded settings: {settings}")
        return settings
