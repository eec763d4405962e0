"""
Exceptions for QuickSMS library.

Provides detailed error information for debugging modem communication issues.
"""

from typing import Optional


class SmsDeviceError(Exception):
    """
    Base exception for SMS device errors.

    All QuickSMS exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        response: Optional[list[str]] = None,
        field: Optional[str] = None
    ) -> None:
        """
        Initialize exception with context.

        Args:
            message: Error description
            command: Command that caused the error (if applicable)
            response: Device response (if applicable)
            field: Status field involved (if applicable)
        """
        self.command = command
        self.response = response
        self.field = field
        super().__init__(message)

    def __str__(self) -> str:
        """Format error message with context."""
        parts = [super().__str__()]

        if self.field:
            parts.append(f"Field: {self.field}")

        if self.command:
            parts.append(f"Command: {self.command}")

        if self.response:
            parts.append(f"Response: {self.response}")

        return " | ".join(parts)


class TransportError(SmsDeviceError):
    """
    Raised when transport layer fails.

    This indicates:
    - Serial port issues
    - Connection lost
    - Hardware communication failure
    """
    pass


class PortUnavailableError(TransportError):
    """
    Raised when the physical port cannot be opened.

    Also raised when the port is already held by another open transport
    in this process.
    """
    pass


class TransportClosedError(TransportError):
    """Raised when a read or write hits a closed transport, including a read aborted by close()."""
    pass


class DeviceDisconnectedError(TransportError):
    """
    Raised when device is disconnected during operation.

    This is a fatal error that requires closing and reopening the connection.
    """
    pass


class CommandTimeoutError(SmsDeviceError):
    """
    Raised when a command gets no complete response in time.

    This typically indicates:
    - Device is not responding
    - Wrong baud rate
    - Command takes longer than timeout
    """
    pass


class ScanTimeoutError(CommandTimeoutError):
    """Raised when no driver probe received any response during a scan."""
    pass


class FramingError(SmsDeviceError):
    """
    Raised when a response line is malformed.

    Partial lines and undecodable bytes are retried once before this is raised.
    """
    pass


class CommandError(SmsDeviceError):
    """Raised when the device answers a command with ERROR, +CME ERROR or +CMS ERROR."""
    pass


class ParseError(SmsDeviceError):
    """
    Raised when a command response cannot be parsed.

    This indicates:
    - Unexpected response format
    - Missing expected fields
    - Invalid data in response
    """
    pass


class NoDriverMatchedError(SmsDeviceError):
    """
    Raised when a scan exhausted all drivers.

    Something answered on the port, but no probe response matched.
    """
    pass


class UnknownDriverError(SmsDeviceError):
    """Raised when a driver identifier is not registered."""
    pass


class DeviceClosedError(SmsDeviceError):
    """Raised when attempting to use a device that is not open."""
    pass


class FieldError(SmsDeviceError):
    """Raised when a status field read or write fails."""
    pass


class UnknownFieldError(FieldError):
    """Raised when a status field name is not declared by the bound driver."""
    pass


class SendError(SmsDeviceError):
    """
    Raised when SMS operations fail.

    This indicates:
    - SMS send failure
    - No input prompt from the device
    - Network rejected the message
    """
    pass
