"""
Command protocol engine.

Writes command lines, collects response lines until a terminator policy is
satisfied, and reports every line on the event bus.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

from .events import LineEventBus
from .transport import Transport
from ..exceptions import (
    CommandError,
    CommandTimeoutError,
    FramingError,
    TransportClosedError,
    TransportError,
)

logger = logging.getLogger(__name__)

PROMPT_LINE = ">"
ERROR_PREFIXES = ("+CME ERROR:", "+CMS ERROR:")


def is_error_line(line: str) -> bool:
    """Check if a line is an error final result code."""
    return line == "ERROR" or line.startswith(ERROR_PREFIXES)


def is_final_line(line: str) -> bool:
    """Check if a line is a final result code."""
    return line == "OK" or is_error_line(line)


@dataclass(frozen=True)
class TerminatorPolicy:
    """
    Decides when a response is complete and how strictly it is framed.

    Attributes:
        name: Policy name for logs
        terminators: Byte sequences that end a line on the wire
        complete_on_prompt: Finish on the "> " input prompt instead of OK
        parse_response: Strip command echo and raise CommandError on error finals
        timeout_is_error: Raise CommandTimeoutError when the window closes
        strict_framing: Treat partial or undecodable lines as framing errors
    """
    name: str
    terminators: tuple[bytes, ...] = (b"\r\n",)
    complete_on_prompt: bool = False
    parse_response: bool = True
    timeout_is_error: bool = True
    strict_framing: bool = True

    def is_complete(self, line: str) -> bool:
        if self.complete_on_prompt:
            return line == PROMPT_LINE or is_error_line(line)
        return is_final_line(line)


FINAL_RESULT = TerminatorPolicy("final-result")
PROMPT = TerminatorPolicy("prompt", terminators=(b"\r\n", b"> "), complete_on_prompt=True)
RAW = TerminatorPolicy(
    "raw",
    parse_response=False,
    timeout_is_error=False,
    strict_framing=False
)


class CommandProtocol:
    """
    Command protocol engine.

    Serializes command execution on one transport. Command payloads are
    opaque; only line framing and final result codes are inspected.
    """

    MAX_FRAMING_RETRIES = 1

    def __init__(
        self,
        transport: Transport,
        events: Optional[LineEventBus] = None,
        default_timeout: float = 1.0,
        text_encoding: str = "utf-8"
    ) -> None:
        """
        Initialize protocol engine.

        Args:
            transport: Transport instance for communication
            events: Bus receiving sent/received line events
            default_timeout: Default timeout for commands in seconds
            text_encoding: Codec for command and response text
        """
        self.transport = transport
        self.events = events if events is not None else LineEventBus()
        self.default_timeout = default_timeout
        self.text_encoding = text_encoding

        # Thread safety for commands
        self._lock = threading.Lock()

    def execute(
        self,
        command: str,
        policy: TerminatorPolicy = FINAL_RESULT,
        timeout: Optional[float] = None,
        strip_ok: bool = False,
        terminate: bool = True
    ) -> list[str]:
        """
        Send a command and wait for its response.

        Args:
            command: Command text (e.g., "AT+CSQ")
            policy: When the response is complete
            timeout: Command timeout in seconds (uses default if None)
            strip_ok: Remove trailing "OK" from response lines
            terminate: Append the transport's line terminator

        Returns:
            List of response lines

        Raises:
            CommandTimeoutError: If the response is incomplete when the timeout elapses
            FramingError: If a malformed line persists after one retry
            CommandError: If the device returns an error result
            TransportError: If the transport fails or is closed
        """
        timeout_val = timeout if timeout is not None else self.default_timeout

        with self._lock:
            if not self.transport.is_open():
                raise TransportClosedError("Transport is not open", command=command)

            data = command.encode(self.text_encoding)
            logger.debug(f"Sending command ({policy.name}): {command}")
            written = self.transport.write_line(data) if terminate else self.transport.write(data)
            if not written:
                raise TransportError(f"Failed to write command: {command}", command=command)
            self.events.sent(command)

            lines = self._read_response(command, policy, timeout_val)

        logger.debug(f"Received response: {lines}")

        if not policy.parse_response:
            return lines

        # Strip echo if present (detection-based, not state-based)
        if lines and lines[0] == command.strip():
            logger.debug(f"Stripping echo line: {lines[0]}")
            lines = lines[1:]

        if lines and is_error_line(lines[-1]):
            logger.error(f"Command returned {lines[-1]}: {command}")
            raise CommandError(
                f"Command returned {lines[-1]}",
                command=command,
                response=lines
            )

        if strip_ok and lines and lines[-1] == "OK":
            lines = lines[:-1]

        return lines

    def _read_response(self, command: str, policy: TerminatorPolicy, timeout: float) -> list[str]:
        lines: list[str] = []
        framing_errors = 0
        pending_framing: Optional[FramingError] = None
        end_time = time.monotonic() + timeout

        while True:
            remaining = end_time - time.monotonic()
            if remaining <= 0:
                if pending_framing is not None:
                    raise pending_framing
                if not policy.timeout_is_error:
                    return lines
                logger.error(f"Command timed out: {command}")
                raise CommandTimeoutError(
                    f"Command timed out after {timeout}s",
                    command=command,
                    response=lines
                )

            raw = self.transport.read_line(policy.terminators, remaining)
            if not raw:
                continue

            try:
                text = self._decode(raw, policy)
            except FramingError as e:
                framing_errors += 1
                error = FramingError(str(e), command=command, response=lines)
                if framing_errors > self.MAX_FRAMING_RETRIES:
                    logger.error(f"Framing error persisted for {command}: {raw!r}")
                    raise error from e
                logger.warning(f"Framing error for {command}, retrying read: {raw!r}")
                pending_framing = error
                continue

            pending_framing = None
            for line in text.splitlines():
                line = line.strip()
                if not line:
                    continue
                self.events.received(line)
                lines.append(line)
                if policy.is_complete(line):
                    return lines

    def _decode(self, raw: bytes, policy: TerminatorPolicy) -> str:
        if not policy.strict_framing:
            return raw.decode(self.text_encoding, errors="replace")

        try:
            if not raw.endswith(policy.terminators):
                raise FramingError(f"Partial line: {raw!r}")
            return raw.decode(self.text_encoding)
        except (FramingError, UnicodeDecodeError) as e:
            shown = raw.decode(self.text_encoding, errors="replace").strip()
            if shown:
                self.events.received(shown)
            if isinstance(e, FramingError):
                raise
            raise FramingError(f"Undecodable line: {raw!r}") from e
