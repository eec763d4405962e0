"""
Driver model.

A driver is data: how to recognize a device dialect, which status fields it
offers and how it submits an SMS. Adding a dialect means building a Driver
value and registering it, not subclassing.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from ..codec import encode_ucs2_hex
from ..exceptions import UnknownFieldError
from ..parsers.base import ResponseParser
from ..types import ContentEncoding

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusField:
    """
    A named device attribute.

    Command templates may use {device}, {portName} and {baudRate}; write
    templates also get {value}. A field without a read template is
    write-only, one without a write template is read-only.
    """
    name: str
    parser: ResponseParser[str]
    read_command: Optional[str] = None
    write_command: Optional[str] = None
    description: str = ""

    @property
    def readable(self) -> bool:
        return self.read_command is not None

    @property
    def writable(self) -> bool:
        return self.write_command is not None

    @property
    def echoes(self) -> bool:
        """True if a written value is expected back from a read."""
        return self.readable and self.writable


@dataclass(frozen=True)
class SendProfile:
    """
    How a driver submits an SMS in text mode.

    Attributes:
        submit_command: Command that opens the "> " prompt; sees {destination}
        setup_commands: Commands run before submitting
        teardown_commands: Commands run after submitting, even on failure
        encoding: Encoding of destination and body
    """
    submit_command: str = 'AT+CMGS="{destination}"'
    setup_commands: tuple[str, ...] = ("AT+CMGF=1",)
    teardown_commands: tuple[str, ...] = ()
    encoding: ContentEncoding = ContentEncoding.TEXT

    def encode(self, text: str) -> str:
        """Encode destination or body text for the wire."""
        if self.encoding is ContentEncoding.UCS2:
            return encode_ucs2_hex(text)
        return text


@dataclass(frozen=True)
class Driver:
    """
    Declarative description of one device dialect.

    Attributes:
        id: Registry identifier (e.g., "sim900")
        name: Display name, also the {device} template token
        probe_command: Command sent while scanning
        probe_pattern: Regular expression searched in each probe response line
        fields: Status fields in display order
        send_profile: SMS submission recipe
        capabilities: Free-form tags (e.g., "ucs2", "battery")
    """
    id: str
    name: str
    probe_command: str
    probe_pattern: str
    fields: tuple[StatusField, ...] = ()
    send_profile: SendProfile = field(default_factory=SendProfile)
    capabilities: frozenset[str] = frozenset()
    _probe_re: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        names = [f.name for f in self.fields]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Driver {self.id} declares duplicate fields: {sorted(duplicates)}")
        object.__setattr__(self, "_probe_re", re.compile(self.probe_pattern))

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def matches(self, response: list[str]) -> bool:
        """Test a probe response against this driver's pattern."""
        return any(self._probe_re.search(line) for line in response)

    def get_field(self, name: str) -> StatusField:
        """
        Look up a status field by name.

        Raises:
            UnknownFieldError: If this driver has no such field
        """
        for status_field in self.fields:
            if status_field.name == name:
                return status_field
        raise UnknownFieldError(f"{self.name} has no status field {name!r}", field=name)

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities
