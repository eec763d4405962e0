"""
Template substitution for message content and command templates.

Tokens look like {name}. Recognized tokens are replaced independently;
anything else, including unknown tokens, is left as written.

Message tokens:
    {device}    device display name
    {portName}  serial port
    {baudRate}  baud rate
    {time}      current local time
    {guid}      fresh 32-digit hex identifier

Command templates additionally see {value} (field writes) and
{destination} (SMS submit).
"""

import re
import uuid
from datetime import datetime
from typing import Mapping, Optional

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_TOKEN_RE = re.compile(r"\{(\w+)\}")


def render_template(template: str, tokens: Mapping[str, object]) -> str:
    """
    Replace recognized {tokens} in a template.

    Example:

    .. code-block:: python

        render_template("{device} on {portName} {other}", {"device": "SIM900", "portName": "COM3"})
        # -> "SIM900 on COM3 {other}"
    """
    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key in tokens:
            return str(tokens[key])
        return match.group(0)

    return _TOKEN_RE.sub(replace, template)


def device_tokens(device: str, port: str, baudrate: int) -> dict[str, object]:
    """Tokens describing a bound device."""
    return {
        "device": device,
        "portName": port,
        "baudRate": baudrate,
    }


def message_tokens(
    device: str,
    port: str,
    baudrate: int,
    now: Optional[datetime] = None
) -> dict[str, object]:
    """Tokens available to SMS content, with a fresh time and guid."""
    tokens = device_tokens(device, port, baudrate)
    tokens["time"] = (now or datetime.now()).strftime(TIME_FORMAT)
    tokens["guid"] = uuid.uuid4().hex
    return tokens
