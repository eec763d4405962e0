"""
Core modem infrastructure.

Provides low-level building blocks for modem communication:
- Transport: Serial communication abstraction
- Protocol: Command execution with terminator policies
- Events: Sent/received line notifications
"""

from .transport import Transport, SerialTransport, MockTransport, PortClaims, port_claims
from .protocol import CommandProtocol, TerminatorPolicy, FINAL_RESULT, PROMPT, RAW
from .events import LineEventBus, LineListener

__all__ = [
    "Transport",
    "SerialTransport",
    "MockTransport",
    "PortClaims",
    "port_claims",
    "CommandProtocol",
    "TerminatorPolicy",
    "FINAL_RESULT",
    "PROMPT",
    "RAW",
    "LineEventBus",
    "LineListener",
]
