"""
Generic 3GPP TS 27.005/27.007 modem driver.

Matches anything that answers "AT" with "OK", so it is registered last and
acts as the fallback when no vendor probe matches.
"""

from .base import Driver, SendProfile, StatusField
from ..parsers import (
    PHONE_NUMBER_PATTERN,
    OperatorParser,
    PrefixedValueParser,
    RegistrationParser,
    SignalQualityParser,
    SimpleValueParser,
    Ucs2AwareParser,
)

MANUFACTURER = StatusField(
    name="Manufacturer",
    read_command="AT+CGMI",
    parser=SimpleValueParser(prefix="+CGMI:"),
)

MODEL = StatusField(
    name="Model",
    read_command="AT+CGMM",
    parser=SimpleValueParser(prefix="+CGMM:"),
)

REVISION = StatusField(
    name="Revision",
    read_command="AT+CGMR",
    parser=SimpleValueParser(prefix="+CGMR:"),
)

IMEI = StatusField(
    name="IMEI",
    read_command="AT+CGSN",
    parser=SimpleValueParser(prefix="+CGSN:"),
)

SIGNAL_QUALITY = StatusField(
    name="Signal Quality",
    read_command="AT+CSQ",
    parser=SignalQualityParser(),
)

SIM_STATE = StatusField(
    name="SIM State",
    read_command="AT+CPIN?",
    parser=PrefixedValueParser("+CPIN:"),
)

REGISTRATION = StatusField(
    name="Network Registration",
    read_command="AT+CREG?",
    parser=RegistrationParser(),
)

OPERATOR = StatusField(
    name="Operator",
    read_command="AT+COPS?",
    parser=OperatorParser(),
)

SMS_CENTER = StatusField(
    name="SMS Center",
    read_command="AT+CSCA?",
    write_command='AT+CSCA="{value}"',
    parser=Ucs2AwareParser(PrefixedValueParser("+CSCA:", index=0), accept=PHONE_NUMBER_PATTERN),
    description="Service center address used for outgoing SMS",
)

MESSAGE_FORMAT = StatusField(
    name="Message Format",
    read_command="AT+CMGF?",
    write_command="AT+CMGF={value}",
    parser=PrefixedValueParser("+CMGF:"),
    description="0 = PDU mode, 1 = text mode",
)

CHARACTER_SET = StatusField(
    name="Character Set",
    read_command="AT+CSCS?",
    write_command='AT+CSCS="{value}"',
    parser=PrefixedValueParser("+CSCS:"),
)

COMMAND_ECHO = StatusField(
    name="Command Echo",
    write_command="ATE{value}",
    parser=SimpleValueParser(),
    description="Write 0 or 1; the modem has no query for it",
)

STANDARD_FIELDS = (
    MANUFACTURER,
    MODEL,
    REVISION,
    IMEI,
    SIGNAL_QUALITY,
    SIM_STATE,
    REGISTRATION,
    OPERATOR,
    SMS_CENTER,
    MESSAGE_FORMAT,
    CHARACTER_SET,
    COMMAND_ECHO,
)

GENERIC = Driver(
    id="generic",
    name="Generic GSM Modem",
    probe_command="AT",
    probe_pattern=r"^OK$",
    fields=STANDARD_FIELDS,
    send_profile=SendProfile(setup_commands=("AT+CMGF=1",)),
)
