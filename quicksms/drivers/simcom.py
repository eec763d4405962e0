"""
SIMCom SIM800/SIM900 series driver.

Probe: AT+CGMM answers with the module name, e.g. "SIM900" or "SIM800L".
"""

from .base import Driver, SendProfile, StatusField
from .generic import STANDARD_FIELDS
from ..parsers import BatteryParser, PrefixedValueParser, SimpleValueParser

BATTERY = StatusField(
    name="Battery",
    read_command="AT+CBC",
    parser=BatteryParser(),
)

ICCID = StatusField(
    name="ICCID",
    read_command="AT+CCID",
    parser=SimpleValueParser(prefix="+CCID:"),
)

SLEEP_MODE = StatusField(
    name="Sleep Mode",
    read_command="AT+CSCLK?",
    write_command="AT+CSCLK={value}",
    parser=PrefixedValueParser("+CSCLK:"),
    description="0 = disabled, 1 = DTR controlled, 2 = automatic",
)

# SIMCom firmwares print "Revision:1137B01SIM900M64_ST"
REVISION = StatusField(
    name="Revision",
    read_command="AT+CGMR",
    parser=SimpleValueParser(prefix="Revision:"),
)

SIM900 = Driver(
    id="sim900",
    name="SIM900",
    probe_command="AT+CGMM",
    probe_pattern=r"\bSIM[89]\d\d",
    fields=tuple(REVISION if f.name == "Revision" else f for f in STANDARD_FIELDS)
    + (BATTERY, ICCID, SLEEP_MODE),
    send_profile=SendProfile(setup_commands=("AT+CMGF=1", 'AT+CSCS="GSM"')),
    capabilities=frozenset({"battery"}),
)
