"""
Quectel EC2x/EG2x series driver.

Probe: ATI answers "Quectel", the model and "Revision: ...". Messages are
sent in the UCS2 character set so any Unicode text gets through; the
character set is switched back to GSM afterwards.
"""

from .base import Driver, SendProfile, StatusField
from .generic import STANDARD_FIELDS
from ..parsers import PrefixedValueParser, SimpleValueParser
from ..types import ContentEncoding

FIRMWARE = StatusField(
    name="Firmware",
    read_command="AT+QGMR",
    parser=SimpleValueParser(prefix="+QGMR:"),
)

NETWORK_INFO = StatusField(
    name="Network Info",
    read_command="AT+QNWINFO",
    parser=PrefixedValueParser("+QNWINFO:"),
    description='Access technology, operator, band and channel, e.g. "LTE","310410","LTE BAND 4",5110',
)

ICCID = StatusField(
    name="ICCID",
    read_command="AT+QCCID",
    parser=SimpleValueParser(prefix="+QCCID:"),
)

QUECTEL_EC2X = Driver(
    id="quectel_ec2x",
    name="Quectel EC2x",
    probe_command="ATI",
    probe_pattern=r"^Quectel",
    fields=STANDARD_FIELDS + (FIRMWARE, NETWORK_INFO, ICCID),
    send_profile=SendProfile(
        setup_commands=("AT+CMGF=1", 'AT+CSCS="UCS2"', "AT+CSMP=17,167,0,8"),
        teardown_commands=('AT+CSCS="GSM"',),
        encoding=ContentEncoding.UCS2,
    ),
    capabilities=frozenset({"ucs2"}),
)
