"""
Pytest configuration and fixtures.

Provides shared test fixtures for QuickSMS tests.
"""

import re

import pytest
import logging

from quicksms import SerialSettings, SmsDevice
from quicksms.codec import CTRL_Z, ESC
from quicksms.core import MockTransport, PortClaims
from quicksms.drivers import SIM900, QUECTEL_EC2X, default_registry


# Enable logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class FakeModem:
    """
    Responder that answers AT commands from an in-memory state.

    Queries "AT+X?" return "+X: <state>", writes "AT+X=<v>" store <v>.
    Commands listed in `fail` are answered with ERROR. AT+CMGS opens the
    "> " prompt and a body ending in Ctrl-Z is accepted with a reference,
    or rejected with +CMS ERROR when `reject_messages` is set.
    """

    STATIC = {
        "AT": ["OK"],
        "ATI": ["Quectel", "EC25", "Revision: EC25EFAR06A03M4G", "OK"],
        "AT+CGMI": ["SIMCOM_Ltd", "OK"],
        "AT+CGMM": ["SIM900", "OK"],
        "AT+CGMR": ["Revision:1137B01SIM900M64_ST", "OK"],
        "AT+CGSN": ["861536030196001", "OK"],
        "AT+CSQ": ["+CSQ: 24,99", "OK"],
        "AT+CPIN?": ["+CPIN: READY", "OK"],
        "AT+CREG?": ["+CREG: 0,1", "OK"],
        "AT+COPS?": ['+COPS: 0,0,"CHINA MOBILE"', "OK"],
        "AT+CBC": ["+CBC: 0,95,4200", "OK"],
        "AT+CCID": ["89860012345678901234", "OK"],
    }

    def __init__(self, fail=(), **state):
        self.state = {
            "CSCA": '"+8613800100500",145',
            "CMGF": "0",
            "CSCS": '"GSM"',
            "CSCLK": "0",
            "CSMP": "17,167,0,0",
        }
        self.state.update(state)
        self.fail = set(fail)
        self.commands: list[str] = []
        self.messages: list[str] = []
        self.reference = 12
        self.reject_messages = False

    def __call__(self, data: bytes):
        command = data.decode("utf-8").strip()
        self.commands.append(command)

        if command in self.fail:
            return ["ERROR"]
        if command == ESC:
            return None
        if command.endswith(CTRL_Z):
            if self.reject_messages:
                return ["+CMS ERROR: 500"]
            self.messages.append(command[:-1])
            return [f"+CMGS: {self.reference}", "OK"]
        if command.startswith("AT+CMGS="):
            return [b"> "]
        if command in self.STATIC:
            return self.STATIC[command]
        if re.fullmatch(r"ATE[01]", command):
            return ["OK"]

        query = re.fullmatch(r"AT\+(\w+)\?", command)
        if query and query.group(1) in self.state:
            key = query.group(1)
            return [f"+{key}: {self.state[key]}", "OK"]

        write = re.fullmatch(r"AT\+(\w+)=(.*)", command)
        if write and write.group(1) in self.state:
            self.state[write.group(1)] = write.group(2)
            return ["OK"]

        return ["ERROR"]


@pytest.fixture
def claims():
    """Private port claim table so tests never collide."""
    return PortClaims()


@pytest.fixture
def fake_modem():
    return FakeModem()


@pytest.fixture
def mock_transport(claims):
    """
    Create a MockTransport instance for testing.

    Example:
        def test_something(mock_transport):
            mock_transport.open()
            mock_transport.add_response(["OK"])
            # ... test code ...
    """
    transport = MockTransport(port="COM3", claims=claims)
    yield transport
    transport.close()


@pytest.fixture
def settings():
    """Settings matching the mock port, with short timeouts."""
    return SerialSettings(port="COM3", baudrate=115200, timeout=0.5, probe_timeout=0.2, send_timeout=0.5)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def device(settings, mock_transport, fake_modem):
    """
    Open SIM900 device on a MockTransport answered by FakeModem.

    Example:
        def test_signal(device):
            assert device.read_field("Signal Quality").ok
    """
    mock_transport.responder = fake_modem
    dev = SmsDevice(SIM900, settings, transport=mock_transport)
    dev.open()
    yield dev
    dev.close()


@pytest.fixture
def quectel_device(settings, mock_transport, fake_modem):
    mock_transport.responder = fake_modem
    dev = SmsDevice(QUECTEL_EC2X, settings, transport=mock_transport)
    dev.open()
    yield dev
    dev.close()
