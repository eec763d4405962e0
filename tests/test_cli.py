"""
Tests for the CLI REPL commands.
"""

import pytest

from quicksms.cli import QuickSmsCLI


@pytest.fixture
def cli(device):
    shell = QuickSmsCLI(port="COM3", driver_id="sim900", show_lines=False)
    shell.device = device
    return shell


def test_status(cli, capsys):
    cli.handle("status")

    out = capsys.readouterr().out
    assert "IMEI" in out
    assert "861536030196001" in out


def test_read_quoted_field(cli, capsys):
    cli.handle('read "Signal Quality"')

    assert "-65 dBm" in capsys.readouterr().out


def test_write(cli, capsys, device):
    cli.handle("write 'SMS Center' +8613900000000")

    assert capsys.readouterr().out.strip() == "OK"
    assert device.status["SMS Center"].value == "+8613900000000"


def test_write_read_only(cli, capsys):
    cli.handle("write IMEI 1")

    assert capsys.readouterr().out.startswith("Failed: ")


def test_unknown_field_reported(cli, capsys):
    cli.handle("read Temperature")

    assert capsys.readouterr().out.startswith("Error: ")


def test_send(cli, capsys, fake_modem):
    cli.handle("send +8613800000000 'hello from {device}'")

    assert "reference 12" in capsys.readouterr().out
    assert fake_modem.messages == ["hello from SIM900"]


def test_fields(cli, capsys):
    cli.handle("fields")

    out = capsys.readouterr().out
    assert "r-  IMEI" in out
    assert "rw  SMS Center" in out
    assert "-w  Command Echo" in out


def test_raw_command(cli, mock_transport):
    cli.handle("AT+CSQ")

    assert mock_transport.sent_lines[-1] == "AT+CSQ"


def test_hex_command(cli, mock_transport):
    cli.handle("hex AT")

    assert mock_transport.sent_lines[-1] == "4154"


def test_unbalanced_quotes_sent_raw(cli, mock_transport):
    cli.handle('AT+CSCA="123')

    assert mock_transport.sent_lines[-1] == 'AT+CSCA="123'


def test_send_without_destination(cli, capsys, fake_modem):
    cli.handle("send '' hi")

    assert capsys.readouterr().out.startswith("Error: Destination number is required")
    assert fake_modem.messages == []


@pytest.mark.parametrize("line, usage", [
    ("read", "Usage: read <field>"),
    ("write IMEI", "Usage: write <field> <value>"),
    ("send +8613800000000", "Usage: send <number> <text>"),
    ("hex", "Usage: hex <text>"),
])
def test_wrong_argument_count(cli, capsys, mock_transport, line, usage):
    """Test known commands with the wrong arguments print usage instead of going to the modem."""
    cli.handle(line)

    assert capsys.readouterr().out.strip() == usage
    assert mock_transport.written == []
