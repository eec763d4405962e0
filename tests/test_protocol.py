"""
Tests for the command protocol engine.
"""

from datetime import datetime, timedelta

import pytest

from quicksms.core import FINAL_RESULT, PROMPT, RAW, CommandProtocol, LineEventBus
from quicksms.core.protocol import is_error_line, is_final_line
from quicksms.exceptions import (
    CommandError,
    CommandTimeoutError,
    FramingError,
    TransportClosedError,
)
from quicksms.types import LineDirection


@pytest.fixture
def engine(mock_transport):
    mock_transport.open()
    return CommandProtocol(mock_transport, default_timeout=0.3)


class TestFinalResultCodes:
    """Test final result code classification."""

    @pytest.mark.parametrize("line", ["OK", "ERROR", "+CME ERROR: 10", "+CMS ERROR: 500"])
    def test_final_lines(self, line):
        assert is_final_line(line)

    @pytest.mark.parametrize("line", ["ERROR", "+CME ERROR: SIM not inserted", "+CMS ERROR: 304"])
    def test_error_lines(self, line):
        assert is_error_line(line)

    @pytest.mark.parametrize("line", ["+CSQ: 24,99", "OKAY", "", ">"])
    def test_intermediate_lines(self, line):
        assert not is_final_line(line)


class TestExecute:
    """Test command execution with the final-result policy."""

    def test_ok_response(self, engine, mock_transport):
        """Test simple command with OK response."""
        mock_transport.add_response(["OK"])

        assert engine.execute("AT") == ["OK"]
        assert mock_transport.written == [b"AT\r\n"]

    def test_multi_line_response(self, engine, mock_transport):
        """Test response lines are collected until the final result code."""
        mock_transport.add_response(["+CSQ: 24,99", "OK"])

        assert engine.execute("AT+CSQ") == ["+CSQ: 24,99", "OK"]

    def test_strip_ok(self, engine, mock_transport):
        """Test trailing OK removal."""
        mock_transport.add_response(["+CSQ: 24,99", "OK"])

        assert engine.execute("AT+CSQ", strip_ok=True) == ["+CSQ: 24,99"]

    def test_echo_stripped(self, engine, mock_transport):
        """Test command echo is removed from the response."""
        mock_transport.add_response(["AT+CSQ", "+CSQ: 24,99", "OK"])

        assert engine.execute("AT+CSQ") == ["+CSQ: 24,99", "OK"]

    def test_blank_lines_skipped(self, engine, mock_transport):
        """Test empty lines between response lines are ignored."""
        mock_transport.add_response(["", "+CSQ: 24,99", "", "OK"])

        assert engine.execute("AT+CSQ") == ["+CSQ: 24,99", "OK"]

    def test_no_terminator(self, engine, mock_transport):
        """Test terminate=False writes the payload as-is."""
        mock_transport.add_response(["OK"])

        engine.execute("hello\x1a", terminate=False)

        assert mock_transport.written == [b"hello\x1a"]

    @pytest.mark.parametrize("final", ["ERROR", "+CME ERROR: 10", "+CMS ERROR: 500"])
    def test_error_result_raises(self, engine, mock_transport, final):
        """Test error final result codes raise CommandError."""
        mock_transport.add_response([final])

        with pytest.raises(CommandError) as exc_info:
            engine.execute("AT+CPIN?")

        assert exc_info.value.command == "AT+CPIN?"
        assert exc_info.value.response == [final]

    def test_timeout(self, engine, mock_transport):
        """Test a response without final result code times out."""
        mock_transport.add_response(["+CSQ: 24,99"])

        with pytest.raises(CommandTimeoutError) as exc_info:
            engine.execute("AT+CSQ", timeout=0.1)

        assert exc_info.value.command == "AT+CSQ"
        assert exc_info.value.response == ["+CSQ: 24,99"]

    def test_silence_times_out(self, engine):
        """Test no response at all times out with an empty response."""
        with pytest.raises(CommandTimeoutError) as exc_info:
            engine.execute("AT", timeout=0.1)

        assert exc_info.value.response == []

    def test_closed_transport(self, engine, mock_transport):
        """Test executing on a closed transport raises TransportClosedError."""
        mock_transport.close()

        with pytest.raises(TransportClosedError):
            engine.execute("AT")


class TestFraming:
    """Test recovery from malformed lines."""

    def test_partial_line_retried_once(self, engine, mock_transport):
        """Test one partial line is dropped and the read retried."""
        mock_transport.add_response([b"+CSQ: 2", "+CSQ: 24,99", "OK"])

        assert engine.execute("AT+CSQ") == ["+CSQ: 24,99", "OK"]

    def test_undecodable_line_retried_once(self, engine, mock_transport):
        """Test one line of invalid bytes is dropped and the read retried."""
        mock_transport.add_response([b"\xff\xfe\r\n", "OK"])

        assert engine.execute("AT") == ["OK"]

    def test_second_framing_error_raises(self, engine, mock_transport):
        """Test a framing error that persists after the retry."""
        mock_transport.add_response([b"+CS", b"Q: 2", "OK"])

        with pytest.raises(FramingError) as exc_info:
            engine.execute("AT+CSQ")

        assert exc_info.value.command == "AT+CSQ"

    def test_framing_error_then_silence(self, engine, mock_transport):
        """Test a framing error followed by nothing reports the framing error."""
        mock_transport.add_response([b"+CSQ"])

        with pytest.raises(FramingError):
            engine.execute("AT+CSQ", timeout=0.1)

    def test_malformed_line_is_published(self, mock_transport):
        """Test listeners still see malformed data."""
        mock_transport.open()
        bus = LineEventBus()
        engine = CommandProtocol(mock_transport, events=bus, default_timeout=0.3)
        mock_transport.add_response([b"+CSQ: 2", "OK"])

        engine.execute("AT+CSQ")

        received = [e.line for e in bus.history() if e.direction is LineDirection.RECEIVED]
        assert received == ["+CSQ: 2", "OK"]


class TestPolicies:
    """Test prompt and raw terminator policies."""

    def test_prompt_completes_on_input_prompt(self, engine, mock_transport):
        """Test the prompt policy stops at "> " without a line terminator."""
        mock_transport.add_response([b"> "])

        assert engine.execute('AT+CMGS="+8613800000000"', policy=PROMPT) == [">"]

    def test_prompt_after_echo(self, engine, mock_transport):
        """Test the echoed command line precedes the prompt."""
        mock_transport.add_response(['AT+CMGS="123"', b"> "])

        assert engine.execute('AT+CMGS="123"', policy=PROMPT) == [">"]

    def test_prompt_policy_error(self, engine, mock_transport):
        """Test the prompt policy still raises on error results."""
        mock_transport.add_response(["+CMS ERROR: 330"])

        with pytest.raises(CommandError):
            engine.execute('AT+CMGS="123"', policy=PROMPT)

    def test_prompt_policy_timeout(self, engine):
        """Test missing prompt times out."""
        with pytest.raises(CommandTimeoutError):
            engine.execute('AT+CMGS="123"', policy=PROMPT, timeout=0.1)

    def test_raw_returns_lines_on_timeout(self, engine, mock_transport):
        """Test the raw policy does not require a final result code."""
        mock_transport.add_response(["RDY", "+CFUN: 1"])

        assert engine.execute("AT+CFUN=1,1", policy=RAW, timeout=0.1) == ["RDY", "+CFUN: 1"]

    def test_raw_does_not_interpret_errors(self, engine, mock_transport):
        """Test the raw policy returns echo and ERROR untouched."""
        mock_transport.add_response(["ATX", "ERROR"])

        assert engine.execute("ATX", policy=RAW) == ["ATX", "ERROR"]

    def test_raw_tolerates_malformed_data(self, engine, mock_transport):
        """Test the raw policy decodes invalid bytes with replacement."""
        mock_transport.add_response([b"\xff\r\n", b"+QIND"])

        lines = engine.execute("AT", policy=RAW, timeout=0.1)

        assert lines[0] == "\ufffd"
        assert lines[1] == "+QIND"

    def test_policy_constants(self):
        assert FINAL_RESULT.parse_response
        assert PROMPT.complete_on_prompt
        assert not RAW.timeout_is_error


class TestLineEvents:
    """Test engine traffic reaches the event bus."""

    def test_sent_before_received(self, mock_transport):
        """Test the command is published before any response line."""
        mock_transport.open()
        ticks = iter(datetime(2026, 1, 1) + timedelta(seconds=i) for i in range(100))
        bus = LineEventBus(clock=lambda: next(ticks))
        engine = CommandProtocol(mock_transport, events=bus, default_timeout=0.3)
        mock_transport.add_response(["+CSQ: 24,99", "OK"])

        engine.execute("AT+CSQ")

        events = bus.history()
        assert [(e.direction, e.line) for e in events] == [
            (LineDirection.SENT, "AT+CSQ"),
            (LineDirection.RECEIVED, "+CSQ: 24,99"),
            (LineDirection.RECEIVED, "OK"),
        ]
        assert events[0].timestamp < events[1].timestamp < events[2].timestamp

    def test_error_response_published(self, mock_transport):
        """Test lines are published even when the command fails."""
        mock_transport.open()
        bus = LineEventBus()
        engine = CommandProtocol(mock_transport, events=bus, default_timeout=0.3)
        mock_transport.add_response(["ERROR"])

        with pytest.raises(CommandError):
            engine.execute("AT+CPIN?")

        assert [e.line for e in bus.history()] == ["AT+CPIN?", "ERROR"]
