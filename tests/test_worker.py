"""
Tests for background device dispatch.
"""

import threading
import time

import pytest

from quicksms import DeviceWorker, SerialSettings, SmsDevice
from quicksms.drivers import SIM900
from quicksms.exceptions import TransportClosedError


def test_operations_return_futures(device):
    """Test device operations run on the worker and resolve futures."""
    with DeviceWorker(device) as worker:
        signal = worker.read_field("Signal Quality").result(timeout=2)
        written = worker.write_field("SMS Center", "+8613900000000").result(timeout=2)
        lines = worker.execute_command("AT").result(timeout=2)

    assert signal.value == "-65 dBm (rssi=24, ber=99)"
    assert written.ok
    assert lines == ["OK"]


def test_operations_run_in_order(device):
    """Test queued operations execute one at a time in submission order."""
    worker = DeviceWorker(device)
    order = []

    futures = [
        worker.submit(lambda i=i: order.append((i, threading.current_thread().name)))
        for i in range(5)
    ]
    for future in futures:
        future.result(timeout=2)

    assert [i for i, _ in order] == [0, 1, 2, 3, 4]
    assert len({name for _, name in order}) == 1
    worker.close()


def test_send_and_read_all(device, fake_modem):
    with DeviceWorker(device) as worker:
        reference = worker.send("+8613800000000", "hello").result(timeout=5)
        results = worker.read_all_fields().result(timeout=5)

    assert reference == 12
    assert results["IMEI"].value == "861536030196001"


def test_open_on_worker(settings, mock_transport, fake_modem):
    mock_transport.responder = fake_modem
    device = SmsDevice(SIM900, settings, transport=mock_transport)

    with DeviceWorker(device) as worker:
        assert worker.open().result(timeout=2) is device
        assert device.is_open

    assert not device.is_open


def test_submit_after_close(device):
    worker = DeviceWorker(device)
    worker.close()

    with pytest.raises(RuntimeError):
        worker.read_field("IMEI")


@pytest.mark.timeout(5)
def test_close_aborts_running_operation(mock_transport):
    """Test closing the worker unblocks an operation waiting on the device."""
    device = SmsDevice(SIM900, SerialSettings("COM3", timeout=10.0), transport=mock_transport).open()
    worker = DeviceWorker(device)

    future = worker.read_field("IMEI")
    time.sleep(0.2)
    start = time.monotonic()
    worker.close()

    result = future.result(timeout=2)
    assert time.monotonic() - start < 2.0
    assert isinstance(result.error.__cause__, TransportClosedError)


def test_close_cancels_queued(mock_transport):
    """Test operations that have not started are cancelled on close."""
    device = SmsDevice(SIM900, SerialSettings("COM3", timeout=10.0), transport=mock_transport).open()
    worker = DeviceWorker(device)

    worker.read_field("IMEI")
    queued = worker.read_field("Model")
    time.sleep(0.1)
    worker.close()

    assert queued.cancelled()
