"""
Background dispatch for device operations.

UI code must not block on serial I/O. DeviceWorker runs every operation of
one device on a single worker thread and hands back futures.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar, Union

from .device import SmsDevice
from .types import CommandEncoding, FieldResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DeviceWorker:
    """
    Single-thread queue in front of an SmsDevice.

    Operations run in submission order, one at a time. close() is not
    queued: it closes the device immediately so an operation stuck waiting
    for the device fails fast, then stops the worker.

    Example:

    .. code-block:: python

        worker = DeviceWorker(device)
        future = worker.read_all_fields()
        future.add_done_callback(lambda f: refresh_table(f.result()))
    """

    def __init__(self, device: SmsDevice) -> None:
        self.device = device
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix=f"SmsDevice-{device.port}"
        )
        self._closed = False

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        """
        Queue a call on the worker thread.

        Raises:
            RuntimeError: If the worker has been closed
        """
        if self._closed:
            raise RuntimeError("DeviceWorker is closed")
        return self._executor.submit(fn, *args, **kwargs)

    def open(self) -> "Future[SmsDevice]":
        return self.submit(self.device.open)

    def read_field(self, name: str) -> "Future[FieldResult]":
        return self.submit(self.device.read_field, name)

    def read_all_fields(self) -> "Future[dict[str, FieldResult]]":
        return self.submit(self.device.read_all_fields)

    def write_field(self, name: str, value: str) -> "Future[FieldResult]":
        return self.submit(self.device.write_field, name, value)

    def send(self, destination: str, template: str) -> "Future[Optional[int]]":
        return self.submit(self.device.send, destination, template)

    def execute_command(
        self,
        payload: str,
        encoding: Union[CommandEncoding, str] = CommandEncoding.TEXT
    ) -> "Future[list[str]]":
        return self.submit(self.device.execute_command, payload, encoding)

    def close(self, wait: bool = True) -> None:
        """
        Close the device and stop the worker.

        Queued operations that have not started are cancelled.

        Args:
            wait: Wait for the running operation to finish unwinding
        """
        if self._closed:
            return
        self._closed = True
        # Drop queued operations before unblocking the running one
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.device.close()
        if wait:
            self._executor.shutdown(wait=True)
        logger.debug(f"Stopped worker for {self.device.port}")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
