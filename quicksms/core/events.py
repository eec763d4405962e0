"""
Line event bus.

Publishes every line sent to or received from a device to subscribed
listeners, in a thread-safe manner.
"""

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Callable, Deque, Optional

from ..types import LineDirection, LineEvent

logger = logging.getLogger(__name__)

# Type alias for line listeners
LineListener = Callable[[LineEvent], None]


class LineEventBus:
    """
    Dispatches line events to listeners.

    Features:
    - Timestamps assigned when the event is published
    - Bounded history for log panes that attach late
    - Thread-safe subscription
    - Error handling for misbehaving listeners
    """

    def __init__(
        self,
        max_history: int = 1000,
        clock: Callable[[], datetime] = datetime.now
    ) -> None:
        """
        Initialize event bus.

        Args:
            max_history: Maximum number of events to keep
            clock: Source of event timestamps
        """
        self._clock = clock
        self._history: Deque[LineEvent] = deque(maxlen=max_history)
        self._listeners: list[LineListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: LineListener) -> None:
        """
        Register a listener for all line events.

        Args:
            listener: Function called with each LineEvent.
                     Signature: listener(event: LineEvent) -> None

        Example:

        .. code-block:: python

            bus.subscribe(lambda event: print(event))
        """
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: LineListener) -> bool:
        """
        Remove a listener.

        Returns:
            True if the listener was removed, False if not found
        """
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
                return True
            return False

    def on_sent(self, callback: Callable[[str, datetime], None]) -> LineListener:
        """
        Subscribe a callback to sent lines only.

        Returns:
            The listener registered, for later unsubscribe()
        """
        return self._subscribe_direction(LineDirection.SENT, callback)

    def on_received(self, callback: Callable[[str, datetime], None]) -> LineListener:
        """
        Subscribe a callback to received lines only.

        Returns:
            The listener registered, for later unsubscribe()
        """
        return self._subscribe_direction(LineDirection.RECEIVED, callback)

    def sent(self, line: str) -> LineEvent:
        """Publish a line written to the device."""
        return self.publish(LineDirection.SENT, line)

    def received(self, line: str) -> LineEvent:
        """Publish a line read from the device."""
        return self.publish(LineDirection.RECEIVED, line)

    def publish(self, direction: LineDirection, line: str) -> LineEvent:
        """
        Timestamp a line and dispatch it to listeners.

        Listeners are called synchronously, in subscription order, before
        this method returns.
        """
        event = LineEvent(direction=direction, line=line, timestamp=self._clock())
        logger.debug(f"{direction.value} {line}")

        with self._lock:
            self._history.append(event)
            listeners = list(self._listeners)

        # Call listeners outside lock
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Line listener {listener!r} failed: {e}", exc_info=True)

        return event

    def history(self, limit: Optional[int] = None) -> list[LineEvent]:
        """
        Get a copy of recent events (oldest first).

        Args:
            limit: Only return the newest `limit` events
        """
        with self._lock:
            events = list(self._history)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear_history(self) -> int:
        """
        Clear the event history.

        Returns:
            Number of events that were cleared
        """
        with self._lock:
            count = len(self._history)
            self._history.clear()
            return count

    def _subscribe_direction(
        self,
        direction: LineDirection,
        callback: Callable[[str, datetime], None]
    ) -> LineListener:
        def listener(event: LineEvent) -> None:
            if event.direction is direction:
                callback(event.line, event.timestamp)

        self.subscribe(listener)
        return listener
