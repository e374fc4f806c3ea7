"""Viewport-width event source for the calendar view controller."""

import logging
import threading
from typing import Callable

from config import DEFAULT_VIEWPORT_WIDTH

logger = logging.getLogger(__name__)

ResizeListener = Callable[[int], None]


class Viewport:
    """Client viewport width with resize listeners.

    Listeners run synchronously inside ``resize``, once per event, in
    subscription order. ``subscribe`` returns the matching unsubscribe.
    """

    def __init__(self, width: int = DEFAULT_VIEWPORT_WIDTH):
        self.width = width
        self._listeners: list[ResizeListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: ResizeListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: ResizeListener):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def resize(self, width: int):
        self.width = width
        with self._lock:
            listeners = list(self._listeners)
        logger.debug("Viewport resized to %spx (%d listeners)", width, len(listeners))
        for listener in listeners:
            listener(width)
