"""Batching of concurrent writes into a single dispatched group."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Hashable
from typing import Any

log = logging.getLogger(__name__)

_FLUSH = object()
_CLOSED = object()


class BatchWriter:
    """A thread-safe map whose contents are released as one batch.

    A batch is released *duration* seconds after the last store. This lets
    many rapid writes from one thread be processed together by another
    thread, which blocks in process_batch until a batch is ready.
    """

    def __init__(self, duration: float) -> None:
        self._duration = duration
        self._items: dict[Hashable, Any] = {}
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._signals: queue.Queue[object] = queue.Queue()
        self._closed = False

    def load(self, key: Hashable, default: Any = None) -> Any:
        """Return the value stored for *key*, or *default*."""
        with self._lock:
            return self._items.get(key, default)

    def store(self, key: Hashable, value: Any) -> None:
        """Store *value* for *key* and restart the dispatch timer."""
        with self._lock:
            if self._closed:
                raise RuntimeError("BatchWriter is closed")
            self._cancel_timer()
            log.debug("BatchWriter: Storing key %r and value %r, reset the timer.", key, value)
            self._items[key] = value
            self._timer = threading.Timer(self._duration, self._dispatch)
            self._timer.daemon = True
            self._timer.start()

    def close(self) -> None:
        """Stop the writer; waiting and future process_batch calls return False."""
        log.debug("BatchWriter: Closing the batch channel")
        with self._lock:
            self._cancel_timer()
            self._closed = True
        self._signals.put(_CLOSED)

    def process_batch(self, fn: Callable[[Any, Any], bool]) -> bool:
        """Block until a batch is released, then call *fn* for each item.

        Iteration stops early if *fn* returns False. The map is emptied
        afterwards. Returns False once the writer has been closed.
        """
        signal = self._signals.get()
        if signal is _CLOSED:
            # Keep the writer closed for every later caller too.
            self._signals.put(_CLOSED)
            return False

        log.debug("BatchWriter: Received a flush for the batch. Dispatching it now.")
        with self._lock:
            items = list(self._items.items())
        for key, value in items:
            if fn(key, value) is False:
                break
        with self._lock:
            self._items.clear()
        return True

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            log.debug("BatchWriter: Cancelled timer")
            self._timer.cancel()
            self._timer = None

    def _dispatch(self) -> None:
        log.debug("BatchWriter: Dispatching a batch job")
        self._signals.put(_FLUSH)