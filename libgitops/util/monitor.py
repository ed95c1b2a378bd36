"""Run a function in a background thread that can be waited on."""

from __future__ import annotations

import threading
from collections.abc import Callable


class Monitor:
    """A background thread running one function, which can be waited for."""

    def __init__(self, func: Callable[[], object]) -> None:
        self._error: BaseException | None = None
        self._thread = threading.Thread(target=self._run, args=(func,), daemon=True)

    def _run(self, func: Callable[[], object]) -> None:
        try:
            func()
        except BaseException as exc:  # surfaced to the caller of wait()
            self._error = exc

    def _start(self) -> None:
        self._thread.start()

    def wait(self) -> None:
        """Block until the function has returned; re-raise what it raised."""
        self._thread.join()
        if self._error is not None:
            raise self._error


def run_monitor(func: Callable[[], object]) -> Monitor:
    """Start *func* in a background thread and return its Monitor."""
    monitor = Monitor(func)
    monitor._start()
    return monitor