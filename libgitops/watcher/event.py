"""File state change events."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum


class FileEvent(IntEnum):
    """A change in a file's state."""

    NONE = 0
    MODIFY = 1
    DELETE = 2
    MOVE = 3

    def __str__(self) -> str:
        return self.name


def format_events(events: Iterable[FileEvent]) -> str:
    """Return the events' names joined by commas."""
    return ",".join(str(event) for event in events)


def events_to_bytes(events: Iterable[FileEvent]) -> bytes:
    """Return the events encoded one byte each."""
    return bytes(int(event) for event in events)


@dataclass(frozen=True)
class FileUpdate:
    """A watcher's notice that a file changed state."""

    event: FileEvent
    path: str