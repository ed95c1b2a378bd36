"""Events describing changes in an object's state."""

from __future__ import annotations

from enum import IntEnum


class ObjectEvent(IntEnum):
    """A change in an object's state."""

    NONE = 0
    CREATE = 1
    MODIFY = 2
    DELETE = 3

    def __str__(self) -> str:
        return self.name