"""Content types and the file extensions that carry them."""

from __future__ import annotations

from enum import Enum


class ContentType(str, Enum):
    """Serialization format of a stored object."""

    JSON = "application/json"
    YAML = "application/yaml"

    def __str__(self) -> str:
        return self.value


CONTENT_TYPES: dict[str, ContentType] = {
    ".json": ContentType.JSON,
    ".yaml": ContentType.YAML,
    ".yml": ContentType.YAML,
}


def ext_for_content_type(content_type: ContentType | str) -> str | None:
    """Return a file extension for *content_type*, or None if it is unknown."""
    return next(
        (ext for ext, ct in CONTENT_TYPES.items() if ct == content_type),
        None,
    )