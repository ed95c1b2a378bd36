"""Keys identifying kinds and objects in a storage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with a version."""

    group: str
    version: str

    def with_kind(self, kind: str) -> GroupVersionKind:
        """Return the GroupVersionKind for *kind* in this group and version."""
        return GroupVersionKind(self.group, self.version, kind)

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


@dataclass(frozen=True)
class GroupVersionKind:
    """An API group, version and kind."""

    group: str
    version: str
    kind: str

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Kind={self.kind}"


class _HasGVK(Protocol):
    group: str
    version: str
    kind: str


def _equals_gvk(this: _HasGVK, other: _HasGVK, respect_version: bool) -> bool:
    if this.kind != other.kind or this.group != other.group:
        return False
    if not respect_version:
        return True
    return this.version == other.version


@dataclass(frozen=True)
class KindKey:
    """Identifies a kind of object."""

    group: str
    version: str
    kind: str

    @property
    def gvk(self) -> GroupVersionKind:
        return GroupVersionKind(self.group, self.version, self.kind)

    def equals_gvk(self, other: _HasGVK, respect_version: bool) -> bool:
        """Compare kind and group, and the version too if *respect_version*."""
        return _equals_gvk(self, other, respect_version)

    def __str__(self) -> str:
        return str(self.gvk)


@dataclass(frozen=True)
class ObjectKey:
    """Identifies a single object: its kind plus an identifier."""

    kind_key: KindKey
    identifier: str

    @property
    def group(self) -> str:
        return self.kind_key.group

    @property
    def version(self) -> str:
        return self.kind_key.version

    @property
    def kind(self) -> str:
        return self.kind_key.kind

    @property
    def gvk(self) -> GroupVersionKind:
        return self.kind_key.gvk

    def equals_gvk(self, other: _HasGVK, respect_version: bool) -> bool:
        """Compare kind and group, and the version too if *respect_version*."""
        return _equals_gvk(self, other, respect_version)

    def __str__(self) -> str:
        return f"{self.kind_key} {self.identifier}"