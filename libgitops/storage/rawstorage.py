"""Low-level storage of encoded objects on disk."""

from __future__ import annotations

import os
import shutil
from abc import ABC, abstractmethod

from libgitops.storage.format import ContentType, ext_for_content_type
from libgitops.storage.key import GroupVersion, KindKey, ObjectKey
from libgitops.util.common import file_exists


class StorageError(Exception):
    """Base error of the storage layer."""


class NotFoundError(StorageError):
    """The requested resource was not found."""

    def __init__(self, message: str = "resource not found") -> None:
        super().__init__(message)


class RawStorage(ABC):
    """Key-indexed storage of byte-encoded objects."""

    @abstractmethod
    def read(self, key: ObjectKey) -> bytes:
        """Return the content of the resource; raise NotFoundError if absent."""

    @abstractmethod
    def exists(self, key: ObjectKey) -> bool:
        """Return whether the resource exists."""

    @abstractmethod
    def write(self, key: ObjectKey, content: bytes) -> None:
        """Write *content* to the resource."""

    @abstractmethod
    def delete(self, key: ObjectKey) -> None:
        """Delete the resource; raise NotFoundError if absent."""

    @abstractmethod
    def list(self, kind: KindKey) -> list[ObjectKey]:
        """Return the keys of all objects matching *kind*."""

    @abstractmethod
    def checksum(self, key: ObjectKey) -> str:
        """Return a string that changes whenever the resource changes."""

    @abstractmethod
    def content_type(self, key: ObjectKey) -> ContentType | None:
        """Return the content type of the resource."""

    @abstractmethod
    def watch_dir(self) -> str:
        """Return the directory that watchers should observe."""

    @abstractmethod
    def get_key(self, path: str) -> ObjectKey:
        """Return the key for a physical file path."""


def checksum_from_mod_time(path: str | os.PathLike) -> str:
    """Return the file's modification time in nanoseconds, as a string."""
    return str(os.stat(path).st_mtime_ns)


class GenericRawStorage(RawStorage):
    """Stores objects as <dir>/<kind>/<identifier>/metadata<ext>.

    Only one GroupVersion is supported; keys of any other are rejected.
    """

    def __init__(
        self,
        directory: str | os.PathLike,
        group_version: GroupVersion,
        content_type: ContentType,
    ) -> None:
        ext = ext_for_content_type(content_type)
        if ext is None:
            raise ValueError(f"invalid content type: {content_type!r}")
        self._dir = os.fspath(directory)
        self._gv = group_version
        self._ct = ContentType(content_type)
        self._ext = ext

    def _key_path(self, key: ObjectKey) -> str:
        return os.path.join(self._dir, key.kind, key.identifier, f"metadata{self._ext}")

    def _kind_path(self, kind: KindKey) -> str:
        return os.path.join(self._dir, kind.kind)

    def _validate_group_version(self, kind: KindKey | ObjectKey) -> None:
        if self._gv.group == kind.group and self._gv.version == kind.version:
            return
        raise StorageError(
            f"GroupVersion {kind.group}/{kind.version} not supported by this GenericRawStorage"
        )

    def read(self, key: ObjectKey) -> bytes:
        self._validate_group_version(key)
        if not self.exists(key):
            raise NotFoundError()
        with open(self._key_path(key), "rb") as fh:
            return fh.read()

    def exists(self, key: ObjectKey) -> bool:
        try:
            self._validate_group_version(key)
        except StorageError:
            return False
        return file_exists(self._key_path(key))

    def write(self, key: ObjectKey, content: bytes) -> None:
        self._validate_group_version(key)
        path = self._key_path(key)
        if not self.exists(key):
            os.makedirs(os.path.dirname(path), mode=0o755, exist_ok=True)
        with open(path, "wb") as fh:
            fh.write(content)

    def delete(self, key: ObjectKey) -> None:
        self._validate_group_version(key)
        if not self.exists(key):
            raise NotFoundError()
        shutil.rmtree(os.path.dirname(self._key_path(key)))

    def list(self, kind: KindKey) -> list[ObjectKey]:
        self._validate_group_version(kind)
        entries = sorted(os.listdir(self._kind_path(kind)))
        return [ObjectKey(kind, name) for name in entries]

    def checksum(self, key: ObjectKey) -> str:
        self._validate_group_version(key)
        if not self.exists(key):
            raise NotFoundError()
        return checksum_from_mod_time(self._key_path(key))

    def content_type(self, key: ObjectKey) -> ContentType:
        return self._ct

    def watch_dir(self) -> str:
        return self._dir

    def get_key(self, path: str) -> ObjectKey:
        split_dir = os.path.normpath(self._dir).split(os.sep)
        split_path = os.path.normpath(path).split(os.sep)

        if len(split_path) < len(split_dir) + 2:
            raise StorageError(f"path not long enough: {path}")
        if split_path[: len(split_dir)] != split_dir:
            raise StorageError(f"path has wrong base: {path}")

        kind = split_path[len(split_dir)]
        uid = split_path[len(split_dir) + 1]
        return ObjectKey(KindKey(self._gv.group, self._gv.version, kind), uid)