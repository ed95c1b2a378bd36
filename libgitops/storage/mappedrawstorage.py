"""Raw storage over a flat directory, addressed through a path mapping."""

from __future__ import annotations

import logging
import os
import threading
from abc import abstractmethod
from collections.abc import Mapping

from libgitops.storage.format import CONTENT_TYPES, ContentType
from libgitops.storage.key import KindKey, ObjectKey
from libgitops.storage.rawstorage import (
    NotFoundError,
    RawStorage,
    StorageError,
    checksum_from_mod_time,
)
from libgitops.util.common import file_exists

log = logging.getLogger(__name__)


class NotTrackedError(NotFoundError):
    """The requested object has no mapping to a file."""

    def __init__(self, message: str = "untracked object: resource not found") -> None:
        super().__init__(message)


class MappedRawStorage(RawStorage):
    """A RawStorage whose objects are located through a key-to-path mapping."""

    @abstractmethod
    def add_mapping(self, key: ObjectKey, path: str) -> None:
        """Bind *key* to the physical file *path*."""

    @abstractmethod
    def remove_mapping(self, key: ObjectKey) -> None:
        """Forget the mapping for *key*."""

    @abstractmethod
    def set_mappings(self, mappings: Mapping[ObjectKey, str]) -> None:
        """Replace all known mappings."""


class GenericMappedRawStorage(MappedRawStorage):
    """Stores files in a directory, located via a path translation map."""

    def __init__(self, directory: str | os.PathLike) -> None:
        self._dir = os.fspath(directory)
        self._mappings: dict[ObjectKey, str] = {}
        self._lock = threading.Lock()

    def _real_path(self, key: ObjectKey) -> str:
        with self._lock:
            path = self._mappings.get(key)
        if path is None:
            raise NotTrackedError(
                f"GenericMappedRawStorage: cannot resolve {str(key)!r}: "
                "untracked object: resource not found"
            )
        return path

    def _snapshot(self) -> list[tuple[ObjectKey, str]]:
        with self._lock:
            return list(self._mappings.items())

    def read(self, key: ObjectKey) -> bytes:
        with open(self._real_path(key), "rb") as fh:
            return fh.read()

    def exists(self, key: ObjectKey) -> bool:
        try:
            path = self._real_path(key)
        except NotTrackedError:
            return False
        return file_exists(path)

    def write(self, key: ObjectKey, content: bytes) -> None:
        # Only files that are already known are written; none are created here.
        with open(self._real_path(key), "wb") as fh:
            fh.write(content)

    def delete(self, key: ObjectKey) -> None:
        path = self._real_path(key)
        # The file may have been removed externally already.
        if file_exists(path):
            os.remove(path)
        self.remove_mapping(key)

    def list(self, kind: KindKey) -> list[ObjectKey]:
        return [key for key, _ in self._snapshot() if key.equals_gvk(kind, False)]

    def checksum(self, key: ObjectKey) -> str:
        return checksum_from_mod_time(self._real_path(key))

    def content_type(self, key: ObjectKey) -> ContentType | None:
        try:
            path = self._real_path(key)
        except NotTrackedError:
            return None
        return CONTENT_TYPES.get(os.path.splitext(path)[1])

    def watch_dir(self) -> str:
        return self._dir

    def get_key(self, path: str) -> ObjectKey:
        for key, mapped in self._snapshot():
            if mapped == path:
                return key
        raise StorageError(f"no mapping found for path {path!r}")

    def add_mapping(self, key: ObjectKey, path: str) -> None:
        log.debug("GenericMappedRawStorage: AddMapping: %r -> %r", str(key), path)
        with self._lock:
            self._mappings[key] = path

    def remove_mapping(self, key: ObjectKey) -> None:
        log.debug("GenericMappedRawStorage: RemoveMapping: %r", str(key))
        with self._lock:
            self._mappings.pop(key, None)

    def set_mappings(self, mappings: Mapping[ObjectKey, str]) -> None:
        log.debug("GenericMappedRawStorage: SetMappings: %r", mappings)
        with self._lock:
            self._mappings = dict(mappings)