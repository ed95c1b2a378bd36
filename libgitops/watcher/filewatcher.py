"""Recursive watching of a directory for changes in manifest files."""

from __future__ import annotations

import itertools
import logging
import os
import queue
import sys
import threading
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from libgitops.util.batcher import BatchWriter
from libgitops.util.monitor import Monitor, run_monitor
from libgitops.watcher.event import FileEvent, FileUpdate
from libgitops.watcher.traversal import is_valid_file, walk_directory_for_files

log = logging.getLogger(__name__)

_END = object()


class NotifyKind(Enum):
    """Low-level filesystem notification kinds the watcher listens for."""

    DELETE = "delete"
    CLOSE_WRITE = "close_write"
    MOVED_FROM = "moved_from"
    MOVED_TO = "moved_to"


@dataclass(frozen=True)
class NotifyEvent:
    """A single low-level filesystem notification.

    Moves are reported as a MOVED_FROM and a MOVED_TO sharing one cookie.
    """

    kind: NotifyKind
    path: str = ""
    cookie: int = 0
    is_dir: bool = False


_EVENT_MAP: dict[NotifyKind, FileEvent] = {
    NotifyKind.DELETE: FileEvent.DELETE,
    NotifyKind.CLOSE_WRITE: FileEvent.MODIFY,
}

# Prefix patterns to fold together, tried in order; the index names the
# event that replaces the prefix, None drops the prefix entirely.
_COMBINED_EVENTS: tuple[tuple[tuple[NotifyKind, ...], int | None], ...] = (
    # DELETE + MODIFY => MODIFY
    ((NotifyKind.DELETE, NotifyKind.CLOSE_WRITE), 1),
    # MODIFY + DELETE => NONE
    ((NotifyKind.CLOSE_WRITE, NotifyKind.DELETE), None),
)


def _convert_event(kind: NotifyKind) -> FileEvent:
    return _EVENT_MAP.get(kind, FileEvent.NONE)


def _convert_update(event: NotifyEvent) -> FileUpdate:
    file_event = _convert_event(event.kind)
    if file_event is FileEvent.NONE:
        raise ValueError(f"invalid event for update conversion: {event.kind.value!r}")
    return FileUpdate(file_event, event.path)


@dataclass
class Options:
    """Settings of a FileWatcher."""

    exclude_dirs: list[str] = field(default_factory=lambda: [".git"])
    batch_timeout: float = 1.0
    valid_extensions: list[str] = field(default_factory=lambda: [".yaml", ".yml", ".json"])
    move_timeout: float = 1.0


def default_options() -> Options:
    """Return the default watcher options."""
    return Options()


@dataclass
class _MoveCache:
    event: NotifyEvent
    timer: threading.Timer


class _Handler(FileSystemEventHandler):
    """Translates watchdog events into NotifyEvents for a FileWatcher."""

    def __init__(self, watcher: FileWatcher) -> None:
        super().__init__()
        self._watcher = watcher
        self._cookies = itertools.count(1)
        # inotify reports completed writes as "closed"; elsewhere use "modified".
        self._write_types = {"closed"} if sys.platform.startswith("linux") else {"created", "modified"}

    def on_any_event(self, event: FileSystemEvent) -> None:
        src = os.fsdecode(event.src_path)
        is_dir = event.is_directory
        kind = event.event_type
        if kind == "deleted":
            self._watcher.handle_event(NotifyEvent(NotifyKind.DELETE, src, is_dir=is_dir))
        elif kind in self._write_types:
            self._watcher.handle_event(NotifyEvent(NotifyKind.CLOSE_WRITE, src, is_dir=is_dir))
        elif kind == "moved":
            cookie = next(self._cookies)
            dest = os.fsdecode(event.dest_path)
            self._watcher.handle_event(NotifyEvent(NotifyKind.MOVED_FROM, src, cookie, is_dir))
            self._watcher.handle_event(NotifyEvent(NotifyKind.MOVED_TO, dest, cookie, is_dir))


class FileWatcher:
    """Recursively watches a directory and reports state changes of files.

    Only files with a valid extension are considered. Notifications for
    one path are grouped for a short time and folded together before they
    are sent out as FileUpdates. One event kind at a time can be suspended
    so that the next matching update is skipped.
    """

    def __init__(self, directory: str | os.PathLike, options: Options | None = None) -> None:
        self._dir = os.fspath(directory)
        self._options = options if options is not None else default_options()
        self._updates: queue.Queue[object] = queue.Queue()
        self._batcher = BatchWriter(self._options.batch_timeout)
        self._lock = threading.Lock()
        self._suspend_event = FileEvent.NONE
        self._move_caches: dict[int, _MoveCache] = {}
        self._observer: Observer | None = None
        self._dispatcher: Monitor | None = None
        self._started = False
        self._closed = False

    def start(self) -> list[str]:
        """Begin watching and return the valid files currently in the directory."""
        if self._started:
            raise RuntimeError("FileWatcher already started")
        if self._closed:
            raise RuntimeError("FileWatcher is closed")
        self._started = True

        log.debug("FileWatcher: Starting recursive watch for %r", self._dir)
        observer = Observer()
        observer.schedule(_Handler(self), self._dir, recursive=True)
        observer.start()
        self._observer = observer
        try:
            files = walk_directory_for_files(
                self._dir, self._options.valid_extensions, self._options.exclude_dirs
            )
        except OSError:
            observer.stop()
            observer.join()
            self._observer = None
            raise
        self._dispatcher = run_monitor(self._dispatch)
        return files

    def handle_event(self, event: NotifyEvent) -> None:
        """Register a low-level notification for batched dispatch."""
        if event.is_dir:
            return
        if not is_valid_file(event.path, self._options.valid_extensions, self._options.exclude_dirs):
            return

        update_event = _convert_event(event.kind)
        with self._lock:
            if self._suspend_event is not FileEvent.NONE and update_event is self._suspend_event:
                self._suspend_event = FileEvent.NONE
                log.debug(
                    "FileWatcher: Skipping suspended event %s for path: %r", update_event, event.path
                )
                return

        events = [*self._batcher.load(event.path, []), event]
        self._batcher.store(event.path, events)
        log.debug("FileWatcher: Registered events %r for path %r", events, event.path)

    def concatenate_events(self, events: Sequence[NotifyEvent]) -> list[FileUpdate]:
        """Fold the given events together and convert them to FileUpdates.

        Move events are paired by cookie; a lone half of a move is reported
        as a deletion or modification once the move timeout has passed.
        """
        events = list(events)
        while True:
            for pattern, output in _COMBINED_EVENTS:
                prefix = tuple(ev.kind for ev in events[: len(pattern)])
                if prefix == pattern:
                    rest = events[len(pattern):]
                    folded = [events[output], *rest] if output is not None else rest
                    log.debug("FileWatcher: Concatenated events: %r -> %r", events, folded)
                    events = folded
                    break
            else:
                break

        updates: list[FileUpdate] = []
        for event in events:
            if event.kind in (NotifyKind.MOVED_FROM, NotifyKind.MOVED_TO):
                update = self._move(event)
                if update is not None:
                    updates.append(update)
            else:
                updates.append(_convert_update(event))
        return updates

    def updates(self) -> Iterator[FileUpdate]:
        """Yield FileUpdates as they come, until the watcher is closed."""
        while True:
            item = self._updates.get()
            if item is _END:
                self._updates.put(_END)
                return
            yield item  # type: ignore[misc]

    def suspend(self, event: FileEvent) -> None:
        """Skip the next update of the given kind, once."""
        with self._lock:
            self._suspend_event = FileEvent(event)

    def close(self) -> None:
        """Stop watching and end the update stream."""
        if self._closed:
            return
        self._closed = True
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
        self._batcher.close()
        if self._dispatcher is not None:
            self._dispatcher.wait()
        with self._lock:
            for cache in self._move_caches.values():
                cache.timer.cancel()
            self._move_caches.clear()
        self._updates.put(_END)

    def _dispatch(self) -> None:
        log.debug("FileWatcher: Dispatch thread started")
        while self._batcher.process_batch(self._dispatch_item):
            log.debug("FileWatcher: Dispatched events batch and reset the events cache")
        log.debug("FileWatcher: Dispatch thread stopped")

    def _dispatch_item(self, path: object, events: list[NotifyEvent]) -> bool:
        for update in self.concatenate_events(events):
            self._send_update(update)
        return True

    def _send_update(self, update: FileUpdate) -> None:
        log.debug("FileWatcher: Sending update: %s -> %r", update.event, update.path)
        self._updates.put(update)

    def _move(self, event: NotifyEvent) -> FileUpdate | None:
        with self._lock:
            cache = self._move_caches.get(event.cookie)
            if cache is None:
                timer = threading.Timer(
                    self._options.move_timeout, self._move_incomplete, args=(event,)
                )
                timer.daemon = True
                self._move_caches[event.cookie] = _MoveCache(event, timer)
                timer.start()
                return None
            cache.timer.cancel()
            del self._move_caches[event.cookie]

        source, dest = cache.event.path, event.path
        if event.kind is NotifyKind.MOVED_FROM:
            source, dest = dest, source
        log.debug("FileWatcher: Detected move: %r -> %r", source, dest)
        return FileUpdate(FileEvent.MOVE, dest)

    def _move_incomplete(self, event: NotifyEvent) -> None:
        with self._lock:
            cache = self._move_caches.get(event.cookie)
            if cache is None or cache.event is not event:
                return
            del self._move_caches[event.cookie]

        # Only one half of the move arrived: the file left or entered the tree.
        file_event = FileEvent.DELETE if event.kind is NotifyKind.MOVED_FROM else FileEvent.MODIFY
        log.debug("moveCache: Timer expired for %d, dispatching...", event.cookie)
        self._send_update(FileUpdate(file_event, event.path))


def new_file_watcher(
    directory: str | os.PathLike, options: Options | None = None
) -> tuple[FileWatcher, list[str]]:
    """Create and start a FileWatcher; return it with the files already present."""
    watcher = FileWatcher(directory, options)
    files = watcher.start()
    return watcher, files