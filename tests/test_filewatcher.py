import os
import time

import pytest

from libgitops.watcher.event import FileEvent, FileUpdate
from libgitops.watcher.filewatcher import (
    FileWatcher,
    NotifyEvent,
    NotifyKind,
    Options,
    default_options,
    new_file_watcher,
)


def ev(kind, path="", cookie=0):
    return NotifyEvent(kind, path, cookie)


@pytest.fixture
def watcher(tmp_path):
    w = FileWatcher(tmp_path)
    yield w
    w.close()


@pytest.fixture
def fast_options():
    return Options(batch_timeout=0.05, move_timeout=0.05)


CASES = [
    (
        [ev(NotifyKind.DELETE), ev(NotifyKind.CLOSE_WRITE), ev(NotifyKind.MOVED_TO)],
        [FileEvent.MODIFY],
    ),
    (
        [ev(NotifyKind.CLOSE_WRITE), ev(NotifyKind.DELETE), ev(NotifyKind.DELETE)],
        [FileEvent.DELETE],
    ),
    (
        [
            ev(NotifyKind.CLOSE_WRITE),
            ev(NotifyKind.MOVED_TO),
            ev(NotifyKind.MOVED_FROM),
            ev(NotifyKind.DELETE),
        ],
        [FileEvent.MODIFY, FileEvent.MOVE, FileEvent.DELETE],
    ),
    (
        [ev(NotifyKind.DELETE), ev(NotifyKind.CLOSE_WRITE)],
        [FileEvent.MODIFY],
    ),
    (
        [ev(NotifyKind.CLOSE_WRITE), ev(NotifyKind.DELETE)],
        [],
    ),
]


@pytest.mark.parametrize("events,expected", CASES)
def test_event_concatenation(watcher, events, expected):
    result = [update.event for update in watcher.concatenate_events(events)]
    assert result == expected


def test_move_pairs_from_then_to(watcher):
    assert watcher.concatenate_events([ev(NotifyKind.MOVED_FROM, "/a.yaml", 5)]) == []
    result = watcher.concatenate_events([ev(NotifyKind.MOVED_TO, "/b.yaml", 5)])
    assert result == [FileUpdate(FileEvent.MOVE, "/b.yaml")]


def test_move_pairs_to_then_from(watcher):
    assert watcher.concatenate_events([ev(NotifyKind.MOVED_TO, "/b.yaml", 9)]) == []
    result = watcher.concatenate_events([ev(NotifyKind.MOVED_FROM, "/a.yaml", 9)])
    assert result == [FileUpdate(FileEvent.MOVE, "/b.yaml")]


@pytest.mark.parametrize(
    "kind,expected",
    [(NotifyKind.MOVED_FROM, FileEvent.DELETE), (NotifyKind.MOVED_TO, FileEvent.MODIFY)],
)
def test_incomplete_move_is_dispatched(tmp_path, fast_options, kind, expected):
    w = FileWatcher(tmp_path, fast_options)
    assert w.concatenate_events([ev(kind, "/x.yaml", 7)]) == []
    time.sleep(0.4)
    w.close()
    assert list(w.updates()) == [FileUpdate(expected, "/x.yaml")]


def test_default_options():
    opts = default_options()
    assert opts.exclude_dirs == [".git"]
    assert opts.batch_timeout == 1.0
    assert opts.valid_extensions == [".yaml", ".yml", ".json"]


def test_start_returns_existing_files(tmp_path, fast_options):
    (tmp_path / "a.yaml").write_text("a")
    (tmp_path / "notes.txt").write_text("n")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.json").write_text("{}")
    w, files = new_file_watcher(tmp_path, fast_options)
    try:
        assert files == [
            os.path.join(str(tmp_path), "a.yaml"),
            os.path.join(str(tmp_path), "sub", "b.json"),
        ]
    finally:
        w.close()


def test_start_twice_raises(tmp_path, fast_options):
    w = FileWatcher(tmp_path, fast_options)
    w.start()
    try:
        with pytest.raises(RuntimeError):
            w.start()
    finally:
        w.close()


def test_handle_event_dispatches_batch(tmp_path, fast_options):
    w = FileWatcher(tmp_path, fast_options)
    w.start()
    path = str(tmp_path / "virtual.yaml")
    w.handle_event(NotifyEvent(NotifyKind.DELETE, path))
    w.handle_event(NotifyEvent(NotifyKind.CLOSE_WRITE, path))
    time.sleep(0.5)
    w.close()
    assert list(w.updates()) == [FileUpdate(FileEvent.MODIFY, path)]


def test_handle_event_skips_invalid_and_directories(tmp_path, fast_options):
    w = FileWatcher(tmp_path, fast_options)
    w.start()
    w.handle_event(NotifyEvent(NotifyKind.CLOSE_WRITE, str(tmp_path / "notes.txt")))
    w.handle_event(NotifyEvent(NotifyKind.DELETE, str(tmp_path / "dir.yaml"), is_dir=True))
    time.sleep(0.3)
    w.close()
    assert list(w.updates()) == []


def test_suspend_skips_one_event(tmp_path, fast_options):
    w = FileWatcher(tmp_path, fast_options)
    w.start()
    first = str(tmp_path / "first.yaml")
    second = str(tmp_path / "second.yaml")
    w.suspend(FileEvent.MODIFY)
    w.handle_event(NotifyEvent(NotifyKind.CLOSE_WRITE, first))
    w.handle_event(NotifyEvent(NotifyKind.CLOSE_WRITE, second))
    time.sleep(0.5)
    w.close()
    assert list(w.updates()) == [FileUpdate(FileEvent.MODIFY, second)]


def test_updates_end_after_close(tmp_path):
    w = FileWatcher(tmp_path)
    w.close()
    assert list(w.updates()) == []
    assert list(w.updates()) == []