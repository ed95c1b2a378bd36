# libgitops

libgitops keeps byte-encoded objects as files on disk. It finds each object by
its group, version and kind, plus an identifier. It can also watch a directory
of manifest files and report changes to them. And it defines the result types
that a transaction returns.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

## Keys

`libgitops.storage.key` defines `GroupVersion`, `GroupVersionKind`, `KindKey`
and `ObjectKey`. They are frozen dataclasses, so they can be used as
dictionary keys.

```python
from libgitops.storage.key import GroupVersion, KindKey, ObjectKey

gv = GroupVersion("sample-app.weave.works", "v1alpha1")
car = KindKey(gv.group, gv.version, "Car")
key = ObjectKey(car, "foo")

str(key)          # "sample-app.weave.works/v1alpha1, Kind=Car foo"
key.gvk           # GroupVersionKind(group=..., version=..., kind="Car")
```

`equals_gvk(other, respect_version)` always compares group and kind. It also
compares version when `respect_version` is true.

## Content types

`libgitops.storage.format` defines `ContentType` (`JSON` and `YAML`) and the
`CONTENT_TYPES` table. That table maps `.json`, `.yaml` and `.yml` to a content
type. `ext_for_content_type(ct)` returns a matching extension, or `None` if
there is none.

## Raw storage

`RawStorage` is the abstract interface. It has these methods: `read`,
`exists`, `write`, `delete`, `list`, `checksum`, `content_type`, `watch_dir` and
`get_key`.

`GenericRawStorage` keeps each object at
`<dir>/<kind>/<identifier>/metadata<ext>`. The extension comes from the
content type it is given. An unknown content type raises `ValueError`. The
storage accepts only its own group and version. For any other it raises
`StorageError`, except `exists`, which returns `False`.

```python
from libgitops.storage.format import ContentType
from libgitops.storage.rawstorage import GenericRawStorage

raw = GenericRawStorage("/tmp/store", gv, ContentType.JSON)
raw.write(key, b'{"kind": "Car"}')   # creates /tmp/store/Car/foo/metadata.json
raw.read(key)
raw.list(car)                        # keys for every entry under /tmp/store/Car, sorted
raw.checksum(key)                    # modification time in nanoseconds, as a string
raw.get_key("/tmp/store/Car/foo/metadata.json")
raw.delete(key)                      # removes the object's directory
```

`read`, `delete` and `checksum` raise `NotFoundError` when the object is
missing.

`GenericMappedRawStorage` looks files up through a mapping from object keys to
paths. It reads and writes only files that are already mapped, and it never
creates one. For an unmapped key it raises `NotTrackedError`, which is a
subclass of `NotFoundError`. `list` returns the mapped keys whose group and
kind match; it ignores version. `content_type` is read from the file
extension. `delete` removes the file if it is still there, then drops the
mapping.

```python
from libgitops.storage.mappedrawstorage import GenericMappedRawStorage

mapped = GenericMappedRawStorage("/tmp/manifests")
mapped.add_mapping(key, "/tmp/manifests/car.yaml")
mapped.content_type(key)                      # ContentType.YAML
mapped.get_key("/tmp/manifests/car.yaml")     # key
mapped.set_mappings({})                       # replace all mappings
```

`libgitops.storage.update.ObjectEvent` lists the kinds of change to an object:
`NONE`, `CREATE`, `MODIFY` and `DELETE`.

## Watching files

`new_file_watcher(directory, options)` creates a `FileWatcher`, starts it and
returns it. It also returns the valid files already in the directory. Options
come from `default_options()` or from `Options` directly:

- `exclude_dirs`: default `[".git"]`
- `valid_extensions`: default `[".yaml", ".yml", ".json"]`
- `batch_timeout`: default `1.0` seconds
- `move_timeout`: default `1.0` seconds

```python
from libgitops.watcher.filewatcher import default_options, new_file_watcher

watcher, files = new_file_watcher("/tmp/manifests", default_options())
for update in watcher.updates():     # blocks; ends after watcher.close()
    print(update.event, update.path)
```

The watcher collects events for each path. It waits until `batch_timeout` has
passed with no new event for that batch, then folds them together:

- a delete followed by a modify becomes a modify;
- a modify followed by a delete is dropped.

Each result is then sent as a `FileUpdate` with a `FileEvent` of `MODIFY`,
`DELETE` or `MOVE`. The two halves of a move become one `MOVE` update. If only
one half arrives within `move_timeout`, it is reported as `DELETE` (moved out)
or `MODIFY` (moved in). `watcher.suspend(FileEvent.MODIFY)` skips the next
event of that kind once. `watcher.close()` stops watching and ends `updates()`.

`libgitops.watcher.traversal` provides `walk_directory_for_files` and
`is_valid_file`. `libgitops.watcher.event` provides `format_events` and
`events_to_bytes`.

## Transactions

A transaction returns a `CommitResult`. This has the fields `author_name`,
`author_email`, `title` and `description`, and a `message` property. It can
return a `PullRequestResult` instead, which adds `labels`, `assignees` and
`milestone`. A `PullRequestSpec` adds `main_branch`, `merge_branch` and
`repository_ref`. Each `validate()` raises `ValidationError` and names the
required fields that are empty. `PullRequestProvider` is the abstract
interface with `create_pull_request(spec)`.

The error types `AbortTransactionError`, `TransactionActiveError` and
`NoPullRequestProviderError` are defined for transaction code to raise.

## Helpers

`libgitops.util.common` provides these helpers:

- `path_exists` and `file_exists`
- `execute_command(command, *args)`: returns trimmed combined output and
  raises `RuntimeError` on failure
- `match_prefix(prefix, *fields)`
- `random_sha(byte_len)`

`libgitops.util.batcher.BatchWriter` releases stored items as one batch
after a quiet period. `libgitops.util.monitor.run_monitor` runs a function in
a background thread that can be waited on.

## What this package does not do

It has no layer that encodes or decodes objects. Storages deal only in raw
bytes. It does not run transactions against a git repository. It does not
create pull requests on any hosting service; it only defines the result
types and the provider interface. There is no command-line program.