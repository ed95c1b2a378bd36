"""Small filesystem, process and string helpers."""

from __future__ import annotations

import os
import secrets
import stat
import subprocess


def path_exists(path: str | os.PathLike) -> tuple[bool, os.stat_result | None]:
    """Report whether *path* exists, together with its stat result.

    Only a missing path counts as non-existent; any other stat failure is
    reported as existing but without stat information.
    """
    try:
        info = os.stat(path)
    except FileNotFoundError:
        return False, None
    except OSError:
        return True, None
    return True, info


def file_exists(path: str | os.PathLike) -> bool:
    """Return True if *path* exists and is not a directory."""
    exists, info = path_exists(path)
    if not exists or info is None:
        return False
    return not stat.S_ISDIR(info.st_mode)


def execute_command(command: str, *args: str) -> str:
    """Run a command and return its combined, whitespace-trimmed output.

    Raises RuntimeError if the command cannot be started or exits non-zero.
    """
    argv = [command, *args]
    try:
        proc = subprocess.run(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as exc:
        raise RuntimeError(f"command {argv!r} could not be run: {exc}") from exc

    output = proc.stdout.decode(errors="replace")
    if proc.returncode != 0:
        raise RuntimeError(
            f"command {argv!r} exited with {output!r}: exit status {proc.returncode}"
        )
    return output.strip()


def match_prefix(prefix: str, *args: str) -> tuple[list[str], bool]:
    """Match *prefix* against the given fields.

    Exact matches win: if any field equals the prefix, those are returned
    with True. Otherwise the fields starting with the prefix are returned
    with False.
    """
    exact = [field for field in args if field == prefix]
    if exact:
        return exact, True
    return [field for field in args if field.startswith(prefix)], False


def random_sha(byte_len: int) -> str:
    """Return a hex string made from *byte_len* random bytes."""
    if byte_len < 0:
        raise ValueError(f"byte length must not be negative: {byte_len}")
    return secrets.token_hex(byte_len)