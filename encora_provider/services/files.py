"""Filesystem helpers for files written next to the media."""

from __future__ import annotations

import asyncio
import os
import tempfile

# mkstemp creates 0600 files; renamed files get the mode a plain open() would.
_UMASK = os.umask(0)
os.umask(_UMASK)


def _target_mode(path: str) -> int:
    try:
        return os.stat(path).st_mode & 0o777
    except FileNotFoundError:
        return 0o666 & ~_UMASK


def _write_atomic(path: str, payload: bytes) -> None:
    directory = os.path.dirname(path) or "."
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=os.path.basename(path))
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
        os.chmod(tmp_path, _target_mode(path))
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise


async def write_bytes_atomic(path: str, payload: bytes) -> str:
    """Write ``payload`` to a temp file beside ``path`` and rename it into place."""

    await asyncio.to_thread(_write_atomic, path, payload)
    return path
