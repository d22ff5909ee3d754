"""Atomic file write helpers.

Artifacts are written to a temporary file in the destination directory and
moved into place with ``os.replace``. Readers either see the previous file or
the complete new one; a failed write leaves no partial file behind.
"""

import json
import os
import tempfile
from contextlib import suppress
from typing import Any, Iterable, Union

PathLike = Union[str, "os.PathLike[str]"]

TEMP_PREFIX = ".part-"
TEMP_SUFFIX = ".tmp"


def atomic_write(dest_path: PathLike, chunks: Iterable[bytes], fsync: bool = True) -> int:
    """Atomically write ``chunks`` to ``dest_path`` and return the byte count.

    Parent directories are created if needed. Empty chunks are skipped. Any
    exception (including one raised by the ``chunks`` iterator) removes the
    temporary file and propagates unchanged.
    """
    dest_path = os.fspath(dest_path)
    dest_dir = os.path.dirname(dest_path) or "."
    os.makedirs(dest_dir, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=dest_dir, prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX)
    written = 0
    replaced = False
    try:
        with os.fdopen(fd, "wb") as handle:
            for chunk in chunks:
                if not chunk:
                    continue
                handle.write(chunk)
                written += len(chunk)
            handle.flush()
            if fsync:
                os.fsync(handle.fileno())
        os.replace(tmp_path, dest_path)
        replaced = True
        return written
    finally:
        if not replaced:
            with suppress(FileNotFoundError):
                os.unlink(tmp_path)


def atomic_write_json(dest_path: PathLike, payload: Any, indent: int = 2) -> int:
    """Serialize ``payload`` as JSON and write it atomically."""
    text = json.dumps(payload, indent=indent)
    return atomic_write(dest_path, [text.encode("utf-8")])


def read_head(source: Any, size: int) -> bytes:
    """Return up to ``size`` leading bytes of a path, buffer or binary file object.

    File objects are read from their current position, which is restored
    afterwards when the object is seekable.

    Raises:
        OSError: If a path cannot be opened or read.
        TypeError: For unsupported source types.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source[:size])
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as handle:
            return handle.read(size)
    if hasattr(source, "read"):
        position = source.tell() if hasattr(source, "seekable") and source.seekable() else None
        data = source.read(size)
        if position is not None:
            source.seek(position)
        return bytes(data or b"")
    raise TypeError(f"Cannot read bytes from {type(source).__name__}")
