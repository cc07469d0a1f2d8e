"""Filesystem storage for collections.

A storage root holds one directory per collection and each collection
holds its files directly. That on-disk layout is the only "schema" the
service has: listings are read from the directory at call time and
nothing is cached in between.

Writes go through :func:`save_bytes`, which writes into a temporary file
next to the destination and renames it into place, so a concurrent
reader sees either the previous file or the new one, never a mix.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import List, Union

from .errors import NotFound
from .models import Entry, EntryType
from .paths import resolve

TEMP_PREFIX = ".upload_"


def _default_file_mode() -> int:
    # os.umask can only be read by setting it
    umask = os.umask(0o022)
    os.umask(umask)
    return 0o666 & ~umask


# mkstemp creates 0600 files; uploads get the mode a plain open() would give
FILE_MODE = _default_file_mode()


def _scan(path: Path) -> List[Entry]:
    entries = []
    with os.scandir(path) as it:
        for item in it:
            if item.name.startswith(TEMP_PREFIX):
                continue
            kind = EntryType.DIRECTORY if item.is_dir() else EntryType.FILE
            entries.append(Entry(name=item.name, type=kind))
    return entries


def list_collections(root: Union[str, Path]) -> List[Entry]:
    """List the direct children of ``root``.

    Order is whatever the directory enumeration yields.

    Raises:
        NotFound: If ``root`` does not exist or is not a directory.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise NotFound(f"Storage root {root_path} not found")
    return _scan(root_path)


def list_entries(root: Union[str, Path], collection_id: str) -> List[Entry]:
    """List the direct children of one collection.

    Raises:
        InvalidPath: If ``collection_id`` is malformed.
        NotFound: If the collection directory does not exist.
    """
    path = resolve(root, collection_id)
    if not path.is_dir():
        raise NotFound(f"Collection '{collection_id}' not found")
    return _scan(path)


def read_file(root: Union[str, Path], collection_id: str, file_id: str) -> bytes:
    """Return the full contents of a file in a collection.

    Raises:
        InvalidPath: If an identifier is malformed.
        NotFound: If the path is missing or not a regular file.
    """
    path = resolve(root, collection_id, file_id)
    if not path.is_file():
        raise NotFound(f"File '{file_id}' not found in collection '{collection_id}'")
    return path.read_bytes()


def _ensure_dir(path: Path) -> None:
    """Create a directory and any missing parents."""
    path.mkdir(parents=True, exist_ok=True)


def save_bytes(dest: Path, data: bytes) -> Path:
    """Atomically write ``data`` to ``dest``, replacing any existing file.

    The parent directory is created when missing. The bytes are written
    to a temporary file in the same directory and moved over ``dest``
    with :func:`os.replace`; on failure the temporary file is removed and
    the original exception propagates.

    Args:
        dest: Resolved destination path.
        data: Raw byte content to write.

    Returns:
        The destination path.
    """
    _ensure_dir(dest.parent)
    fd, tmp_path = tempfile.mkstemp(dir=str(dest.parent), prefix=TEMP_PREFIX)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, dest)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise
    return dest
