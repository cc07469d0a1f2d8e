"""Resolve collection and file identifiers against a storage root.

Every identifier that arrives from a request goes through :func:`resolve`
before it touches the filesystem. An identifier is a single path
component: it may not be empty, may not contain a separator or a NUL
byte, and may not be ``.`` or ``..``. After joining, the resolved path
must still live under the root, which also catches symlinks pointing
elsewhere.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .errors import InvalidPath

_FORBIDDEN_CHARS = ("/", "\\", "\x00")


def check_identifier(value: Optional[str], kind: str = "identifier") -> str:
    """Validate a single path component and return it unchanged."""
    if value is None or value == "":
        raise InvalidPath(f"Empty {kind}")
    if any(ch in value for ch in _FORBIDDEN_CHARS):
        raise InvalidPath(f"Invalid {kind} '{value}'")
    if value in (".", ".."):
        raise InvalidPath(f"Invalid {kind} '{value}'")
    return value


def _is_within(root: Path, candidate: Path) -> bool:
    try:
        candidate.relative_to(root)
    except ValueError:
        return False
    return True


def resolve(
    root: Union[str, Path],
    collection_id: Optional[str],
    file_id: Optional[str] = None,
) -> Path:
    """Return the absolute path of a collection, or of a file inside it.

    Args:
        root: Storage root the identifiers are relative to.
        collection_id: Name of a collection directly under ``root``.
        file_id: Optional name of a file directly under the collection.

    Returns:
        The resolved absolute path. It is not required to exist.

    Raises:
        InvalidPath: If an identifier is malformed or the result would
            escape ``root``.
    """
    base = Path(root).resolve()
    check_identifier(collection_id, "collection")
    target = base / collection_id
    if file_id is not None:
        check_identifier(file_id, "file name")
        target = target / file_id

    resolved = target.resolve()
    if resolved == base or not _is_within(base, resolved):
        raise InvalidPath(f"Path escapes storage root: {target}")
    return resolved
