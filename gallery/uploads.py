"""Ingest uploaded files into a collection.

Clients post either a single file or several under the same form field.
:func:`normalize_files` turns whatever arrived into an :class:`UploadBatch`
tagged ``SINGLE`` or ``MULTIPLE``; :func:`ingest` then writes every file
of the batch the same way.

Failure policy differs by tag. A single-file upload either succeeds or
raises. A multi-file upload keeps going after a failed item, marks that
item with ``ok=False`` and only raises when nothing at all was written.
Files written before a failure stay in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Mapping, Tuple, Union

from .errors import InvalidPath, UploadError
from .models import UploadSummary
from .paths import resolve
from .storage import TEMP_PREFIX, save_bytes


@dataclass(frozen=True)
class UploadedFile:
    name: str
    mimetype: str
    size: int
    data: bytes

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mimetype: str = "application/octet-stream") -> "UploadedFile":
        return cls(name=name, mimetype=mimetype or "application/octet-stream", size=len(data), data=data)


class BatchKind(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class UploadBatch:
    kind: BatchKind
    files: Tuple[UploadedFile, ...]

    @classmethod
    def single(cls, file: UploadedFile) -> "UploadBatch":
        return cls(BatchKind.SINGLE, (file,))

    @classmethod
    def multiple(cls, files) -> "UploadBatch":
        return cls(BatchKind.MULTIPLE, tuple(files))


def normalize_files(field: Union[None, UploadedFile, List[UploadedFile], Mapping[Any, UploadedFile]]) -> UploadBatch:
    """Normalize an upload payload into an :class:`UploadBatch`.

    ``field`` may be a single :class:`UploadedFile`, a sequence of them
    or a mapping whose values are files.

    Raises:
        UploadError: If no files were supplied.
    """
    if field is None:
        raise UploadError("No file uploaded")
    if isinstance(field, UploadedFile):
        return UploadBatch.single(field)
    if isinstance(field, Mapping):
        files = list(field.values())
    elif isinstance(field, (list, tuple)):
        files = list(field)
    else:
        raise UploadError(f"Unsupported upload payload: {type(field).__name__}")
    if not files:
        raise UploadError("No file uploaded")
    if not all(isinstance(f, UploadedFile) for f in files):
        raise UploadError("Upload payload contains non-file values")
    return UploadBatch.multiple(files)


def _write_one(root: Path, collection_id: str, file: UploadedFile) -> UploadSummary:
    # names with the temp prefix are hidden from listings
    if file.name.startswith(TEMP_PREFIX):
        raise InvalidPath(f"Invalid file name '{file.name}'")
    dest = resolve(root, collection_id, file.name)
    save_bytes(dest, file.data)
    return UploadSummary(name=file.name, mimetype=file.mimetype, size=file.size)


def ingest(root: Union[str, Path], collection_id: str, batch: UploadBatch) -> List[UploadSummary]:
    """Write every file of ``batch`` into ``collection_id`` under ``root``.

    The collection directory is created when missing and existing files
    of the same name are replaced.

    Returns:
        One :class:`UploadSummary` per file, in upload order.

    Raises:
        InvalidPath: If ``collection_id`` is malformed, or the only file
            of a single upload has a malformed name.
        UploadError: If the batch is empty, a single upload could not be
            written, or every item of a multi-file upload failed.
    """
    root = Path(root)
    # validate the target before anything is written
    resolve(root, collection_id)
    if not batch.files:
        raise UploadError("No file uploaded")

    if batch.kind is BatchKind.SINGLE:
        file = batch.files[0]
        try:
            return [_write_one(root, collection_id, file)]
        except OSError as exc:
            raise UploadError(f"Failed to write '{file.name}': {exc}", status_code=500)

    results: List[UploadSummary] = []
    write_failed = False
    for file in batch.files:
        try:
            results.append(_write_one(root, collection_id, file))
        except InvalidPath as exc:
            results.append(_failed(file, exc.message))
        except OSError as exc:
            write_failed = True
            results.append(_failed(file, f"Failed to write: {exc}"))

    if not any(item.ok for item in results):
        raise UploadError(
            "No files were uploaded",
            status_code=500 if write_failed else 400,
            data=results,
        )
    return results


def _failed(file: UploadedFile, reason: str) -> UploadSummary:
    return UploadSummary(name=file.name, mimetype=file.mimetype, size=file.size, ok=False, error=reason)
