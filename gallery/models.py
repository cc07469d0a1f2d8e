"""Pydantic models and data schemas for the collections API.

``Entry`` and ``UploadSummary`` are produced by the core; the response
envelopes mirror the JSON shapes existing clients already consume
(``dirs`` for collection listings, ``result`` for entry listings and
``status``/``message``/``data`` for uploads).
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class EntryType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class Entry(BaseModel):
    """One member of a collection listing.

    Attributes:
        name: Directory entry name.
        type: Whether the entry is a file or a directory.
    """

    name: str
    type: EntryType


class UploadSummary(BaseModel):
    """Outcome of ingesting one uploaded file.

    Attributes:
        name: File name as written to the collection.
        mimetype: MIME type declared by the client.
        size: Payload size in bytes.
        ok: False when this item could not be written.
        error: Reason the item failed, if it did.
    """

    name: str
    mimetype: str
    size: int
    ok: bool = True
    error: Optional[str] = None


class CollectionsResponse(BaseModel):
    dirs: List[Entry]


class EntriesResponse(BaseModel):
    result: List[Entry]


class ConditionEntriesResponse(BaseModel):
    result: List[Entry]
    collection: str


class UploadResponse(BaseModel):
    status: bool
    message: str
    data: List[UploadSummary]


class HealthResponse(BaseModel):
    status: str
    roots: dict
