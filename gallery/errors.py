"""Error types raised by the core.

Every error carries the HTTP status the boundary layer should answer
with, so ``main.py`` can render them through a single exception handler.
"""

from __future__ import annotations

from typing import Any, List, Optional


class GalleryError(Exception):
    """Base class for all errors raised by the gallery core."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class NotFound(GalleryError):
    status_code = 404


class InvalidPath(GalleryError):
    status_code = 400


class MissingCondition(GalleryError):
    status_code = 400


class InvalidCondition(GalleryError):
    # Unknown conditions were always answered with 404.
    status_code = 404


class InvalidDimensions(GalleryError):
    status_code = 400


class TransformError(GalleryError):
    status_code = 415


class UploadError(GalleryError):
    """Raised when nothing was uploaded or when writing an upload failed.

    ``data`` holds the per-file summaries of a multi-file upload so the
    caller can see which items were written before the failure.
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        data: Optional[List[Any]] = None,
    ) -> None:
        super().__init__(message, status_code)
        self.data = data

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.data is not None:
            body["data"] = [item.model_dump() if hasattr(item, "model_dump") else item for item in self.data]
        return body


class InternalError(GalleryError):
    status_code = 500
