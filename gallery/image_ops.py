"""Image manipulation utilities.

This module wraps the on-the-fly resize used when a client fetches an
image with ``width`` and ``height`` query parameters. The image is scaled
to fit inside the requested box with its aspect ratio preserved, never
cropped and never enlarged.
"""

from __future__ import annotations

from io import BytesIO
from typing import NamedTuple, Optional, Tuple

from PIL import Image, UnidentifiedImageError  # type: ignore[import]

from .errors import InvalidDimensions, TransformError

# Formats Pillow can write back out; anything else is re-encoded as PNG.
_WRITABLE_FORMATS = {"JPEG", "PNG", "GIF", "WEBP", "BMP", "TIFF"}
_FALLBACK_FORMAT = "PNG"


class ResizeSpec(NamedTuple):
    width: int
    height: int


def _parse_positive_int(value, name: str) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidDimensions(f"{name} must be a positive integer, got '{value}'")
    if number <= 0:
        raise InvalidDimensions(f"{name} must be a positive integer, got '{value}'")
    return number


def parse_dimensions(width, height) -> Optional[ResizeSpec]:
    """Turn raw ``width``/``height`` query values into a :class:`ResizeSpec`.

    Returns ``None`` when neither is given. Raises
    :class:`InvalidDimensions` when only one is given or either is not a
    positive integer.
    """
    if width is None and height is None:
        return None
    if width is None or height is None:
        raise InvalidDimensions("width and height must be given together")
    return ResizeSpec(_parse_positive_int(width, "width"), _parse_positive_int(height, "height"))


def fit_inside(size: Tuple[int, int], box: Tuple[int, int]) -> Tuple[int, int]:
    """Largest size with the aspect ratio of ``size`` that fits in ``box``.

    Sizes already inside the box are returned unchanged.
    """
    src_w, src_h = size
    box_w, box_h = box
    if src_w <= box_w and src_h <= box_h:
        return src_w, src_h
    scale = min(box_w / src_w, box_h / src_h)
    return max(1, round(src_w * scale)), max(1, round(src_h * scale))


def _open_image(data: bytes) -> Image.Image:
    """Open raw image bytes with Pillow and force a full decode."""
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise TransformError(f"Cannot decode image: {exc}")
    return img


def resize_image(data: bytes, width: int, height: int) -> bytes:
    """Resize an image so it fits entirely inside ``width`` x ``height``.

    Args:
        data: Raw image bytes.
        width: Maximum output width.
        height: Maximum output height.

    Returns:
        The encoded image, in the source format when Pillow can write it
        and PNG otherwise.
    """
    spec = parse_dimensions(width, height)
    img = _open_image(data)
    fmt = img.format if img.format in _WRITABLE_FORMATS else _FALLBACK_FORMAT

    new_size = fit_inside(img.size, (spec.width, spec.height))
    if new_size != img.size:
        img = img.resize(new_size, Image.LANCZOS)

    if fmt == "JPEG" and img.mode not in ("RGB", "L", "CMYK"):
        img = img.convert("RGB")

    buffer = BytesIO()
    try:
        if fmt == "JPEG":
            img.save(buffer, format=fmt, quality=85)
        else:
            img.save(buffer, format=fmt)
    except (OSError, ValueError) as exc:
        raise TransformError(f"Cannot encode image as {fmt}: {exc}")
    return buffer.getvalue()


def image_mimetype(data: bytes) -> str:
    """MIME type of encoded image bytes, read from the header only."""
    try:
        with Image.open(BytesIO(data)) as img:
            return img.get_format_mimetype() or "application/octet-stream"
    except (UnidentifiedImageError, OSError):
        return "application/octet-stream"
