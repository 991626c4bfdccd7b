"""Header-level inspection of image buffers.

``inspect`` opens the buffer lazily with Pillow, which parses the container
header without decoding pixel data. That keeps inspection cheap even for
very large uploads.

Pillow also refuses to open images above twice ``Image.MAX_IMAGE_PIXELS``.
That limit is a process-wide global, so ``open_image`` swaps it for one
derived from the caller's per-side ceiling while the header is parsed.
"""

from __future__ import annotations

import threading
from io import BytesIO
from typing import Optional

from PIL import Image

from imaging.errors import DECODER_ERRORS, DecodeError, PixelLimitError
from imaging.models import ImageMetadata

_ALPHA_MODES = frozenset({"RGBA", "RGBa", "LA", "La", "PA"})

# Pillow names JPEGs carrying a multi-picture (MPF) segment "MPO".
_FORMAT_ALIASES = {"mpo": "jpeg"}

_PIXEL_LIMIT_LOCK = threading.Lock()


def ensure_bytes(buffer: object) -> bytes:
    """Return ``buffer`` as ``bytes`` or raise ``TypeError``."""
    if isinstance(buffer, bytes):
        return buffer
    if isinstance(buffer, (bytearray, memoryview)):
        return bytes(buffer)
    raise TypeError(f"expected a bytes-like image buffer, got {type(buffer).__name__}")


def image_has_alpha(img: Image.Image) -> bool:
    return img.mode in _ALPHA_MODES or "transparency" in img.info


def container_format(img: Image.Image) -> str:
    """Lowercase container name of an opened image, ``""`` when unknown."""
    fmt = (img.format or "").lower()
    return _FORMAT_ALIASES.get(fmt, fmt)


def open_image(data: bytes, max_dimension: Optional[int] = None) -> Image.Image:
    """Open ``data`` lazily without decoding pixels.

    With ``max_dimension`` set, Pillow's decompression bomb guard is sized to
    a ``max_dimension`` square instead of its built-in default, so every image
    within the ceiling opens.
    """
    if max_dimension is None:
        return Image.open(BytesIO(data))
    with _PIXEL_LIMIT_LOCK:
        previous = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = max_dimension * max_dimension
        try:
            return Image.open(BytesIO(data))
        finally:
            Image.MAX_IMAGE_PIXELS = previous


def _channel_count(img: Image.Image) -> int:
    if img.mode == "P":
        return 4 if "transparency" in img.info else 3
    return len(img.getbands())


def _density(img: Image.Image) -> Optional[int]:
    dpi = img.info.get("dpi")
    if not dpi:
        return None
    try:
        return int(round(float(dpi[0])))
    except (TypeError, ValueError, IndexError):
        return None


def describe(img: Image.Image, size_bytes: int) -> ImageMetadata:
    """Build metadata for an already opened image."""
    fmt = container_format(img)
    if not fmt:
        raise DecodeError("Image has no container format")
    width, height = img.size
    return ImageMetadata(
        format=fmt,
        width=width,
        height=height,
        channels=_channel_count(img),
        density=_density(img),
        size_bytes=size_bytes,
        has_alpha=image_has_alpha(img),
    )


def inspect(buffer: bytes, max_dimension: Optional[int] = None) -> ImageMetadata:
    """Read format, dimensions and channel data from an image buffer.

    Args:
        buffer: Raw image bytes.
        max_dimension: Per-side ceiling used to size Pillow's pixel-count
            guard. Pillow's own default applies when omitted.

    Returns:
        An ``ImageMetadata`` snapshot of the buffer.

    Raises:
        PixelLimitError: If the header declares far more pixels than the
            ceiling allows.
        DecodeError: If the buffer is empty or not a recognisable image.
        TypeError: If ``buffer`` is not bytes-like.
    """
    data = ensure_bytes(buffer)
    if not data:
        raise DecodeError("Empty image buffer")
    try:
        with open_image(data, max_dimension) as img:
            return describe(img, len(data))
    except DecodeError:
        raise
    except Image.DecompressionBombError as exc:
        raise PixelLimitError(str(exc)) from exc
    except DECODER_ERRORS as exc:
        raise DecodeError(f"Unreadable image: {exc}") from exc
