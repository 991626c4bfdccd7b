"""Output format choice for uploads."""

from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image

from imaging.errors import DECODER_ERRORS, DecodeError
from imaging.inspector import inspect
from imaging.models import OutputFormat

logger = logging.getLogger(__name__)

DEFAULT_FORMAT: OutputFormat = "jpeg"


def _uses_alpha(data: bytes) -> bool:
    """Decode the alpha band and report whether any pixel is non-opaque."""
    with Image.open(BytesIO(data)) as img:
        rgba = img.convert("RGBA")
    low, _ = rgba.getchannel("A").getextrema()
    return low < 255


def select_format(buffer: bytes, check_alpha_usage: bool = False) -> OutputFormat:
    """Pick an output codec for an image.

    Images with an alpha channel go to ``webp``, which keeps transparency
    at a fraction of the size of png. Everything else goes to ``jpeg``.
    Any failure to read the image falls back to ``jpeg``.

    Args:
        buffer: Raw image bytes.
        check_alpha_usage: Decode the alpha band and only choose ``webp``
            when some pixel is actually transparent. Without it the mere
            presence of an alpha channel decides.
    """
    try:
        metadata = inspect(buffer)
    except (DecodeError, TypeError):
        return DEFAULT_FORMAT
    if not metadata.has_alpha:
        return "jpeg"
    if not check_alpha_usage:
        return "webp"
    try:
        return "webp" if _uses_alpha(bytes(buffer)) else "jpeg"
    except DECODER_ERRORS as exc:
        logger.info("[format] alpha check failed, using %s: %s", DEFAULT_FORMAT, exc)
        return DEFAULT_FORMAT
