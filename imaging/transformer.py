"""Resize and re-encode engine.

This is the only module that decodes full pixel data. It wraps Pillow's
decoder, LANCZOS resampling and the jpeg/png/webp encoders behind a single
``process`` call that returns the encoded bytes together with metadata read
back from the output.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any, Dict, Optional, Tuple

from PIL import Image

from imaging.config import ImageConfig, load_config
from imaging.errors import DECODER_ERRORS, DecodeError, ProcessingError
from imaging.inspector import container_format, ensure_bytes, image_has_alpha, inspect, open_image
from imaging.models import ProcessedImage, ProcessingOptions

logger = logging.getLogger(__name__)

_FAILURES = (DecodeError,) + DECODER_ERRORS

_JPEG_MODES = frozenset({"1", "L", "RGB", "CMYK"})
_WEBP_MODES = frozenset({"RGB", "RGBA"})
_PNG_MODES = frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"})


def fit_within(
    width: int,
    height: int,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
) -> Tuple[int, int]:
    """Scale ``(width, height)`` down to fit the given bounds.

    The scale factor is the smallest of the applicable ``max / source``
    ratios and is applied to both axes. Images that already fit are
    returned unchanged; nothing is ever enlarged.

    Args:
        width: Source width in pixels.
        height: Source height in pixels.
        max_width: Optional width bound.
        max_height: Optional height bound.

    Returns:
        The target ``(width, height)``.
    """
    ratios = []
    if max_width is not None:
        ratios.append(max_width / width)
    if max_height is not None:
        ratios.append(max_height / height)
    if not ratios:
        return width, height
    scale = min(ratios)
    if scale >= 1:
        return width, height
    new_width = max(1, round(width * scale))
    new_height = max(1, round(height * scale))
    if max_width is not None:
        new_width = min(new_width, max_width)
    if max_height is not None:
        new_height = min(new_height, max_height)
    return new_width, new_height


def _open_image(data: bytes, max_dimension: int) -> Image.Image:
    """Open raw image bytes and decode the first frame."""
    img = open_image(data, max_dimension)
    img.load()
    return img


def _flatten(img: Image.Image) -> Image.Image:
    """Composite an image with transparency onto a white background."""
    rgba = img.convert("RGBA")
    background = Image.new("RGB", rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def _resize(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    if img.size == size:
        return img
    # Palette and bilevel images only support nearest-neighbour resampling.
    if img.mode == "P":
        img = img.convert("RGBA" if image_has_alpha(img) else "RGB")
    elif img.mode == "1":
        img = img.convert("L")
    return img.resize(size, Image.Resampling.LANCZOS)


def _prepare_for(img: Image.Image, fmt: str) -> Image.Image:
    """Convert ``img`` into a mode the target encoder accepts."""
    if fmt == "jpeg":
        if img.mode in _JPEG_MODES:
            return img
        return _flatten(img) if image_has_alpha(img) else img.convert("RGB")
    if fmt == "webp":
        if img.mode in _WEBP_MODES:
            return img
        return img.convert("RGBA" if image_has_alpha(img) else "RGB")
    if fmt == "png":
        if img.mode in _PNG_MODES:
            return img
        return img.convert("RGBA" if image_has_alpha(img) else "RGB")
    return img


def _encoder_options(fmt: str, quality: int) -> Dict[str, Any]:
    if fmt == "jpeg":
        return {"quality": quality, "progressive": True, "optimize": True}
    if fmt == "webp":
        return {"quality": quality}
    if fmt == "png":
        # Lossless: quality is accepted but has no effect.
        return {"compress_level": 9}
    return {}


def _encode(img: Image.Image, fmt: str, quality: int) -> bytes:
    buffer = BytesIO()
    _prepare_for(img, fmt).save(buffer, format=fmt.upper(), **_encoder_options(fmt, quality))
    return buffer.getvalue()


def process(
    buffer: bytes,
    options: Optional[ProcessingOptions] = None,
    config: Optional[ImageConfig] = None,
) -> ProcessedImage:
    """Resize and re-encode an image.

    Args:
        buffer: Raw image bytes.
        options: Bounds, quality and output format. Missing values mean
            no resize, the configured default quality and the source format.
        config: Supplies the default quality and the per-side ceiling
            used to guard against oversized sources; read from the
            environment when omitted.

    Returns:
        ``ProcessedImage`` whose ``info`` describes the encoded output.

    Raises:
        ProcessingError: If the buffer cannot be decoded, resized or encoded.
        TypeError: If ``buffer`` is not bytes-like.
    """
    options = options or ProcessingOptions()
    config = config or load_config()
    quality = options.quality or config.default_quality
    data = ensure_bytes(buffer)

    try:
        with _open_image(data, config.max_dimension) as img:
            source_format = container_format(img)
            target_format = options.format or source_format
            if not target_format:
                raise DecodeError("Source image has no container format")
            size = fit_within(img.width, img.height, options.max_width, options.max_height)
            output = _encode(_resize(img, size), target_format, quality)
        info = inspect(output, config.max_dimension)
    except _FAILURES as exc:
        logger.error("[transform] failed to process %d byte image: %s", len(data), exc)
        raise ProcessingError() from exc

    logger.debug(
        "[transform] %s -> %s %dx%d (%d bytes)",
        source_format,
        info.format,
        info.width,
        info.height,
        info.size_bytes,
    )
    return ProcessedImage(buffer=output, info=info)
