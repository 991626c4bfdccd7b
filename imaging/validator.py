"""Upload validation policy.

``validate`` never raises for bad input. Every rejection is reported as a
``ValidationResult`` with a human-readable ``error`` that the HTTP layer can
hand back to the user unchanged.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from imaging.config import ImageConfig, load_config
from imaging.errors import DecodeError, PixelLimitError
from imaging.inspector import ensure_bytes, inspect
from imaging.models import ImageMetadata, ValidationResult

logger = logging.getLogger(__name__)

PARSE_ERROR = "Failed to parse image"
TOO_LARGE_FILE_ERROR = "Image file too large"
INVALID_DIMENSIONS_ERROR = "Invalid image dimensions"
TOO_LARGE_DIMENSIONS_ERROR = "Image dimensions too large"


def _try_inspect(data: bytes, max_dimension: int) -> Tuple[Optional[ImageMetadata], Optional[str]]:
    try:
        return inspect(data, max_dimension), None
    except PixelLimitError as exc:
        logger.info("[validate] pixel count over the %d px ceiling: %s", max_dimension, exc)
        return None, TOO_LARGE_DIMENSIONS_ERROR
    except DecodeError as exc:
        logger.info("[validate] decode failed: %s", exc)
        return None, PARSE_ERROR


def validate(buffer: bytes, config: Optional[ImageConfig] = None) -> ValidationResult:
    """Check that an upload is a supported image within the size policy.

    Args:
        buffer: Raw upload bytes.
        config: Policy to apply; read from the environment when omitted.

    Returns:
        ``ValidationResult`` with metadata on success or an error message.

    Raises:
        TypeError: If ``buffer`` is not bytes-like.
    """
    config = config or load_config()
    data = ensure_bytes(buffer)

    if len(data) > config.max_upload_bytes:
        logger.info("[validate] rejected %d byte upload (limit %d)", len(data), config.max_upload_bytes)
        return ValidationResult.fail(TOO_LARGE_FILE_ERROR)

    metadata, error = _try_inspect(data, config.max_dimension)
    if metadata is None:
        return ValidationResult.fail(error or PARSE_ERROR)

    # Unsupported containers are reported the same way as corrupt ones.
    if metadata.format not in config.allowed_formats:
        logger.info("[validate] unsupported format %s", metadata.format)
        return ValidationResult.fail(PARSE_ERROR)

    if metadata.width <= 0 or metadata.height <= 0:
        return ValidationResult.fail(INVALID_DIMENSIONS_ERROR)

    if metadata.width > config.max_dimension or metadata.height > config.max_dimension:
        logger.info(
            "[validate] rejected %dx%d image (limit %d per side)",
            metadata.width,
            metadata.height,
            config.max_dimension,
        )
        return ValidationResult.fail(TOO_LARGE_DIMENSIONS_ERROR)

    return ValidationResult.ok(metadata)
