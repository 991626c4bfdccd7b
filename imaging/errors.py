"""Exceptions raised by the image pipeline."""

from __future__ import annotations

import struct

from PIL import Image


class ImagePipelineError(Exception):
    """Base class for pipeline failures."""


class DecodeError(ImagePipelineError):
    """The buffer is not a parseable image of a known container format."""


class PixelLimitError(DecodeError):
    """The image header declares more pixels than the configured ceiling allows."""


class ProcessingError(ImagePipelineError):
    """Decoding, resizing or re-encoding an image failed."""

    def __init__(self, message: str = "Failed to process image") -> None:
        super().__init__(message)


# Exception types Pillow raises for damaged, truncated or hostile input.
# UnidentifiedImageError is an OSError subclass.
DECODER_ERRORS = (
    OSError,
    ValueError,
    SyntaxError,
    EOFError,
    KeyError,
    MemoryError,
    struct.error,
    Image.DecompressionBombError,
)
