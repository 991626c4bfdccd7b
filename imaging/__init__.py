"""Image processing package for uploaded assets.

This package turns a raw uploaded image buffer into validated, resized and
re-encoded variants with collision-resistant filenames. Storage of the
produced bytes is left to the caller. See individual modules for details.
"""

from imaging.errors import DecodeError, ImagePipelineError, PixelLimitError, ProcessingError
from imaging.filenames import generate_filename
from imaging.format_selector import select_format
from imaging.inspector import inspect
from imaging.models import (
    ImageMetadata,
    ProcessedImage,
    ProcessingOptions,
    ResponsiveSetReport,
    ResponsiveSizeResult,
    ResponsiveSizeSpec,
    ValidationResult,
    VariantFailure,
)
from imaging.responsive import generate, generate_report
from imaging.transformer import process
from imaging.validator import validate

__all__ = [
    "DecodeError",
    "ImagePipelineError",
    "PixelLimitError",
    "ProcessingError",
    "ImageMetadata",
    "ProcessedImage",
    "ProcessingOptions",
    "ResponsiveSetReport",
    "ResponsiveSizeResult",
    "ResponsiveSizeSpec",
    "ValidationResult",
    "VariantFailure",
    "inspect",
    "validate",
    "process",
    "select_format",
    "generate",
    "generate_report",
    "generate_filename",
]
