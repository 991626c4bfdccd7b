"""Configuration for the image pipeline.

Values are read from the host environment so that deployments can tune the
pipeline without code changes. ``load_config()`` reads the environment at
call time, which lets tests override individual variables with
``monkeypatch.setenv``.

Environment variables:
    IMAGE_DEFAULT_QUALITY: Quality used for lossy encoders when a caller
        does not pass one (default 80).
    IMAGE_MAX_WIDTH / IMAGE_MAX_HEIGHT: Default bounding box applied by the
        HTTP surface to single-image uploads (default 2048 each).
    IMAGE_MAX_DIMENSION: Largest accepted width or height, in pixels
        (default 10000).
    IMAGE_ALLOWED_FORMATS: Comma separated allow-list of container formats
        (default 'jpeg,png,webp').
    IMAGE_MAX_UPLOAD_BYTES: Largest accepted upload (default 10 MiB).
    IMAGE_RESPONSIVE_WORKERS: Upper bound on concurrent variant encodes
        (default 4).
"""

from __future__ import annotations

import os
from typing import FrozenSet, List

from pydantic import BaseModel, ConfigDict, Field

from imaging.models import ResponsiveSizeSpec

DEFAULT_QUALITY: int = 80
DEFAULT_MAX_WIDTH: int = 2048
DEFAULT_MAX_HEIGHT: int = 2048
DEFAULT_MAX_DIMENSION: int = 10_000
DEFAULT_ALLOWED_FORMATS: FrozenSet[str] = frozenset({"jpeg", "png", "webp"})
DEFAULT_MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
DEFAULT_RESPONSIVE_WORKERS: int = 4

DEFAULT_RESPONSIVE_SIZES: List[ResponsiveSizeSpec] = [
    ResponsiveSizeSpec(width=150, height=150, suffix="thumbnail"),
    ResponsiveSizeSpec(width=800, height=600, suffix="medium"),
    ResponsiveSizeSpec(width=1920, height=1080, suffix="large"),
]


class ImageConfig(BaseModel):
    """Resolved pipeline settings.

    Attributes:
        default_quality: Quality for jpeg/webp output when none is given.
        max_width: Default maximum output width for single uploads.
        max_height: Default maximum output height for single uploads.
        max_dimension: Per-side ceiling enforced by the validator.
        allowed_formats: Container formats the validator accepts.
        max_upload_bytes: Largest buffer the validator accepts.
        responsive_workers: Thread pool bound for responsive sets.
    """

    model_config = ConfigDict(frozen=True)

    default_quality: int = Field(DEFAULT_QUALITY, ge=1, le=100)
    max_width: int = Field(DEFAULT_MAX_WIDTH, ge=1)
    max_height: int = Field(DEFAULT_MAX_HEIGHT, ge=1)
    max_dimension: int = Field(DEFAULT_MAX_DIMENSION, ge=1)
    allowed_formats: FrozenSet[str] = DEFAULT_ALLOWED_FORMATS
    max_upload_bytes: int = Field(DEFAULT_MAX_UPLOAD_BYTES, ge=1)
    responsive_workers: int = Field(DEFAULT_RESPONSIVE_WORKERS, ge=1)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _formats_env(name: str, default: FrozenSet[str]) -> FrozenSet[str]:
    raw = os.getenv(name, "")
    items = {part.strip().lower() for part in raw.split(",") if part.strip()}
    return frozenset(items) if items else default


def load_config() -> ImageConfig:
    """Build an ``ImageConfig`` from the current environment.

    Raises:
        ValueError: If a numeric variable is not an integer.
        pydantic.ValidationError: If a value is out of range.
    """
    return ImageConfig(
        default_quality=_int_env("IMAGE_DEFAULT_QUALITY", DEFAULT_QUALITY),
        max_width=_int_env("IMAGE_MAX_WIDTH", DEFAULT_MAX_WIDTH),
        max_height=_int_env("IMAGE_MAX_HEIGHT", DEFAULT_MAX_HEIGHT),
        max_dimension=_int_env("IMAGE_MAX_DIMENSION", DEFAULT_MAX_DIMENSION),
        allowed_formats=_formats_env("IMAGE_ALLOWED_FORMATS", DEFAULT_ALLOWED_FORMATS),
        max_upload_bytes=_int_env("IMAGE_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
        responsive_workers=_int_env("IMAGE_RESPONSIVE_WORKERS", DEFAULT_RESPONSIVE_WORKERS),
    )
