"""Pydantic models shared by the image pipeline.

Every model is created fresh for a single call and never mutated
afterwards. Buffers are plain ``bytes`` owned by the caller.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

OutputFormat = Literal["jpeg", "png", "webp"]


class ImageMetadata(BaseModel):
    """Snapshot of one decoded buffer.

    Attributes:
        format: Lowercase container name, e.g. ``jpeg`` or ``png``.
        width: Width in pixels.
        height: Height in pixels.
        channels: Number of colour bands, alpha included.
        density: Horizontal DPI when the header records it.
        size_bytes: Length of the buffer that was inspected.
        has_alpha: Whether the image carries an alpha channel or a
            transparency entry.
    """

    model_config = ConfigDict(frozen=True)

    format: str
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    channels: int = Field(ge=0)
    density: Optional[int] = None
    size_bytes: int = Field(ge=0)
    has_alpha: bool = False


class ProcessingOptions(BaseModel):
    """Knobs for a single transform.

    Absent bounds mean "no resize constraint", an absent format means "keep
    the source format" and an absent quality falls back to the configured
    default.
    """

    model_config = ConfigDict(frozen=True)

    max_width: Optional[int] = Field(None, ge=1)
    max_height: Optional[int] = Field(None, ge=1)
    quality: Optional[int] = Field(None, ge=1, le=100)
    format: Optional[OutputFormat] = None


class ProcessedImage(BaseModel):
    """Encoded output of one transform; ``info`` describes the output."""

    buffer: bytes
    info: ImageMetadata


class ValidationResult(BaseModel):
    """Outcome of validating an upload.

    Exactly one of ``metadata`` and ``error`` is set.
    """

    is_valid: bool
    metadata: Optional[ImageMetadata] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def check_exclusive(self) -> "ValidationResult":
        if self.is_valid and (self.metadata is None or self.error is not None):
            raise ValueError("valid results carry metadata and no error")
        if not self.is_valid and (self.error is None or self.metadata is not None):
            raise ValueError("invalid results carry an error and no metadata")
        return self

    @classmethod
    def ok(cls, metadata: ImageMetadata) -> "ValidationResult":
        return cls(is_valid=True, metadata=metadata)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, error=error)


class ResponsiveSizeSpec(BaseModel):
    """A named bounding box for one responsive variant.

    Attributes:
        width: Maximum variant width.
        height: Maximum variant height.
        suffix: Caller-chosen label such as ``thumbnail``.
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(ge=1)
    height: int = Field(ge=1)
    suffix: str = Field(min_length=1)


class ResponsiveSizeResult(BaseModel):
    suffix: str
    buffer: bytes
    info: ImageMetadata


class VariantFailure(BaseModel):
    suffix: str
    error: str


class ResponsiveSetReport(BaseModel):
    """Successful variants in request order, plus the targets that failed."""

    results: List[ResponsiveSizeResult] = Field(default_factory=list)
    failures: List[VariantFailure] = Field(default_factory=list)

    @property
    def suffixes(self) -> List[str]:
        return [result.suffix for result in self.results]

    @property
    def is_partial(self) -> bool:
        return bool(self.failures) and bool(self.results)
