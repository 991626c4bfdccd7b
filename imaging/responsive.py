"""Responsive variant sets.

A responsive set is produced by running the transformer once per named
bounding box. Targets are independent, so they are encoded concurrently on
a small thread pool (Pillow releases the GIL while decoding, resampling and
encoding). The pool size caps peak memory because every worker holds a
fully decoded copy of the source.

A failed target never affects the others. It is logged and left out of the
results; callers look at which suffixes came back to see what succeeded.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional

from imaging import transformer
from imaging.config import ImageConfig, load_config
from imaging.inspector import ensure_bytes
from imaging.models import (
    ProcessedImage,
    ProcessingOptions,
    ResponsiveSetReport,
    ResponsiveSizeResult,
    ResponsiveSizeSpec,
    VariantFailure,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Outcome:
    spec: ResponsiveSizeSpec
    processed: Optional[ProcessedImage] = None
    error: Optional[str] = None


def _render_variant(
    data: bytes,
    spec: ResponsiveSizeSpec,
    base: ProcessingOptions,
    config: ImageConfig,
) -> _Outcome:
    options = ProcessingOptions(
        max_width=spec.width,
        max_height=spec.height,
        quality=base.quality,
        format=base.format,
    )
    try:
        processed = transformer.process(data, options, config)
    except Exception as exc:  # one bad target must not sink the set
        logger.warning("[responsive] %s variant (%dx%d) failed: %s", spec.suffix, spec.width, spec.height, exc)
        return _Outcome(spec=spec, error=str(exc) or type(exc).__name__)
    return _Outcome(spec=spec, processed=processed)


def generate_report(
    buffer: bytes,
    specs: Iterable[ResponsiveSizeSpec],
    options: Optional[ProcessingOptions] = None,
    max_workers: Optional[int] = None,
    config: Optional[ImageConfig] = None,
) -> ResponsiveSetReport:
    """Render every target and report successes and failures separately.

    Args:
        buffer: Raw source image bytes.
        specs: Named bounding boxes, in the order results should come back.
        options: Format and quality shared by every variant. Their bounds
            are ignored; each target supplies its own.
        max_workers: Concurrency limit; defaults to the configured value.
        config: Pipeline settings; read from the environment when omitted.

    Returns:
        A ``ResponsiveSetReport`` with results in input order.
    """
    data = ensure_bytes(buffer)
    specs = list(specs)
    if not specs:
        return ResponsiveSetReport()

    config = config or load_config()
    base = options or ProcessingOptions()
    workers = max(1, min(max_workers or config.responsive_workers, len(specs)))

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="responsive") as pool:
        # map() yields in submission order, so outcomes line up with specs.
        outcomes = list(pool.map(lambda spec: _render_variant(data, spec, base, config), specs))

    report = ResponsiveSetReport()
    for outcome in outcomes:
        if outcome.processed is not None:
            report.results.append(
                ResponsiveSizeResult(
                    suffix=outcome.spec.suffix,
                    buffer=outcome.processed.buffer,
                    info=outcome.processed.info,
                )
            )
        else:
            report.failures.append(VariantFailure(suffix=outcome.spec.suffix, error=outcome.error or "unknown error"))

    if report.failures:
        logger.warning(
            "[responsive] partial failure: %d of %d variants failed (%s)",
            len(report.failures),
            len(specs),
            ", ".join(failure.suffix for failure in report.failures),
        )
    return report


def generate(
    buffer: bytes,
    specs: Iterable[ResponsiveSizeSpec],
    options: Optional[ProcessingOptions] = None,
    max_workers: Optional[int] = None,
    config: Optional[ImageConfig] = None,
) -> List[ResponsiveSizeResult]:
    """Render every target and return only the variants that succeeded."""
    return generate_report(buffer, specs, options=options, max_workers=max_workers, config=config).results
