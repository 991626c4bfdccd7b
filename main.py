import base64
import binascii
import logging
import os
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from imaging import (
    ProcessingError,
    ProcessingOptions,
    generate_filename,
    generate_report,
    process,
    select_format,
    validate,
)
from imaging.config import DEFAULT_RESPONSIVE_SIZES, ImageConfig, load_config
from imaging.filenames import canonical_format

# --- Environment & Config ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("main")

# --- App Init ---
app = FastAPI(title="Image pipeline")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # adjust in prod
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("[startup] image pipeline ready (log level %s)", LOG_LEVEL)


async def _read_upload(file: Optional[UploadFile], data_url: Optional[str], config: ImageConfig) -> bytes:
    """Return upload bytes from a multipart file or a base64 data URL."""
    try:
        raw_data = await file.read() if file else (
            base64.b64decode(data_url.split(",", 1)[1], validate=True) if data_url else None
        )
    except (IndexError, binascii.Error):
        raise HTTPException(status_code=400, detail="Malformed data URL.")
    if not raw_data:
        raise HTTPException(status_code=400, detail="No image data provided.")
    if len(raw_data) > config.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {config.max_upload_bytes // 1024 // 1024}MB",
        )
    return raw_data


async def _require_valid(raw_data: bytes, config: ImageConfig) -> None:
    result = await run_in_threadpool(validate, raw_data, config)
    if not result.is_valid:
        raise HTTPException(status_code=400, detail=result.error or "Invalid image file")


def _data_url(fmt: str, data: bytes) -> str:
    return f"data:image/{fmt};base64,{base64.b64encode(data).decode()}"


def _stem(filename: Optional[str]) -> str:
    return os.path.splitext(filename or "upload")[0] or "upload"


# --- Image Endpoints ---
@app.post("/images/validate")
async def validate_image_endpoint(
    data_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    config: ImageConfig = Depends(load_config),
):
    raw_data = await _read_upload(file, data_url, config)
    result = await run_in_threadpool(validate, raw_data, config)
    return result.model_dump()


@app.post("/images/format")
async def optimal_format_endpoint(
    data_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    config: ImageConfig = Depends(load_config),
):
    raw_data = await _read_upload(file, data_url, config)
    return {"format": await run_in_threadpool(select_format, raw_data)}


@app.post("/images/process")
async def process_image_endpoint(
    data_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    quality: Optional[int] = Form(None),
    max_width: Optional[int] = Form(None),
    max_height: Optional[int] = Form(None),
    format: Optional[str] = Form(None),
    config: ImageConfig = Depends(load_config),
):
    """Validate, optimise and name a single uploaded image.

    When no ``format`` is requested the format selector picks one from the
    image content. Bounds default to the configured maximum size. The
    encoded image is returned inline as a data URL together with the
    filename it should be stored under.
    """
    raw_data = await _read_upload(file, data_url, config)
    await _require_valid(raw_data, config)

    target_format = canonical_format(format) if format else await run_in_threadpool(select_format, raw_data)
    try:
        options = ProcessingOptions(
            max_width=config.max_width if max_width is None else max_width,
            max_height=config.max_height if max_height is None else max_height,
            quality=quality,
            format=target_format,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid processing options: {exc.error_count()} error(s)")

    try:
        processed = await run_in_threadpool(process, raw_data, options, config)
    except ProcessingError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    info = processed.info
    return {
        "filename": generate_filename((file.filename if file else None) or "upload", info.format),
        "format": info.format,
        "width": info.width,
        "height": info.height,
        "size_bytes": info.size_bytes,
        "data_url": _data_url(info.format, processed.buffer),
    }


@app.post("/images/responsive")
async def responsive_images_endpoint(
    data_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    config: ImageConfig = Depends(load_config),
):
    """Build the default thumbnail/medium/large set for an upload.

    Variants that fail are listed under ``failed``; the request still
    succeeds as long as the upload itself is valid.
    """
    raw_data = await _read_upload(file, data_url, config)
    await _require_valid(raw_data, config)

    report = await run_in_threadpool(generate_report, raw_data, DEFAULT_RESPONSIVE_SIZES, None, None, config)
    stem = _stem(file.filename if file else None)
    variants = [
        {
            "suffix": variant.suffix,
            "filename": generate_filename(f"{stem}_{variant.suffix}", variant.info.format),
            "format": variant.info.format,
            "width": variant.info.width,
            "height": variant.info.height,
            "size_bytes": variant.info.size_bytes,
            "data_url": _data_url(variant.info.format, variant.buffer),
        }
        for variant in report.results
    ]
    return {"variants": variants, "failed": [failure.suffix for failure in report.failures]}
