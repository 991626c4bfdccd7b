"""Collision-resistant artifact names."""

from __future__ import annotations

import os
import re
import threading
import time
import uuid
from typing import Optional

MAX_FILENAME_LENGTH = 150
DEFAULT_EXTENSION = "jpeg"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_UNSAFE_EXT_CHARS = re.compile(r"[^a-z0-9]")
_EXTENSION_ALIASES = {
    "jpg": "jpeg",
    "jpe": "jpeg",
    "jfif": "jpeg",
    "tif": "tiff",
}

# Last timestamp handed out; names never go backwards in time.
_clock_lock = threading.Lock()
_last_stamp = 0


def canonical_format(value: str) -> str:
    """Normalise a format or extension name, e.g. ``.JPG`` -> ``jpeg``."""
    ext = _UNSAFE_EXT_CHARS.sub("", value.strip().lower().lstrip("."))
    return _EXTENSION_ALIASES.get(ext, ext)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _unique_token() -> str:
    global _last_stamp
    with _clock_lock:
        stamp = max(_now_ms(), _last_stamp)
        _last_stamp = stamp
    short = uuid.uuid4().hex[:8]
    return f"{stamp}_{short}"


def generate_filename(original_name: str, format: Optional[str] = None) -> str:
    """Build a safe, unique filename for a stored image.

    The original extension is dropped and every character outside
    ``[A-Za-z0-9_-]`` is replaced by ``_``. A millisecond timestamp and a
    random token keep two names generated back to back distinct. The
    extension comes from ``format`` when given, otherwise from the original
    name. Overlong names lose the tail of their base name only.

    >>> generate_filename("holiday photo.JPG")  # doctest: +SKIP
    'holiday_photo_1752600000000_3f9a0c1b.jpeg'
    """
    stem, ext = os.path.splitext(original_name)
    base = _UNSAFE_CHARS.sub("_", stem) or "image"

    extension = canonical_format(format) if format else canonical_format(ext)
    extension = extension or DEFAULT_EXTENSION

    tail = f"_{_unique_token()}.{extension}"
    room = max(1, MAX_FILENAME_LENGTH - len(tail))
    return base[:room] + tail
