"""Shared fixtures for the image pipeline tests.

Images are generated in memory with Pillow so the suite needs no binary
fixtures on disk.
"""

import io

import pytest
from PIL import Image

_CONFIG_VARS = (
    "IMAGE_DEFAULT_QUALITY",
    "IMAGE_MAX_WIDTH",
    "IMAGE_MAX_HEIGHT",
    "IMAGE_MAX_DIMENSION",
    "IMAGE_ALLOWED_FORMATS",
    "IMAGE_MAX_UPLOAD_BYTES",
    "IMAGE_RESPONSIVE_WORKERS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure host settings never leak into the tests."""
    for name in _CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


def encode(img, fmt, **save_kwargs):
    buf = io.BytesIO()
    img.save(buf, format=fmt.upper(), **save_kwargs)
    return buf.getvalue()


@pytest.fixture
def make_image():
    """Factory for solid-colour test images: make_image(w, h, fmt, mode, color)."""

    def _make(width=100, height=100, fmt="jpeg", mode="RGB", color=(255, 0, 0), **save_kwargs):
        img = Image.new(mode, (width, height), color=color)
        return encode(img, fmt, **save_kwargs)

    return _make


@pytest.fixture
def noisy_image():
    """A 256x256 RGB noise image; detailed enough for quality to matter."""
    bands = [Image.effect_noise((256, 256), 64) for _ in range(3)]
    return Image.merge("RGB", bands)


@pytest.fixture
def jpeg_200(make_image):
    return make_image(200, 200, "jpeg")


@pytest.fixture
def corrupt_buffer():
    return b"This is not an image file!"


@pytest.fixture
def mpo_jpeg():
    """A two-frame JPEG with an MPF segment, as written by many phone cameras."""
    first = Image.new("RGB", (120, 80), color=(200, 30, 30))
    second = Image.new("RGB", (120, 80), color=(30, 30, 200))
    return encode(first, "mpo", save_all=True, append_images=[second])
