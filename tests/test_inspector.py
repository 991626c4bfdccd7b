import pytest
from PIL import Image

from imaging.errors import DecodeError, PixelLimitError
from imaging.inspector import inspect


def test_inspect_jpeg(jpeg_200):
    meta = inspect(jpeg_200)
    assert meta.format == "jpeg"
    assert (meta.width, meta.height) == (200, 200)
    assert meta.channels == 3
    assert meta.has_alpha is False
    assert meta.size_bytes == len(jpeg_200)


def test_inspect_png_with_alpha(make_image):
    meta = inspect(make_image(40, 30, "png", mode="RGBA", color=(0, 0, 0, 0)))
    assert meta.format == "png"
    assert (meta.width, meta.height) == (40, 30)
    assert meta.channels == 4
    assert meta.has_alpha is True


def test_inspect_webp(make_image):
    meta = inspect(make_image(64, 32, "webp"))
    assert meta.format == "webp"
    assert (meta.width, meta.height) == (64, 32)


def test_inspect_reads_density(make_image):
    meta = inspect(make_image(10, 10, "jpeg", dpi=(300, 300)))
    assert meta.density == 300


def test_inspect_palette_transparency_counts_alpha(make_image):
    meta = inspect(make_image(10, 10, "png", mode="P", color=0, transparency=0))
    assert meta.channels == 4
    assert meta.has_alpha is True


def test_multi_picture_jpeg_reads_as_jpeg(mpo_jpeg):
    meta = inspect(mpo_jpeg)
    assert meta.format == "jpeg"
    assert (meta.width, meta.height) == (120, 80)


def test_pixel_guard_follows_ceiling(monkeypatch, make_image):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    data = make_image(100, 100, "png")
    assert inspect(data, max_dimension=100).width == 100
    assert Image.MAX_IMAGE_PIXELS == 1000

    with pytest.raises(PixelLimitError):
        inspect(data, max_dimension=10)


def test_inspect_accepts_bytearray(jpeg_200):
    assert inspect(bytearray(jpeg_200)).width == 200


@pytest.mark.parametrize(
    "payload",
    [b"", b"This is not an image file!", b"II*\x00", b"\x89PNG\r\n\x1a\n"],
    ids=["empty", "text", "tiff-header", "png-signature"],
)
def test_inspect_rejects_undecodable(payload):
    with pytest.raises(DecodeError):
        inspect(payload)


def test_inspect_rejects_non_bytes():
    with pytest.raises(TypeError):
        inspect("not bytes")
