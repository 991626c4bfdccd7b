import re

import pytest

from imaging import filenames
from imaging.filenames import MAX_FILENAME_LENGTH, canonical_format, generate_filename


def test_generates_unique_names():
    first = generate_filename("test.jpg")
    second = generate_filename("test.jpg")
    assert first != second
    pattern = re.compile(r"^test_\d+_[a-z0-9]+\.jpeg$")
    assert pattern.match(first)
    assert pattern.match(second)


def test_custom_format():
    assert re.match(r"^test_\d+_[a-z0-9]+\.png$", generate_filename("test.jpg", "png"))


def test_each_special_character_becomes_underscore():
    assert re.match(r"^test___file_\d+_[a-z0-9]+\.jpeg$", generate_filename("test@#$file.jpg"))
    assert re.match(r"^test_________file_\d+_[a-z0-9]+\.jpeg$", generate_filename("test@#$%^&*()file.jpg"))


def test_keeps_case_dashes_and_underscores():
    assert generate_filename("My-Photo_v2.png").startswith("My-Photo_v2_")


def test_long_names_are_truncated_but_recognisable():
    filename = generate_filename("a" * 300 + ".jpg")
    assert len(filename) <= MAX_FILENAME_LENGTH
    assert filename.startswith("aaaa")
    assert re.search(r"_\d+_[a-z0-9]+\.jpeg$", filename)


def test_short_names_are_not_truncated():
    assert generate_filename("a" * 100 + ".jpg").startswith("a" * 100 + "_")


def test_only_last_extension_is_stripped():
    assert re.match(r"^archive_tar_\d+_[a-z0-9]+\.gz$", generate_filename("archive.tar.gz"))


@pytest.mark.parametrize(
    "name,expected_ext",
    [("photo.JPG", "jpeg"), ("scan.tif", "tiff"), ("README", "jpeg"), ("pic.webp", "webp")],
)
def test_extension_from_original_name(name, expected_ext):
    assert generate_filename(name).endswith("." + expected_ext)


def test_empty_name_gets_placeholder():
    assert re.match(r"^image_\d+_[a-z0-9]+\.jpeg$", generate_filename(""))


@pytest.mark.parametrize("value,expected", [("jpg", "jpeg"), (".JPEG", "jpeg"), ("PNG", "png"), ("Tif", "tiff")])
def test_canonical_format(value, expected):
    assert canonical_format(value) == expected


def test_timestamp_never_goes_backwards(monkeypatch):
    readings = iter([5_000, 4_000, 6_000])
    monkeypatch.setattr(filenames, "_last_stamp", 0)
    monkeypatch.setattr(filenames, "_now_ms", lambda: next(readings))

    stamps = [int(generate_filename("clock.png").split("_")[1]) for _ in range(3)]
    assert stamps == [5_000, 5_000, 6_000]
