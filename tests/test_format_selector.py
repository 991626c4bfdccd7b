from imaging.format_selector import select_format


def test_opaque_image_prefers_jpeg(make_image):
    assert select_format(make_image(100, 100, "jpeg")) == "jpeg"
    assert select_format(make_image(100, 100, "png")) == "jpeg"


def test_transparent_png_prefers_webp(make_image):
    assert select_format(make_image(100, 100, "png", mode="RGBA", color=(0, 0, 0, 0))) == "webp"


def test_palette_transparency_prefers_webp(make_image):
    assert select_format(make_image(10, 10, "png", mode="P", color=0, transparency=0)) == "webp"


def test_alpha_presence_is_enough_by_default(make_image):
    opaque_rgba = make_image(10, 10, "png", mode="RGBA", color=(1, 2, 3, 255))
    assert select_format(opaque_rgba) == "webp"


def test_alpha_usage_check_ignores_opaque_alpha(make_image):
    opaque_rgba = make_image(10, 10, "png", mode="RGBA", color=(1, 2, 3, 255))
    translucent = make_image(10, 10, "png", mode="RGBA", color=(1, 2, 3, 128))
    assert select_format(opaque_rgba, check_alpha_usage=True) == "jpeg"
    assert select_format(translucent, check_alpha_usage=True) == "webp"


def test_alpha_usage_check_on_truncated_data_falls_back(make_image):
    data = make_image(300, 300, "png", mode="RGBA", color=(9, 9, 9, 10))
    assert select_format(data[: len(data) // 2], check_alpha_usage=True) == "jpeg"


def test_unreadable_input_falls_back_to_jpeg(corrupt_buffer):
    assert select_format(corrupt_buffer) == "jpeg"
    assert select_format(b"") == "jpeg"
    assert select_format(None) == "jpeg"
