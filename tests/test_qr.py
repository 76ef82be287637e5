import io

import pytest
from PIL import Image

from scan2dine.core.exceptions import EncodingError
from scan2dine.services.qr import (
    PNG_SIGNATURE,
    download_qr_code,
    generate_qr_code,
    public_menu_url,
    qr_filename,
)

MENU_URL = "https://scan2dine.example/menu/abc123"


def _size(png: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(png)) as img:
        return img.size


def test_default_size_is_300px_png():
    image = generate_qr_code(MENU_URL)

    assert image.png.startswith(PNG_SIGNATURE)
    assert (image.width, image.height) == (300, 300)
    assert _size(image.png) == (300, 300)
    assert image.url == MENU_URL
    assert image.data_url.startswith("data:image/png;base64,")


def test_width_override():
    assert _size(generate_qr_code(MENU_URL, {"width": 512}).png) == (512, 512)


def test_default_colors_are_black_on_white():
    image = generate_qr_code(MENU_URL)
    with Image.open(io.BytesIO(image.png)) as img:
        colors = {color for _, color in img.convert("RGB").getcolors(maxcolors=1024)}
    assert colors == {(0, 0, 0), (255, 255, 255)}


def test_corner_is_quiet_zone():
    with Image.open(io.BytesIO(generate_qr_code(MENU_URL).png)) as img:
        assert img.convert("RGB").getpixel((0, 0)) == (255, 255, 255)


@pytest.mark.parametrize("url,options", [
    ("", None),
    (MENU_URL, {"width": 0}),
    (MENU_URL, {"color": {"dark": "black"}}),
    ("x" * 5000, {"error_correction": "H"}),
])
def test_encoding_errors(url, options):
    with pytest.raises(EncodingError):
        generate_qr_code(url, options)


def test_download_names_png():
    download = download_qr_code(generate_qr_code(MENU_URL), "chez-nous-menu-qr")

    assert download.filename == "chez-nous-menu-qr.png"
    assert download.media_type == "image/png"
    assert download.content.startswith(PNG_SIGNATURE)


def test_download_accepts_data_url():
    image = generate_qr_code(MENU_URL)
    assert download_qr_code(image.data_url).content == image.png


@pytest.mark.parametrize("bad", [b"", b"GIF89a....", "not a data url", "data:image/png;base64,@@@"])
def test_download_fails_silently(bad):
    assert download_qr_code(bad) is None


def test_public_menu_url():
    assert public_menu_url("https://host/", "r1") == "https://host/menu/r1"


@pytest.mark.parametrize("name,expected", [
    ("Café Olé!", "Cafe-Ole-menu-qr"),
    ("  The  Green Fork ", "The-Green-Fork-menu-qr"),
    (None, "restaurant-menu-qr"),
    ("???", "restaurant-menu-qr"),
])
def test_qr_filename(name, expected):
    assert qr_filename(name) == expected


def test_overflow_is_reported_as_encoding_error():
    with pytest.raises(EncodingError) as exc_info:
        generate_qr_code("x" * 5000, {"error_correction": "H"})
    assert exc_info.value.code == "data_overflow"


def test_width_below_one_pixel_per_module_is_rejected():
    with pytest.raises(EncodingError) as exc_info:
        generate_qr_code(MENU_URL, {"width": 20})
    assert exc_info.value.code == "width_too_small"


def test_smallest_width_keeps_every_module():
    # 37-char URL at level M is a version 3 symbol: 29 modules plus a 2-module border each side
    image = generate_qr_code(MENU_URL, {"width": 33, "margin": 2})
    assert _size(image.png) == (33, 33)
