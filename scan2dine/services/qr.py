"""
QR Code Generation

Wraps the `qrcode` encoder: turns the public menu URL into a square PNG
and packages it as a download.

Defaults match what owners print on table cards: 300px, a 2-module quiet
zone, black on white, error correction level M.

Usage:
    from scan2dine.services.qr import generate_qr_code, download_qr_code

    image = generate_qr_code("https://example.com/menu/abc123")
    download = download_qr_code(image, qr_filename("Chez Nous"))
"""

import base64
import binascii
import io
import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Literal, Optional, Union

import qrcode
from PIL import Image
from pydantic import BaseModel, Field, ValidationError, field_validator
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage

from scan2dine.core.config import get_settings
from scan2dine.core.exceptions import EncodingError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
DATA_URL_PREFIX = "data:image/png;base64,"

_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


class QRColor(BaseModel):
    dark: str = "#000000"
    light: str = "#FFFFFF"

    @field_validator("dark", "light")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not _COLOR.match(v):
            raise ValueError("Colors must be hex: #RGB, #RRGGBB or #RRGGBBAA")
        return v


class QRCodeOptions(BaseModel):
    """Recognized encoder options; unknown keys are ignored."""

    width: int = Field(default_factory=lambda: get_settings().qr_default_width, gt=0, le=4096)
    margin: int = Field(default_factory=lambda: get_settings().qr_default_margin, ge=0, le=40)
    color: QRColor = Field(default_factory=QRColor)
    error_correction: Literal["L", "M", "Q", "H"] = "M"


@dataclass
class QRCodeImage:
    """
    Generated QR code.

    Attributes:
        png: Encoded PNG bytes
        width: Image width in pixels
        height: Image height in pixels
        url: The encoded payload
    """
    png: bytes
    width: int
    height: int
    url: str

    @property
    def data_url(self) -> str:
        """PNG as a data: URL, ready for an <img src>."""
        return DATA_URL_PREFIX + base64.b64encode(self.png).decode("ascii")


@dataclass
class QRDownload:
    """A QR image packaged as a file attachment."""
    filename: str
    content: bytes
    media_type: str = "image/png"


def public_menu_url(origin: str, restaurant_id: str) -> str:
    """Canonical public menu address encoded in the QR code."""
    return f"{origin.rstrip('/')}/menu/{restaurant_id}"


def generate_qr_code(
    url: str,
    options: Optional[Union[QRCodeOptions, dict[str, Any]]] = None,
) -> QRCodeImage:
    """
    Encode a URL as a square PNG.

    Args:
        url: Payload to encode
        options: {"width", "margin", "color": {"dark", "light"},
            "error_correction"}; missing keys use the defaults

    Returns:
        QRCodeImage of exactly width x width pixels

    Raises:
        EncodingError: Empty payload, payload beyond the symbol's capacity
            at the chosen error correction level, a width below one pixel
            per module, or invalid options
    """
    if not url:
        raise EncodingError("Nothing to encode", code="empty_payload")

    try:
        opts = options if isinstance(options, QRCodeOptions) else QRCodeOptions.model_validate(options or {})
    except ValidationError as e:
        raise EncodingError(f"Invalid QR options: {e.errors()[0]['msg']}", code="invalid_options") from e

    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION_LEVELS[opts.error_correction],
        box_size=1,
        border=opts.margin,
        image_factory=PilImage,
    )
    qr.add_data(url)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        # Newer qrcode releases signal overflow with a bare ValueError from best_fit
        logger.error(f"QR payload too large ({len(url)} chars) for level {opts.error_correction}")
        raise EncodingError(
            "Data too long for a QR code at this error correction level",
            code="data_overflow",
        ) from e

    # Render at the largest whole box size that fits, then scale to the exact width
    total_modules = qr.modules_count + 2 * opts.margin
    if opts.width < total_modules:
        raise EncodingError(
            f"Width {opts.width}px is too small for {total_modules} modules",
            code="width_too_small",
        )
    qr.box_size = opts.width // total_modules
    rendered = qr.make_image(fill_color=opts.color.dark, back_color=opts.color.light)

    buffer = io.BytesIO()
    rendered.save(buffer)
    buffer.seek(0)
    with Image.open(buffer) as img:
        img = img.convert("RGB")
        if img.size != (opts.width, opts.width):
            img = img.resize((opts.width, opts.width), Image.Resampling.NEAREST)
        out = io.BytesIO()
        img.save(out, format="PNG")

    logger.debug(f"QR code generated for {url} ({opts.width}px, version {qr.version})")
    return QRCodeImage(png=out.getvalue(), width=opts.width, height=opts.width, url=url)


def _png_bytes(image_data: Union[QRCodeImage, bytes, str]) -> Optional[bytes]:
    if isinstance(image_data, QRCodeImage):
        return image_data.png
    if isinstance(image_data, bytes):
        return image_data
    if isinstance(image_data, str) and image_data.startswith(DATA_URL_PREFIX):
        try:
            return base64.b64decode(image_data[len(DATA_URL_PREFIX):], validate=True)
        except binascii.Error:
            return None
    return None


def download_qr_code(
    image_data: Union[QRCodeImage, bytes, str],
    filename: str = "menu-qr-code",
) -> Optional[QRDownload]:
    """
    Package a generated QR code as `<filename>.png`.

    Accepts a QRCodeImage, raw PNG bytes, or a PNG data URL. Anything that
    is not a PNG yields None; the problem is logged, not raised.
    """
    png = _png_bytes(image_data)
    if not png or not png.startswith(PNG_SIGNATURE):
        logger.warning(f"Ignoring QR download '{filename}': image data is not a PNG")
        return None
    return QRDownload(filename=f"{filename}.png", content=png)


def qr_filename(restaurant_name: Optional[str]) -> str:
    """
    Base filename for a restaurant's QR download.

    Example:
        >>> qr_filename("Café Olé!")
        'Cafe-Ole-menu-qr'
        >>> qr_filename(None)
        'restaurant-menu-qr'
    """
    name = unicodedata.normalize("NFKD", restaurant_name or "")
    name = name.encode("ascii", "ignore").decode("ascii")
    name = re.sub(r"[^A-Za-z0-9_\- ]+", "", name).strip()
    name = re.sub(r"[\s\-]+", "-", name)
    return f"{name or 'restaurant'}-menu-qr"
