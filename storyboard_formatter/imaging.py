## storyboard_formatter/imaging.py

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageOps

from storyboard_formatter.config import ImportConfig
from storyboard_formatter.errors import DecodeError

logger = logging.getLogger(__name__)

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<payload>.*)$", re.S)

_DECODE_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)


@dataclass(frozen=True)
class NormalizedImage:
    data_url: str
    width: int
    height: int
    mime_type: str


def encode_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(url: str) -> Tuple[str, bytes]:
    """Split a base64 data URL into (mime type, raw bytes)."""
    m = _DATA_URL.match(url or "")
    if not m:
        raise DecodeError("not a base64 data URL")
    try:
        payload = base64.b64decode(m.group("payload"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"invalid base64 payload: {e}") from e
    return m.group("mime") or "application/octet-stream", payload


def open_image(data: bytes) -> Image.Image:
    """Decode bytes eagerly so corrupt payloads fail here rather than at draw time."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except _DECODE_ERRORS as e:
        raise DecodeError(f"cannot decode image: {e}") from e
    return img


def open_data_url(url: str) -> Image.Image:
    _, data = decode_data_url(url)
    return open_image(data)


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Downscale-only bound, aspect ratio preserved."""
    if width <= max_width and height <= max_height:
        return width, height
    ratio = min(max_width / width, max_height / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


class ImageNormalizer:
    """Turns uploaded image bytes into the canonical embedded form stored on a panel."""

    def __init__(self, config: Optional[ImportConfig] = None):
        self.config = config or ImportConfig()

    def normalize(self, data: bytes, mime_type: str) -> NormalizedImage:
        img = open_image(data)
        try:
            img = ImageOps.exif_transpose(img)
        except _DECODE_ERRORS as e:
            raise DecodeError(f"cannot apply orientation: {e}") from e

        size = fit_within(img.width, img.height, self.config.max_width, self.config.max_height)
        if size != img.size:
            logger.debug("Downscaling %sx%s -> %sx%s", img.width, img.height, *size)
            if img.mode not in ("RGB", "RGBA", "L", "LA"):
                img = img.convert("RGBA")
            img = img.resize(size, Image.LANCZOS)

        buf = io.BytesIO()
        if mime_type == "image/png":
            if img.mode not in ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"):
                img = img.convert("RGBA")
            img.save(buf, format="PNG", optimize=False)
            out_mime = "image/png"
        else:
            img.convert("RGB").save(buf, format="JPEG", quality=self.config.jpeg_quality, subsampling=0)
            out_mime = "image/jpeg"

        return NormalizedImage(
            data_url=encode_data_url(buf.getvalue(), out_mime),
            width=img.width,
            height=img.height,
            mime_type=out_mime,
        )


def image_to_png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
