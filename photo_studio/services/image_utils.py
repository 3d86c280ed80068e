"""Pillow helpers for inspecting and downscaling uploaded images."""
from __future__ import annotations

import base64
import binascii
from io import BytesIO

from PIL import Image, UnidentifiedImageError

_FORMAT_MIME = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


def detect_mime_type(data: bytes, default: str | None = None) -> str | None:
    """Return the MIME type Pillow recognises for *data*, or *default*."""

    try:
        with Image.open(BytesIO(data)) as image:
            fmt = (image.format or "").upper()
    except (UnidentifiedImageError, OSError):
        return default
    return _FORMAT_MIME.get(fmt, default)


def make_thumbnail(data: bytes, max_edge: int) -> bytes:
    """Downscale *data* so its longest edge is at most *max_edge*; PNG output."""

    with Image.open(BytesIO(data)) as image:
        image.load()
        thumb = image.convert("RGBA") if image.mode not in {"RGB", "RGBA"} else image.copy()
    thumb.thumbnail((max_edge, max_edge))
    buffer = BytesIO()
    thumb.save(buffer, format="PNG")
    return buffer.getvalue()


def decode_base64_image(payload: str) -> bytes:
    """Decode a raw or ``data:`` URL base64 payload into bytes."""

    text = (payload or "").strip()
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("image payload is not valid base64") from exc


def encode_base64_image(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")
