from __future__ import annotations

import base64
from io import BytesIO
from typing import Callable

import pytest
from PIL import Image


def _png(color: tuple[int, int, int] = (200, 30, 30), size: tuple[int, int] = (64, 48)) -> bytes:
    image = Image.new("RGB", size, color)
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    return _png


@pytest.fixture
def png_b64() -> str:
    return base64.b64encode(_png()).decode("ascii")


@pytest.fixture(autouse=True)
def _fresh_settings():
    from photo_studio.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
