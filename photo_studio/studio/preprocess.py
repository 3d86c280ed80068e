"""Background normalisation pass run once before any slot is generated."""
from __future__ import annotations

import logging
from typing import Optional

from photo_studio.services.image_provider.base import ImageGenerationError, ImageGenerationService
from photo_studio.services.image_utils import detect_mime_type
from photo_studio.studio.prompts import PREPROCESS_PROMPT

logger = logging.getLogger(__name__)


class PreprocessingError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


async def normalise_background(
    provider: ImageGenerationService,
    raw_image: bytes,
    *,
    mime_type: Optional[str] = None,
) -> bytes:
    if not raw_image:
        raise ValueError("no image supplied")
    mime = mime_type or detect_mime_type(raw_image)
    if mime is None:
        raise ValueError("uploaded file is not a supported image")

    try:
        return await provider.generate(raw_image, PREPROCESS_PROMPT, mime_type=mime)
    except ImageGenerationError as exc:
        logger.error("background normalisation failed: %s", exc)
        raise PreprocessingError(str(exc), status_code=exc.status_code) from exc
