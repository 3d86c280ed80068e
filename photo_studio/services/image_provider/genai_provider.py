from __future__ import annotations

import base64
import logging
from typing import Any, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from photo_studio.config import GenAIConfig, get_settings
from photo_studio.services.image_utils import detect_mime_type
from photo_studio.studio.constants import ASPECT_RATIO

from .base import ImageGenerationError

log = logging.getLogger(__name__)


class GenAIImageService:
    """Reference-image + prompt generation through the google-genai SDK."""

    def __init__(self, config: GenAIConfig | None = None, *, client: Any = None) -> None:
        config = config or get_settings().genai
        if client is None:
            if not config.api_key:
                raise RuntimeError("GOOGLE_AI_API_KEY is not configured")
            client = genai.Client(
                api_key=config.api_key,
                http_options=types.HttpOptions(timeout=config.timeout_seconds * 1000),
            )
        self.client = client
        self.model = config.image_model
        log.info("[genai.model] ready name=%s", self.model)

    async def generate(
        self,
        reference_image: bytes,
        prompt: str,
        *,
        mime_type: Optional[str] = None,
    ) -> bytes:
        mime = mime_type or detect_mime_type(reference_image, "image/png")
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_bytes(data=reference_image, mime_type=mime),
                    prompt,
                ],
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"],
                    image_config=types.ImageConfig(aspect_ratio=ASPECT_RATIO),
                ),
            )
        except genai_errors.APIError as exc:
            raise ImageGenerationError(
                f"google-genai request failed: {exc}", status_code=getattr(exc, "code", None)
            ) from exc

        return _extract_image_bytes(response)


def _extract_image_bytes(response: Any) -> bytes:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        raise ImageGenerationError("google-genai returned no candidates")

    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline_data = getattr(part, "inline_data", None)
        data = getattr(inline_data, "data", None)
        if isinstance(data, (bytes, bytearray)) and data:
            return bytes(data)
        if isinstance(data, str) and data:
            return base64.b64decode(data)

    raise ImageGenerationError("google-genai did not return an image")
