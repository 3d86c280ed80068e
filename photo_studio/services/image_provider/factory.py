"""Image provider factory dedicated to google-genai."""
from __future__ import annotations

from typing import Optional

from .genai_provider import GenAIImageService

_PROVIDER: Optional[GenAIImageService] = None


def get_provider() -> GenAIImageService:
    """Return the cached google-genai image provider instance."""

    global _PROVIDER
    if _PROVIDER is None:
        _PROVIDER = GenAIImageService()
    return _PROVIDER
