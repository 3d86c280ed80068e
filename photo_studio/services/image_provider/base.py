from __future__ import annotations

from typing import Optional, Protocol


class ImageGenerationError(RuntimeError):
    """A single generation call failed or returned no image."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ImageGenerationService(Protocol):
    async def generate(
        self,
        reference_image: bytes,
        prompt: str,
        *,
        mime_type: Optional[str] = None,
    ) -> bytes:
        ...
