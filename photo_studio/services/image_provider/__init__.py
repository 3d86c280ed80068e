"""Image generation service contract and its google-genai implementation."""
from .base import ImageGenerationError, ImageGenerationService  # noqa: F401

__all__ = ["ImageGenerationError", "ImageGenerationService"]
