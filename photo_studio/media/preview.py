"""Ephemeral preview handles for media that has not been uploaded yet."""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Dict

from photo_studio.config import get_settings
from photo_studio.services.image_utils import make_thumbnail


class ReleasedHandleError(LookupError):
    """Raised when a preview handle is read or released after release."""


@dataclass(frozen=True)
class PreviewHandle:
    token: str

    def __str__(self) -> str:
        return self.token


class PreviewRegistry:
    """Allocates display-only thumbnails and tracks which are still live."""

    def __init__(self, max_edge: int | None = None) -> None:
        self.max_edge = max_edge or get_settings().studio.preview_max_edge
        self._live: Dict[str, bytes] = {}

    @property
    def live_count(self) -> int:
        return len(self._live)

    def is_live(self, handle: PreviewHandle) -> bool:
        return handle.token in self._live

    def allocate(self, raw_bytes: bytes) -> PreviewHandle:
        thumbnail = make_thumbnail(raw_bytes, self.max_edge)
        handle = PreviewHandle(token=f"preview://{uuid.uuid4().hex}")
        self._live[handle.token] = thumbnail
        return handle

    def read(self, handle: PreviewHandle) -> bytes:
        try:
            return self._live[handle.token]
        except KeyError:
            raise ReleasedHandleError(f"preview handle {handle} was released") from None

    def release(self, handle: PreviewHandle) -> None:
        if self._live.pop(handle.token, None) is None:
            raise ReleasedHandleError(f"preview handle {handle} was already released")
