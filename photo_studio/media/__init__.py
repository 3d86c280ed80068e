"""Pending media held during an editing session and persisted reference edits."""
from .pending_store import CapacityError, PendingMediaItem, PendingResourceStore, ReorderRangeError  # noqa: F401
from .preview import PreviewHandle, PreviewRegistry, ReleasedHandleError  # noqa: F401

__all__ = [
    "CapacityError",
    "PendingMediaItem",
    "PendingResourceStore",
    "PreviewHandle",
    "PreviewRegistry",
    "ReleasedHandleError",
    "ReorderRangeError",
]
