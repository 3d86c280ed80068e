"""Session-scoped holder for media selected by the user but not yet uploaded.

A :class:`PendingResourceStore` is created per editing session and owns one
preview handle per pending item.  Items leave the store through ``remove``,
``clear`` or ``reset``; in every case the item is detached from the pending
sequence before its handle is released, so a handle can only ever be released
by the call that detached it.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from photo_studio.config import get_settings
from photo_studio.media.preview import PreviewHandle, PreviewRegistry
from photo_studio.services.image_utils import detect_mime_type

logger = logging.getLogger(__name__)


class PendingStoreError(Exception):
    """Base class for recoverable pending-store errors."""


class CapacityError(PendingStoreError):
    def __init__(self, limit: int, current: int) -> None:
        super().__init__(f"media limit reached ({current}/{limit})")
        self.limit = limit
        self.current = current


class ReorderRangeError(PendingStoreError, IndexError):
    pass


@dataclass(frozen=True)
class PendingMediaItem:
    id: str
    raw_bytes: bytes
    preview: PreviewHandle
    content_type: str
    filename: Optional[str] = None


class PendingResourceStore:
    def __init__(
        self,
        max_items: int | None = None,
        *,
        registry: PreviewRegistry | None = None,
        committed: Iterable[str] = (),
    ) -> None:
        if max_items is None:
            max_items = get_settings().studio.max_images
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self.max_items = max_items
        self.registry = registry or PreviewRegistry()
        self._pending: List[PendingMediaItem] = []
        self._committed: List[str] = list(committed)

    # ---- context manager: one store per editing session ----
    def __enter__(self) -> "PendingResourceStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.reset()

    # ---- read-only view ----
    @property
    def items(self) -> Tuple[PendingMediaItem, ...]:
        return tuple(self._pending)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def committed(self) -> Tuple[str, ...]:
        return tuple(self._committed)

    @property
    def total_count(self) -> int:
        return len(self._committed) + len(self._pending)

    def raw_payloads(self) -> List[bytes]:
        """Original bytes of every pending item, in pending order, for upload."""

        return [item.raw_bytes for item in self._pending]

    def get(self, item_id: str) -> Optional[PendingMediaItem]:
        for item in self._pending:
            if item.id == item_id:
                return item
        return None

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[PendingMediaItem]:
        return iter(tuple(self._pending))

    # ---- mutations ----
    def add(
        self,
        raw_bytes: bytes,
        item_id: str | None = None,
        *,
        filename: str | None = None,
        committed_count: int | None = None,
    ) -> str:
        """Append a pending item and allocate its preview.

        ``committed_count`` lets the caller pass the length of the persisted
        sequence it owns; otherwise the store's committed mirror is used.
        """

        committed = len(self._committed) if committed_count is None else committed_count
        current = committed + len(self._pending)
        if current >= self.max_items:
            raise CapacityError(self.max_items, current)

        if not isinstance(raw_bytes, (bytes, bytearray)) or not raw_bytes:
            raise ValueError("pending media must be non-empty bytes")
        content_type = detect_mime_type(bytes(raw_bytes))
        if content_type is None:
            raise ValueError("pending media must be an image")

        new_id = item_id or uuid.uuid4().hex[:8]
        if self.get(new_id) is not None:
            raise ValueError(f"pending item {new_id!r} already exists")

        preview = self.registry.allocate(bytes(raw_bytes))
        self._pending.append(
            PendingMediaItem(
                id=new_id,
                raw_bytes=bytes(raw_bytes),
                preview=preview,
                content_type=content_type,
                filename=filename,
            )
        )
        logger.debug("pending media added", extra={"item_id": new_id, "pending": len(self._pending)})
        return new_id

    def remove(self, item_id: str) -> None:
        for index, item in enumerate(self._pending):
            if item.id == item_id:
                detached = self._pending.pop(index)
                self.registry.release(detached.preview)
                return

    def reorder(self, from_index: int, to_index: int) -> None:
        size = len(self._pending)
        for index in (from_index, to_index):
            if not 0 <= index < size:
                raise ReorderRangeError(f"pending index {index} out of range (size={size})")
        if from_index == to_index:
            return
        reordered = list(self._pending)
        moved = reordered.pop(from_index)
        reordered.insert(to_index, moved)
        self._pending = reordered

    def clear(self) -> None:
        detached, self._pending = self._pending, []
        for item in detached:
            self.registry.release(item.preview)

    def reset(self) -> None:
        self.clear()
        self._committed = []

    # ---- committed-reference mirror ----
    def mirror_committed(self, references: Sequence[str]) -> None:
        self._committed = list(references)

    def add_committed(self, reference: str) -> None:
        self._committed = [*self._committed, reference]

    def remove_committed(self, reference: str) -> None:
        self._committed = [ref for ref in self._committed if ref != reference]

    def clear_committed(self) -> None:
        self._committed = []
