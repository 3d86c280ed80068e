"""Upload pending media and append the resulting references to a sequence."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence

from photo_studio.media.pending_store import PendingMediaItem, PendingResourceStore
from photo_studio.services.storage_bridge import UPLOAD_FOLDER, store_image_and_url

logger = logging.getLogger(__name__)

Uploader = Callable[[PendingMediaItem], Awaitable[str]]


def r2_uploader(folder: str = UPLOAD_FOLDER) -> Uploader:
    """Uploader that stores each item's original bytes in R2 and returns its URL."""

    async def _upload(item: PendingMediaItem) -> str:
        stored = await asyncio.to_thread(
            store_image_and_url,
            item.raw_bytes,
            filename=item.filename,
            content_type=item.content_type,
            folder=folder,
            item_id=item.id,
        )
        return stored["url"]

    return _upload


async def commit_pending(
    store: PendingResourceStore,
    references: Sequence[str],
    uploader: Uploader,
) -> List[str]:
    """Upload every pending item concurrently and return the extended sequence.

    Only the items pending when the call starts are uploaded; anything added
    while the uploads run stays pending, and anything removed meanwhile is not
    appended.  Every upload settles before the first failure is re-raised;
    on failure nothing is appended and the store keeps its pending items so
    the caller can retry.
    """

    items = store.items
    if not items:
        return list(references)

    results = await asyncio.gather(*(uploader(item) for item in items), return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result

    uploaded = [ref for item, ref in zip(items, results) if store.get(item.id) is item]
    for item in items:
        store.remove(item.id)
    updated = [*references, *uploaded]
    store.mirror_committed(updated)
    logger.info("committed pending media", extra={"uploaded": len(uploaded), "total": len(updated)})
    return updated
