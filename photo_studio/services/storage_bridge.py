"""Store committed studio media in R2 and describe where it landed."""
from __future__ import annotations

import mimetypes
from typing import Any, Dict, Optional

from photo_studio.services.r2_client import make_key, put_bytes

UPLOAD_FOLDER = "studio/uploads"


def store_image_and_url(
    data: bytes,
    *,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    folder: str = UPLOAD_FOLDER,
    item_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Persist *data* to R2 and return ``{"key", "url", "content_type"}``.

    Raises ``StorageError`` when the upload does not complete.
    """

    if not isinstance(data, (bytes, bytearray)) or not data:
        raise TypeError("image payload must be non-empty bytes")

    ct = content_type or "image/png"
    name = filename or f"image{mimetypes.guess_extension(ct) or '.png'}"
    key = make_key(folder, name, item_id=item_id)
    url = put_bytes(key, bytes(data), content_type=ct)
    return {"key": key, "url": url, "content_type": ct}
