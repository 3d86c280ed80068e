from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from photo_studio.config import get_settings
from photo_studio.schemas import PresignPutRequest, PresignPutResponse
from photo_studio.services.r2_client import StorageError, make_key, presign_put_url, public_url_for
from photo_studio.services.storage_bridge import UPLOAD_FOLDER

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/r2", tags=["r2"])


@router.post("/presign-put", response_model=PresignPutResponse)
def presign_put(req: PresignPutRequest) -> PresignPutResponse:
    """Hand the browser a short-lived URL to upload one pending image directly."""

    studio = get_settings().studio
    if studio.upload_allowed_mime and req.content_type not in studio.upload_allowed_mime:
        raise HTTPException(status_code=415, detail=f"content_type not allowed: {req.content_type}")
    if studio.upload_max_bytes and req.size and req.size > studio.upload_max_bytes:
        raise HTTPException(status_code=413, detail="file exceeds permitted size")

    key = make_key(req.folder or UPLOAD_FOLDER, req.filename)
    public_url = public_url_for(key)
    if not public_url:
        raise HTTPException(status_code=503, detail="S3_PUBLIC_BASE is not configured")
    try:
        upload_url = presign_put_url(key, req.content_type)
    except StorageError as exc:
        logger.warning("presign failed for %s: %s", key, exc)
        raise HTTPException(status_code=503, detail=f"presign failed: {exc}") from exc
    return PresignPutResponse(key=key, upload_url=upload_url, public_url=public_url)
