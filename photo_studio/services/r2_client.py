"""Cloudflare R2 access for studio media (S3-compatible API via boto3)."""
from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from photo_studio.config import StorageConfig, get_settings

logger = logging.getLogger(__name__)

_UNSAFE_NAME = re.compile(r"[^0-9A-Za-z._-]")


class StorageError(RuntimeError):
    """Raised when R2 is unconfigured or rejects a request."""


def _storage() -> StorageConfig:
    storage = get_settings().storage
    if not storage.is_configured:
        raise StorageError("R2 storage is not configured")
    return storage


@lru_cache(maxsize=1)
def _client() -> BaseClient:
    storage = _storage()
    return boto3.session.Session().client(
        "s3",
        endpoint_url=storage.endpoint,
        aws_access_key_id=storage.access_key,
        aws_secret_access_key=storage.secret_key,
        region_name=storage.region,
    )


def get_client() -> BaseClient:
    """Return the cached boto3 client for Cloudflare R2."""

    return _client()


def bucket_name() -> str:
    return _storage().bucket


def make_key(folder: str, filename: str, *, item_id: Optional[str] = None) -> str:
    """``<folder>/<yyyy>/<mm>/<dd>/<id>-<name>``; ids default to a fresh uuid."""

    folder = (folder or "").strip("/ ") or "studio/uploads"
    day = datetime.now(timezone.utc).strftime("%Y/%m/%d")
    name = _UNSAFE_NAME.sub("_", (filename or "").rsplit("/", 1)[-1]) or "image"
    token = _UNSAFE_NAME.sub("_", item_id) if item_id else uuid.uuid4().hex
    return f"{folder}/{day}/{token}-{name}"


def public_url_for(key: str) -> Optional[str]:
    base = get_settings().storage.public_base
    if not base:
        return None
    return f"{base.rstrip('/')}/{key.lstrip('/')}"


def presign_put_url(key: str, content_type: str, expires: int = 900) -> str:
    try:
        return get_client().generate_presigned_url(
            ClientMethod="put_object",
            Params={"Bucket": bucket_name(), "Key": key, "ContentType": content_type},
            ExpiresIn=max(int(expires), 60),
            HttpMethod="PUT",
        )
    except (ClientError, BotoCoreError) as exc:
        raise StorageError("Failed to generate upload URL") from exc


def put_bytes(key: str, data: bytes, *, content_type: str = "application/octet-stream") -> str:
    """Upload *data* under *key* and return its public URL."""

    url = public_url_for(key)
    if not url:
        raise StorageError("S3_PUBLIC_BASE is not configured")

    bucket = bucket_name()
    try:
        get_client().put_object(Bucket=bucket, Key=key, Body=data, ContentType=content_type)
    except (ClientError, BotoCoreError) as exc:
        logger.warning("R2 put failed: bucket=%s key=%s err=%s", bucket, key, exc)
        raise StorageError(f"Failed to store object at key={key}") from exc
    return url


__all__ = [
    "StorageError",
    "bucket_name",
    "get_client",
    "make_key",
    "public_url_for",
    "presign_put_url",
    "put_bytes",
]
