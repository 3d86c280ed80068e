from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List
from urllib.parse import urlparse

DEFAULT_IMAGE_MODEL = "gemini-3-pro-image-preview"


def _as_int(value: str | None, default: int, *, minimum: int = 0) -> int:
    if value is None or not value.strip():
        return default
    try:
        return max(int(value), minimum)
    except (TypeError, ValueError):
        return default


def _as_list(csv: str | None, fallback: List[str]) -> List[str]:
    """Split a CSV string to list with trimming and fallback."""
    if not csv:
        return fallback
    items = [x.strip() for x in csv.split(",") if x.strip()]
    return items or fallback


def _env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value is None:
            continue
        text = value.strip()
        if text:
            return text
    return None


def _parse_allowed_origins(raw: str | None) -> List[str]:
    """Normalise comma-separated origins into values accepted by CORSMiddleware."""

    if not raw:
        return ["*"]

    cleaned: List[str] = []
    for origin in raw.split(","):
        value = origin.strip()
        if not value:
            continue
        if value == "*":
            return ["*"]

        parsed = urlparse(value)
        if parsed.scheme and parsed.netloc:
            normalised = f"{parsed.scheme}://{parsed.netloc}"
        else:
            normalised = value

        if normalised not in cleaned:
            cleaned.append(normalised)

    return cleaned or ["*"]


@dataclass
class GenAIConfig:
    api_key: str | None = None
    image_model: str = DEFAULT_IMAGE_MODEL
    timeout_seconds: int = 120

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "GenAIConfig":
        return cls(
            api_key=_env("GOOGLE_AI_API_KEY", "GOOGLE_API_KEY"),
            image_model=_env("GENAI_IMAGE_MODEL") or DEFAULT_IMAGE_MODEL,
            timeout_seconds=_as_int(os.getenv("GENAI_TIMEOUT_SECONDS"), 120, minimum=1),
        )


@dataclass
class StudioConfig:
    max_images: int = 8
    preview_max_edge: int = 512
    upload_max_bytes: int = 20_000_000
    upload_allowed_mime: tuple[str, ...] = ("image/png", "image/jpeg", "image/webp")

    @classmethod
    def from_env(cls) -> "StudioConfig":
        allowed = _as_list(
            os.getenv("UPLOAD_ALLOWED_MIME"), ["image/png", "image/jpeg", "image/webp"]
        )
        return cls(
            max_images=_as_int(os.getenv("STUDIO_MAX_IMAGES"), 8, minimum=1),
            preview_max_edge=_as_int(os.getenv("STUDIO_PREVIEW_MAX_EDGE"), 512, minimum=16),
            upload_max_bytes=_as_int(os.getenv("UPLOAD_MAX_BYTES"), 20_000_000),
            upload_allowed_mime=tuple(allowed),
        )


@dataclass
class StorageConfig:
    endpoint: str | None
    access_key: str | None
    secret_key: str | None
    region: str
    bucket: str | None
    public_base: str | None
    config_prefix: str = "site-config"

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.access_key and self.secret_key and self.bucket)

    @classmethod
    def from_env(cls) -> "StorageConfig":
        return cls(
            endpoint=_env("R2_ENDPOINT", "S3_ENDPOINT"),
            access_key=_env("R2_ACCESS_KEY_ID", "S3_ACCESS_KEY"),
            secret_key=_env("R2_SECRET_ACCESS_KEY", "S3_SECRET_KEY"),
            region=_env("R2_REGION", "S3_REGION") or "auto",
            bucket=_env("R2_BUCKET", "S3_BUCKET"),
            public_base=_env("R2_PUBLIC_BASE", "S3_PUBLIC_BASE"),
            config_prefix=(_env("CONFIG_STORE_PREFIX") or "site-config").strip("/"),
        )


@dataclass
class Settings:
    environment: str
    log_level: str
    allowed_origins: List[str]
    genai: GenAIConfig
    studio: StudioConfig
    storage: StorageConfig


@lru_cache()
def get_settings() -> Settings:
    environment = os.getenv("ENVIRONMENT", "development")
    return Settings(
        environment=environment,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        allowed_origins=_parse_allowed_origins(os.getenv("ALLOWED_ORIGINS", "*")),
        genai=GenAIConfig.from_env(),
        studio=StudioConfig.from_env(),
        storage=StorageConfig.from_env(),
    )
