from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from photo_studio.config import get_settings
from photo_studio.routes.r2 import router as r2_router
from photo_studio.routes.site_config import router as site_config_router
from photo_studio.routes.studio import router as studio_router

settings = get_settings()
LOG_LEVEL = settings.log_level

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("uvicorn").setLevel(LOG_LEVEL)
logging.getLogger("uvicorn.error").setLevel(LOG_LEVEL)
logging.getLogger("uvicorn.access").setLevel(LOG_LEVEL)
logging.getLogger("photo_studio").setLevel(LOG_LEVEL)

logger = logging.getLogger("photo_studio")

app = FastAPI(title="Studio Photo API", version="1.0.0")

allow_all = "*" in settings.allowed_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=not allow_all,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)

app.include_router(studio_router)
app.include_router(r2_router)
app.include_router(site_config_router)

if not settings.genai.is_configured:
    logger.warning("GOOGLE_AI_API_KEY is not set; studio generation will return 503")
if not settings.storage.is_configured:
    logger.warning("R2 storage is not configured; uploads are disabled")


@app.get("/", include_in_schema=False)
def root() -> dict[str, Any]:
    return {"service": "photo-studio", "ok": True}


@app.head("/", include_in_schema=False)
def root_head() -> Response:
    return Response(status_code=200)


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}
