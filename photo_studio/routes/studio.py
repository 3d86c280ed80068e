from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from photo_studio.config import get_settings
from photo_studio.schemas import (
    GenerationResponse,
    ProcessImageResponse,
    SlotFailureModel,
    StudioGenerateRequest,
    StyleListResponse,
    StyleOption,
)
from photo_studio.services.image_provider.base import ImageGenerationService
from photo_studio.services.image_provider.factory import get_provider
from photo_studio.services.image_utils import decode_base64_image, encode_base64_image
from photo_studio.studio.constants import STYLES_BY_PRODUCT, ProductClass
from photo_studio.studio.orchestrator import AllSlotsFailedError, GenerationOrchestrator
from photo_studio.studio.preprocess import PreprocessingError, normalise_background

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/studio-photo", tags=["studio-photo"])


def get_image_service() -> ImageGenerationService:
    try:
        return get_provider()
    except Exception as exc:  # pragma: no cover - remote dependency init
        logger.exception("Failed to initialise image provider: %s", exc)
        raise HTTPException(status_code=503, detail="Image provider unavailable") from exc


def get_orchestrator(
    provider: ImageGenerationService = Depends(get_image_service),
) -> GenerationOrchestrator:
    return GenerationOrchestrator(provider)


def _quota_exceeded(status_code: int | None) -> HTTPException | None:
    if status_code == 429:
        return HTTPException(
            status_code=429,
            detail={
                "error": "genai_quota_exceeded",
                "message": "The image model quota is exhausted, retry later.",
                "provider": "google-genai",
            },
        )
    return None


@router.post("/process", response_model=ProcessImageResponse)
async def process_image(
    file: UploadFile = File(...),
    provider: ImageGenerationService = Depends(get_image_service),
) -> ProcessImageResponse:
    studio = get_settings().studio
    if file.content_type and file.content_type not in studio.upload_allowed_mime:
        raise HTTPException(status_code=415, detail=f"content_type not allowed: {file.content_type}")

    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="No file supplied")
    if studio.upload_max_bytes and len(raw) > studio.upload_max_bytes:
        raise HTTPException(status_code=413, detail="file exceeds permitted size")

    try:
        processed = await normalise_background(provider, raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PreprocessingError as exc:
        raise _quota_exceeded(exc.status_code) or HTTPException(
            status_code=502,
            detail={"error": "preprocessing_failed", "message": str(exc)},
        ) from exc

    return ProcessImageResponse(processed_image=encode_base64_image(processed))


@router.post("/generate", response_model=GenerationResponse)
async def generate_images(
    request: StudioGenerateRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> GenerationResponse:
    try:
        existing = {slot: decode_base64_image(payload) for slot, payload in request.existing.items()}
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"existing images: {exc}") from exc

    try:
        outcome = await orchestrator.generate(request, existing)
    except AllSlotsFailedError as exc:
        if exc.quota_exhausted:
            raise _quota_exceeded(429) from exc
        raise HTTPException(
            status_code=502,
            detail={
                "error": "generation_failed",
                "message": str(exc),
                "failures": [
                    {"slot": failure.slot, "reason": failure.reason} for failure in exc.failures
                ],
            },
        ) from exc

    return GenerationResponse(
        images={slot: encode_base64_image(data) for slot, data in outcome.images.items()},
        generated=list(outcome.generated),
        failures=[
            SlotFailureModel(slot=failure.slot, reason=failure.reason)
            for failure in outcome.failures
        ],
    )


@router.get("/styles/{product_class}", response_model=StyleListResponse)
def list_styles(product_class: ProductClass) -> StyleListResponse:
    return StyleListResponse(
        product_class=product_class,
        styles=[
            StyleOption(name=name, description=description)
            for name, description in STYLES_BY_PRODUCT[product_class]
        ],
    )
