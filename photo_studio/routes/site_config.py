from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from photo_studio.schemas import ConfigEntryCreate, ConfigEntryPayload, ConfigEntryResponse
from photo_studio.services.config_store import (
    ConfigEntry,
    ConfigKeyExistsError,
    ConfigStore,
    ConfigStoreError,
    get_config_store,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/site-config", tags=["site-config"])


def _response(entry: ConfigEntry) -> ConfigEntryResponse:
    return ConfigEntryResponse(key=entry.key, value=entry.value, metadata=entry.metadata)


@router.get("/{key}", response_model=ConfigEntryResponse)
def read_entry(key: str, store: ConfigStore = Depends(get_config_store)) -> ConfigEntryResponse:
    try:
        entry = store.get(key)
    except ConfigStoreError as exc:
        logger.exception("config read failed for %s", key)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    if entry is None:
        raise HTTPException(status_code=404, detail=f"unknown configuration key: {key}")
    return _response(entry)


@router.put("/{key}", response_model=ConfigEntryResponse)
def upsert_entry(
    key: str,
    payload: ConfigEntryPayload,
    store: ConfigStore = Depends(get_config_store),
) -> ConfigEntryResponse:
    try:
        entry = store.put(key, payload.value, payload.metadata())
    except ConfigStoreError as exc:
        logger.exception("config write failed for %s", key)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return _response(entry)


@router.post("", response_model=ConfigEntryResponse, status_code=201)
def create_entry(
    payload: ConfigEntryCreate,
    store: ConfigStore = Depends(get_config_store),
) -> ConfigEntryResponse:
    try:
        entry = store.create(payload.key, payload.value, payload.metadata())
    except ConfigKeyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ConfigStoreError as exc:
        logger.exception("config create failed for %s", payload.key)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return _response(entry)
