from __future__ import annotations

import base64
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from photo_studio.main import app
from photo_studio.routes.studio import get_image_service
from photo_studio.services.config_store import InMemoryConfigStore, get_config_store
from photo_studio.services.image_provider.base import ImageGenerationError


class StubImageService:
    def __init__(self, failing: tuple[str, ...] = (), status_code: Optional[int] = None) -> None:
        self.failing = failing
        self.status_code = status_code
        self.calls = 0

    async def generate(self, reference_image: bytes, prompt: str, *, mime_type: Optional[str] = None) -> bytes:
        self.calls += 1
        for marker in self.failing:
            if marker in prompt:
                raise ImageGenerationError("no image returned", status_code=self.status_code)
        if "Shot type: full body" in prompt:
            return b"full"
        if "Shot type: close-up" in prompt:
            return b"close"
        if "Remove the original background" in prompt:
            return b"normalised"
        return b"product"


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@pytest.fixture
def service() -> StubImageService:
    return StubImageService()


@pytest.fixture
def client(service):
    store = InMemoryConfigStore()
    app.dependency_overrides[get_image_service] = lambda: service
    app.dependency_overrides[get_config_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _generate_payload(png_b64: str, **extra) -> dict:
    payload = {
        "reference_image": png_b64,
        "product_class": "clothing",
        "subject": {
            "gender": "male",
            "ethnicity": "European",
            "facial_hair": "no_beard",
            "style": {"name": "Fashion Editorial", "description": "Artistic, high-fashion pose."},
        },
    }
    payload.update(extra)
    return payload


def test_health(client) -> None:
    assert client.get("/health").json() == {"ok": True}


def test_process_returns_normalised_image(client, make_png) -> None:
    response = client.post(
        "/api/studio-photo/process",
        files={"file": ("shirt.png", make_png(), "image/png")},
    )
    assert response.status_code == 200
    assert response.json() == {"processed_image": _b64(b"normalised")}


def test_process_rejects_non_image(client) -> None:
    response = client.post(
        "/api/studio-photo/process",
        files={"file": ("notes.png", b"plain text", "image/png")},
    )
    assert response.status_code == 400


def test_process_rejects_disallowed_mime(client) -> None:
    response = client.post(
        "/api/studio-photo/process",
        files={"file": ("notes.txt", b"plain text", "text/plain")},
    )
    assert response.status_code == 415


def test_process_failure_is_fatal(make_png) -> None:
    app.dependency_overrides[get_image_service] = lambda: StubImageService(
        failing=("Remove the original background",)
    )
    try:
        response = TestClient(app).post(
            "/api/studio-photo/process",
            files={"file": ("shirt.png", make_png(), "image/png")},
        )
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 502
    assert response.json()["detail"]["error"] == "preprocessing_failed"


def test_generate_returns_every_slot(client, png_b64) -> None:
    response = client.post("/api/studio-photo/generate", json=_generate_payload(png_b64))

    assert response.status_code == 200
    body = response.json()
    assert body["images"] == {
        "productOnly": _b64(b"product"),
        "fullBody": _b64(b"full"),
        "closeUp": _b64(b"close"),
    }
    assert body["failures"] == []


def test_generate_reports_partial_failures(png_b64) -> None:
    app.dependency_overrides[get_image_service] = lambda: StubImageService(
        failing=("Shot type: close-up",)
    )
    try:
        response = TestClient(app).post(
            "/api/studio-photo/generate",
            json=_generate_payload(png_b64, requested_slots=["fullBody", "closeUp"]),
        )
    finally:
        app.dependency_overrides.clear()

    body = response.json()
    assert response.status_code == 200
    assert body["images"] == {"fullBody": _b64(b"full")}
    assert [failure["slot"] for failure in body["failures"]] == ["closeUp"]


def test_generate_total_failure_returns_502(png_b64) -> None:
    app.dependency_overrides[get_image_service] = lambda: StubImageService(failing=("Shot type",))
    try:
        response = TestClient(app).post(
            "/api/studio-photo/generate",
            json=_generate_payload(png_b64, requested_slots=["fullBody", "closeUp"]),
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["error"] == "generation_failed"
    assert {failure["slot"] for failure in detail["failures"]} == {"fullBody", "closeUp"}
    assert "images" not in response.json()


def test_regenerate_single_slot_merges_existing(client, service, png_b64) -> None:
    existing = {"productOnly": _b64(b"old-product"), "fullBody": _b64(b"old-full")}
    response = client.post(
        "/api/studio-photo/generate",
        json=_generate_payload(png_b64, requested_slots=["fullBody"], existing=existing),
    )

    body = response.json()
    assert body["images"] == {"productOnly": _b64(b"old-product"), "fullBody": _b64(b"full")}
    assert body["generated"] == ["fullBody"]
    assert service.calls == 1


def test_generate_rejects_style_from_another_category(client, png_b64) -> None:
    payload = _generate_payload(png_b64)
    payload["subject"]["style"]["name"] = "Premium Catalogue"
    response = client.post("/api/studio-photo/generate", json=payload)
    assert response.status_code == 422


def test_styles_listing(client) -> None:
    response = client.get("/api/studio-photo/styles/shoes")
    assert response.status_code == 200
    names = [style["name"] for style in response.json()["styles"]]
    assert "Premium Catalogue" in names
    assert client.get("/api/studio-photo/styles/hats").status_code == 422


def test_site_config_upsert_and_create(client) -> None:
    assert client.get("/api/site-config/promo_title").status_code == 404

    first = client.put("/api/site-config/promo_title", json={"value": "Spring", "section": "discount"})
    second = client.put("/api/site-config/promo_title", json={"value": "Summer", "section": "discount"})
    assert first.status_code == second.status_code == 200

    entry = client.get("/api/site-config/promo_title").json()
    assert entry == {"key": "promo_title", "value": "Summer", "metadata": {"section": "discount"}}

    created = client.post("/api/site-config", json={"key": "hero", "value": "https://x/h.png", "type": "image"})
    assert created.status_code == 201
    conflict = client.post("/api/site-config", json={"key": "hero", "value": "other"})
    assert conflict.status_code == 409


def test_presign_put_returns_upload_and_public_urls(client, monkeypatch) -> None:
    from photo_studio.routes import r2 as r2_routes

    monkeypatch.setenv("R2_PUBLIC_BASE", "https://cdn.example.com")
    monkeypatch.setattr(r2_routes, "presign_put_url", lambda key, ct: f"https://upload/{key}")

    response = client.post(
        "/api/r2/presign-put",
        json={"filename": "shirt.png", "content_type": "image/png", "size": 1024},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["key"].startswith("studio/uploads/")
    assert body["upload_url"] == f"https://upload/{body['key']}"
    assert body["public_url"] == f"https://cdn.example.com/{body['key']}"


def test_presign_put_rejects_disallowed_type(client) -> None:
    response = client.post(
        "/api/r2/presign-put",
        json={"filename": "notes.txt", "content_type": "text/plain"},
    )
    assert response.status_code == 415


def test_generate_quota_exhaustion_returns_429(png_b64) -> None:
    app.dependency_overrides[get_image_service] = lambda: StubImageService(
        failing=("Shot type",), status_code=429
    )
    try:
        response = TestClient(app).post(
            "/api/studio-photo/generate",
            json=_generate_payload(png_b64, requested_slots=["fullBody", "closeUp"]),
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 429
    assert response.json()["detail"]["error"] == "genai_quota_exceeded"
