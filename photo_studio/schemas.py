from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator, model_validator

from photo_studio.services.image_utils import decode_base64_image
from photo_studio.studio.constants import (
    SLOT_ORDER,
    STYLES_BY_PRODUCT,
    Ethnicity,
    FacialHair,
    Gender,
    ProductClass,
    SlotKey,
    normalise_slot,
)


class _CompatModel(BaseModel):
    """Base model configured to ignore unknown fields (Pydantic v2 only)."""

    model_config = ConfigDict(extra="ignore")


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _strip_optional(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _rename(data: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    for legacy, field in aliases.items():
        if legacy in data and field not in data:
            data[field] = data.pop(legacy)
    return data


# -----------------------------------------------------------------------------
# Generation
# -----------------------------------------------------------------------------


class StyleOption(_CompatModel):
    name: constr(strip_whitespace=True, min_length=1)
    description: str = ""


class SubjectAttributes(_CompatModel):
    """Synthetic model the product is shown on."""

    gender: Gender
    ethnicity: Ethnicity
    facial_hair: Optional[FacialHair] = Field(
        None, description="Only honoured for male subjects."
    )
    style: StyleOption

    @field_validator("facial_hair", mode="before")
    @classmethod
    def _blank_facial_hair(cls, value: Any) -> Any:
        return _strip_optional(value)


class GenerationRequest(_CompatModel):
    reference_image: constr(strip_whitespace=True, min_length=1) = Field(
        ..., description="Base64 of the background-normalised product image."
    )
    product_class: ProductClass
    subject: SubjectAttributes
    requested_slots: List[SlotKey] = Field(
        default_factory=lambda: list(SLOT_ORDER),
        description="Slots to generate; defaults to every slot.",
    )

    @model_validator(mode="before")
    @classmethod
    def _accept_flat_payload(cls, value: Any) -> Any:
        """Accept the flat camelCase payload sent by the studio page."""

        if not isinstance(value, dict):
            return value
        data = _rename(
            dict(value),
            {
                "processedImageBase64": "reference_image",
                "productType": "product_class",
                "keysToGenerate": "requested_slots",
                "slots": "requested_slots",
            },
        )
        if "subject" not in data:
            subject = _rename(
                {
                    key: data.pop(key)
                    for key in ("modelGender", "modelEthnicity", "modelBeard", "style")
                    if key in data
                },
                {
                    "modelGender": "gender",
                    "modelEthnicity": "ethnicity",
                    "modelBeard": "facial_hair",
                },
            )
            if subject:
                data["subject"] = subject
        return data

    @field_validator("requested_slots", mode="before")
    @classmethod
    def _normalise_slots(cls, value: Any) -> Any:
        if value is None:
            return list(SLOT_ORDER)
        if isinstance(value, str):
            value = [value]
        seen: List[str] = []
        for item in value:
            slot = normalise_slot(item)
            if slot not in seen:
                seen.append(slot)
        return seen

    @field_validator("requested_slots")
    @classmethod
    def _require_slot(cls, value: List[SlotKey]) -> List[SlotKey]:
        if not value:
            raise ValueError("at least one slot must be requested")
        return value

    @field_validator("reference_image")
    @classmethod
    def _check_base64(cls, value: str) -> str:
        decode_base64_image(value)
        return value

    @model_validator(mode="after")
    def _style_belongs_to_product(self) -> "GenerationRequest":
        names = {name for name, _ in STYLES_BY_PRODUCT[self.product_class]}
        if self.subject.style.name not in names:
            raise ValueError(
                f"style {self.subject.style.name!r} is not available for {self.product_class}"
            )
        return self

    @property
    def reference_bytes(self) -> bytes:
        return decode_base64_image(self.reference_image)

    def for_slot(self, slot: SlotKey) -> "GenerationRequest":
        """Copy of this request restricted to a single slot."""

        return self.model_copy(update={"requested_slots": [slot]})


class StudioGenerateRequest(GenerationRequest):
    existing: Dict[SlotKey, str] = Field(
        default_factory=dict,
        description="Previously generated slots (base64) to merge the new results into.",
    )

    @field_validator("existing", mode="before")
    @classmethod
    def _normalise_existing(cls, value: Any) -> Any:
        if not value:
            return {}
        if isinstance(value, dict):
            return {normalise_slot(key): payload for key, payload in value.items() if payload}
        return value


class SlotFailureModel(_CompatModel):
    slot: SlotKey
    reason: str


class GenerationResponse(_CompatModel):
    images: Dict[SlotKey, str] = Field(default_factory=dict)
    generated: List[SlotKey] = Field(default_factory=list)
    failures: List[SlotFailureModel] = Field(default_factory=list)


class ProcessImageResponse(_CompatModel):
    processed_image: str


class StyleListResponse(_CompatModel):
    product_class: ProductClass
    styles: List[StyleOption]


# -----------------------------------------------------------------------------
# Site configuration
# -----------------------------------------------------------------------------


class ConfigEntryPayload(_CompatModel):
    value: Optional[str] = None
    type: Optional[str] = Field(None, description="Value kind, e.g. text or image.")
    section: Optional[str] = None
    description: Optional[str] = None

    def metadata(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"key", "value"}, exclude_none=True)


class ConfigEntryCreate(ConfigEntryPayload):
    key: constr(strip_whitespace=True, min_length=1)


class ConfigEntryResponse(_CompatModel):
    key: str
    value: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


# -----------------------------------------------------------------------------
# Uploads
# -----------------------------------------------------------------------------


class PresignPutRequest(_CompatModel):
    filename: str = Field(..., description="Original filename supplied by the browser")
    content_type: str = Field(..., description="Detected MIME type of the upload")
    folder: Optional[str] = Field("studio/uploads", description="Target logical folder for the asset")
    size: Optional[int] = Field(None, ge=0, description="Optional size hint for validation")


class PresignPutResponse(_CompatModel):
    key: str
    upload_url: str
    public_url: str
