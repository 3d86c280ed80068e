"""Fan one reference image out to one generation call per requested slot.

Slots are independent: every call is started before any is awaited, a failed
slot never discards a sibling's image, and the whole call only fails when no
slot produced an image.  Results are returned as a new mapping merged over the
caller's existing set; the caller's mapping is never modified.
"""
from __future__ import annotations

import asyncio
import logging
import random
import uuid
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from photo_studio.schemas import GenerationRequest
from photo_studio.services.image_provider.base import ImageGenerationService
from photo_studio.studio.constants import SLOT_ORDER, SlotKey
from photo_studio.studio.prompts import SubjectTraits, draw_traits, resolve_prompts

logger = logging.getLogger(__name__)

GeneratedImageSet = Mapping[SlotKey, bytes]

MODEL_SLOTS = frozenset({"fullBody", "closeUp"})


@dataclass(frozen=True)
class SlotFailure:
    slot: SlotKey
    reason: str
    status_code: Optional[int] = None


@dataclass(frozen=True)
class GenerationOutcome:
    images: Dict[SlotKey, bytes]
    generated: Tuple[SlotKey, ...]
    failures: Tuple[SlotFailure, ...] = ()
    traits: Optional[SubjectTraits] = field(default=None, compare=False)

    @property
    def failed_slots(self) -> Tuple[SlotKey, ...]:
        return tuple(failure.slot for failure in self.failures)


class AllSlotsFailedError(RuntimeError):
    def __init__(self, failures: Tuple[SlotFailure, ...]) -> None:
        slots = ", ".join(failure.slot for failure in failures)
        super().__init__(f"every requested slot failed: {slots}")
        self.failures = failures

    @property
    def quota_exhausted(self) -> bool:
        return bool(self.failures) and all(f.status_code == 429 for f in self.failures)


def merge_generated(
    existing: Optional[GeneratedImageSet],
    fresh: GeneratedImageSet,
) -> Dict[SlotKey, bytes]:
    """Right-biased merge: slots in *fresh* replace those in *existing*."""

    merged: Dict[SlotKey, bytes] = dict(existing or {})
    merged.update(fresh)
    return merged


def _ordered(slots) -> Tuple[SlotKey, ...]:
    return tuple(slot for slot in SLOT_ORDER if slot in slots)


def _describe(exc: BaseException) -> str:
    text = str(exc).strip()
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


class GenerationOrchestrator:
    def __init__(
        self,
        provider: ImageGenerationService,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.provider = provider
        self.rng = rng or random.Random()

    async def generate(
        self,
        request: GenerationRequest,
        existing: Optional[GeneratedImageSet] = None,
    ) -> GenerationOutcome:
        slots = _ordered(request.requested_slots)
        # packshots never use traits
        traits = draw_traits(self.rng) if set(slots) & MODEL_SLOTS else None
        prompts = resolve_prompts(request, slots, traits)
        reference = request.reference_bytes
        trace = uuid.uuid4().hex[:8]

        logger.info(
            "studio generation started",
            extra={"trace": trace, "slots": list(slots), "product_class": request.product_class},
        )

        results = await asyncio.gather(
            *(self.provider.generate(reference, prompts[slot]) for slot in slots),
            return_exceptions=True,
        )

        fresh: Dict[SlotKey, bytes] = {}
        failures = []
        for slot, result in zip(slots, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "studio slot %s failed: %s", slot, result, extra={"trace": trace}
                )
                failures.append(
                    SlotFailure(
                        slot=slot,
                        reason=_describe(result),
                        status_code=getattr(result, "status_code", None),
                    )
                )
            else:
                fresh[slot] = result

        if not fresh:
            logger.error("studio generation failed for every slot", extra={"trace": trace})
            raise AllSlotsFailedError(tuple(failures))

        return GenerationOutcome(
            images=merge_generated(existing, fresh),
            generated=tuple(fresh),
            failures=tuple(failures),
            traits=traits,
        )

    async def regenerate(
        self,
        request: GenerationRequest,
        slot: SlotKey,
        existing: Optional[GeneratedImageSet] = None,
    ) -> GenerationOutcome:
        """Generate one slot again and merge it over *existing*."""

        return await self.generate(request.for_slot(slot), existing)
