"""Prompt builders for the background pass and each studio slot.

Model shots (``fullBody`` and ``closeUp``) share one subject description per
request; ``productOnly`` packshots ignore the subject entirely and switch on
the product class instead.
"""
from __future__ import annotations

import random
import re
import textwrap
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from photo_studio.studio.constants import (
    ASPECT_RATIO,
    CATALOG_BACKGROUND_HEX,
    DEFAULT_PRODUCT_WIDTH_PCT,
    FACE_FEATURES,
    HAIR_STYLES,
    LEATHER_CAMERA_ELEVATION_DEG,
    LEATHER_LENS_MM,
    LOCATION_WORDS,
    PREPROCESS_BACKGROUND_HEX,
    SHOE_PAIR_WIDTH_PCT,
    SHOE_SOLE_BASELINE_PCT,
    STUDIO_WALL_HEX,
    ProductClass,
    SlotKey,
)

if TYPE_CHECKING:
    from photo_studio.schemas import GenerationRequest

STUBBLE_INSTRUCTION = (
    "The model has a light, well-groomed three-day stubble beard."
)
CLEAN_SHAVEN_INSTRUCTION = (
    "The model is completely clean-shaven, with no beard and no mustache."
)

PREPROCESS_PROMPT = (
    "Given this image of a fashion product, isolate the product with clean, precise edges. "
    "Remove the original background completely and replace it with a solid, uniform "
    f"background of exactly {PREPROCESS_BACKGROUND_HEX}. Output only the isolated product "
    "on the new background. Do not add text or any other element."
)

_LOCATION_PATTERN = re.compile("|".join(LOCATION_WORDS), re.IGNORECASE)


@dataclass(frozen=True)
class SubjectTraits:
    """Randomised look shared by every model shot of one request."""

    hairstyle: str
    face: str


def draw_traits(rng: random.Random | None = None) -> SubjectTraits:
    rng = rng or random.Random()
    return SubjectTraits(hairstyle=rng.choice(HAIR_STYLES), face=rng.choice(FACE_FEATURES))


def facial_hair_instruction(gender: str, facial_hair: Optional[str]) -> str:
    if gender != "male":
        return ""
    if facial_hair == "beard":
        return STUBBLE_INSTRUCTION
    if facial_hair == "no_beard":
        return CLEAN_SHAVEN_INSTRUCTION
    return ""


def sanitise_style_description(description: str) -> str:
    """Replace location words so the style only steers pose and outfit."""

    return _LOCATION_PATTERN.sub("studio fashion", description or "")


def _block(text: str) -> str:
    return textwrap.dedent(text).strip()


def _model_brief(request: "GenerationRequest", traits: SubjectTraits) -> str:
    subject = request.subject
    face_line = f"{traits.face}. {facial_hair_instruction(subject.gender, subject.facial_hair)}".strip()
    return _block(
        f"""
        You are a world-class fashion photographer shooting for a premium sportswear brand.
        Task: create a premium e-commerce photo of a model wearing the product in the reference image.
        The product must be preserved exactly: colour, texture, logo and shape.

        Model:
        - Gender: {subject.gender}.
        - Ethnicity: {subject.ethnicity}.
        - Hair: {traits.hairstyle}.
        - Face: {face_line}
        - Attitude: {sanitise_style_description(subject.style.description)}
        - Outfit: the model wears the product. Jackets, coats and shirts are worn fully closed.
          Pair it with clean sportswear-chic pieces in the spirit of a luxury catalogue.

        Studio setting (non-negotiable):
        - Windowless indoor photo studio.
        - Solid, flat, matte background wall in exactly {STUDIO_WALL_HEX}; no gradient, no texture.
        - No nature, sky, streets, buildings or rooms, whatever the product suggests.
        - Flattened output without alpha channel.

        Quality: photorealistic, highly detailed, square {ASPECT_RATIO} frame.
        """
    )


def full_body_prompt(request: "GenerationRequest", traits: SubjectTraits) -> str:
    return "\n\n".join(
        [
            _model_brief(request, traits),
            _block(
                """
                Shot type: full body (or 3/4 length).
                The model stands confidently, the product fully visible and naturally worn,
                centred in the square frame.
                """
            ),
        ]
    )


def close_up_prompt(request: "GenerationRequest", traits: SubjectTraits) -> str:
    if request.product_class == "shoes":
        framing = (
            "Camera at ankle height, focused on the shoes on the model's feet, "
            "showing how they meet the trouser hem."
        )
    else:
        framing = (
            "Frame from the chin to the hips, focused on the torso where the product is worn; "
            "crop the head just above the chin."
        )
    return "\n\n".join(
        [
            _model_brief(request, traits),
            _block(
                f"""
                Shot type: close-up on the model.
                The product is worn by the model; this is a detail shot, not a packshot.
                Zoom in on the product to show texture and finish. {framing}
                The product fills most of the square frame while the body gives it structure.
                """
            ),
        ]
    )


def _catalog_background() -> str:
    return _block(
        f"""
        Background: solid pure white {CATALOG_BACKGROUND_HEX} (RGB 255,255,255) everywhere,
        produced by digital background replacement. Do not render a floor or a wall.
        """
    )


def product_only_prompt(product_class: Optional[ProductClass]) -> str:
    """Packshot prompt; each product class needs its own framing geometry."""

    if product_class == "shoes":
        body = f"""
        You are an AI specialised in technical e-commerce photography.
        Task: a standardised catalogue image of a pair of shoes aligned to a fixed virtual grid.

        Geometry:
        - Pure side profile, toes pointing right.
        - Camera at ground level (0 degrees), parallel to the floor, soles flat and level.
        - Flotation line: the bottom of the soles sits at exactly {SHOE_SOLE_BASELINE_PCT}% of the
          image height, leaving {100 - SHOE_SOLE_BASELINE_PCT}% empty white space below the shoes.
        - The pair (foreground and background shoe) spans exactly {SHOE_PAIR_WIDTH_PCT}% of the image width.

        Arrangement: staggered profile, one shoe fully visible in front, the other slightly
        behind and offset, both pointing right.

        Shadow: a soft, small light-grey contact shadow under the soles at the
        {SHOE_SOLE_BASELINE_PCT}% line, fading quickly into the white.
        """
    elif product_class == "clothing":
        body = f"""
        You are an AI specialised in e-commerce packshots.
        Task: a perfectly isolated clothing item.

        - Angle: perfectly front-facing, straight on.
        - Shadows: none. Flat lay / ghost mannequin style.
        - Framing: centred, about {DEFAULT_PRODUCT_WIDTH_PCT}% of the image width.
        """
    elif product_class == "leather":
        body = f"""
        You are an AI specialised in e-commerce packshots.
        Task: a perfectly isolated leather good (bag, wallet or accessory), exact replica of
        material and hardware.

        Geometry (locked):
        - Front view, camera elevated about {LEATHER_CAMERA_ELEVATION_DEG} degrees.
        - {LEATHER_LENS_MM}mm lens equivalent, flat perspective.
        - Product width 50-60% of the image width, perfectly centred.

        Shadow: low-opacity contact shadow strictly under the object, no cast shadow.
        """
    else:
        body = f"""
        You are an AI specialised in e-commerce packshots.
        Task: a perfectly isolated product.

        - Angle: front-facing.
        - Lighting: neutral, even studio light. No gradient, no vignette, no floor.
        - Framing: centred, about {DEFAULT_PRODUCT_WIDTH_PCT}% of the image width.
        """
    return "\n\n".join(
        [
            _block(body),
            _catalog_background(),
            "Composition: square format (1:1). Fidelity: perfect replica of the product.",
        ]
    )


def resolve_prompts(
    request: "GenerationRequest",
    slots: Iterable[SlotKey],
    traits: Optional[SubjectTraits] = None,
) -> Dict[SlotKey, str]:
    prompts: Dict[SlotKey, str] = {}
    for slot in slots:
        if slot == "productOnly":
            prompts[slot] = product_only_prompt(request.product_class)
        elif traits is None:
            raise ValueError(f"slot {slot} needs subject traits")
        elif slot == "fullBody":
            prompts[slot] = full_body_prompt(request, traits)
        elif slot == "closeUp":
            prompts[slot] = close_up_prompt(request, traits)
        else:
            raise ValueError(f"unknown slot: {slot}")
    return prompts
