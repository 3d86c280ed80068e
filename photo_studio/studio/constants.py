"""Closed vocabularies and fixed composition constants for studio shots."""
from __future__ import annotations

from typing import Dict, Literal, Tuple, get_args

SlotKey = Literal["productOnly", "fullBody", "closeUp"]
ProductClass = Literal["clothing", "shoes", "leather"]
Gender = Literal["male", "female"]
Ethnicity = Literal["Maghrebi", "African", "Latin", "Asian", "European"]
FacialHair = Literal["beard", "no_beard"]

# Presentation order; slots carry no scheduling order.
SLOT_ORDER: Tuple[SlotKey, ...] = get_args(SlotKey)
PRODUCT_CLASSES: Tuple[ProductClass, ...] = get_args(ProductClass)

# Older clients send the short slot names.
SLOT_ALIASES: Dict[str, SlotKey] = {
    "full": "fullBody",
    "closeup": "closeUp",
    "product_only": "productOnly",
}

ASPECT_RATIO = "1:1"

PREPROCESS_BACKGROUND_HEX = "#F6F4F2"
STUDIO_WALL_HEX = "#F6F4F2"
CATALOG_BACKGROUND_HEX = "#FFFFFF"

SHOE_SOLE_BASELINE_PCT = 70
SHOE_PAIR_WIDTH_PCT = 55
LEATHER_CAMERA_ELEVATION_DEG = 15
LEATHER_LENS_MM = 85
DEFAULT_PRODUCT_WIDTH_PCT = 75

HAIR_STYLES: Tuple[str, ...] = (
    "Short textured crop",
    "Long flowing natural hair",
    "Slicked back ponytail",
    "Buzz cut fade",
    "Shoulder-length sharp bob",
    "Braided intricate hairstyle",
    "Messy chic bun",
    "Curly natural afro",
    "Wavy mid-length hair",
    "Clean side-part",
)

FACE_FEATURES: Tuple[str, ...] = (
    "High cheekbones, sharp jawline",
    "Soft facial features, natural look",
    "Distinct eyebrows, intense gaze",
    "Freckles, warm expression",
    "Angular face structure, model look",
    "Round face, youthful appearance",
    "Strong chin, defined features",
    "Elegant and symmetrical features",
)

# (name, description) pairs, one closed list per product class.
CLOTHING_STYLES: Tuple[Tuple[str, str], ...] = (
    ("Studio Professionnel", "Classic studio pose, professional lighting."),
    ("Urbain Moderne", "Model in a modern city context."),
    ("Lifestyle Casual", "Model in a casual, everyday environment."),
    ("Sport & Active", "Model in motion, active pose."),
    ("Élégant Soirée", "Sophisticated pose, evening wear context."),
    ("Minimaliste", "Clean pose, minimalist aesthetic."),
    ("Outdoor Aventure", "Model in a nature/adventure context."),
    ("Cozy Indoor", "Model in a warm, indoor setting."),
    ("Fashion Editorial", "Artistic, high-fashion pose."),
    ("E-commerce Premium", "High-quality catalog shot, perfect for online stores."),
)

SHOE_STYLES: Tuple[Tuple[str, str], ...] = (
    ("Studio Classique", "Model standing, classic studio shot."),
    ("Action & Mouvement", "Model walking or in motion."),
    ("Close-up Détail", "Very tight close-up on the shoes being worn."),
    ("Lifestyle Urbain", "Model in a city lifestyle context."),
    ("Sport Performance", "Athlete model in a sports action context."),
    ("Casual Quotidien", "Model in a natural, everyday situation."),
    ("Fashion Lookbook", "Editorial, lookbook style shot."),
    ("Minimaliste Épuré", "Model standing against a plain background, clean style."),
    ("Street Style", "Model in a street fashion context."),
    ("Premium Catalogue", "High-definition details, professional catalog quality."),
)

LEATHER_GOODS_STYLES: Tuple[Tuple[str, str], ...] = (
    ("Photo Produit Studio", "Model holding the item with professional studio lighting."),
    ("Lifestyle Porté", "Model carrying the item in a natural, everyday city scene."),
    (
        "Nature Morte de Luxe",
        "The item arranged in a luxurious, still-life setting, without a model.",
    ),
    (
        "E-commerce à Plat",
        "The item laid flat on the gray background, shot from above (flat lay style).",
    ),
    (
        "Gros Plan Détails",
        "A close-up shot on the item's details like texture, hardware, and stitching, held by a model.",
    ),
    (
        "Lookbook Mode",
        "An editorial-style shot featuring the item as a key part of a full fashion look.",
    ),
    (
        "En Mouvement",
        "Model walking, showcasing the item in motion to see how it hangs and moves.",
    ),
    (
        "Minimaliste Chic",
        "A clean, minimalist shot focusing on the item's shape and form, held by a model.",
    ),
)

STYLES_BY_PRODUCT: Dict[ProductClass, Tuple[Tuple[str, str], ...]] = {
    "clothing": CLOTHING_STYLES,
    "shoes": SHOE_STYLES,
    "leather": LEATHER_GOODS_STYLES,
}

# Location words that would pull a model shot out of the studio.
LOCATION_WORDS: Tuple[str, ...] = ("outdoor", "nature", "mountain", "street", "city")


def normalise_slot(value: str) -> str:
    """Map legacy slot aliases onto the canonical slot names."""

    text = str(value).strip()
    return SLOT_ALIASES.get(text, text)
