"""Built-in starter storyboard used for new sessions, resets and bad drafts."""
from __future__ import annotations

import copy

from storyboard.models import StoryboardDoc

_TEMPLATE: StoryboardDoc = {
    "model": "veo-2",
    "metadata": {
        "project_title": "Hair Powder Ad",
        "language": "id",
        "aspect_ratio": "9:16",
        "total_duration_sec": 16,
        "brand": {
            "tagline": "Instant Freshness, Maximum Volume.",
            "tone": ["Energetic", "Comedy"],
        },
    },
    "global_prompt": (
        "A short, punchy ad for a new hair powder product targeting young men in Indonesia."
    ),
    "characters": [
        {
            "id": "c1",
            "name": "Rio",
            "age_range": "20-25",
            "look": "Indonesian male, casual style, stylish hair.",
            "outfit_notes": "Consistent white t-shirt + denim jacket.",
        },
    ],
    "locations": [
        {
            "id": "l1",
            "name": "Bedroom",
            "lighting": "Natural morning light through a window.",
            "notes": "Clean, minimalist style bedroom.",
        },
        {
            "id": "l2",
            "name": "Sidewalk Cafe",
            "lighting": "Golden hour, late afternoon.",
            "notes": "Busy urban sidewalk with cafe seating.",
        },
    ],
    "brand_assets": ["Product bottle with blue label"],
    "aida": {
        "enabled": True,
        "mapping": {"s1": "ATTENTION", "s2": "ACTION"},
    },
    "scenes": [
        {
            "id": "s1",
            "title": "The Transformation",
            "duration_sec": 8,
            "location_id": "l1",
            "ratio": "inherit",
            "use_vo": False,
            "shots": [
                {
                    "type": "close-up",
                    "action": "Rio applies hair powder to his flat hair.",
                    "camera": "Slightly slow-motion.",
                },
                {
                    "type": "medium",
                    "action": (
                        "He styles his hair, which now has incredible volume. "
                        "He smiles confidently at his reflection."
                    ),
                    "camera": "Push-in on his happy face.",
                },
            ],
            "dialog": [
                {"character_id": "c1", "mode": "vo", "line": "Rambut lepek? Nggak lagi."},
            ],
            "hooks": ["Negative", "Contradiction"],
        },
        {
            "id": "s2",
            "title": "The Result",
            "duration_sec": 8,
            "location_id": "l2",
            "ratio": "inherit",
            "use_vo": False,
            "shots": [
                {
                    "type": "wide",
                    "action": "Rio walks confidently down the street, turning heads.",
                    "camera": "Tracking shot.",
                },
                {
                    "type": "close-up",
                    "action": "He holds up the product to the camera with a wink.",
                    "camera": "Whip pan to product.",
                },
            ],
            "dialog": [
                {
                    "character_id": "c1",
                    "mode": "vo",
                    "line": "Dapetin volume maksimal, sekarang juga!",
                },
            ],
            "hooks": ["CTA"],
        },
    ],
}


def template() -> StoryboardDoc:
    """Return a fresh, independently mutable copy of the starter storyboard."""
    return copy.deepcopy(_TEMPLATE)
