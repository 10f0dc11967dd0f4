"""Controlled vocabularies and model-variant rules for storyboard documents."""
from __future__ import annotations

MODEL_VEO_2 = "veo-2"
MODEL_VEO_3 = "veo-3"
MODELS = (MODEL_VEO_2, MODEL_VEO_3)

# veo-2 renders a single fixed ratio; veo-3 picks from an enumerated set.
ASPECT_RATIO_V2 = "9:16"
ASPECT_RATIOS_V3 = ("9:16", "16:9", "1:1")
INHERIT_RATIO = "inherit"

LANGUAGES = {
    "id": "Indonesian",
    "en": "English",
}

TONES = (
    "Comedy", "Warm", "Inspirational", "Dramatic",
    "Corporate", "Educational", "Cinematic", "Energetic",
)

SHOT_TYPES = (
    "wide", "medium", "close-up", "insert",
    "POV", "establishing", "dutch-angle", "aerial",
)

HOOK_TYPES = ("Negative", "Contradiction", "Question", "Shocking", "Bold", "CTA")

AIDA_STAGES = ("ATTENTION", "INTEREST", "DESIRE", "ACTION")

DIALOG_MODES = ("dialog", "vo")

CHARACTER_PREFIX = "c"
LOCATION_PREFIX = "l"
SCENE_PREFIX = "s"

DEFAULT_DRAFT_KEY = "veo_storyboard_draft"
DEFAULT_AUTOSAVE_DELAY_SEC = 2.0
