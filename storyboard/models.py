"""Storyboard data models: the typed shape of an exported storyboard document.

Documents are edited as plain JSON-shaped dicts (``StoryboardDoc``) so that a
half-finished, temporarily invalid document can be held in memory and saved
as a draft.  The pydantic models below describe the *accepted* shape and are
only applied by the validation engine.

extra="ignore" on all models gives forward-compatibility: unknown fields from
newer drafts are silently dropped rather than rejected.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from storyboard.constants import SHOT_TYPES

StoryboardDoc = Dict[str, Any]


def _whole_seconds(value: float) -> Union[int, float]:
    # Whole numbers go back out as ints: 8, not 8.0.
    return int(value) if value.is_integer() else value


# ── Cast & places ─────────────────────────────────────────────────────────────


class Character(BaseModel):
    """A recurring on-screen person, kept visually consistent across scenes."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: Optional[str] = None
    age_range: str = Field(min_length=1)
    look: str = Field(min_length=1)
    outfit_notes: Optional[str] = None


class Location(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = Field(min_length=1)
    lighting: Optional[str] = None
    notes: Optional[str] = None


# ── Scene content ─────────────────────────────────────────────────────────────


class ShotAudio(BaseModel):
    model_config = ConfigDict(extra="ignore")

    music: Optional[str] = None
    sfx: Optional[List[str]] = None


class Shot(BaseModel):
    """A single camera shot inside a scene."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(min_length=1)
    camera: Optional[str] = None
    action: str = Field(min_length=1)
    visual_style: Optional[str] = None
    audio: Optional[ShotAudio] = None
    overlay_text: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("type")
    @classmethod
    def _known_shot_type(cls, value: str) -> str:
        if value not in SHOT_TYPES:
            raise ValueError(f"Shot type must be one of {', '.join(SHOT_TYPES)}")
        return value


class DialogLine(BaseModel):
    """A spoken line; ``mode`` distinguishes on-camera dialog from voice-over."""

    model_config = ConfigDict(extra="ignore")

    character_id: str = Field(min_length=1)
    mode: Literal["dialog", "vo"]
    line: str = Field(min_length=1)


class Scene(BaseModel):
    """An ordered unit of the storyboard: one location, shots and lines.

    ``ratio`` is either ``"inherit"`` or an explicit aspect ratio; which
    explicit values are allowed depends on the document's model and is
    checked by the cross-entity pass, not here.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    title: Optional[str] = None
    duration_sec: float = Field(ge=0, strict=True)
    location_id: str = Field(min_length=1)
    ratio: str
    use_vo: bool = Field(default=False, strict=True)
    shots: List[Shot] = Field(min_length=1)
    dialog: List[DialogLine] = Field(min_length=1)
    hooks: Optional[List[str]] = None

    @field_serializer("duration_sec")
    def _serialize_duration(self, value: float) -> Union[int, float]:
        return _whole_seconds(value)


# ── Document ──────────────────────────────────────────────────────────────────


class Brand(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tagline: Optional[str] = None
    tone: Optional[List[str]] = None


class Metadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project_title: str = Field(min_length=1)
    language: Literal["id", "en"]
    aspect_ratio: str
    total_duration_sec: float = Field(ge=1, strict=True)
    brand: Brand

    @field_serializer("total_duration_sec")
    def _serialize_total_duration(self, value: float) -> Union[int, float]:
        return _whole_seconds(value)


class Aida(BaseModel):
    """AIDA marketing-funnel mapping: scene id → stage label."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = Field(default=False, strict=True)
    mapping: Optional[Dict[str, str]] = None


class Storyboard(BaseModel):
    """The full storyboard document exported for video generation.

    Field order is document order: validation errors are reported in the
    order the fields are declared here.
    """

    model_config = ConfigDict(extra="ignore")

    model: Literal["veo-2", "veo-3"]
    metadata: Metadata
    characters: List[Character] = Field(min_length=1)
    locations: List[Location] = Field(min_length=1)
    brand_assets: Optional[List[str]] = None
    global_prompt: Optional[str] = None
    aida: Optional[Aida] = None
    scenes: List[Scene] = Field(min_length=1)
    seed: Optional[int] = Field(default=None, strict=True)
    variations: Optional[int] = Field(default=None, ge=0, le=3, strict=True)
