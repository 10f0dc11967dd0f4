"""Storyboard validation engine.

Two passes over a candidate document (typically freshly parsed JSON):

1. Structural/per-field pass — the pydantic ``Storyboard`` model.  Every
   violation is collected, keyed by its dotted path
   (``scenes.1.dialog.0.line``).
2. Cross-entity pass — rules that need more than one entity at a time:
   dialog ``character_id`` and scene ``location_id`` references, and the
   model-dependent aspect-ratio rules.  It walks the raw input and tolerates
   entries that the first pass already rejected.

Validation failures are a normal result, never an exception.  Only input
that is not a JSON object at all raises ``MalformedStoryboardError``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from storyboard.constants import (
    ASPECT_RATIO_V2,
    ASPECT_RATIOS_V3,
    INHERIT_RATIO,
    MODEL_VEO_2,
    MODEL_VEO_3,
)
from storyboard.models import (
    Aida,
    Brand,
    Character,
    DialogLine,
    Location,
    Metadata,
    Scene,
    Shot,
    ShotAudio,
    Storyboard,
    StoryboardDoc,
)

logger = logging.getLogger(__name__)

ErrorMap = Dict[str, List[str]]

# Messages for "required" / minimum-length failures, keyed by field name.
_REQUIRED_MESSAGES: Dict[str, str] = {
    "project_title": "Project title is required",
    "age_range": "Age range is required",
    "look": "Look description is required",
    "name": "Location name is required",
    "type": "Shot type is required",
    "action": "Action is required",
    "character_id": "Character ID is required",
    "line": "Dialog line is required",
    "location_id": "Location is required",
    "characters": "At least one character is required",
    "locations": "At least one location is required",
    "scenes": "At least one scene is required",
    "shots": "At least one shot is required per scene",
    "dialog": "At least one dialog/VO line is required per scene",
}

_RANGE_MESSAGES: Dict[str, str] = {
    "duration_sec": "Duration must be positive",
    "total_duration_sec": "Target duration must be at least 1 second",
    "variations": "Variations must be between 0 and 3",
}

_REQUIRED_TYPES = frozenset({"missing", "string_too_short", "too_short"})
_RANGE_TYPES = frozenset({"greater_than_equal", "less_than_equal"})

# Nested model reached through each field, for ranking error paths.
_CHILD_MODELS = {
    (Storyboard, "metadata"): Metadata,
    (Storyboard, "characters"): Character,
    (Storyboard, "locations"): Location,
    (Storyboard, "aida"): Aida,
    (Storyboard, "scenes"): Scene,
    (Metadata, "brand"): Brand,
    (Scene, "shots"): Shot,
    (Scene, "dialog"): DialogLine,
    (Shot, "audio"): ShotAudio,
}

# Collections whose entries carry a system-assigned id that must be unique.
_ID_COLLECTIONS = (
    ("characters", "character"),
    ("locations", "location"),
    ("scenes", "scene"),
)


class MalformedStoryboardError(ValueError):
    """Raised when the input cannot be interpreted as a storyboard at all."""


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation run: a normalized document or the full error map."""

    document: Optional[StoryboardDoc] = None
    errors: ErrorMap = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _path(loc: Tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc)


def _field_message(error: dict) -> str:
    """Turn one pydantic error dict into a human-readable message."""
    loc = error.get("loc") or ()
    name = loc[-1] if loc and isinstance(loc[-1], str) else None
    err_type = error.get("type", "")

    if err_type in _REQUIRED_TYPES and name in _REQUIRED_MESSAGES:
        return _REQUIRED_MESSAGES[name]
    if err_type in _RANGE_TYPES and name in _RANGE_MESSAGES:
        return _RANGE_MESSAGES[name]
    if err_type == "value_error":
        ctx_error = (error.get("ctx") or {}).get("error")
        if ctx_error is not None:
            return str(ctx_error)
    return error.get("msg", "Invalid value")


def _add(errors: ErrorMap, path: str, message: str) -> None:
    errors.setdefault(path, []).append(message)


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _ids(entries: Any) -> frozenset:
    return frozenset(
        e["id"] for e in _as_list(entries)
        if isinstance(e, dict) and isinstance(e.get("id"), str)
    )


def _document_order(path: str) -> Tuple[int, ...]:
    """Sort key: field segments rank by model field order, list indices by value."""
    key = []
    model = Storyboard
    for part in path.split("."):
        if part.isdigit():
            key.append(int(part))
            continue
        fields = list(model.model_fields) if model is not None else []
        key.append(fields.index(part) if part in fields else len(fields))
        model = _CHILD_MODELS.get((model, part))
    return tuple(key)


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------

def _field_pass(data: dict) -> Tuple[Optional[Storyboard], ErrorMap]:
    errors: ErrorMap = {}
    try:
        return Storyboard.model_validate(data), errors
    except ValidationError as exc:
        for e in exc.errors():
            _add(errors, _path(e["loc"]), _field_message(e))
        return None, errors


def _ratio_rules(data: dict, errors: ErrorMap) -> None:
    model = data.get("model")
    aspect_ratio = _as_dict(data.get("metadata")).get("aspect_ratio")
    scenes = _as_list(data.get("scenes"))

    if model == MODEL_VEO_2:
        if isinstance(aspect_ratio, str) and aspect_ratio != ASPECT_RATIO_V2:
            _add(errors, "metadata.aspect_ratio", "Veo-2 only supports 9:16 aspect ratio.")
        for i, scene in enumerate(scenes):
            ratio = _as_dict(scene).get("ratio")
            if isinstance(ratio, str) and ratio not in (INHERIT_RATIO, ASPECT_RATIO_V2):
                _add(errors, f"scenes.{i}.ratio", "Veo-2 scenes must inherit or be 9:16.")

    elif model == MODEL_VEO_3:
        allowed = ", ".join(ASPECT_RATIOS_V3)
        if isinstance(aspect_ratio, str) and aspect_ratio not in ASPECT_RATIOS_V3:
            _add(errors, "metadata.aspect_ratio", f"Veo-3 supports only {allowed} aspect ratios.")
        for i, scene in enumerate(scenes):
            ratio = _as_dict(scene).get("ratio")
            if isinstance(ratio, str) and ratio != INHERIT_RATIO and ratio not in ASPECT_RATIOS_V3:
                _add(errors, f"scenes.{i}.ratio", f"Veo-3 scenes must inherit or be one of {allowed}.")


def _cross_entity_pass(data: dict) -> ErrorMap:
    """Duplicate ID, reference and ratio checks; empty or non-string references are left to the field pass."""
    errors: ErrorMap = {}
    for collection, kind in _ID_COLLECTIONS:
        seen = set()
        for i, entry in enumerate(_as_list(data.get(collection))):
            entry_id = _as_dict(entry).get("id")
            if not isinstance(entry_id, str) or not entry_id:
                continue
            if entry_id in seen:
                _add(errors, f"{collection}.{i}.id", f'Duplicate {kind} ID "{entry_id}".')
            seen.add(entry_id)

    character_ids = _ids(data.get("characters"))
    location_ids = _ids(data.get("locations"))

    for i, scene in enumerate(_as_list(data.get("scenes"))):
        if not isinstance(scene, dict):
            continue
        location_id = scene.get("location_id")
        if isinstance(location_id, str) and location_id and location_id not in location_ids:
            _add(errors, f"scenes.{i}.location_id", f'Location ID "{location_id}" does not exist.')
        for j, line in enumerate(_as_list(scene.get("dialog"))):
            if not isinstance(line, dict):
                continue
            character_id = line.get("character_id")
            if isinstance(character_id, str) and character_id and character_id not in character_ids:
                _add(
                    errors,
                    f"scenes.{i}.dialog.{j}.character_id",
                    f'Character ID "{character_id}" does not exist.',
                )

    _ratio_rules(data, errors)
    return errors


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_storyboard(data: Any) -> ValidationResult:
    """Validate *data* and return a ``ValidationResult``.

    On success ``result.document`` is the normalized document: defaults
    filled in, unknown keys dropped, unset optionals omitted.  On failure
    ``result.errors`` maps every offending path to its messages, in document
    order.

    Raises:
        MalformedStoryboardError: *data* is not a dict.
    """
    if not isinstance(data, dict):
        raise MalformedStoryboardError(
            f"Storyboard must be a JSON object, got {type(data).__name__}"
        )

    model, errors = _field_pass(data)
    for path, messages in _cross_entity_pass(data).items():
        for message in messages:
            _add(errors, path, message)

    if errors:
        ordered = dict(sorted(errors.items(), key=lambda item: _document_order(item[0])))
        logger.debug("storyboard rejected with %d invalid field(s)", len(ordered))
        return ValidationResult(errors=ordered)

    return ValidationResult(document=model.model_dump(mode="json", exclude_none=True))


def format_errors(errors: ErrorMap) -> List[str]:
    """Flatten an error map into ``"<path>: <message>"`` lines."""
    return [f"{path}: {message}" for path, messages in errors.items() for message in messages]


def validate_storyboard_file(path: Path) -> ValidationResult:
    """Load JSON from *path* and run validate_storyboard().

    Raises:
        ValueError: if the file is missing, contains invalid JSON, or is not
            a JSON object.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ValueError(f"Storyboard file not found: {path}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    return validate_storyboard(data)
