"""Editing session: the single owner of the in-memory storyboard.

Rendering code reads ``session.document`` (a copy) and calls back into the
mutation methods below; it never edits the document directly.  Every
successful mutation schedules a debounced draft save.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, List, Optional

from storyboard import integrity
from storyboard.aggregate import DurationSummary, duration_summary, total_duration
from storyboard.constants import (
    ASPECT_RATIO_V2,
    CHARACTER_PREFIX,
    DEFAULT_DRAFT_KEY,
    INHERIT_RATIO,
    LOCATION_PREFIX,
    MODEL_VEO_2,
    MODELS,
    SCENE_PREFIX,
)
from storyboard.export import GenerateResult, generate
from storyboard.ids import IdAllocator
from storyboard.models import StoryboardDoc
from storyboard.template import template
from storyboard.validator import ValidationResult, validate_storyboard

logger = logging.getLogger(__name__)


class StoryboardSession:
    def __init__(
        self,
        gateway=None,
        key: str = DEFAULT_DRAFT_KEY,
        document: Optional[StoryboardDoc] = None,
    ):
        """
        Args:
            gateway:  Optional ``drafts.DraftGateway``; without one the
                      session lives in memory only.
            key:      Draft slot name.
            document: Starting document.  Defaults to the stored draft, or
                      the template when there is no gateway.
        """
        self._gateway = gateway
        self._key = key
        self._ids = IdAllocator()
        if document is not None:
            self._document = copy.deepcopy(document)
        elif gateway is not None:
            self._document = gateway.load(key)
        else:
            self._document = template()
        self.last_export: Optional[GenerateResult] = None

    @property
    def document(self) -> StoryboardDoc:
        return copy.deepcopy(self._document)

    # ── Derived values ────────────────────────────────────────────────────

    @property
    def total_duration(self):
        return total_duration(self._list("scenes"))

    def duration_summary(self) -> DurationSummary:
        return duration_summary(self._document)

    # ── Adding entities ───────────────────────────────────────────────────

    def add_character(self, **fields: Any) -> str:
        return self._append_entity(
            "characters", CHARACTER_PREFIX,
            {"name": "", "age_range": "", "look": "", "outfit_notes": ""}, fields,
        )

    def add_location(self, **fields: Any) -> str:
        return self._append_entity(
            "locations", LOCATION_PREFIX,
            {"name": "", "lighting": "", "notes": ""}, fields,
        )

    def add_scene(self, **fields: Any) -> str:
        defaults = {
            "title": "",
            "duration_sec": 10,
            "location_id": "",
            "ratio": INHERIT_RATIO,
            "shots": [{"type": "medium", "action": ""}],
            "dialog": [{"character_id": "", "line": "", "mode": "dialog"}],
            "use_vo": False,
        }
        return self._append_entity("scenes", SCENE_PREFIX, defaults, fields)

    def add_shot(self, scene_id: str, **fields: Any) -> int:
        """Append a shot to *scene_id*; returns its index."""
        doc = copy.deepcopy(self._document)
        shots = self._scene_in(doc, scene_id).setdefault("shots", [])
        shots.append({"type": "medium", "action": "", **fields})
        self._commit(doc)
        return len(shots) - 1

    def add_dialog_line(self, scene_id: str, **fields: Any) -> int:
        """Append a dialog line to *scene_id*; returns its index.

        Defaults to the first character and, when the scene is voice-over,
        to ``vo`` mode.
        """
        doc = copy.deepcopy(self._document)
        scene = self._scene_in(doc, scene_id)
        characters = doc.get("characters") or []
        first_id = characters[0].get("id", "") if characters and isinstance(characters[0], dict) else ""
        line = {
            "character_id": first_id,
            "line": "",
            "mode": "vo" if scene.get("use_vo") else "dialog",
            **fields,
        }
        dialog = scene.setdefault("dialog", [])
        dialog.append(line)
        self._commit(doc)
        return len(dialog) - 1

    # ── Editing fields ────────────────────────────────────────────────────

    def update(self, path: str, value: Any) -> None:
        """Set the field at dotted *path* (e.g. ``scenes.0.title``).

        Raises:
            ValueError: *path* names an ``id`` (ids are system-assigned) or
                does not exist in the document.
        """
        parts = path.split(".")
        if parts[-1] == "id":
            raise ValueError(f"IDs are assigned by the system and cannot be edited: {path}")
        if parts == ["model"]:
            self.set_model(value)
            return

        doc = copy.deepcopy(self._document)
        try:
            parent = doc
            for part in parts[:-1]:
                parent = parent[int(part)] if isinstance(parent, list) else parent[part]
            last = parts[-1]
            if isinstance(parent, list):
                parent[int(last)] = value
            elif isinstance(parent, dict):
                parent[last] = value
            else:
                raise TypeError(type(parent).__name__)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise ValueError(f"No such field: {path}") from exc
        self._commit(doc)

    def set_model(self, model: str) -> None:
        """Switch the model variant; veo-2 pins the global ratio to 9:16."""
        if model not in MODELS:
            raise ValueError(f"model must be one of {list(MODELS)}, got {model!r}")
        doc = copy.deepcopy(self._document)
        doc["model"] = model
        if model == MODEL_VEO_2:
            metadata = doc.setdefault("metadata", {})
            metadata["aspect_ratio"] = ASPECT_RATIO_V2
        self._commit(doc)

    # ── Removing entities ─────────────────────────────────────────────────

    def remove_character(self, character_id: str, confirm: Optional[integrity.ConfirmFn] = None) -> bool:
        """Remove a character; dialog lines using it are cleared only if *confirm* agrees.

        Returns True if the document changed.
        """
        return self._commit_if_changed(
            integrity.remove_character(self._document, character_id, confirm)
        )

    def remove_location(self, location_id: str, confirm: Optional[integrity.ConfirmFn] = None) -> bool:
        return self._commit_if_changed(
            integrity.remove_location(self._document, location_id, confirm)
        )

    def remove_scene(self, scene_id: str) -> bool:
        return self._commit_if_changed(integrity.remove_scene(self._document, scene_id))

    def remove_shot(self, scene_id: str, index: int) -> None:
        self._remove_item(scene_id, "shots", index)

    def remove_dialog_line(self, scene_id: str, index: int) -> None:
        self._remove_item(scene_id, "dialog", index)

    # ── Generate / reset ──────────────────────────────────────────────────

    def validate(self) -> ValidationResult:
        return validate_storyboard(self._document)

    def generate(self) -> GenerateResult:
        self.last_export = generate(self._document)
        return self.last_export

    def reset(self) -> None:
        """Replace the document with the template and delete the saved draft."""
        self._document = template()
        self._ids.reset()
        self.last_export = None
        if self._gateway is not None:
            self._gateway.clear(self._key)
        logger.info("storyboard session reset to template")

    def close(self) -> None:
        """Write any pending draft immediately."""
        if self._gateway is not None:
            self._gateway.flush()

    # ── Internals ─────────────────────────────────────────────────────────

    def _list(self, name: str) -> List[Any]:
        value = self._document.get(name)
        return value if isinstance(value, list) else []

    def _append_entity(self, collection: str, prefix: str, defaults: dict, fields: dict) -> str:
        fields.pop("id", None)
        entity_id = self._ids.next_id(prefix, self._list(collection))
        doc = copy.deepcopy(self._document)
        if not isinstance(doc.get(collection), list):
            doc[collection] = []
        doc[collection].append({"id": entity_id, **defaults, **fields})
        self._commit(doc)
        return entity_id

    @staticmethod
    def _scene_in(doc: StoryboardDoc, scene_id: str) -> dict:
        for scene in doc.get("scenes") or []:
            if isinstance(scene, dict) and scene.get("id") == scene_id:
                return scene
        raise ValueError(f"Unknown scene: {scene_id!r}")

    def _remove_item(self, scene_id: str, field: str, index: int) -> None:
        doc = copy.deepcopy(self._document)
        items = self._scene_in(doc, scene_id).get(field)
        if not isinstance(items, list) or not 0 <= index < len(items):
            raise ValueError(f"No {field} entry {index} in scene {scene_id!r}")
        del items[index]
        self._commit(doc)

    def _commit_if_changed(self, new_doc: StoryboardDoc) -> bool:
        if new_doc is self._document:
            return False
        self._commit(new_doc)
        return True

    def _commit(self, new_doc: StoryboardDoc) -> None:
        self._document = new_doc
        if self._gateway is not None:
            self._gateway.save(self._key, new_doc)
