"""
integrity.py — Referential integrity for entity removal.

Removing a character or location that scenes still point at would leave a
dangling reference.  Removal is a two-step protocol:

    plan   — pure scan; returns a ``RemovalPlan`` listing every usage.
    apply  — ``plan.apply(document)`` clears every usage to "" and THEN
             removes the entity, returning a new document.

Cleared references are emptied, not deleted: the dialog line survives, so a
scene never drops below its one-line minimum.  An emptied ``location_id`` or
``character_id`` is reported by the validation engine as an ordinary
"required" field error until the user picks a replacement.

``remove_character`` / ``remove_location`` wrap both steps behind a
confirmation callback.  When usages exist and the callback declines, the
document is returned untouched (all-or-nothing).
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from storyboard.models import StoryboardDoc

logger = logging.getLogger(__name__)

Usage = Tuple[int, ...]
ConfirmFn = Callable[["RemovalPlan"], bool]


@dataclass(frozen=True)
class RemovalPlan:
    """Impact of removing one entity.

    usages:
        ``(scene_index, dialog_index)`` pairs for a character,
        ``(scene_index,)`` for a location or scene.
    """

    kind: str
    entity_id: str
    usages: Tuple[Usage, ...]

    @property
    def requires_confirmation(self) -> bool:
        return bool(self.usages)

    def apply(self, document: StoryboardDoc) -> StoryboardDoc:
        """Return a new document with references cleared and the entity removed.

        The input *document* is never mutated.
        """
        new_doc: StoryboardDoc = copy.deepcopy(document)
        if self.kind == "character":
            _clear_dialog_references(new_doc, self.entity_id, self.usages)
            new_doc["characters"] = _without_id(new_doc.get("characters"), self.entity_id)
        elif self.kind == "location":
            _clear_location_references(new_doc, self.entity_id, self.usages)
            new_doc["locations"] = _without_id(new_doc.get("locations"), self.entity_id)
        elif self.kind == "scene":
            new_doc["scenes"] = _without_id(new_doc.get("scenes"), self.entity_id)
            mapping = (new_doc.get("aida") or {}).get("mapping")
            if isinstance(mapping, dict):
                mapping.pop(self.entity_id, None)
        else:
            raise ValueError(f"Unknown removal kind: {self.kind!r}")
        return new_doc

    def describe(self) -> str:
        """One-line summary suitable for a confirmation prompt."""
        if not self.usages:
            return f"{self.kind} {self.entity_id!r} is not referenced"
        where = ", ".join(_usage_label(self.kind, u) for u in self.usages)
        return f"{self.kind} {self.entity_id!r} is used by {where}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _scenes(document: StoryboardDoc) -> list:
    scenes = document.get("scenes")
    return scenes if isinstance(scenes, list) else []


def _without_id(entries, entity_id: str) -> list:
    if not isinstance(entries, list):
        return []
    return [e for e in entries if not (isinstance(e, dict) and e.get("id") == entity_id)]


def _clear_dialog_references(document: StoryboardDoc, entity_id: str, usages) -> None:
    scenes = _scenes(document)
    for scene_index, dialog_index in usages:
        if scene_index >= len(scenes) or not isinstance(scenes[scene_index], dict):
            continue
        dialog = scenes[scene_index].get("dialog")
        if not isinstance(dialog, list) or dialog_index >= len(dialog):
            continue
        line = dialog[dialog_index]
        # A plan may be applied to a newer document; only clear what still matches.
        if isinstance(line, dict) and line.get("character_id") == entity_id:
            line["character_id"] = ""


def _clear_location_references(document: StoryboardDoc, entity_id: str, usages) -> None:
    scenes = _scenes(document)
    for (scene_index,) in usages:
        if scene_index >= len(scenes):
            continue
        scene = scenes[scene_index]
        if isinstance(scene, dict) and scene.get("location_id") == entity_id:
            scene["location_id"] = ""


def _usage_label(kind: str, usage: Usage) -> str:
    if kind == "character":
        return f"scenes[{usage[0]}].dialog[{usage[1]}]"
    return f"scenes[{usage[0]}]"


def _has_id(entries, entity_id: str) -> bool:
    return isinstance(entries, list) and any(
        isinstance(e, dict) and e.get("id") == entity_id for e in entries
    )


def _gate(document: StoryboardDoc, plan: RemovalPlan, confirm: Optional[ConfirmFn]) -> StoryboardDoc:
    if plan.requires_confirmation:
        if confirm is None or not confirm(plan):
            logger.info("removal of %s %r declined; document unchanged", plan.kind, plan.entity_id)
            return document
        logger.info("cascading clear: %s", plan.describe())
    return plan.apply(document)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def plan_character_removal(document: StoryboardDoc, character_id: str) -> RemovalPlan:
    """Find every dialog line that speaks as *character_id*."""
    usages = []
    for i, scene in enumerate(_scenes(document)):
        if not isinstance(scene, dict):
            continue
        dialog = scene.get("dialog")
        for j, line in enumerate(dialog if isinstance(dialog, list) else []):
            if isinstance(line, dict) and line.get("character_id") == character_id:
                usages.append((i, j))
    return RemovalPlan(kind="character", entity_id=character_id, usages=tuple(usages))


def plan_location_removal(document: StoryboardDoc, location_id: str) -> RemovalPlan:
    """Find every scene set at *location_id*."""
    usages = tuple(
        (i,) for i, scene in enumerate(_scenes(document))
        if isinstance(scene, dict) and scene.get("location_id") == location_id
    )
    return RemovalPlan(kind="location", entity_id=location_id, usages=usages)


def plan_scene_removal(document: StoryboardDoc, scene_id: str) -> RemovalPlan:
    """Scenes are only referenced by the AIDA mapping, which is pruned on apply.

    The mapping entry is not treated as a usage needing confirmation.
    """
    return RemovalPlan(kind="scene", entity_id=scene_id, usages=())


def remove_character(
    document: StoryboardDoc,
    character_id: str,
    confirm: Optional[ConfirmFn] = None,
) -> StoryboardDoc:
    """Remove *character_id*, asking *confirm* first if dialog lines use it.

    Returns the new document, or *document* itself when the character is
    absent or the confirmation is declined.
    """
    if not _has_id(document.get("characters"), character_id):
        return document
    return _gate(document, plan_character_removal(document, character_id), confirm)


def remove_location(
    document: StoryboardDoc,
    location_id: str,
    confirm: Optional[ConfirmFn] = None,
) -> StoryboardDoc:
    """Remove *location_id*, asking *confirm* first if scenes use it."""
    if not _has_id(document.get("locations"), location_id):
        return document
    return _gate(document, plan_location_removal(document, location_id), confirm)


def remove_scene(document: StoryboardDoc, scene_id: str) -> StoryboardDoc:
    """Remove *scene_id* and its AIDA mapping entry."""
    if not _has_id(document.get("scenes"), scene_id):
        return document
    return plan_scene_removal(document, scene_id).apply(document)
