"""Tests for storyboard/integrity.py — removal planning and cascading clears."""
from __future__ import annotations

import copy

import pytest

from storyboard.integrity import (
    RemovalPlan,
    plan_character_removal,
    plan_location_removal,
    plan_scene_removal,
    remove_character,
    remove_location,
    remove_scene,
)
from storyboard.template import template
from storyboard.validator import validate_storyboard


def _with_second_character() -> dict:
    doc = template()
    doc["characters"].append({"id": "c2", "age_range": "30-35", "look": "Barista."})
    return doc


def _always(answer: bool):
    calls: list = []

    def confirm(plan: RemovalPlan) -> bool:
        calls.append(plan)
        return answer

    confirm.calls = calls
    return confirm


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

class TestPlanCharacterRemoval:

    def test_collects_every_dialog_usage(self):
        plan = plan_character_removal(template(), "c1")
        assert plan.usages == ((0, 0), (1, 0))
        assert plan.requires_confirmation

    def test_unused_character_needs_no_confirmation(self):
        plan = plan_character_removal(_with_second_character(), "c2")
        assert plan.usages == ()
        assert not plan.requires_confirmation

    def test_describe_lists_usages(self):
        text = plan_character_removal(template(), "c1").describe()
        assert "scenes[0].dialog[0]" in text
        assert "scenes[1].dialog[0]" in text

    def test_tolerates_malformed_scenes(self):
        doc = template()
        doc["scenes"].append("not a scene")
        doc["scenes"].append({"id": "s4", "dialog": "nope"})
        assert plan_character_removal(doc, "c1").usages == ((0, 0), (1, 0))


class TestPlanLocationRemoval:

    def test_collects_scene_usages(self):
        assert plan_location_removal(template(), "l2").usages == ((1,),)

    def test_unknown_location_has_no_usages(self):
        assert plan_location_removal(template(), "l99").usages == ()


# ---------------------------------------------------------------------------
# Applying
# ---------------------------------------------------------------------------

class TestApply:

    def test_apply_clears_then_removes_character(self):
        doc = template()
        new_doc = plan_character_removal(doc, "c1").apply(doc)
        assert new_doc["characters"] == []
        assert new_doc["scenes"][0]["dialog"][0]["character_id"] == ""
        assert new_doc["scenes"][1]["dialog"][0]["character_id"] == ""

    def test_dialog_lines_survive_the_clear(self):
        doc = template()
        new_doc = plan_character_removal(doc, "c1").apply(doc)
        assert new_doc["scenes"][0]["dialog"][0]["line"] == "Rambut lepek? Nggak lagi."
        assert len(new_doc["scenes"][0]["dialog"]) == 1

    def test_apply_never_mutates_input(self):
        doc = template()
        before = copy.deepcopy(doc)
        plan_location_removal(doc, "l1").apply(doc)
        assert doc == before

    def test_cleared_location_surfaces_as_field_error(self):
        doc = template()
        new_doc = plan_location_removal(doc, "l1").apply(doc)
        errors = validate_storyboard(new_doc).errors
        assert errors == {"scenes.0.location_id": ["Location is required"]}

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            RemovalPlan(kind="shot", entity_id="x", usages=()).apply(template())

    def test_plan_applied_after_scene_removed(self):
        doc = template()
        plan = plan_character_removal(doc, "c1")
        del doc["scenes"][1]
        new_doc = plan.apply(doc)
        assert new_doc["characters"] == []
        assert new_doc["scenes"][0]["dialog"][0]["character_id"] == ""

    def test_plan_does_not_clear_reassigned_references(self):
        doc = _with_second_character()
        plan = plan_character_removal(doc, "c1")
        doc["scenes"][1]["dialog"][0]["character_id"] = "c2"
        new_doc = plan.apply(doc)
        assert new_doc["scenes"][1]["dialog"][0]["character_id"] == "c2"
        assert [c["id"] for c in new_doc["characters"]] == ["c2"]

    def test_location_plan_does_not_clear_reassigned_scene(self):
        doc = template()
        plan = plan_location_removal(doc, "l2")
        doc["scenes"][1]["location_id"] = "l1"
        new_doc = plan.apply(doc)
        assert new_doc["scenes"][1]["location_id"] == "l1"
        assert validate_storyboard(new_doc).ok


# ---------------------------------------------------------------------------
# Confirmation gate
# ---------------------------------------------------------------------------

class TestRemoveCharacter:

    def test_declined_leaves_document_unchanged(self):
        doc = template()
        before = copy.deepcopy(doc)
        confirm = _always(False)
        result = remove_character(doc, "c1", confirm)
        assert result is doc
        assert doc == before
        assert len(confirm.calls) == 1

    def test_no_confirm_callback_counts_as_declined(self):
        doc = template()
        assert remove_character(doc, "c1") is doc

    def test_confirmed_clears_and_removes_atomically(self):
        doc = template()
        result = remove_character(doc, "c1", _always(True))
        assert result["scenes"][0]["dialog"][0]["character_id"] == ""
        assert all(c["id"] != "c1" for c in result["characters"])

    def test_unused_character_removed_without_asking(self):
        doc = _with_second_character()
        confirm = _always(False)
        result = remove_character(doc, "c2", confirm)
        assert [c["id"] for c in result["characters"]] == ["c1"]
        assert confirm.calls == []

    def test_absent_character_is_a_no_op(self):
        doc = template()
        assert remove_character(doc, "c42", _always(True)) is doc


class TestRemoveLocation:

    def test_declined(self):
        doc = template()
        assert remove_location(doc, "l1", _always(False)) is doc

    def test_confirmed(self):
        result = remove_location(template(), "l2", _always(True))
        assert [loc["id"] for loc in result["locations"]] == ["l1"]
        assert result["scenes"][1]["location_id"] == ""
        assert result["scenes"][0]["location_id"] == "l1"

    def test_result_is_valid_after_reassigning(self):
        result = remove_location(template(), "l2", _always(True))
        result["scenes"][1]["location_id"] = "l1"
        assert validate_storyboard(result).ok


class TestRemoveScene:

    def test_prunes_aida_mapping(self):
        result = remove_scene(template(), "s2")
        assert [s["id"] for s in result["scenes"]] == ["s1"]
        assert result["aida"]["mapping"] == {"s1": "ATTENTION"}

    def test_plan_needs_no_confirmation(self):
        assert not plan_scene_removal(template(), "s1").requires_confirmation

    def test_absent_scene_is_a_no_op(self):
        doc = template()
        assert remove_scene(doc, "s9") is doc
