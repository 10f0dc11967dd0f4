"""Tests for storyboard/session.py — the controlled mutation interface."""
from __future__ import annotations

import json

import pytest

from drafts import DraftGateway, MemoryDraftStore
from storyboard.session import StoryboardSession
from storyboard.template import template

_KEY = "veo_storyboard_draft"


@pytest.fixture
def store() -> MemoryDraftStore:
    return MemoryDraftStore()


@pytest.fixture
def session(store, timers) -> StoryboardSession:
    return StoryboardSession(gateway=DraftGateway(store, timer_factory=timers), key=_KEY)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestStartup:

    def test_starts_from_template_without_draft(self, session):
        assert session.document == template()

    def test_starts_from_valid_draft(self, store, timers):
        draft = template()
        draft["metadata"]["project_title"] = "Restored"
        store.write(_KEY, json.dumps(draft))
        s = StoryboardSession(gateway=DraftGateway(store, timer_factory=timers), key=_KEY)
        assert s.document["metadata"]["project_title"] == "Restored"

    def test_in_memory_session(self):
        assert StoryboardSession().document == template()

    def test_document_property_is_a_copy(self, session):
        session.document["metadata"]["project_title"] = "hacked"
        assert session.document["metadata"]["project_title"] == "Hair Powder Ad"


# ---------------------------------------------------------------------------
# Adding
# ---------------------------------------------------------------------------

class TestAdding:

    def test_add_character_assigns_next_id(self, session):
        assert session.add_character(name="Sari") == "c2"
        added = session.document["characters"][-1]
        assert added == {"id": "c2", "name": "Sari", "age_range": "", "look": "", "outfit_notes": ""}

    def test_caller_cannot_choose_id(self, session):
        assert session.add_location(id="l1", name="Rooftop") == "l3"

    def test_ids_never_reused_after_removal(self, session):
        added = session.add_character()
        assert added == "c2"
        assert session.remove_character(added)
        assert session.add_character() == "c3"

    def test_add_scene_defaults(self, session):
        scene_id = session.add_scene()
        assert scene_id == "s3"
        scene = session.document["scenes"][-1]
        assert scene["ratio"] == "inherit"
        assert scene["duration_sec"] == 10
        assert scene["shots"] == [{"type": "medium", "action": ""}]
        assert scene["dialog"] == [{"character_id": "", "line": "", "mode": "dialog"}]

    def test_add_shot(self, session):
        index = session.add_shot("s1", type="insert", action="Product on the shelf.")
        assert index == 2
        assert session.document["scenes"][0]["shots"][2]["type"] == "insert"

    def test_add_dialog_line_defaults_to_first_character(self, session):
        index = session.add_dialog_line("s2")
        line = session.document["scenes"][1]["dialog"][index]
        assert line == {"character_id": "c1", "line": "", "mode": "dialog"}

    def test_add_dialog_line_in_vo_scene(self, session):
        session.update("scenes.0.use_vo", True)
        index = session.add_dialog_line("s1")
        assert session.document["scenes"][0]["dialog"][index]["mode"] == "vo"

    def test_unknown_scene_raises(self, session):
        with pytest.raises(ValueError, match="Unknown scene"):
            session.add_shot("s99")


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------

class TestUpdate:

    def test_update_nested_field(self, session):
        session.update("scenes.1.title", "Street Walk")
        assert session.document["scenes"][1]["title"] == "Street Walk"

    def test_ids_are_not_editable(self, session):
        with pytest.raises(ValueError, match="IDs are assigned by the system"):
            session.update("characters.0.id", "hero")

    def test_unknown_path_raises(self, session):
        with pytest.raises(ValueError, match="No such field"):
            session.update("scenes.9.title", "x")

    def test_switching_to_veo2_pins_ratio(self, session):
        session.set_model("veo-3")
        session.update("metadata.aspect_ratio", "16:9")
        session.update("model", "veo-2")
        assert session.document["metadata"]["aspect_ratio"] == "9:16"

    def test_unknown_model_rejected(self, session):
        with pytest.raises(ValueError):
            session.set_model("veo-9")

    def test_totals_follow_edits(self, session):
        assert session.total_duration == 16
        session.update("scenes.0.duration_sec", 10)
        assert session.total_duration == 18
        assert session.duration_summary().exceeded


# ---------------------------------------------------------------------------
# Removing
# ---------------------------------------------------------------------------

class TestRemoving:

    def test_declined_removal_changes_nothing(self, session, timers):
        before = session.document
        assert not session.remove_character("c1", confirm=lambda plan: False)
        assert session.document == before
        assert timers.live == []

    def test_confirmed_removal_clears_dialog(self, session):
        assert session.remove_character("c1", confirm=lambda plan: True)
        doc = session.document
        assert doc["characters"] == []
        assert doc["scenes"][0]["dialog"][0]["character_id"] == ""

    def test_remove_location_confirmed(self, session):
        assert session.remove_location("l1", confirm=lambda plan: True)
        assert session.document["scenes"][0]["location_id"] == ""

    def test_remove_scene(self, session):
        assert session.remove_scene("s1")
        assert "s1" not in session.document["aida"]["mapping"]

    def test_remove_shot_and_dialog_line(self, session):
        session.remove_shot("s1", 0)
        session.remove_dialog_line("s1", 0)
        scene = session.document["scenes"][0]
        assert len(scene["shots"]) == 1
        assert scene["dialog"] == []
        assert "scenes.0.dialog" in session.validate().errors

    def test_remove_out_of_range_raises(self, session):
        with pytest.raises(ValueError):
            session.remove_shot("s1", 5)


# ---------------------------------------------------------------------------
# Persistence & generate
# ---------------------------------------------------------------------------

class TestAutosave:

    def test_burst_of_edits_writes_once(self, session, store, timers):
        session.update("metadata.project_title", "A")
        session.update("metadata.project_title", "AB")
        session.update("metadata.project_title", "ABC")
        assert store.read(_KEY) is None
        assert len(timers.live) == 1
        timers.elapse()
        assert json.loads(store.read(_KEY))["metadata"]["project_title"] == "ABC"

    def test_close_flushes_pending_draft(self, session, store):
        session.add_location(name="Gym")
        session.close()
        assert json.loads(store.read(_KEY))["locations"][-1]["name"] == "Gym"

    def test_reset_restores_template_and_clears_draft(self, session, store, timers):
        session.update("metadata.project_title", "Changed")
        timers.elapse()
        assert store.read(_KEY) is not None
        session.reset()
        assert session.document == template()
        assert store.read(_KEY) is None
        assert session.add_character() == "c2"


class TestGenerate:

    def test_generate_template(self, session):
        result = session.generate()
        assert result.ok
        assert session.last_export is result

    def test_generate_reports_errors(self, session):
        session.remove_location("l2", confirm=lambda plan: True)
        result = session.generate()
        assert not result.ok
        assert json.loads(result.text) == {"scenes.1.location_id": ["Location is required"]}
