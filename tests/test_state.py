"""Tests for the editing session: file operations, editing and dirty tracking."""

from __future__ import annotations

import json
import os

import pytest

from permissioneditor.model.entries import Kind, SectionName
from permissioneditor.model.errors import IOFailure, NotFound
from permissioneditor.model.io import FileStore
from permissioneditor.model.state import DocumentState

from conftest import incident


@pytest.fixture
def state() -> DocumentState:
    return DocumentState()


@pytest.fixture
def calls(state) -> list:
    """Records every listener notification."""
    received = []
    state.subscribe(lambda: received.append(state.has_unsaved_changes))
    return received


# ---- files ----

def test_new_file_has_one_clean_entry(state, calls):
    entry = state.new_file(Kind.INCIDENT)
    assert state.kind == Kind.INCIDENT
    assert state.entries == [entry]
    assert entry.id == "I001"
    assert state.selected is entry
    assert state.filepath is None
    assert not state.has_unsaved_changes
    assert calls[-1] is False


def test_open_file_detects_kind(state, incident_file):
    assert state.open_file(str(incident_file))
    assert state.kind == Kind.INCIDENT
    assert state.filepath == str(incident_file)
    assert [e.id for e in state.entries] == ["I001", "I002"]
    assert state.selected is state.entries[0]
    assert not state.has_unsaved_changes
    assert state.status_message == "Loaded 2 permission(s) from incident.json"


def test_open_undetectable_file_keeps_document(state, write_json):
    state.new_file(Kind.CHANGE)
    before = list(state.entries)

    assert not state.open_file(str(write_json([])))
    assert state.status_message == "Unable to determine file type"
    assert state.entries == before
    assert state.kind == Kind.CHANGE


def test_open_reports_validation_problems(state, write_json):
    path = write_json([
        {"Identification": {"Id": "I001"}, "DisplayName": "A", "Grant": {"Caller": "x"}},
        {"Identification": {"Id": "I001"}, "DisplayName": "", "Grant": {"Caller": "x"}},
    ])
    assert state.open_file(str(path))
    assert len(state.entries) == 2
    assert state.status_message == "File loaded with 2 validation error(s)"


def test_open_propagates_load_errors(state, write_json, monkeypatch):
    path = write_json(json.dumps([{"Grant": {"Caller": "x"}}]))
    def _fail(p, kind):
        raise NotFound("gone", p)

    monkeypatch.setattr(FileStore, "load", staticmethod(_fail))
    with pytest.raises(NotFound):
        state.open_file(str(path))
    assert state.entries == []
    assert state.status_message.startswith("Error opening file:")


def test_close_file_clears_everything(state, incident_file):
    state.open_file(str(incident_file))
    state.close_file()
    assert state.kind is None
    assert state.entries == []
    assert state.filepath is None
    assert state.filename == "Untitled"


def test_save_as_writes_and_cleans(state, tmp_path, calls):
    state.new_file(Kind.INCIDENT)
    state.add_entry()
    path = tmp_path / "incident.json"

    result = state.save_as(str(path))

    assert result.is_valid
    assert state.filepath == str(path)
    assert not state.has_unsaved_changes
    assert calls[-1] is False
    assert [e.id for e in FileStore.load(path, Kind.INCIDENT)] == ["I001", "I002"]


def test_save_blocked_by_validation(state, tmp_path):
    state.new_file(Kind.INCIDENT)
    state.update_field(state.selected, "display_name", "  ")
    path = tmp_path / "incident.json"

    result = state.save_as(str(path))

    assert not result.is_valid
    assert not path.exists()
    assert state.has_unsaved_changes
    assert state.status_message == "Cannot save: 1 validation error(s)"


def test_failed_save_leaves_document_dirty(state, tmp_path):
    state.new_file(Kind.CHANGE)
    state.add_entry()
    with pytest.raises(IOFailure):
        state.save_as(str(tmp_path / "missing" / "change.json"))
    assert state.has_unsaved_changes
    assert state.filepath is None


def test_save_requires_path(state):
    state.new_file(Kind.CHANGE)
    with pytest.raises(ValueError):
        state.save()


def test_save_as_requires_kind(state, tmp_path):
    with pytest.raises(ValueError):
        state.save_as(str(tmp_path / "out.json"))
    assert not (tmp_path / "out.json").exists()


def test_save_over_opened_file_keeps_backup(state, incident_file):
    before = incident_file.read_bytes()
    state.open_file(str(incident_file))
    state.update_field(state.selected, "display_name", "Renamed")

    state.save()

    with open(FileStore.backup_path(incident_file), "rb") as f:
        assert f.read() == before
    assert FileStore.load(incident_file, Kind.INCIDENT)[0].display_name == "Renamed"


# ---- collection editing ----

def test_add_entry_generates_unique_id(state, calls):
    state.new_file(Kind.CHANGE)
    entry = state.add_entry()
    assert entry.id == "C002"
    assert state.selected is entry
    assert state.has_unsaved_changes
    assert calls[-1] is True


def test_add_fills_gap_after_delete(state):
    state.new_file(Kind.INCIDENT)
    state.add_entry()
    state.add_entry()
    state.select(state.entries[1])
    state.delete_selected()
    assert state.add_entry().id == "I002"


def test_duplicate_selected(state):
    state.new_file(Kind.INCIDENT)
    state.update_section_field(state.selected, SectionName.GRANT, "caller", "x")
    copy = state.duplicate_selected()
    assert copy.id == "I002"
    assert copy.grant.caller == "x"
    assert copy.grant is not state.entries[0].grant
    assert state.selected is copy


def test_delete_uses_identity(state):
    state.new_file(Kind.INCIDENT)
    twin = incident(state.selected.id, state.selected.display_name)
    twin.grant = state.selected.grant
    twin.revoke = state.selected.revoke
    state.entries.append(twin)

    state.select(twin)
    state.delete_selected()

    assert len(state.entries) == 1
    assert state.entries[0] is not twin
    assert state.selected is None


def test_without_selection_nothing_happens(state):
    state.new_file(Kind.INCIDENT)
    state.select(None)
    state.has_unsaved_changes = False
    assert state.duplicate_selected() is None
    assert state.delete_selected() is None
    assert not state.has_unsaved_changes


def test_add_entry_requires_kind(state):
    with pytest.raises(ValueError):
        state.add_entry()


# ---- field editing ----

def test_unchanged_value_does_not_mark_dirty(state, calls):
    entry = state.new_file(Kind.INCIDENT)
    count = len(calls)
    state.update_field(entry, "id", "I001")
    assert not state.has_unsaved_changes
    assert len(calls) == count


def test_update_field_marks_dirty(state):
    entry = state.new_file(Kind.INCIDENT)
    state.update_field(entry, "id", "I100")
    assert entry.id == "I100"
    assert state.has_unsaved_changes


def test_update_unknown_field(state):
    entry = state.new_file(Kind.INCIDENT)
    with pytest.raises(AttributeError):
        state.update_field(entry, "grant", None)
    with pytest.raises(AttributeError):
        state.update_section_field(entry, SectionName.GRANT, "requester", "x")


def test_update_section_field_creates_missing_section(state):
    entry = state.new_file(Kind.CHANGE)
    entry.revoke = None
    state.update_section_field(entry, "revoke", "requester", "r")
    assert entry.revoke.requester == "r"


def test_section_toggles(state, tmp_path):
    entry = state.new_file(Kind.INCIDENT)
    state.update_section_field(entry, SectionName.GRANT, "caller", "x")
    assert state.section_has_data(entry, SectionName.GRANT)
    assert not state.section_has_data(entry, SectionName.REVOKE)

    state.set_section_enabled(entry, SectionName.GRANT, False)
    assert not state.is_section_enabled(entry, SectionName.GRANT)

    path = tmp_path / "incident.json"
    state.save_as(str(path))
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved[0]["Grant"]["Caller"] is None


def test_enabling_section_creates_it(state):
    entry = state.new_file(Kind.CHANGE)
    entry.grant = None
    entry.grant_enabled = False
    state.set_section_enabled(entry, SectionName.GRANT, True)
    assert entry.grant is not None
    assert state.has_unsaved_changes


def test_unsubscribe_stops_notifications(state):
    received = []
    listener = lambda: received.append(1)
    state.subscribe(listener)
    state.unsubscribe(listener)
    state.new_file(Kind.INCIDENT)
    assert received == []


def test_backup_absent_for_first_save(state, tmp_path):
    state.new_file(Kind.INCIDENT)
    path = tmp_path / "fresh.json"
    state.save_as(str(path))
    assert not os.path.exists(FileStore.backup_path(path))
