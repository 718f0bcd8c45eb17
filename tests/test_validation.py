"""Tests for entry and list validation messages."""

from __future__ import annotations

from permissioneditor.model.entries import IncidentEntry
from permissioneditor.model.validation import (
    ValidationResult, validate_entries, validate_entry, validate_unique_ids,
)

from conftest import change, incident


# ---- validate_entry ----

def test_valid_entry_has_no_errors():
    result = validate_entry(incident("I001", "Mail"))
    assert result.is_valid
    assert str(result) == "Valid"


def test_none_entry():
    assert validate_entry(None).errors == ["Permission cannot be null"]


def test_blank_id_and_display_name():
    result = validate_entry(incident("  ", ""))
    assert result.errors == [
        "Id is required and cannot be empty",
        "DisplayName is required and cannot be empty",
    ]


def test_empty_sections_are_allowed():
    entry = change("C001", "Laptop")
    assert entry.grant is None and entry.revoke is None
    assert validate_entry(entry).is_valid


# ---- validate_unique_ids ----

def test_unique_ids_empty_list_is_valid():
    assert validate_unique_ids([], lambda e: e.id).is_valid
    assert validate_unique_ids(None, lambda e: e.id).is_valid


def test_one_message_per_duplicated_id_with_count():
    entries = [
        incident("I001"), incident("I002"), incident("I001"),
        incident("I002"), incident("I001"), incident("I003"),
    ]
    result = validate_unique_ids(entries, lambda e: e.id)
    assert result.errors == [
        "Duplicate Id found: 'I001' appears 3 times",
        "Duplicate Id found: 'I002' appears 2 times",
    ]


def test_blank_ids_are_counted():
    entries = [incident("I001"), incident(None), incident(" ")]
    result = validate_unique_ids(entries, lambda e: e.id)
    assert result.errors == ["Found 2 permission(s) with empty or null Id"]


def test_id_selector_works_on_plain_values():
    result = validate_unique_ids(["a", "b", "a"], lambda s: s)
    assert result.errors == ["Duplicate Id found: 'a' appears 2 times"]


# ---- validate_entries ----

def test_null_list():
    assert validate_entries(None).errors == ["Permissions list cannot be null"]


def test_empty_list():
    assert validate_entries([]).errors == ["Permissions list is empty"]


def test_valid_list():
    assert validate_entries([incident("I001", "A"), incident("I002", "B")]).is_valid


def test_list_errors_are_prefixed_with_position_and_id():
    entries = [incident("I001", "A"), incident("I002", ""), None]
    result = validate_entries(entries)
    assert result.errors == [
        "Found 1 permission(s) with empty or null Id",
        "Permission #2 (Id: 'I002'): DisplayName is required and cannot be empty",
        "Permission #3 (Id: 'null'): Permission cannot be null",
    ]


def test_missing_entries_are_not_reported_as_duplicates():
    result = validate_entries([None, None])
    assert result.errors == [
        "Found 2 permission(s) with empty or null Id",
        "Permission #1 (Id: 'null'): Permission cannot be null",
        "Permission #2 (Id: 'null'): Permission cannot be null",
    ]


def test_duplicate_errors_come_before_entry_errors():
    entries = [incident("I001", "A"), IncidentEntry(), incident("I001", "B")]
    result = validate_entries(entries)
    assert result.errors == [
        "Duplicate Id found: 'I001' appears 2 times",
        "Found 1 permission(s) with empty or null Id",
        "Permission #2 (Id: ''): Id is required and cannot be empty",
        "Permission #2 (Id: ''): DisplayName is required and cannot be empty",
    ]


def test_result_helpers():
    result = ValidationResult()
    result.add_error("one")
    result.add_errors(["two", "three"])
    assert not result.is_valid
    assert str(result) == "one\ntwo\nthree"
