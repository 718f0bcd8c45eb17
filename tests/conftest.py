"""Shared test fixtures for permission editor tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from permissioneditor.model.entries import (
    ChangeEntry, ChangeSection, IncidentEntry, IncidentSection, Kind, make_entry,
)


def incident(entry_id: str | None = "I001", name: str = "Incident", **grant: Any) -> IncidentEntry:
    """Incident entry with an optional populated Grant section."""
    section = IncidentSection(**grant) if grant else None
    return make_entry(Kind.INCIDENT, entry_id, name, grant=section)


def change(entry_id: str | None = "C001", name: str = "Change", **grant: Any) -> ChangeEntry:
    section = ChangeSection(**grant) if grant else None
    return make_entry(Kind.CHANGE, entry_id, name, grant=section)


INCIDENT_DATA = [
    {
        "Identification": {"Id": "I001"},
        "DisplayName": "Mailbox access",
        "Grant": {
            "Caller": "$employee.Email",
            "RequestShort": "Grant mailbox",
            "Category": "Access",
            "EnableGetAssets": True,
            "SkipNoAssetsFound": False,
            "AssetsFilter": None,
        },
        "Revoke": {
            "Caller": "$employee.Email",
            "RequestShort": "Revoke mailbox",
        },
    },
    {
        "Identification": {"Id": "I002"},
        "DisplayName": "VPN",
        "Grant": {"Caller": "x", "RequestShort": "VPN on"},
        "Revoke": None,
    },
]

CHANGE_DATA = [
    {
        "Identification": {"Id": "C001"},
        "DisplayName": "Laptop",
        "Grant": {"Requester": "$employee.Email", "BriefDescription": "New laptop"},
        "Revoke": {"Requester": "$employee.Email", "BriefDescription": "Return laptop"},
    },
]


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[Any, str], Path]:
    """Write a JSON document (or raw text) into tmp_path and return its path."""
    def _write(content: Any, name: str = "permissions.json") -> Path:
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content, indent=2), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def incident_file(write_json) -> Path:
    return write_json(INCIDENT_DATA, "incident.json")


@pytest.fixture
def change_file(write_json) -> Path:
    return write_json(CHANGE_DATA, "change.json")
