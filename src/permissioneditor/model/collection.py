"""
Collection editing helpers: id generation and copying of entries.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from permissioneditor.config import COPY_SUFFIX, ID_PREFIXES, NEW_ENTRY_NAMES
from permissioneditor.model.entries import Entry, Kind, Section, make_entry


def generate_id(prefix: str, existing_ids: Iterable[Optional[str]]) -> str:
    """
    Smallest unused number for the prefix, zero-padded to three digits.

    >>> generate_id("I", ["I001", "I003"])
    'I002'
    """
    used = set()
    for existing in existing_ids:
        if existing is None or not existing.startswith(prefix):
            continue
        try:
            used.add(int(existing[len(prefix):]))
        except ValueError:
            used.add(0)

    number = 1
    while number in used:
        number += 1

    return f"{prefix}{number:03d}"


def clone_section(section: Optional[Section]) -> Optional[Section]:
    """Field-by-field copy so a duplicate never shares sections with its source."""
    if section is None:
        return None
    return replace(section)


def new_entry(kind: Kind, existing_ids: Iterable[Optional[str]]) -> Entry:
    kind = Kind(kind)
    entry = make_entry(
        kind,
        entry_id=generate_id(ID_PREFIXES[kind], existing_ids),
        display_name=NEW_ENTRY_NAMES[kind],
    )
    entry.grant = entry.section_type()
    entry.revoke = entry.section_type()
    return entry


def duplicate_entry(entry: Entry, existing_ids: Iterable[Optional[str]]) -> Entry:
    copy = make_entry(
        entry.kind,
        entry_id=generate_id(ID_PREFIXES[entry.kind], existing_ids),
        display_name=f"{entry.display_name}{COPY_SUFFIX}",
        grant=clone_section(entry.grant),
        revoke=clone_section(entry.revoke),
    )
    copy.grant_enabled = entry.grant_enabled
    copy.revoke_enabled = entry.revoke_enabled
    return copy
