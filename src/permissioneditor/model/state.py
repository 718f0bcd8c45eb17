"""
Document State (Editing Session)
================================
This module defines the in-memory state of the currently open permission file.

Why is this file needed?
------------------------
1. State Management: it holds the entry list, the selection, the file path
   and the dirty flag in one place.
2. Persistence: it is the only caller of FileStore, and it refuses to save
   lists that fail validation.
3. Decoupling: views subscribe a plain callback and re-read the state when
   it fires; the state never imports Qt.

Classes:
    DocumentState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from typing import Any, Callable, List, Optional

from permissioneditor.model.collection import duplicate_entry, new_entry
from permissioneditor.model.entries import Entry, Kind, SectionName, is_empty
from permissioneditor.model.io import FileStore
from permissioneditor.model.validation import ValidationResult, validate_entries

logger = logging.getLogger(__name__)

Listener = Callable[[], None]

TOP_LEVEL_FIELDS = ("id", "display_name")


@dataclass
class DocumentState:
    """
    Holds the permission list of the open file.
    Pass this instance to the main window and its widgets.
    """
    kind: Optional[Kind] = None
    filepath: Optional[str] = None
    entries: List[Entry] = field(default_factory=list)
    selected: Optional[Entry] = None
    has_unsaved_changes: bool = False
    status_message: str = ""

    _listeners: List[Listener] = field(default_factory=list, repr=False, compare=False)

    # ---- OBSERVERS ----

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def mark_modified(self) -> None:
        self.has_unsaved_changes = True
        self._notify()

    def _set_status(self, message: str) -> None:
        self.status_message = message
        logger.info(message)

    # ---- PROPERTIES ----

    @property
    def filename(self) -> str:
        return os.path.basename(self.filepath) if self.filepath else "Untitled"

    def entry_ids(self) -> List[str]:
        return [e.id for e in self.entries]

    # ---- FILE OPERATIONS ----

    def reset(self) -> None:
        """Clear all data, as after closing the file."""
        self.kind = None
        self.filepath = None
        self.entries = []
        self.selected = None
        self.has_unsaved_changes = False

    def new_file(self, kind: Kind) -> Entry:
        """Start an unsaved file of the given kind holding one fresh entry."""
        self.reset()
        self.kind = Kind(kind)
        entry = self.add_entry()
        self.has_unsaved_changes = False
        self._set_status(f"New {self.kind} file created")
        self._notify()
        return entry

    def open_file(self, path: str) -> bool:
        """
        Detect the kind of the file and load it.

        Returns False when the kind cannot be determined. Store errors
        propagate; the current document is left untouched in both cases.
        Validation problems do not block loading, they are reported in the
        status message.
        """
        kind = FileStore.detect_kind(path)
        if kind is None:
            self._set_status("Unable to determine file type")
            return False

        try:
            entries = FileStore.load(path, kind)
        except Exception as e:
            self._set_status(f"Error opening file: {e}")
            raise

        self.reset()
        self.kind = kind
        self.filepath = os.fspath(path)
        self.entries = entries
        self.selected = entries[0] if entries else None

        result = validate_entries(entries)
        if result.is_valid:
            self._set_status(f"Loaded {len(entries)} permission(s) from {self.filename}")
        else:
            self._set_status(f"File loaded with {len(result.errors)} validation error(s)")
            for error in result.errors:
                logger.warning(error)

        self._notify()
        return True

    def close_file(self) -> None:
        self.reset()
        self._set_status("File closed")
        self._notify()

    def validate(self) -> ValidationResult:
        return validate_entries(self.entries)

    def save(self) -> ValidationResult:
        """Save to the current path. Requires a path, see save_as()."""
        if not self.filepath:
            raise ValueError("No file path specified, use save_as().")
        return self.save_as(self.filepath)

    def save_as(self, path: str) -> ValidationResult:
        """
        Validate and write the entries to 'path'.

        Returns the validation result; nothing is written when it is
        invalid. Store errors propagate and leave the document dirty.
        """
        if self.kind is None:
            raise ValueError("No file type selected.")

        result = self.validate()
        if not result.is_valid:
            self._set_status(f"Cannot save: {len(result.errors)} validation error(s)")
            self._notify()
            return result

        try:
            FileStore.save(path, self.entries)
        except Exception as e:
            self._set_status(f"Error saving file: {e}")
            self._notify()
            raise

        self.filepath = os.fspath(path)
        self.has_unsaved_changes = False
        self._set_status(f"Saved to {self.filename}")
        self._notify()
        return result

    # ---- COLLECTION EDITING ----

    def add_entry(self) -> Entry:
        if self.kind is None:
            raise ValueError("No file type selected.")
        entry = new_entry(self.kind, self.entry_ids())
        self.entries.append(entry)
        self.selected = entry
        self._set_status(f"Added new {self.kind} permission: {entry.id}")
        self.mark_modified()
        return entry

    def duplicate_selected(self) -> Optional[Entry]:
        if self.selected is None:
            return None
        copy = duplicate_entry(self.selected, self.entry_ids())
        self.entries.append(copy)
        self.selected = copy
        self._set_status(f"Duplicated as {copy.id}")
        self.mark_modified()
        return copy

    def delete_selected(self) -> Optional[Entry]:
        entry = self.selected
        if entry is None:
            return None
        # Identity, not equality: two entries may hold the same data
        self.entries = [e for e in self.entries if e is not entry]
        self.selected = None
        self._set_status(f"Deleted {entry.kind} permission: {entry.id}")
        self.mark_modified()
        return entry

    def select(self, entry: Optional[Entry]) -> None:
        self.selected = entry

    # ---- FIELD EDITING ----

    def update_field(self, entry: Entry, name: str, value: Any) -> None:
        if name not in TOP_LEVEL_FIELDS:
            raise AttributeError(f"Unknown entry field: '{name}'")
        if getattr(entry, name) == value:
            return
        setattr(entry, name, value)
        self.mark_modified()

    def update_section_field(self, entry: Entry, section: SectionName, name: str, value: Any) -> None:
        target = self._ensure_section(entry, SectionName(section))
        if not hasattr(target, name):
            raise AttributeError(f"Unknown section field: '{name}'")
        if getattr(target, name) == value:
            return
        setattr(target, name, value)
        self.mark_modified()

    def section_has_data(self, entry: Entry, section: SectionName) -> bool:
        """True if disabling the section would discard data on save."""
        return not is_empty(getattr(entry, SectionName(section).value))

    def is_section_enabled(self, entry: Entry, section: SectionName) -> bool:
        return getattr(entry, f"{SectionName(section).value}_enabled")

    def set_section_enabled(self, entry: Entry, section: SectionName, enabled: bool) -> None:
        """
        Enabling creates the section if missing. Disabling keeps the data in
        memory; it is replaced by an empty section when the file is saved.
        """
        section = SectionName(section)
        flag = f"{section.value}_enabled"
        if enabled:
            self._ensure_section(entry, section)
        if getattr(entry, flag) == enabled:
            return
        setattr(entry, flag, enabled)
        self.mark_modified()

    @staticmethod
    def _ensure_section(entry: Entry, section: SectionName):
        current = getattr(entry, section.value)
        if current is None:
            current = entry.section_type()
            setattr(entry, section.value, current)
        return current
