"""
Permission Validation
=====================
Checks single entries and whole permission lists before they are saved.

Validation never raises. Every problem, including a missing entry or a
missing list, is reported as a human-readable message in a ValidationResult.

Grant and Revoke sections are optional: a file that is being built up may
hold entries whose sections are still empty, so section content is not
checked here.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from permissioneditor.model import is_blank
from permissioneditor.model.entries import Entry

T = TypeVar("T")


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def add_errors(self, errors: Iterable[str]) -> None:
        self.errors.extend(errors)

    def __str__(self) -> str:
        return "Valid" if self.is_valid else "\n".join(self.errors)


def validate_entry(entry: Optional[Entry]) -> ValidationResult:
    """Validate the required fields of a single incident or change entry."""
    result = ValidationResult()

    if entry is None:
        result.add_error("Permission cannot be null")
        return result

    if is_blank(entry.id):
        result.add_error("Id is required and cannot be empty")

    if is_blank(entry.display_name):
        result.add_error("DisplayName is required and cannot be empty")

    return result


def validate_unique_ids(
    entries: Optional[Sequence[T]],
    id_selector: Callable[[T], Optional[str]],
) -> ValidationResult:
    """
    Report every id that occurs more than once, plus the number of entries
    without an id. An empty list is valid.
    """
    result = ValidationResult()

    if not entries:
        return result

    ids = [id_selector(e) for e in entries]

    # Counter keeps first-seen order, so messages follow the file order.
    # Missing ids are reported by the blank count below.
    for entry_id, count in Counter(i for i in ids if i is not None).items():
        if count > 1:
            result.add_error(f"Duplicate Id found: '{entry_id}' appears {count} times")

    empty_count = sum(1 for entry_id in ids if is_blank(entry_id))
    if empty_count > 0:
        result.add_error(f"Found {empty_count} permission(s) with empty or null Id")

    return result


def validate_entries(entries: Optional[Sequence[Optional[Entry]]]) -> ValidationResult:
    """Validate a whole permission list: unique ids first, then each entry."""
    result = ValidationResult()

    if entries is None:
        result.add_error("Permissions list cannot be null")
        return result

    if len(entries) == 0:
        result.add_error("Permissions list is empty")
        return result

    result.add_errors(validate_unique_ids(entries, _entry_id).errors)

    for index, entry in enumerate(entries, start=1):
        entry_result = validate_entry(entry)
        if entry_result.is_valid:
            continue
        shown_id = entry.id if entry is not None else "null"
        for error in entry_result.errors:
            result.add_error(f"Permission #{index} (Id: '{shown_id}'): {error}")

    return result


def _entry_id(entry: Optional[Entry]) -> Optional[str]:
    return entry.id if entry is not None else None
