"""
Permission Records
==================
Defines the two record shapes stored in incident.json and change.json files.

Both files are a flat JSON array. Every element looks like::

    {
        "Identification": {"Id": "I001"},
        "DisplayName": "Mailbox access",
        "Grant": {"Caller": "...", ..., "EnableGetAssets": false},
        "Revoke": {...}
    }

The two kinds differ only in the fields of their Grant/Revoke sections, so
the entry classes are a variant pair that share the generic helpers in this
module instead of a common base class.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import Any, ClassVar, Dict, Optional, Type, Union

from permissioneditor.model import is_blank


class Kind(StrEnum):
    INCIDENT = "incident"
    CHANGE = "change"


class SectionName(StrEnum):
    GRANT = "grant"
    REVOKE = "revoke"


def _text(json_name: str, label: Optional[str] = None):
    return field(default=None, metadata={"json": json_name, "label": label or json_name})


def _flag(json_name: str, label: str):
    return field(default=False, metadata={"json": json_name, "label": label})


@dataclass
class Identification:
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"Id": self.id}

    @staticmethod
    def from_dict(data: Any) -> Identification:
        lowered = _lower_keys(data, "Identification")
        return Identification(id=_read_text(lowered, "Id"))


@dataclass
class IncidentSection:
    """Grant or Revoke section of an incident permission."""
    caller: Optional[str] = _text("Caller")
    request_short: Optional[str] = _text("RequestShort", "Request (short)")
    request_description: Optional[str] = _text("RequestDescription", "Request description")
    action: Optional[str] = _text("Action")
    branch: Optional[str] = _text("Branch")
    operator_group: Optional[str] = _text("OperatorGroup", "Operator group")
    operator: Optional[str] = _text("Operator")
    category: Optional[str] = _text("Category")
    sub_category: Optional[str] = _text("SubCategory", "Subcategory")
    call_type: Optional[str] = _text("CallType", "Call type")
    status: Optional[str] = _text("Status")
    impact: Optional[str] = _text("Impact")
    priority: Optional[str] = _text("Priority")
    duration: Optional[str] = _text("Duration")
    entry_type: Optional[str] = _text("EntryType", "Entry type")
    urgency: Optional[str] = _text("Urgency")
    processing_status: Optional[str] = _text("ProcessingStatus", "Processing status")
    enable_get_assets: bool = _flag("EnableGetAssets", "Enable get assets")
    skip_no_assets_found: bool = _flag("SkipNoAssetsFound", "Skip if no assets found")
    assets_filter: Optional[str] = _text("AssetsFilter", "Assets filter")

    def is_empty(self) -> bool:
        return is_empty(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)

    @staticmethod
    def from_dict(data: Any) -> IncidentSection:
        return section_from_dict(IncidentSection, data)


@dataclass
class ChangeSection:
    """Grant or Revoke section of a change permission."""
    requester: Optional[str] = _text("Requester")
    request: Optional[str] = _text("Request")
    action: Optional[str] = _text("Action")
    brief_description: Optional[str] = _text("BriefDescription", "Brief description")
    template: Optional[str] = _text("Template")
    category: Optional[str] = _text("Category")
    sub_category: Optional[str] = _text("SubCategory", "Subcategory")
    change_type: Optional[str] = _text("ChangeType", "Change type")
    impact: Optional[str] = _text("Impact")
    benefit: Optional[str] = _text("Benefit")
    priority: Optional[str] = _text("Priority")
    enable_get_assets: bool = _flag("EnableGetAssets", "Enable get assets")
    skip_no_assets_found: bool = _flag("SkipNoAssetsFound", "Skip if no assets found")
    assets_filter: Optional[str] = _text("AssetsFilter", "Assets filter")

    def is_empty(self) -> bool:
        return is_empty(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)

    @staticmethod
    def from_dict(data: Any) -> ChangeSection:
        return section_from_dict(ChangeSection, data)


Section = Union[IncidentSection, ChangeSection]


@dataclass
class IncidentEntry:
    """One permission record of an incident.json file."""
    kind: ClassVar[Kind] = Kind.INCIDENT
    section_type: ClassVar[Type[IncidentSection]] = IncidentSection

    identification: Identification = field(default_factory=Identification)
    display_name: str = ""
    grant: Optional[IncidentSection] = None
    revoke: Optional[IncidentSection] = None
    # Editor toggles, never serialized
    grant_enabled: bool = field(default=True, compare=False, repr=False)
    revoke_enabled: bool = field(default=True, compare=False, repr=False)

    @property
    def id(self) -> str:
        return self.identification.id or ""

    @id.setter
    def id(self, value: Optional[str]) -> None:
        self.identification.id = value

    def to_dict(self) -> Dict[str, Any]:
        return entry_to_dict(self)

    @staticmethod
    def from_dict(data: Any) -> IncidentEntry:
        return entry_from_dict(IncidentEntry, data)


@dataclass
class ChangeEntry:
    """One permission record of a change.json file."""
    kind: ClassVar[Kind] = Kind.CHANGE
    section_type: ClassVar[Type[ChangeSection]] = ChangeSection

    identification: Identification = field(default_factory=Identification)
    display_name: str = ""
    grant: Optional[ChangeSection] = None
    revoke: Optional[ChangeSection] = None
    grant_enabled: bool = field(default=True, compare=False, repr=False)
    revoke_enabled: bool = field(default=True, compare=False, repr=False)

    @property
    def id(self) -> str:
        return self.identification.id or ""

    @id.setter
    def id(self, value: Optional[str]) -> None:
        self.identification.id = value

    def to_dict(self) -> Dict[str, Any]:
        return entry_to_dict(self)

    @staticmethod
    def from_dict(data: Any) -> ChangeEntry:
        return entry_from_dict(ChangeEntry, data)


Entry = Union[IncidentEntry, ChangeEntry]

ENTRY_TYPES: Dict[Kind, Type[Entry]] = {
    Kind.INCIDENT: IncidentEntry,
    Kind.CHANGE: ChangeEntry,
}


def entry_type(kind: Kind) -> Type[Entry]:
    return ENTRY_TYPES[Kind(kind)]


def make_entry(
    kind: Kind,
    entry_id: Optional[str] = None,
    display_name: str = "",
    grant: Optional[Section] = None,
    revoke: Optional[Section] = None,
) -> Entry:
    """Build an entry of the given kind without going through JSON."""
    cls = entry_type(kind)
    return cls(
        identification=Identification(id=entry_id),
        display_name=display_name,
        grant=grant,
        revoke=revoke,
    )


# ---- SECTION HELPERS ----

def text_fields(section_type: type) -> list:
    return [f for f in fields(section_type) if f.type != "bool"]


def flag_fields(section_type: type) -> list:
    return [f for f in fields(section_type) if f.type == "bool"]


def is_empty(section: Optional[Section]) -> bool:
    """
    True if every string field is None/blank and both flags are False.
    A missing section is empty as well.
    """
    if section is None:
        return True
    for f in fields(section):
        value = getattr(section, f.name)
        if isinstance(value, bool):
            if value:
                return False
        elif not is_blank(value):
            return False
    return True


def empty_section(section_type: type) -> Section:
    """Section written in place of a disabled one."""
    return section_type(assets_filter="")


def section_to_dict(section: Section) -> Dict[str, Any]:
    return {f.metadata["json"]: getattr(section, f.name) for f in fields(section)}


def section_from_dict(section_type: type, data: Any) -> Section:
    lowered = _lower_keys(data, section_type.__name__)
    values = {}
    for f in fields(section_type):
        json_name = f.metadata["json"]
        if f.type == "bool":
            values[f.name] = _read_flag(lowered, json_name)
        else:
            values[f.name] = _read_text(lowered, json_name)
    return section_type(**values)


# ---- ENTRY HELPERS ----

def entry_to_dict(entry: Entry) -> Dict[str, Any]:
    """PascalCase JSON object; unset fields are written as null, never omitted."""
    return {
        "Identification": entry.identification.to_dict(),
        "DisplayName": entry.display_name,
        "Grant": _section_for_save(entry, entry.grant, entry.grant_enabled),
        "Revoke": _section_for_save(entry, entry.revoke, entry.revoke_enabled),
    }


def entry_from_dict(cls: Type[Entry], data: Any) -> Entry:
    lowered = _lower_keys(data, cls.__name__)

    raw_ident = lowered.get("identification")
    if raw_ident is not None:
        identification = Identification.from_dict(raw_ident)
    else:
        # Flattened convenience form: {"Id": "I001", ...}
        identification = Identification(id=_read_text(lowered, "Id"))

    grant = _read_section(cls.section_type, lowered.get("grant"))
    revoke = _read_section(cls.section_type, lowered.get("revoke"))

    return cls(
        identification=identification,
        display_name=_read_text(lowered, "DisplayName") or "",
        grant=grant,
        revoke=revoke,
        grant_enabled=not is_empty(grant),
        revoke_enabled=not is_empty(revoke),
    )


def _section_for_save(entry: Entry, section: Optional[Section], enabled: bool) -> Optional[Dict[str, Any]]:
    if not enabled:
        return empty_section(entry.section_type).to_dict()
    if section is None:
        return None
    return section.to_dict()


def _read_section(section_type: type, raw: Any) -> Optional[Section]:
    if raw is None:
        return None
    return section_from_dict(section_type, raw)


def _lower_keys(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"{what} must be a JSON object, got {type(data).__name__}")
    return {str(k).lower(): v for k, v in data.items()}


def _read_text(lowered: Dict[str, Any], json_name: str) -> Optional[str]:
    value = lowered.get(json_name.lower())
    if value is None or isinstance(value, str):
        return value
    raise TypeError(f"Field '{json_name}' must be a string, got {type(value).__name__}")


def _read_flag(lowered: Dict[str, Any], json_name: str) -> bool:
    value = lowered.get(json_name.lower())
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise TypeError(f"Field '{json_name}' must be a boolean, got {type(value).__name__}")
