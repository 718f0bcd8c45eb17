"""
Configuration & Constants
=========================
Central registry for file-format constants and user-facing defaults.

Why is this file needed?
------------------------
1. Abstraction: keeps magic strings (backup suffix, id prefixes, default
   names) out of the model and view code.
2. Environment: reads the debug switch and the log file location used by
   the entry point.

Exports:
    APP_NAME (str): Visible application name.
    BACKUP_SUFFIX (str): Suffix appended to a file path for its backup copy.
    ID_PREFIXES (dict): Id prefix per permission kind.
"""
import os
from typing import Optional

from permissioneditor.model.entries import Kind


def debug_enabled() -> bool:
    """True when PERMISSIONEDITOR_DEBUG is set to a truthy value."""
    return os.environ.get("PERMISSIONEDITOR_DEBUG", "").lower() in ("1", "true", "yes")


def log_file_path() -> Optional[str]:
    """Path from PERMISSIONEDITOR_LOG_FILE, or None to log to the console only."""
    return os.environ.get("PERMISSIONEDITOR_LOG_FILE") or None


APP_NAME: str = "Permission Editor"

# --- Logging ---
LOGGER_NAME: str = "permissioneditor"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT: str = "%H:%M:%S"

# --- File format ---
BACKUP_SUFFIX: str = ".backup"
JSON_INDENT: int = 2
FILE_ENCODING: str = "utf-8"
FILE_FILTER: str = "JSON Files (*.json);;All Files (*)"

# --- Collection defaults ---
ID_PREFIXES: dict[Kind, str] = {
    Kind.INCIDENT: "I",
    Kind.CHANGE: "C",
}
NEW_ENTRY_NAMES: dict[Kind, str] = {
    Kind.INCIDENT: "New Incident Permission",
    Kind.CHANGE: "New Change Permission",
}
COPY_SUFFIX: str = " (Copy)"
