"""
Input/Output Manager (JSON)
Handles loading and saving permission lists to incident.json / change.json.
"""
from __future__ import annotations

import json
import logging
import os
import shutil
from typing import Any, List, Optional, Sequence, Tuple

from permissioneditor.config import BACKUP_SUFFIX, FILE_ENCODING, JSON_INDENT
from permissioneditor.model.entries import Entry, Kind, entry_type
from permissioneditor.model.errors import IOFailure, NotFound, ParseError, PathLike

logger = logging.getLogger(__name__)

# Keys of the first element's Grant section that identify the file kind
INCIDENT_MARKERS = ("caller", "requestshort")
CHANGE_MARKERS = ("requester", "briefdescription")


class FileStore:

    @staticmethod
    def backup_path(path: PathLike) -> str:
        return f"{os.fspath(path)}{BACKUP_SUFFIX}"

    @staticmethod
    def load(path: PathLike, kind: Kind) -> List[Entry]:
        """
        Read a JSON array of entries of the given kind.

        Raises:
            NotFound: the file does not exist.
            ParseError: content is not valid JSON, not an array, or an
                element does not match the record shape.
            IOFailure: the file exists but could not be read.
        """
        path = os.fspath(path)
        logger.info(f"Loading {Kind(kind)} permissions from: {path}")

        if not os.path.exists(path):
            msg = f"File not found: {path}"
            logger.error(msg)
            raise NotFound(msg, path)

        try:
            text = FileStore._read_text(path)
        except UnicodeDecodeError as e:
            logger.error(f"File {path} is not valid UTF-8: {e}")
            raise ParseError(f"Invalid JSON format in file: {path}", path) from e
        except OSError as e:
            logger.exception(f"Failed to read file: {path}")
            raise IOFailure(f"Failed to read file: {path}", path) from e

        try:
            data = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            logger.error(f"Invalid JSON in {path}: {e}")
            raise ParseError(f"Invalid JSON format in file: {path}", path) from e

        if data is None:
            logger.warning(f"File {path} contains null, treating as empty list.")
            return []

        if not isinstance(data, list):
            msg = f"Invalid JSON format in file: {path} (root must be an array)"
            logger.error(msg)
            raise ParseError(msg, path)

        cls = entry_type(kind)
        entries: List[Entry] = []
        for index, item in enumerate(data):
            try:
                entries.append(cls.from_dict(item))
            except TypeError as e:
                logger.error(f"Element #{index + 1} of {path} is malformed: {e}")
                raise ParseError(f"Invalid JSON format in file: {path}", path) from e

        logger.info(f"Loaded {len(entries)} permission(s) from: {path}")
        return entries

    @staticmethod
    def save(path: PathLike, entries: Sequence[Entry]) -> None:
        """
        Write entries as an indented JSON array.

        An existing file is first copied to '<path>.backup'. The backup and
        the write are two separate steps: a failure in between leaves the
        backup intact and the target possibly truncated.

        Raises:
            IOFailure: backup, serialization or write failed.
        """
        path = os.fspath(path)
        logger.info(f"Saving {len(entries)} permission(s) to: {path}")

        try:
            if os.path.exists(path):
                backup = FileStore.backup_path(path)
                shutil.copyfile(path, backup)
                logger.debug(f"Backup written to: {backup}")

            payload = json.dumps(
                [entry.to_dict() for entry in entries],
                indent=JSON_INDENT,
                ensure_ascii=False,
            )
            with open(path, "w", encoding=FILE_ENCODING, newline="\n") as f:
                f.write(payload)

        except (OSError, TypeError, ValueError) as e:
            logger.exception(f"Failed to save file: {path}")
            raise IOFailure(f"Failed to save file: {path}", path) from e

        logger.info(f"Saved to: {path}")

    @staticmethod
    def detect_kind(path: PathLike) -> Optional[Kind]:
        """
        Guess the file kind from the Grant section of the first element.
        Best effort: returns None on any problem.
        """
        try:
            data = json.loads(FileStore._read_text(os.fspath(path)))
        except (OSError, ValueError, RecursionError) as e:
            logger.debug(f"Kind detection failed for {path}: {e}")
            return None

        if not isinstance(data, list) or not data:
            return None

        first = data[0]
        if not isinstance(first, dict):
            return None

        grant = _get_insensitive(first, "grant")
        if not isinstance(grant, dict):
            return None

        keys = {str(k).lower() for k in grant}
        if any(marker in keys for marker in INCIDENT_MARKERS):
            return Kind.INCIDENT
        if any(marker in keys for marker in CHANGE_MARKERS):
            return Kind.CHANGE

        logger.debug(f"No kind marker found in Grant section of {path}")
        return None

    @staticmethod
    def validate_json_shape(path: PathLike) -> Tuple[bool, str]:
        """
        Check that the file exists, is well-formed JSON and has an array at
        the root. Element schema is not checked.
        """
        path = os.fspath(path)
        if not os.path.exists(path):
            return False, "File does not exist"

        try:
            data = json.loads(FileStore._read_text(path))
        except (json.JSONDecodeError, RecursionError) as e:
            return False, f"Invalid JSON: {e}"
        except (OSError, UnicodeDecodeError) as e:
            return False, f"Error reading file: {e}"

        if not isinstance(data, list):
            return False, "JSON must be an array of permission objects"

        return True, ""

    # ---- HELPERS ----

    @staticmethod
    def _read_text(path: str) -> str:
        # utf-8-sig tolerates files written with a byte order mark
        with open(path, "r", encoding="utf-8-sig") as f:
            return f.read()


def _get_insensitive(obj: dict, key: str) -> Any:
    for k, v in obj.items():
        if str(k).lower() == key:
            return v
    return None
