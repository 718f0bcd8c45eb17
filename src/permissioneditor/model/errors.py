"""Error taxonomy for file store operations."""
from __future__ import annotations

import os
from typing import Union

PathLike = Union[str, os.PathLike]


class StoreError(Exception):
    """Base class for load/save failures. Always carries the offending path."""

    def __init__(self, message: str, path: PathLike) -> None:
        super().__init__(message)
        self.path = os.fspath(path)


class NotFound(StoreError, FileNotFoundError):
    """The file to load does not exist."""


class ParseError(StoreError, ValueError):
    """The file content is not valid JSON or not an array of permission objects."""


class IOFailure(StoreError, OSError):
    """Reading, writing or copying failed for a reason other than parsing."""
