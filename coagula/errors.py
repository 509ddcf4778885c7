from __future__ import annotations

from typing import Any, Optional


class MaterializationError(Exception):
    """Base error for anything that stops a row stream from becoming a graph."""

    level: str
    key: Any

    def __init__(self, message: str, *, level: str, key: Any = None) -> None:
        super().__init__(message)
        self.level = level
        self.key = key


class MalformedRowError(MaterializationError, ValueError):
    """A row breaks the null propagation rule of the joined levels."""

    row_index: Optional[int]

    def __init__(
        self,
        message: str,
        *,
        level: str,
        key: Any = None,
        row_index: Optional[int] = None,
    ) -> None:
        super().__init__(message, level=level, key=key)
        self.row_index = row_index


class UnresolvedReferenceError(MaterializationError, LookupError):
    """A referenced key does not resolve to any record of the target table."""

    target: str

    def __init__(
        self, message: str, *, level: str, key: Any = None, target: str = "owner"
    ) -> None:
        super().__init__(message, level=level, key=key)
        self.target = target
