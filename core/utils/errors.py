"""Custom exceptions for core logic."""

from __future__ import annotations


class AppendIdsError(Exception):
    """Base class for failures that abort processing of one document."""


class ParseError(AppendIdsError):
    """Raised when source text or a CSS selector cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        file_type: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.file_type = file_type
        self.line = line
        self.column = column


class SerializationError(AppendIdsError):
    """Raised when a mutated document cannot be written back to text."""

    def __init__(self, message: str, *, file_type: str) -> None:
        super().__init__(message)
        self.file_type = file_type


class AttributeMutationError(AppendIdsError):
    """Raised when the id attribute cannot be set or removed on a node."""

    def __init__(self, message: str, *, attr: str) -> None:
        super().__init__(message)
        self.attr = attr
