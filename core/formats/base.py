"""Processor interface definitions."""

from __future__ import annotations

from typing import Protocol

from core.ids.models import IdOptions


class Processor(Protocol):
    """Protocol for format-specific id processors."""

    name: str

    def process(self, text: str, options: IdOptions) -> str:
        """Return text with ids applied, or raise an AppendIdsError."""
