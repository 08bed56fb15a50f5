"""Deterministic id generation with per-document uniqueness."""

from __future__ import annotations

import hashlib
from collections.abc import Sequence

from core.ids.models import ElementDescriptor, IdOptions

_SLUG_MAX_LENGTH = 50
_HASH_LENGTH = 8


class IdGenerator:
    """Produces ids for one document run.

    Every strategy returns through ensure_unique, so an id is never handed out
    twice by the same instance. Create a new instance for each document.
    """

    def __init__(self) -> None:
        self._used_ids: set[str] = set()
        self._counter = 0

    @property
    def counter(self) -> int:
        return self._counter

    def increment_counter(self) -> None:
        self._counter += 1

    def generate(self, element: ElementDescriptor, options: IdOptions) -> str:
        """Generate an id for element using the configured strategy."""

        if options.strategy == "slug":
            return self.generate_slug_id(element.text_content or "", options.prefix)
        if options.strategy == "path":
            return self.generate_path_id(element.tag_name, element.path, options.prefix)
        return self.generate_hash_id(element.tag_name, element.path, options.prefix)

    def generate_hash_id(self, node_type: str, path: Sequence[int], prefix: str) -> str:
        path_string = ":".join(str(index) for index in path)
        content = f'{{"type":"{node_type}","path":"{path_string}"}}'
        digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
        return self.ensure_unique(f"{prefix}{digest[:_HASH_LENGTH]}")

    def generate_slug_id(self, text: str, prefix: str) -> str:
        if not text:
            return self.generate_hash_id("unknown", (), prefix)

        cleaned = "".join(
            char if char.isalnum() or char in " -" else " "
            for char in text.lower().strip()
        )
        slug = "-".join(cleaned.split())[:_SLUG_MAX_LENGTH]
        return self.ensure_unique(f"{prefix}{slug}")

    def generate_path_id(self, node_type: str, path: Sequence[int], prefix: str) -> str:
        path_string = "".join(f"-{index}" for index in path)
        return self.ensure_unique(f"{prefix}{node_type}{path_string}")

    def ensure_unique(self, candidate: str) -> str:
        """Record candidate, suffixing -2, -3, ... when it was already used."""

        if candidate not in self._used_ids:
            self._used_ids.add(candidate)
            return candidate

        suffix = 2
        while f"{candidate}-{suffix}" in self._used_ids:
            suffix += 1
        unique = f"{candidate}-{suffix}"
        self._used_ids.add(unique)
        return unique
