"""Eligibility rules and attribute-list helpers shared by all formats."""

from __future__ import annotations

from collections.abc import Iterable

from core.ids.models import IdOptions


def should_process(tag_name: str, options: IdOptions, existing_value: str | None = None) -> bool:
    """Return True when an element may receive a (new) id.

    Rules, in order:
    - an existing value blocks the element unless overwrite is enabled;
    - a non-empty include set admits only its members;
    - exclude always rejects, even for included tags.
    """

    if existing_value is not None and not options.overwrite:
        return False

    if options.include and tag_name not in options.include:
        return False

    if tag_name in options.exclude:
        return False

    return True


def find_attribute(attributes: Iterable[tuple[str, str]], name: str) -> str | None:
    """Return the first value stored under name, or None."""

    for attr_name, value in attributes:
        if attr_name == name:
            return value
    return None

