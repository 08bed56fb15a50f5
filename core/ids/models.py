"""Data models for id assignment options and visited elements."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

IdStrategy = Literal["hash", "slug", "path"]

DEFAULT_ATTR = "data-ast-id"
DEFAULT_PREFIX = "el-"

_ATTR_NAME_RE = re.compile(r"[^\s\"'<>/=]+")


class IdOptions(BaseModel):
    """Immutable per-run options shared by every format processor."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    attr: str = DEFAULT_ATTR
    strategy: IdStrategy = "hash"
    prefix: str = DEFAULT_PREFIX
    overwrite: bool = False
    selector: str | None = None
    include: frozenset[str] = Field(default_factory=frozenset)
    exclude: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("attr")
    @classmethod
    def _check_attr_name(cls, value: str) -> str:
        if not _ATTR_NAME_RE.fullmatch(value):
            raise ValueError(f"attr must be a plain attribute name, got {value!r}")
        return value

    @field_validator("strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, value: object) -> object:
        if isinstance(value, str):
            return value.lower().strip()
        return value

    @field_validator("selector", mode="before")
    @classmethod
    def _blank_selector_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def _split_tag_names(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(item).strip() for item in value if str(item).strip())
        return value


@dataclass(frozen=True)
class ElementDescriptor:
    """One visited element, as handed to the id generator.

    text_content is only filled in when the slug strategy is active.
    """

    tag_name: str
    path: tuple[int, ...]
    text_content: str | None = None
    attributes: tuple[tuple[str, str], ...] = ()
