"""Options loading utilities for id assignment runs."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from core.ids.models import IdOptions


def load_options(
    path: Path | None = None, overrides: Mapping[str, Any] | None = None
) -> IdOptions:
    """Load options from YAML and apply non-None overrides on top."""

    options_path = path or Path(__file__).with_name("options.yaml")

    try:
        raw = yaml.safe_load(options_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Options file not found: {options_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in options file: {options_path}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Options file must contain a mapping: {options_path}")

    merged = dict(raw)
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    try:
        return IdOptions.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid options schema: {options_path}: {_first_error(exc)}") from exc


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return f"{location}: {first.get('msg', 'invalid value')}"
