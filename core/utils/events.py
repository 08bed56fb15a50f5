"""Structured event logging shared by core processors and the CLI."""

from __future__ import annotations

import json
import logging
from typing import Any

CORE_LOGGER_NAME = "append_ids.core"
CLI_LOGGER_NAME = "append_ids.cli"


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit one JSON event line; skipped entirely when the level is disabled."""

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, dump_json(payload))


def dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
