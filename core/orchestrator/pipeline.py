"""Orchestration entry point: one document in, one document out."""

from __future__ import annotations

import logging
import time

from core.formats.registry import create_processor
from core.ids.models import IdOptions
from core.utils.errors import AppendIdsError
from core.utils.events import CORE_LOGGER_NAME, log_event

logger = logging.getLogger(CORE_LOGGER_NAME)


def process_document(text: str, options: IdOptions, file_type: str) -> str:
    """Run the processor for file_type over text.

    A new processor (and with it a new id generator) is created for every
    call, so results depend only on text and options.
    """

    processor = create_processor(file_type)
    start = time.perf_counter()
    try:
        output = processor.process(text, options)
    except AppendIdsError as exc:
        log_event(
            logger,
            logging.ERROR,
            "document_failed",
            file_type=file_type,
            error_type=type(exc).__name__,
            error_message=str(exc),
            elapsed_ms=_elapsed_ms(start),
        )
        raise

    log_event(
        logger,
        logging.INFO,
        "document_processed",
        file_type=file_type,
        strategy=options.strategy,
        input_chars=len(text),
        output_chars=len(output),
        elapsed_ms=_elapsed_ms(start),
    )
    return output


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
