"""Processor registry for CLI and pipeline format resolution."""

from __future__ import annotations

from collections.abc import Callable

from core.formats.base import Processor
from core.formats.html_processor import HtmlProcessor
from core.formats.jsx_processor import JsxProcessor
from core.formats.xml_processor import XmlProcessor

ProcessorFactory = Callable[[], Processor]

_SUPPORTED_FORMATS: dict[str, ProcessorFactory] = {
    "html": HtmlProcessor,
    "jsx": JsxProcessor,
    "xml": XmlProcessor,
}


def create_processor(name: str) -> Processor:
    """Instantiate a fresh processor for one document."""

    try:
        factory = _SUPPORTED_FORMATS[name]
    except KeyError as exc:
        raise ValueError(f"Unsupported file type: {name}") from exc
    return factory()


def list_supported_formats() -> list[str]:
    """Return supported format names in stable order."""

    return sorted(_SUPPORTED_FORMATS)
