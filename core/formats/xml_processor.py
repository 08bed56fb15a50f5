"""XML processor: single forward pass over the raw tag stream.

Rules:
- Well-formedness is checked with lxml before anything is written.
- Only start and empty-element tags that receive an id are rebuilt; every
  other token (text, CDATA, comments, doctype, PIs, end tags) is copied as is.
- Attribute names are compared literally (``ns:attr`` is not resolved).
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from xml.sax.saxutils import escape

import soupsieve
from bs4 import BeautifulSoup
from lxml import etree

from core.ids.generator import IdGenerator
from core.ids.models import ElementDescriptor, IdOptions
from core.ids.policy import find_attribute, should_process
from core.utils.errors import ParseError, SerializationError
from core.utils.events import CORE_LOGGER_NAME, log_event

logger = logging.getLogger(CORE_LOGGER_NAME)

_TOKEN_RE = re.compile(
    r"""
    (?P<comment><!--.*?-->)
    | (?P<cdata><!\[CDATA\[.*?\]\]>)
    | (?P<pi><\?.*?\?>)
    | (?P<doctype><!DOCTYPE(?:[^\[>"']|"[^"]*"|'[^']*'|\[.*?\])*>)
    | (?P<end></[^\s>]+\s*>)
    | (?P<tag><[^\s/>!?]+(?:\s+[^\s=/>]+\s*=\s*(?:"[^"]*"|'[^']*'))*\s*/?>)
    | (?P<text>[^<]+)
    """,
    re.DOTALL | re.VERBOSE,
)
_TOKEN_KINDS = ("comment", "cdata", "pi", "doctype", "end", "tag", "text")
_TAG_RE = re.compile(
    r"<(?P<name>[^\s/>]+)"
    r"(?P<attrs>(?:\s+[^\s=/>]+\s*=\s*(?:\"[^\"]*\"|'[^']*'))*)"
    r"(?P<tail>\s*/?>)",
    re.DOTALL,
)
_ATTR_RE = re.compile(r"\s+(?P<name>[^\s=/>]+)\s*=\s*(?P<quoted>\"[^\"]*\"|'[^']*')")
_ATTR_ENTITIES = {'"': "&quot;"}


@dataclass(frozen=True)
class _Token:
    kind: str
    raw: str


class _XmlWriter:
    """Accumulates output; any buffer failure aborts the document."""

    def __init__(self) -> None:
        self._buffer = io.StringIO()

    def write(self, chunk: str) -> None:
        try:
            self._buffer.write(chunk)
        except (OSError, ValueError) as exc:
            raise SerializationError(f"Write error: {exc}", file_type="xml") from exc

    def getvalue(self) -> str:
        return self._buffer.getvalue()


class XmlProcessor:
    """Assigns ids to XML (and SVG) elements without disturbing other bytes."""

    name = "xml"

    def process(self, text: str, options: IdOptions) -> str:
        if not text.strip():
            return text

        compiled = _compile_selector(options.selector)
        root = _check_well_formed(text)
        elements = _elements_in_order(root) if options.strategy == "slug" else None
        selected = _select_element_indices(text, compiled) if compiled is not None else None

        generator = IdGenerator()
        writer = _XmlWriter()
        path_stack: list[int] = []
        element_counter = 0
        assigned = 0

        for token in _tokenize(text):
            if token.kind != "tag":
                if token.kind == "end" and path_stack:
                    path_stack.pop()
                writer.write(token.raw)
                continue

            path_stack.append(element_counter)
            raw = token.raw
            if selected is None or element_counter in selected:
                source_element = elements[element_counter] if elements is not None else None
                rewritten = _process_tag(raw, options, generator, path_stack, source_element)
                if rewritten is not None:
                    raw = rewritten
                    assigned += 1
            writer.write(raw)
            if token.raw.endswith("/>"):
                path_stack.pop()
            element_counter += 1

        log_event(
            logger,
            logging.DEBUG,
            "xml_ids_assigned",
            visited=element_counter,
            assigned=assigned,
            selector=options.selector,
        )
        return writer.getvalue()


def process_xml(text: str, options: IdOptions) -> str:
    """Process one XML document with a fresh processor."""

    return XmlProcessor().process(text, options)


def _process_tag(
    raw: str,
    options: IdOptions,
    generator: IdGenerator,
    path_stack: list[int],
    source_element: etree._Element | None = None,
) -> str | None:
    match = _TAG_RE.fullmatch(raw)
    if match is None:
        raise ParseError(f"Malformed tag: {raw[:40]!r}", file_type="xml")

    element_name = match.group("name")
    attributes = list(_ATTR_RE.finditer(match.group("attrs")))
    pairs = tuple((attr.group("name"), attr.group("quoted")[1:-1]) for attr in attributes)
    existing_value = find_attribute(pairs, options.attr)
    if not should_process(element_name, options, existing_value):
        return None

    text_content = _direct_text(source_element) if source_element is not None else None
    descriptor = ElementDescriptor(
        tag_name=element_name,
        path=tuple(path_stack),
        text_content=text_content,
        attributes=pairs,
    )
    new_id = generator.generate(descriptor, options)

    pieces = [raw[: match.start("attrs")]]
    for attr in attributes:
        if options.overwrite and attr.group("name") == options.attr:
            continue
        pieces.append(attr.group(0))
    pieces.append(f' {options.attr}="{escape(new_id, _ATTR_ENTITIES)}"')
    pieces.append(match.group("tail"))
    return "".join(pieces)


def _tokenize(text: str) -> Iterator[_Token]:
    position = 0
    length = len(text)
    while position < length:
        match = _TOKEN_RE.match(text, position)
        if match is None:
            line, column = _line_column(text, position)
            raise ParseError(
                f"XML parsing error: unexpected markup at line {line}, column {column}",
                file_type="xml",
                line=line,
                column=column,
            )
        kind = next(name for name in _TOKEN_KINDS if match.group(name) is not None)
        yield _Token(kind=kind, raw=match.group(0))
        position = match.end()


def _check_well_formed(text: str) -> etree._Element:
    parser = etree.XMLParser(
        encoding="utf-8",
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
    )
    try:
        return etree.fromstring(text.encode("utf-8"), parser)
    except etree.XMLSyntaxError as exc:
        line, column = exc.position
        raise ParseError(
            f"XML parsing error: {exc.msg}",
            file_type="xml",
            line=line,
            column=column,
        ) from exc


def _compile_selector(selector: str | None) -> soupsieve.SoupSieve | None:
    if selector is None:
        return None
    try:
        return soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as exc:
        raise ParseError(
            f"Invalid CSS selector {selector!r}: {exc}",
            file_type="xml",
            line=exc.line,
            column=exc.col,
        ) from exc


def _select_element_indices(text: str, compiled: soupsieve.SoupSieve) -> set[int]:
    """Map selector matches to document-order element indices."""

    soup = BeautifulSoup(text, "xml")
    matched = {id(tag) for tag in compiled.select(soup)}
    return {index for index, tag in enumerate(soup.find_all(True)) if id(tag) in matched}


def _line_column(text: str, position: int) -> tuple[int, int]:
    line = text.count("\n", 0, position) + 1
    column = position - (text.rfind("\n", 0, position) + 1) + 1
    return line, column


def _elements_in_order(root: etree._Element) -> list[etree._Element]:
    """Elements in start-tag order; comments, PIs and entity nodes are skipped."""

    return [element for element in root.iter() if isinstance(element.tag, str)]


def _direct_text(element: etree._Element) -> str:
    """Join the element's own text and the tails of its children."""

    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return " ".join(part.strip() for part in parts if part.strip())
