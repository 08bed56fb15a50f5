"""HTML processor: BeautifulSoup decides, the original text is edited in place.

The document is parsed with ``html.parser`` so every element keeps the source
position of its start tag. Candidates, policy and slug text come from the
tree; ids are then spliced into the original start tags, so all other bytes
(entities, quoting, attribute order, doctype spelling) come back unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from xml.sax.saxutils import escape

import soupsieve
from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from core.ids.generator import IdGenerator
from core.ids.models import ElementDescriptor, IdOptions
from core.ids.policy import should_process
from core.utils.errors import AttributeMutationError, ParseError
from core.utils.events import CORE_LOGGER_NAME, log_event

logger = logging.getLogger(CORE_LOGGER_NAME)

_START_TAG_RE = re.compile(
    r"<(?P<name>[a-zA-Z][^\s/>]*)"
    r"(?P<attrs>(?:[^>\"']|\"[^\"]*\"|'[^']*')*?)"
    r"(?P<tail>\s*/?>)",
    re.DOTALL,
)
_ATTR_RE = re.compile(
    r"(?P<lead>\s*)(?P<name>[^\s\"'/>=]+)"
    r"(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s>]+))?"
)
_ATTR_ENTITIES = {'"': "&quot;"}


@dataclass(frozen=True)
class _Edit:
    start: int
    end: int
    replacement: str


@dataclass
class _TraversalContext:
    options: IdOptions
    generator: IdGenerator
    candidates: set[int] | None
    line_offsets: list[int]
    path_stack: list[int] = field(default_factory=list)
    edits: list[_Edit] = field(default_factory=list)
    element_counter: int = 0
    assigned: int = 0


class HtmlProcessor:
    """Assigns ids to HTML elements, optionally limited by a CSS selector."""

    name = "html"

    def process(self, text: str, options: IdOptions) -> str:
        compiled = _compile_selector(options.selector)
        soup = BeautifulSoup(text, "html.parser", multi_valued_attributes=None)

        candidates = None
        if compiled is not None:
            candidates = {id(tag) for tag in compiled.select(soup)}

        context = _TraversalContext(
            options=options,
            generator=IdGenerator(),
            candidates=candidates,
            line_offsets=_line_offsets(text),
        )
        _walk(soup, text, context)

        log_event(
            logger,
            logging.DEBUG,
            "html_ids_assigned",
            visited=context.element_counter,
            assigned=context.assigned,
            selector=options.selector,
        )
        return _apply_edits(text, context.edits, options.attr)


def process_html(text: str, options: IdOptions) -> str:
    """Process one HTML document with a fresh processor."""

    return HtmlProcessor().process(text, options)


def _compile_selector(selector: str | None) -> soupsieve.SoupSieve | None:
    if selector is None:
        return None
    try:
        return soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as exc:
        raise ParseError(
            f"Invalid CSS selector {selector!r}: {exc}",
            file_type="html",
            line=exc.line,
            column=exc.col,
        ) from exc


def _walk(soup: BeautifulSoup, text: str, context: _TraversalContext) -> None:
    # Paths are ancestor stacks of document-order element indices, the same
    # shape the XML processor produces.
    stack: list[tuple[PageElement, bool]] = [(child, False) for child in reversed(soup.contents)]
    while stack:
        node, exiting = stack.pop()
        if exiting:
            context.path_stack.pop()
            continue
        if not isinstance(node, Tag):
            continue

        context.path_stack.append(context.element_counter)
        if context.candidates is None or id(node) in context.candidates:
            _visit_element(node, text, context)
        context.element_counter += 1

        stack.append((node, True))
        for child in reversed(node.contents):
            stack.append((child, False))


def _visit_element(element: Tag, text: str, context: _TraversalContext) -> None:
    options = context.options
    existing_value = element.get(options.attr.lower())
    if not should_process(element.name, options, existing_value):
        return

    text_content = _direct_text(element) if options.strategy == "slug" else None
    descriptor = ElementDescriptor(
        tag_name=element.name,
        path=tuple(context.path_stack),
        text_content=text_content,
        attributes=tuple((name, str(value)) for name, value in element.attrs.items()),
    )
    new_id = context.generator.generate(descriptor, options)

    match = _locate_start_tag(element, text, context.line_offsets, options.attr)
    context.edits.append(
        _Edit(match.start(), match.end(), _rewrite_start_tag(match, options, new_id))
    )
    context.assigned += 1


def _locate_start_tag(
    element: Tag, text: str, line_offsets: list[int], attr: str
) -> re.Match[str]:
    if element.sourceline is None or element.sourcepos is None:
        raise AttributeMutationError(f"<{element.name}> has no source position", attr=attr)

    start = line_offsets[element.sourceline - 1] + element.sourcepos
    match = _START_TAG_RE.match(text, start)
    if match is None or match.group("name").lower() != element.name:
        raise AttributeMutationError(
            f"Start tag of <{element.name}> not found at line {element.sourceline}",
            attr=attr,
        )
    return match


def _rewrite_start_tag(match: re.Match[str], options: IdOptions, new_id: str) -> str:
    """Drop same-named attributes when overwriting, then append the new one."""

    attrs = match.group("attrs")
    kept = attrs
    if options.overwrite:
        target = options.attr.lower()
        pieces: list[str] = []
        cursor = 0
        for attr in _ATTR_RE.finditer(attrs):
            if attr.group("name").lower() == target:
                pieces.append(attrs[cursor : attr.start()])
                cursor = attr.end()
        pieces.append(attrs[cursor:])
        kept = "".join(pieces)

    return "".join(
        [
            match.string[match.start() : match.start("attrs")],
            kept,
            f' {options.attr}="{escape(new_id, _ATTR_ENTITIES)}"',
            match.group("tail"),
        ]
    )


def _apply_edits(text: str, edits: list[_Edit], attr: str) -> str:
    chunks: list[str] = []
    cursor = 0
    for edit in sorted(edits, key=lambda item: item.start):
        if edit.start < cursor:
            raise AttributeMutationError(f"Overlapping start tag edits at {edit.start}", attr=attr)
        chunks.append(text[cursor : edit.start])
        chunks.append(edit.replacement)
        cursor = edit.end
    chunks.append(text[cursor:])
    return "".join(chunks)


def _line_offsets(text: str) -> list[int]:
    # html.parser counts lines on "\n" only and reports 0-based columns.
    offsets = [0]
    position = text.find("\n")
    while position != -1:
        offsets.append(position + 1)
        position = text.find("\n", position + 1)
    return offsets


def _direct_text(element: Tag) -> str:
    """Join the element's own text nodes; nested elements and comments are skipped."""

    parts = [
        child.strip()
        for child in element.children
        if isinstance(child, NavigableString) and not isinstance(child, PreformattedString)
    ]
    return " ".join(part for part in parts if part)
