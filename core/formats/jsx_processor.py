"""JSX/TSX processor: parse with tree-sitter, inject ids, splice edits back.

The source is never regenerated. Ids are applied as byte-range edits on the
original text, so everything outside the touched opening tags is preserved
exactly.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from core.ids.generator import IdGenerator
from core.ids.models import ElementDescriptor, IdOptions
from core.ids.policy import find_attribute, should_process
from core.utils.errors import AttributeMutationError, ParseError, SerializationError
from core.utils.events import CORE_LOGGER_NAME, log_event

logger = logging.getLogger(CORE_LOGGER_NAME)

_TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())

_ELEMENT_TYPES = {"jsx_element", "jsx_self_closing_element"}
_ATTRIBUTE_TYPES = {"jsx_attribute", "jsx_expression"}
_NAME_SEPARATOR_RE = re.compile(r"[.:]")
_JS_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


@dataclass(frozen=True)
class _Edit:
    start: int
    end: int
    replacement: bytes


@dataclass
class _TraversalContext:
    options: IdOptions
    generator: IdGenerator
    path_stack: list[int] = field(default_factory=list)
    edits: list[_Edit] = field(default_factory=list)
    visited: int = 0
    assigned: int = 0


class JsxProcessor:
    """Assigns ids to host elements in JS/JSX/TS/TSX module source."""

    name = "jsx"

    def process(self, text: str, options: IdOptions) -> str:
        source = text.encode("utf-8")
        tree = Parser(_TSX_LANGUAGE).parse(source)
        if tree.root_node.has_error:
            raise _parse_error(tree.root_node)

        context = _TraversalContext(options=options, generator=IdGenerator())
        _walk(tree.root_node, context)

        output = _apply_edits(source, context.edits, options.attr)
        log_event(
            logger,
            logging.DEBUG,
            "jsx_ids_assigned",
            visited=context.visited,
            assigned=context.assigned,
            edits=len(context.edits),
        )
        try:
            return output.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SerializationError(
                f"Edited source is not valid UTF-8: {exc}", file_type="jsx"
            ) from exc


def process_jsx(text: str, options: IdOptions) -> str:
    """Process one JSX/TSX document with a fresh processor."""

    return JsxProcessor().process(text, options)


def is_host_element(name: str) -> bool:
    """Lowercase-initial names are host elements; capitalized ones are components."""

    return name[:1].islower()


def _walk(root: Node, context: _TraversalContext) -> None:
    # (node, exiting) pairs; the explicit stack keeps deep expression trees
    # away from the interpreter recursion limit.
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, exiting = stack.pop()
        if exiting:
            context.path_stack.pop()
            continue

        if node.type in _ELEMENT_TYPES or node.type == "jsx_fragment":
            context.path_stack.append(context.generator.counter)
            stack.append((node, True))
            opening = _opening_element(node)
            if opening is not None:
                _visit_opening(node, opening, context)
            children = _element_children(node)
        else:
            children = node.children

        for child in reversed(children):
            stack.append((child, False))


def _opening_element(node: Node) -> Node | None:
    """Return the tag carrying name and attributes, or None for fragments."""

    if node.type == "jsx_self_closing_element":
        return node
    if node.type != "jsx_element":
        return None
    opening = node.child_by_field_name("open_tag")
    if opening is None:
        opening = next(
            (child for child in node.children if child.type == "jsx_opening_element"), None
        )
    if opening is None or opening.child_by_field_name("name") is None:
        return None
    return opening


def _element_children(node: Node) -> list[Node]:
    if node.type == "jsx_self_closing_element":
        return []
    return [
        child
        for child in node.children
        if child.type not in {"jsx_opening_element", "jsx_closing_element"}
    ]


def _element_name(opening: Node) -> str:
    name_node = opening.child_by_field_name("name")
    if name_node is None:
        return ""
    return _NAME_SEPARATOR_RE.split(_node_text(name_node).strip())[-1].strip()


def _visit_opening(element: Node, opening: Node, context: _TraversalContext) -> None:
    context.visited += 1
    options = context.options
    element_name = _element_name(opening)
    if not is_host_element(element_name):
        return

    attributes = _attributes(opening)
    literals = _literal_pairs(attributes)
    existing_value = find_attribute(literals, options.attr)

    if not should_process(element_name, options, existing_value):
        return

    text_content = _extract_text(element) if options.strategy == "slug" else None
    descriptor = ElementDescriptor(
        tag_name=element_name,
        path=tuple(context.path_stack),
        text_content=text_content,
        attributes=literals,
    )
    new_id = context.generator.generate(descriptor, options)

    removed: set[int] = set()
    if options.overwrite:
        for attribute in attributes:
            if _attribute_name(attribute) != options.attr:
                continue
            previous = attribute.prev_sibling
            start = previous.end_byte if previous is not None else attribute.start_byte
            context.edits.append(_Edit(start, attribute.end_byte, b""))
            removed.add(attribute.start_byte)

    anchor = opening.child_by_field_name("name")
    for attribute in attributes:
        if attribute.start_byte not in removed:
            anchor = attribute
    if anchor is None:
        raise AttributeMutationError("Opening tag has no name to anchor on", attr=options.attr)

    literal = f' {options.attr}="{_escape_jsx_string(new_id)}"'.encode("utf-8")
    context.edits.append(_Edit(anchor.end_byte, anchor.end_byte, literal))
    context.generator.increment_counter()
    context.assigned += 1


def _attributes(opening: Node) -> list[Node]:
    return [child for child in opening.named_children if child.type in _ATTRIBUTE_TYPES]


def _literal_pairs(attributes: list[Node]) -> tuple[tuple[str, str], ...]:
    pairs: list[tuple[str, str]] = []
    for attribute in attributes:
        name = _attribute_name(attribute)
        value = _literal_attribute_value(attribute)
        if name is not None and value is not None:
            pairs.append((name, value))
    return tuple(pairs)


def _attribute_name(attribute: Node) -> str | None:
    if attribute.type != "jsx_attribute" or not attribute.named_children:
        return None
    return _node_text(attribute.named_children[0])


def _literal_attribute_value(attribute: Node) -> str | None:
    """Return the value of a string-literal attribute; expressions count as absent."""

    named = [child for child in attribute.named_children if child.type != "comment"]
    if len(named) < 2 or named[1].type != "string":
        return None
    return _node_text(named[1])[1:-1]


def _extract_text(element: Node) -> str:
    parts: list[str] = []
    for child in _element_children(element):
        if child.type in {"jsx_text", "html_character_reference"}:
            piece = _node_text(child).strip()
        elif child.type == "jsx_expression":
            piece = _string_expression_value(child)
        elif child.type in _ELEMENT_TYPES:
            piece = _extract_text(child)
        else:
            piece = ""
        if piece:
            parts.append(piece)
    return " ".join(parts).strip()


def _string_expression_value(expression: Node) -> str:
    named = [child for child in expression.named_children if child.type != "comment"]
    if len(named) != 1 or named[0].type != "string":
        return ""
    chunks: list[str] = []
    for part in named[0].named_children:
        if part.type == "string_fragment":
            chunks.append(_node_text(part))
        elif part.type == "escape_sequence":
            escaped = _node_text(part)[1:]
            chunks.append(_JS_ESCAPES.get(escaped, escaped))
    return "".join(chunks).strip()


def _escape_jsx_string(value: str) -> str:
    return value.replace("&", "&amp;").replace('"', "&quot;")


def _apply_edits(source: bytes, edits: list[_Edit], attr: str) -> bytes:
    # For equal starts the zero-width insertion sorts before the deletion
    # that begins at the same offset.
    chunks: list[bytes] = []
    cursor = 0
    for edit in sorted(edits, key=lambda item: (item.start, item.end)):
        if edit.start < cursor:
            raise AttributeMutationError(
                f"Overlapping attribute edits at byte {edit.start}", attr=attr
            )
        chunks.append(source[cursor : edit.start])
        chunks.append(edit.replacement)
        cursor = edit.end
    chunks.append(source[cursor:])
    return b"".join(chunks)


def _parse_error(root: Node) -> ParseError:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            row, column = node.start_point
            kind = f"missing {node.type!r}" if node.is_missing else "unexpected syntax"
            return ParseError(
                f"Parse error: {kind} at line {row + 1}, column {column + 1}",
                file_type="jsx",
                line=row + 1,
                column=column + 1,
            )
        broken = [child for child in node.children if child.has_error or child.is_missing]
        stack.extend(reversed(broken))
    return ParseError("Parse error: invalid source", file_type="jsx")


def _node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8")
