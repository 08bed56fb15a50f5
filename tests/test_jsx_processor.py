from __future__ import annotations

import hashlib

import pytest

from core.formats.jsx_processor import is_host_element, process_jsx
from core.ids.models import IdOptions
from core.utils.errors import ParseError

PATH = IdOptions(strategy="path")


def test_jsx_nested_host_elements_get_path_ids() -> None:
    source = "const App = () => <div><span>Hello</span></div>;\n"

    result = process_jsx(source, PATH)

    assert result == (
        "const App = () => "
        '<div data-ast-id="el-div-0"><span data-ast-id="el-span-0-1">Hello</span></div>;\n'
    )


def test_jsx_components_are_skipped_but_still_open_a_level() -> None:
    source = "const App = () => <Component><div /></Component>;"

    result = process_jsx(source, PATH)

    assert result == (
        'const App = () => <Component><div data-ast-id="el-div-0-0" /></Component>;'
    )


def test_jsx_member_expression_components_are_skipped() -> None:
    source = "const x = <Foo.Bar />;"

    assert process_jsx(source, PATH) == source


def test_jsx_fragment_children_share_a_parent_level() -> None:
    source = "const x = <><span>a</span><span>b</span></>;"

    result = process_jsx(source, PATH)

    assert result == (
        "const x = <>"
        '<span data-ast-id="el-span-0-0">a</span>'
        '<span data-ast-id="el-span-0-1">b</span>'
        "</>;"
    )


def test_jsx_hash_strategy_matches_content_digest() -> None:
    digest = hashlib.sha256(b'{"type":"div","path":"0"}').hexdigest()[:8]

    result = process_jsx("const x = <div />;", IdOptions())

    assert result == f'const x = <div data-ast-id="el-{digest}" />;'


def test_jsx_existing_literal_attribute_is_kept_without_overwrite() -> None:
    source = 'const x = <div data-ast-id="keep"><p>t</p></div>;'

    result = process_jsx(source, PATH)

    assert result == (
        'const x = <div data-ast-id="keep"><p data-ast-id="el-p-0-0">t</p></div>;'
    )


def test_jsx_overwrite_replaces_only_the_target_attribute() -> None:
    source = 'const x = <div className="a" data-ast-id="old" id="b">x</div>;'

    result = process_jsx(source, IdOptions(strategy="path", overwrite=True))

    assert result == 'const x = <div className="a" id="b" data-ast-id="el-div-0">x</div>;'


def test_jsx_overwrite_when_target_attribute_is_last() -> None:
    source = 'const x = <div id="b" data-ast-id="old" />;'

    result = process_jsx(source, IdOptions(strategy="path", overwrite=True))

    assert result == 'const x = <div id="b" data-ast-id="el-div-0" />;'


def test_jsx_expression_valued_attribute_does_not_count_as_present() -> None:
    source = "const x = <div data-ast-id={dynamic} />;"

    result = process_jsx(source, PATH)

    assert result == 'const x = <div data-ast-id={dynamic} data-ast-id="el-div-0" />;'


def test_jsx_expression_valued_attribute_is_replaced_with_overwrite() -> None:
    source = "const x = <div data-ast-id={dynamic} />;"

    result = process_jsx(source, IdOptions(strategy="path", overwrite=True))

    assert result == 'const x = <div data-ast-id="el-div-0" />;'


def test_jsx_slug_collects_text_literals_and_nested_elements() -> None:
    source = 'const x = <p>Hello {"World"} <b>again</b></p>;'

    result = process_jsx(source, IdOptions(strategy="slug"))

    assert result == (
        'const x = <p data-ast-id="el-hello-world-again">'
        'Hello {"World"} <b data-ast-id="el-again">again</b></p>;'
    )


def test_jsx_spread_attributes_are_kept_before_the_id() -> None:
    source = "const x = <div {...props}>x</div>;"

    result = process_jsx(source, PATH)

    assert result == 'const x = <div {...props} data-ast-id="el-div-0">x</div>;'


def test_jsx_typescript_syntax_is_preserved() -> None:
    source = (
        "type Props = { count: number };\n"
        "export function Counter({ count }: Props): JSX.Element {\n"
        "  return <span>{count as number}</span>;\n"
        "}\n"
    )

    result = process_jsx(source, PATH)

    assert result == source.replace("<span>", '<span data-ast-id="el-span-0">')


def test_jsx_non_jsx_source_is_returned_unchanged() -> None:
    source = "export const add = (a, b) => a + b;\n"

    assert process_jsx(source, IdOptions()) == source


def test_jsx_processing_is_idempotent_without_overwrite() -> None:
    source = "const x = <main><h1>Title</h1><p>Body</p></main>;"

    once = process_jsx(source, IdOptions())

    assert process_jsx(once, IdOptions()) == once


def test_jsx_exclude_and_include_filters() -> None:
    source = "const x = <div><span>a</span><p>b</p></div>;"

    included = process_jsx(source, IdOptions(strategy="path", include=["span"]))
    excluded = process_jsx(source, IdOptions(strategy="path", exclude=["span"]))

    assert included == 'const x = <div><span data-ast-id="el-span-0-0">a</span><p>b</p></div>;'
    assert '<span>a</span>' in excluded
    assert '<p data-ast-id="el-p-0-1">b</p>' in excluded


def test_jsx_preserves_non_ascii_text_around_edits() -> None:
    source = "const x = <p>Café ☕</p>;"

    result = process_jsx(source, PATH)

    assert result == 'const x = <p data-ast-id="el-p-0">Café ☕</p>;'


def test_jsx_syntax_error_raises_parse_error() -> None:
    with pytest.raises(ParseError) as exc_info:
        process_jsx("const x = <div>;", IdOptions())

    assert exc_info.value.file_type == "jsx"
    assert exc_info.value.line == 1


@pytest.mark.parametrize(
    ("name", "expected"),
    [("div", True), ("my-element", True), ("Component", False), ("", False)],
)
def test_is_host_element(name: str, expected: bool) -> None:
    assert is_host_element(name) is expected
