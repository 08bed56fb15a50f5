from __future__ import annotations

import hashlib

from core.ids.generator import IdGenerator
from core.ids.models import ElementDescriptor, IdOptions


def _expected_hash(node_type: str, path: str, prefix: str = "el-") -> str:
    content = f'{{"type":"{node_type}","path":"{path}"}}'
    return prefix + hashlib.sha256(content.encode("utf-8")).hexdigest()[:8]


def test_hash_id_uses_first_eight_hex_chars_of_content_digest() -> None:
    generator = IdGenerator()

    assert generator.generate_hash_id("div", [0, 1, 2], "el-") == _expected_hash("div", "0:1:2")


def test_hash_id_repeats_get_numeric_suffix() -> None:
    generator = IdGenerator()

    first = generator.generate_hash_id("div", [0, 1, 2], "el-")
    second = generator.generate_hash_id("div", [0, 1, 2], "el-")

    assert first != second
    assert first.startswith("el-")
    assert len(first) == len("el-") + 8
    assert second == f"{first}-2"


def test_hash_id_is_stable_across_generators() -> None:
    first = IdGenerator().generate_hash_id("section", [3, 4], "x-")
    second = IdGenerator().generate_hash_id("section", [3, 4], "x-")

    assert first == second


def test_slug_id_generation() -> None:
    generator = IdGenerator()

    assert generator.generate_slug_id("Hello World! 123", "el-") == "el-hello-world-123"
    assert generator.generate_slug_id("Hello World! 123", "el-") == "el-hello-world-123-2"


def test_slug_id_truncates_to_fifty_characters() -> None:
    generator = IdGenerator()

    slug = generator.generate_slug_id("a" * 80, "")

    assert slug == "a" * 50


def test_slug_id_keeps_unicode_letters() -> None:
    generator = IdGenerator()

    assert generator.generate_slug_id("  Café Menu  ", "el-") == "el-café-menu"


def test_slug_id_empty_text_falls_back_to_unknown_hash() -> None:
    generator = IdGenerator()

    assert generator.generate_slug_id("", "el-") == _expected_hash("unknown", "")


def test_path_id_generation() -> None:
    generator = IdGenerator()

    assert generator.generate_path_id("div", [0, 1, 2], "el-") == "el-div-0-1-2"
    assert generator.generate_path_id("span", [], "el-") == "el-span"


def test_ensure_unique_counts_up() -> None:
    generator = IdGenerator()

    assert generator.ensure_unique("test-id") == "test-id"
    assert generator.ensure_unique("test-id") == "test-id-2"
    assert generator.ensure_unique("test-id") == "test-id-3"


def test_ensure_unique_skips_suffixes_already_taken() -> None:
    generator = IdGenerator()

    generator.ensure_unique("x-2")
    generator.ensure_unique("x")

    assert generator.ensure_unique("x") == "x-3"


def test_generate_dispatches_on_strategy() -> None:
    element = ElementDescriptor(tag_name="li", path=(0, 4), text_content="Buy milk")

    assert IdGenerator().generate(element, IdOptions(strategy="path")) == "el-li-0-4"
    assert IdGenerator().generate(element, IdOptions(strategy="slug")) == "el-buy-milk"
    assert IdGenerator().generate(element, IdOptions(strategy="hash")) == _expected_hash(
        "li", "0:4"
    )


def test_counter_starts_at_zero_and_increments() -> None:
    generator = IdGenerator()

    assert generator.counter == 0
    generator.increment_counter()
    generator.increment_counter()
    assert generator.counter == 2
