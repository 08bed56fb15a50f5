from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from core.ids.models import IdOptions
from core.ids.options_loader import load_options


def test_load_default_options() -> None:
    options = load_options()

    assert options.attr == "data-ast-id"
    assert options.strategy == "hash"
    assert options.prefix == "el-"
    assert options.overwrite is False
    assert options.selector is None
    assert options.include == frozenset()
    assert options.exclude == frozenset()


def test_load_options_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "options.yaml"
    path.write_text(
        """
attr: data-test-id
strategy: Path
prefix: t-
overwrite: true
selector: "main p"
include: [div, span]
exclude: [script]
""",
        encoding="utf-8",
    )

    options = load_options(path)

    assert options.attr == "data-test-id"
    assert options.strategy == "path"
    assert options.prefix == "t-"
    assert options.overwrite is True
    assert options.selector == "main p"
    assert options.include == frozenset({"div", "span"})
    assert options.exclude == frozenset({"script"})


def test_overrides_replace_file_values_but_none_keeps_them(tmp_path: Path) -> None:
    path = tmp_path / "options.yaml"
    path.write_text("prefix: file-\nstrategy: slug\n", encoding="utf-8")

    options = load_options(path, {"prefix": "cli-", "strategy": None, "include": "a,b"})

    assert options.prefix == "cli-"
    assert options.strategy == "slug"
    assert options.include == frozenset({"a", "b"})


def test_empty_file_uses_model_defaults(tmp_path: Path) -> None:
    path = tmp_path / "options.yaml"
    path.write_text("", encoding="utf-8")

    assert load_options(path) == IdOptions()


def test_load_options_raises_for_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Options file not found"):
        load_options(tmp_path / "missing.yaml")


def test_load_options_raises_for_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "options.yaml"
    path.write_text("attr: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_options(path)


def test_load_options_raises_for_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "options.yaml"
    path.write_text("- hash\n- slug\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a mapping"):
        load_options(path)


def test_load_options_raises_for_unknown_strategy(tmp_path: Path) -> None:
    path = tmp_path / "options.yaml"
    path.write_text("strategy: random\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid options schema"):
        load_options(path)


def test_load_options_raises_for_unknown_key(tmp_path: Path) -> None:
    path = tmp_path / "options.yaml"
    path.write_text("namespace: svg\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid options schema"):
        load_options(path)


@pytest.mark.parametrize("attr", ["", "data id", 'data"id', "a=b", "<x>"])
def test_options_reject_unusable_attribute_names(attr: str) -> None:
    with pytest.raises(ValueError):
        IdOptions(attr=attr)


def test_options_are_frozen() -> None:
    options = IdOptions()

    with pytest.raises(ValidationError):
        options.prefix = "changed-"  # type: ignore[misc]


def test_blank_selector_is_treated_as_absent() -> None:
    assert IdOptions(selector="   ").selector is None
