"""Typer CLI entrypoint for ast-append-ids."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer

from apps.cli.format_human import FileResult, render_file_result, render_run_summary
from apps.cli.io import build_output_path, detect_file_type, find_files, write_text_atomic
from core.ids.models import IdOptions
from core.ids.options_loader import load_options
from core.orchestrator.pipeline import process_document
from core.utils.errors import AppendIdsError
from core.utils.events import CLI_LOGGER_NAME, log_event

app = typer.Typer(
    help="Append deterministic ids to JSX, XML and HTML elements", rich_markup_mode=None
)
logger = logging.getLogger(CLI_LOGGER_NAME)

PathArgument = Annotated[str, typer.Argument(metavar="PATH", help="Input file, directory or glob.")]
AttrOption = Annotated[str | None, typer.Option("--attr", help="Attribute name for the id.")]
StrategyOption = Annotated[
    str | None, typer.Option("--strategy", help="Id strategy: hash, slug or path.")
]
PrefixOption = Annotated[str | None, typer.Option("--prefix", help="Id prefix.")]
OverwriteOption = Annotated[
    bool, typer.Option("--overwrite", help="Replace ids that are already present.")
]
SelectorOption = Annotated[
    str | None, typer.Option("--selector", help="CSS selector for target elements.")
]
IncludeOption = Annotated[
    str | None, typer.Option("--include", help="Comma-separated tags to include.")
]
ExcludeOption = Annotated[
    str | None, typer.Option("--exclude", help="Comma-separated tags to exclude.")
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", exists=True, dir_okay=False, help="YAML options file."),
]
OutputOption = Annotated[
    Path | None,
    typer.Option("--output", "-o", file_okay=False, help="Output directory (default: in place)."),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output.")]


@app.command("jsx")
def jsx_command(
    path: PathArgument,
    attr: AttrOption = None,
    strategy: StrategyOption = None,
    prefix: PrefixOption = None,
    overwrite: OverwriteOption = False,
    include: IncludeOption = None,
    exclude: ExcludeOption = None,
    config: ConfigOption = None,
    output: OutputOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Process JSX/TSX files."""

    overrides = _overrides(attr, strategy, prefix, overwrite, include=include, exclude=exclude)
    _run(path, "jsx", overrides, config, output, verbose)


@app.command("xml")
def xml_command(
    path: PathArgument,
    attr: AttrOption = None,
    strategy: StrategyOption = None,
    prefix: PrefixOption = None,
    overwrite: OverwriteOption = False,
    selector: SelectorOption = None,
    config: ConfigOption = None,
    output: OutputOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Process XML and SVG files."""

    overrides = _overrides(attr, strategy, prefix, overwrite, selector=selector)
    _run(path, "xml", overrides, config, output, verbose)


@app.command("html")
def html_command(
    path: PathArgument,
    attr: AttrOption = None,
    strategy: StrategyOption = None,
    prefix: PrefixOption = None,
    overwrite: OverwriteOption = False,
    selector: SelectorOption = None,
    config: ConfigOption = None,
    output: OutputOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Process HTML files."""

    overrides = _overrides(attr, strategy, prefix, overwrite, selector=selector)
    _run(path, "html", overrides, config, output, verbose)


@app.command("auto")
def auto_command(
    path: PathArgument,
    attr: AttrOption = None,
    strategy: StrategyOption = None,
    prefix: PrefixOption = None,
    overwrite: OverwriteOption = False,
    config: ConfigOption = None,
    output: OutputOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Detect each file's type and process it."""

    overrides = _overrides(attr, strategy, prefix, overwrite)
    _run(path, None, overrides, config, output, verbose)


def _overrides(
    attr: str | None,
    strategy: str | None,
    prefix: str | None,
    overwrite: bool,
    **extra: str | None,
) -> dict[str, Any]:
    # overwrite is a flag: absent means "keep the config file value".
    return {
        "attr": attr,
        "strategy": strategy,
        "prefix": prefix,
        "overwrite": True if overwrite else None,
        **extra,
    }


def _run(
    pattern: str,
    file_type: str | None,
    overrides: dict[str, Any],
    config: Path | None,
    out_dir: Path | None,
    verbose: bool,
) -> None:
    if verbose:
        _configure_verbose_logging()

    try:
        options = load_options(config, overrides)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc

    files = find_files(pattern)
    if not files:
        typer.echo(f"ERROR: no files found matching: {pattern}")
        return

    if verbose:
        typer.echo(f"INFO: found {len(files)} file(s) to process")

    results: list[FileResult] = []
    for source in files:
        result = _process_file(source, file_type, options, out_dir)
        results.append(result)
        if verbose or not result.ok:
            typer.echo(render_file_result(result))

    typer.echo(render_run_summary(results))
    log_event(
        logger,
        logging.INFO,
        "run_finished",
        files=len(results),
        errors=sum(1 for result in results if not result.ok),
    )
    if any(not result.ok for result in results):
        raise typer.Exit(code=1)


def _process_file(
    source: Path, file_type: str | None, options: IdOptions, out_dir: Path | None
) -> FileResult:
    detected_type = file_type
    try:
        with source.open(encoding="utf-8", newline="") as handle:
            content = handle.read()
        if detected_type is None:
            detected_type = detect_file_type(source, content)
        processed = process_document(content, options, detected_type)
        destination = build_output_path(source, out_dir)
        write_text_atomic(destination, processed)
    except (AppendIdsError, OSError, UnicodeDecodeError) as exc:
        return FileResult(path=source, file_type=detected_type, error=str(exc))
    return FileResult(path=source, file_type=detected_type, output_path=destination)


def _configure_verbose_logging() -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
    root = logging.getLogger("append_ids")
    if not any(isinstance(existing, logging.StreamHandler) for existing in root.handlers):
        root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
