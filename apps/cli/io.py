"""CLI I/O helpers: file discovery, type detection and atomic output writing."""

from __future__ import annotations

import glob
import os
import tempfile
from pathlib import Path

SOURCE_SUFFIXES = (".jsx", ".tsx", ".js", ".ts", ".xml", ".svg", ".html", ".htm")

_SUFFIX_TYPES = {
    ".jsx": "jsx",
    ".tsx": "jsx",
    ".js": "jsx",
    ".ts": "jsx",
    ".xml": "xml",
    ".svg": "xml",
    ".html": "html",
    ".htm": "html",
}


def find_files(pattern: str) -> list[Path]:
    """Resolve a file, a directory (recursive) or a glob pattern to files.

    Rules:
    - an existing file is returned as the only result;
    - a directory yields every supported source file below it;
    - anything else is expanded as a recursive glob pattern.
    """

    path = Path(pattern)
    if path.is_file():
        return [path]

    if path.is_dir():
        files: list[Path] = []
        for suffix in SOURCE_SUFFIXES:
            files.extend(sorted(path.rglob(f"*{suffix}")))
        return [item for item in files if item.is_file()]

    matches = sorted(glob.glob(pattern, recursive=True))
    return [Path(item) for item in matches if Path(item).is_file()]


def detect_file_type(path: Path, content: str) -> str:
    """Pick a processor by extension first, then by sniffing the content."""

    by_suffix = _SUFFIX_TYPES.get(path.suffix.lower())
    if by_suffix is not None:
        return by_suffix

    trimmed = content.strip()
    if trimmed.startswith("<?xml") or trimmed.startswith("<svg"):
        return "xml"
    if trimmed.upper().startswith("<!DOCTYPE") or trimmed.startswith("<html"):
        return "html"
    return "jsx"


def build_output_path(source: Path, out_dir: Path | None) -> Path:
    """Return the destination for source: in place, or flattened into out_dir."""

    if out_dir is None:
        return source
    return out_dir / source.name


def write_text_atomic(path: Path, content: str) -> None:
    """Write text via temporary file + replace so readers never see partial output."""

    path.parent.mkdir(parents=True, exist_ok=True)

    fd, raw_tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f"{path.name}.",
        suffix=".tmp",
    )
    os.close(fd)
    tmp_path = Path(raw_tmp_path)

    try:
        with tmp_path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        tmp_path.replace(path)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
        raise
