"""Human-readable run reporting for CLI output."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileResult:
    """Outcome of processing one discovered file."""

    path: Path
    file_type: str | None
    output_path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def render_file_result(result: FileResult) -> str:
    """Render one per-file line."""

    if result.ok:
        return f"OK: processed {result.path} as {result.file_type} -> {result.output_path}"
    return f"ERROR: failed to process {result.path}: {result.error}"


def render_run_summary(results: list[FileResult]) -> str:
    """Render the closing summary line for a batch."""

    success_count = sum(1 for result in results if result.ok)
    error_count = len(results) - success_count
    status = "INFO" if error_count == 0 else "WARNING"
    return (
        f"{status}: processed {success_count} file(s) successfully, {error_count} error(s)"
    )
