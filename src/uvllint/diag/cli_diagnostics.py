from __future__ import annotations

from pathlib import Path

from uvllint.diag.diagnostic import Diagnostic, Severity
from uvllint.diag.source import Span


def _span_for_file(file: Path | str | None) -> Span:
    filename = "<cli>" if file is None else str(file)
    return Span(
        start_offset=0,
        end_offset=1,
        line=1,
        col=1,
        end_line=1,
        end_col=2,
        filename=filename,
    )


def file_read_error(path: Path, exc: OSError) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        code="UVL4001",
        message=f"failed to read file: {path}",
        span=_span_for_file(path),
        notes=[str(exc)],
        help=["Verify the file path exists and is readable."],
    )


def config_load_error(path: Path, exc: Exception) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        code="UVL4002",
        message=f"failed to load config TOML: {path}",
        span=_span_for_file(path),
        notes=[str(exc)],
        help=["Ensure the config payload is valid TOML and declares `schema_version = \"1\"`."],
    )
