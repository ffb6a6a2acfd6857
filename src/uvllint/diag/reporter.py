from __future__ import annotations

from collections import Counter

from rich.console import Console
from rich.text import Text

from uvllint.diag.diagnostic import Diagnostic, DiagnosticLabel, Severity
from uvllint.diag.source import SourceRepository, SourceText, Span

_SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


class DiagnosticReporter:
    """Renders UVL diagnostics as a headline, a location, and one source line per label.

    UVL constructs live on a single line, so only the first line of a span is
    shown; a span that runs past it is underlined to the end of that line.
    """

    TAB_SIZE = 4

    def __init__(
        self,
        console: Console | None = None,
        *,
        repository: SourceRepository | None = None,
        show_fixes: bool = True,
    ) -> None:
        self.console = console or Console(stderr=True)
        self.repository = repository or SourceRepository()
        self.show_fixes = show_fixes

    def render_text(self, source: SourceText | None, diag: Diagnostic) -> str:
        primary, related = self._split_labels(diag)
        lines = [
            f"{diag.severity.value}[{diag.code}]: {diag.message}",
            f"  --> {self._location(primary.span)}",
        ]

        resolved = self._resolve_source(source, diag.span.filename)
        if resolved is None:
            lines.append("   = note: source is unavailable for this diagnostic span")
        else:
            gutter = len(str(max(label.span.line for label in (primary, *related))))
            lines.extend(self._snippet(resolved, primary, "^", gutter))
            for label in related:
                lines.append(f"{' ' * gutter} ::: {self._location(label.span)}")
                lines.extend(self._snippet(resolved, label, "-", gutter))

        lines.extend(f"   = note: {n}" for n in diag.notes)
        lines.extend(f"   = help: {h}" for h in diag.help)
        if self.show_fixes and diag.fix is not None:
            lines.append(
                f"   = fix: {diag.fix.title} (delete offsets {diag.fix.start}..{diag.fix.end})"
            )
        return "\n".join(lines)

    def print(self, source: SourceText | None, diagnostics: list[Diagnostic]) -> None:
        ordered = sorted(
            diagnostics,
            key=lambda d: (d.span.filename, d.span.start_offset, d.span.end_offset),
        )
        for diag in ordered:
            style = _SEVERITY_STYLES.get(diag.severity, "")
            self.console.print(Text(self.render_text(source, diag), style=style))
            self.console.print()
        if diagnostics:
            self.console.print(self.render_summary(diagnostics))

    def render_summary(self, diagnostics: list[Diagnostic]) -> str:
        errors = sum(1 for d in diagnostics if d.is_error)
        others = len(diagnostics) - errors
        by_code = Counter(d.code for d in diagnostics)
        rules = ", ".join(
            code if count == 1 else f"{code} (x{count})" for code, count in sorted(by_code.items())
        )
        verdict = "found" if errors else "finished with"
        return f"{verdict} {errors} error(s) and {others} other diagnostic(s): {rules}"

    def _split_labels(self, diag: Diagnostic) -> tuple[DiagnosticLabel, list[DiagnosticLabel]]:
        primary = next((label for label in diag.labels if label.is_primary), None)
        if primary is None:
            primary = DiagnosticLabel(span=diag.span, is_primary=True)
        related = [label for label in diag.labels if label is not primary]
        return primary, related

    def _resolve_source(self, source: SourceText | None, filename: str) -> SourceText | None:
        if source is not None:
            self.repository.remember(source)
            if source.filename == filename:
                return source
        return self.repository.get(filename)

    def _location(self, span: Span) -> str:
        return f"{span.filename}:{max(1, span.line)}:{max(1, span.col)}"

    def _snippet(
        self, source: SourceText, label: DiagnosticLabel, marker: str, gutter: int
    ) -> list[str]:
        span = label.span
        line_no = max(1, min(span.line, source.line_count))
        raw = source.line_text(line_no)
        start = min(max(1, span.col), len(raw) + 1)
        end = span.end_col if span.end_line == span.line else len(raw) + 1
        end = max(start + 1, min(end, len(raw) + 1))

        lead = len(raw[: start - 1].expandtabs(self.TAB_SIZE))
        width = len(raw[: end - 1].expandtabs(self.TAB_SIZE)) - lead
        underline = " " * lead + marker * max(1, width)
        if label.message:
            underline = f"{underline} {label.message}"
        pad = " " * gutter
        return [
            f"{pad} |",
            f"{line_no:>{gutter}} | {raw.expandtabs(self.TAB_SIZE)}",
            f"{pad} | {underline}",
        ]
