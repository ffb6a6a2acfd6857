from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from uvllint.diag.source import Span


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class DiagnosticLabel:
    span: Span
    message: str | None = None
    is_primary: bool = False


@dataclass(frozen=True, slots=True)
class QuickFix:
    """Deletes the text between two offsets. Hosts decide whether to apply it."""

    title: str
    start: int
    end: int

    def apply(self, text: str) -> str:
        return text[: self.start] + text[self.end :]


@dataclass(frozen=True, slots=True)
class Diagnostic:
    severity: Severity
    code: str
    message: str
    span: Span
    notes: list[str] = field(default_factory=list)
    help: list[str] = field(default_factory=list)
    labels: list[DiagnosticLabel] = field(default_factory=list)
    fix: QuickFix | None = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR
