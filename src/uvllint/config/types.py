from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class RulesConfig:
    disable: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReportConfig:
    show_fixes: bool = True


@dataclass(frozen=True, slots=True)
class LintConfig:
    schema_version: str = "1"
    rules: RulesConfig = field(default_factory=RulesConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
