from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LintOptions:
    filename: str = "<input>"
    disabled_codes: tuple[str, ...] = ()
