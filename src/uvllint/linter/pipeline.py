from __future__ import annotations

import logging
from dataclasses import dataclass, field

from uvllint.diag.diagnostic import Diagnostic
from uvllint.diag.source import SourceText
from uvllint.linter.options import LintOptions
from uvllint.parse.parser import ParseFailure, parse_document
from uvllint.parse.syntax import SyntaxNode
from uvllint.sema.declarations import DeclarationTable
from uvllint.sema.validate import analyze_document

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class LintUnit:
    tree: SyntaxNode | None = None
    table: DeclarationTable | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _apply_stages(text: str, *, options: LintOptions, unit: LintUnit) -> None:
    try:
        tree = parse_document(text, filename=options.filename)
    except ParseFailure as exc:
        LOGGER.error("Parse failure for %s", options.filename)
        unit.diagnostics.append(exc.diagnostic)
        return

    unit.tree = tree
    result = analyze_document(tree, SourceText(text, options.filename))
    unit.table = result.table
    unit.diagnostics.extend(result.diagnostics)


def lint_source(text: str, *, options: LintOptions) -> LintUnit:
    LOGGER.debug("Starting lint pipeline for %s", options.filename)
    unit = LintUnit()
    _apply_stages(text, options=options, unit=unit)
    if options.disabled_codes:
        disabled = set(options.disabled_codes)
        unit.diagnostics = [d for d in unit.diagnostics if d.code not in disabled]
    LOGGER.info(
        "Lint pipeline completed for %s with %s diagnostics",
        options.filename,
        len(unit.diagnostics),
    )
    return unit
