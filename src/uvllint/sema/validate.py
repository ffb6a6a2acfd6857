from __future__ import annotations

import logging
from dataclasses import dataclass, field

from uvllint.diag.diagnostic import Diagnostic
from uvllint.diag.source import SourceText
from uvllint.parse.syntax import SyntaxNode
from uvllint.sema.constraints import check_constraints
from uvllint.sema.declarations import DeclarationTable, collect_declarations
from uvllint.sema.structure import check_structure
from uvllint.sema.unknown_nodes import check_unknown_nodes

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ValidationResult:
    table: DeclarationTable
    diagnostics: list[Diagnostic] = field(default_factory=list)


def analyze_document(tree: SyntaxNode, source: SourceText) -> ValidationResult:
    declarations = collect_declarations(tree, source)
    diagnostics = list(declarations.diagnostics)
    diagnostics.extend(check_structure(tree, source))
    diagnostics.extend(check_constraints(tree, source, declarations.table))
    diagnostics.extend(check_unknown_nodes(tree, source))
    LOGGER.debug("Validation of %s produced %s diagnostic(s)", source.filename, len(diagnostics))
    return ValidationResult(table=declarations.table, diagnostics=diagnostics)


def validate_document(tree: SyntaxNode, source: SourceText) -> list[Diagnostic]:
    return analyze_document(tree, source).diagnostics
