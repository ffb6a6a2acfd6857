from uvllint.linter.options import LintOptions
from uvllint.linter.pipeline import LintUnit, lint_source
from uvllint.parse.parser import ParseFailure, parse_document
from uvllint.parse.syntax import NodeKind, SyntaxNode
from uvllint.sema.declarations import DeclarationTable, ValueType
from uvllint.sema.validate import analyze_document, validate_document

__all__ = [
    "DeclarationTable",
    "LintOptions",
    "LintUnit",
    "NodeKind",
    "ParseFailure",
    "SyntaxNode",
    "ValueType",
    "analyze_document",
    "lint_source",
    "parse_document",
    "validate_document",
]
