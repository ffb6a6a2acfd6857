from __future__ import annotations

from uvllint.diag.diagnostic import Diagnostic, Severity
from uvllint.diag.source import SourceText
from uvllint.parse.syntax import RECOGNIZED_NODE_NAMES, SyntaxNode


def check_unknown_nodes(tree: SyntaxNode, source: SourceText) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for node in tree.walk():
        if node.name in RECOGNIZED_NODE_NAMES:
            continue
        diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                code="UVL2301",
                message="Features have to be connected with \" or '",
                span=source.span(node.start, node.end),
                notes=[f"unrecognized syntax node `{node.name}`"],
            )
        )
    return diagnostics
