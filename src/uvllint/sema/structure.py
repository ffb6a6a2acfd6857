from __future__ import annotations

import re

from uvllint.diag.diagnostic import Diagnostic, QuickFix, Severity
from uvllint.diag.source import SourceText
from uvllint.parse.syntax import NodeKind, SyntaxNode

RESERVED_FEATURE_NAMES = frozenset({"features", "constraints"})

_SECTION_HEADERS = {
    NodeKind.FEATURES_SECTION: ("features", "FeaturesSection"),
    NodeKind.CONSTRAINTS_SECTION: ("constraints", "ConstraintsBlock"),
}
_RANGE_RE = re.compile(r"\[\s*(\d+)\s*\.\.\s*(\d+)\s*\]")
_VALUE_PATTERNS = (
    re.compile(r"-?\d+"),
    re.compile(r'".*"'),
    re.compile(r"'[a-zA-Z_]\w*'", re.ASCII),
)


class StructureChecker:
    def __init__(self, source: SourceText) -> None:
        self.source = source

    def check(self, tree: SyntaxNode) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for node in tree.walk():
            kind = node.kind
            if kind in _SECTION_HEADERS:
                self._check_header(node, kind, diagnostics)
            elif kind in (NodeKind.CARDINALITY, NodeKind.COUNTER):
                self._check_range(node, diagnostics)
            elif kind == NodeKind.EXTENDED_FEATURE:
                self._check_feature_name(node, diagnostics)
                self._check_values(node, diagnostics)
        return diagnostics

    def _check_header(
        self, node: SyntaxNode, kind: NodeKind, diagnostics: list[Diagnostic]
    ) -> None:
        keyword, label = _SECTION_HEADERS[kind]
        words = self._text(node).split()
        if words and words[0] == keyword:
            return
        diagnostics.append(
            self._error(
                node,
                "UVL2101",
                f'The {label} must start with "{keyword}".',
                help_items=[f"Start the section with the lowercase `{keyword}` keyword."],
            )
        )

    def _check_range(self, node: SyntaxNode, diagnostics: list[Diagnostic]) -> None:
        match = _RANGE_RE.search(self._text(node))
        if match is None:
            diagnostics.append(
                self._error(
                    node,
                    "UVL2102",
                    "The pattern is number1 .. number2.",
                    help_items=["Write ranges as `[min..max]` with non-negative integers."],
                )
            )
            return
        low, high = int(match.group(1)), int(match.group(2))
        if low > high:
            diagnostics.append(
                self._error(
                    node,
                    "UVL2103",
                    f"Invalid syntax: Min ({low}) must be less than Max ({high})",
                )
            )

    def _check_feature_name(self, node: SyntaxNode, diagnostics: list[Diagnostic]) -> None:
        feature_node = node.child(NodeKind.FEATURE)
        if feature_node is None:
            return
        name = self._text(feature_node)
        if name not in RESERVED_FEATURE_NAMES:
            return
        diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                code="UVL2104",
                message=f'The text "{name}" is not allowed in the Feature node',
                span=self.source.span(feature_node.start, feature_node.end),
                fix=QuickFix(
                    title=f"Remove '{name}'",
                    start=feature_node.start,
                    end=feature_node.end,
                ),
            )
        )

    def _check_values(self, node: SyntaxNode, diagnostics: list[Diagnostic]) -> None:
        attribute_item = node.child(NodeKind.ATTRIBUTE_ITEM)
        if attribute_item is None:
            return
        for selection in attribute_item.children_of(NodeKind.ATTRIBUTE_SELECTION):
            value_node = selection.child(NodeKind.VALUE)
            if value_node is None:
                continue
            text = self._text(value_node)
            if any(pattern.fullmatch(text) for pattern in _VALUE_PATTERNS):
                continue
            diagnostics.append(
                self._error(
                    value_node,
                    "UVL2105",
                    "Value must be a number, a string in double quotes, "
                    "or an identifier in single quotes.",
                )
            )

    def _error(
        self,
        node: SyntaxNode,
        code: str,
        message: str,
        *,
        help_items: list[str] | None = None,
    ) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            code=code,
            message=message,
            span=self.source.span(node.start, node.end),
            help=help_items or [],
        )

    def _text(self, node: SyntaxNode) -> str:
        return self.source.slice(node.start, node.end)


def check_structure(tree: SyntaxNode, source: SourceText) -> list[Diagnostic]:
    return StructureChecker(source).check(tree)
