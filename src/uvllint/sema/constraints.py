from __future__ import annotations

import difflib
import re

from uvllint.diag.diagnostic import Diagnostic, Severity
from uvllint.diag.source import SourceText
from uvllint.parse.syntax import NodeKind, SyntaxNode
from uvllint.sema.declarations import DeclarationTable, ValueType

NUMERIC_AGGREGATES = frozenset({"sum", "avg"})
STRING_AGGREGATES = frozenset({"len"})

_QUOTED_ID_RE = re.compile(r"'-?\d+'")


class ConstraintChecker:
    def __init__(self, source: SourceText, table: DeclarationTable) -> None:
        self.source = source
        self.table = table

    def check(self, tree: SyntaxNode) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for node in tree.walk():
            if node.kind != NodeKind.CONSTRAINTS:
                continue
            self._check_parentheses(node, diagnostics)
            for operation in node.descendants_of(NodeKind.OPERATION):
                self._check_operation(operation, diagnostics)
            for item in node.descendants_of(NodeKind.CONSTRAINTS_ITEM):
                self._check_item(item, diagnostics)
        return diagnostics

    def _check_parentheses(self, node: SyntaxNode, diagnostics: list[Diagnostic]) -> None:
        text = self._text(node)
        if text.count("(") > 1 or text.count(")") > 1:
            diagnostics.append(
                self._error(
                    node,
                    "UVL2201",
                    "A constraint can only have one pair of parentheses.",
                    help_items=["Split the constraint into several lines."],
                )
            )

    def _check_operation(self, operation: SyntaxNode, diagnostics: list[Diagnostic]) -> None:
        key_node = operation.child(NodeKind.KEY)
        if key_node is None:
            return
        key = self._text(key_node).strip()
        attribute = self.table.lookup_key(key)
        if attribute is None:
            diagnostics.append(
                self._error(
                    key_node,
                    "UVL2202",
                    f'"{key}" is not a valid key.',
                    help_items=self._suggest(key, self._all_keys()),
                )
            )
            return

        function = self._text(operation).strip().split("(")[0].strip()
        if function in NUMERIC_AGGREGATES and not attribute.value_type.is_numeric:
            diagnostics.append(
                self._error(
                    key_node,
                    "UVL2203",
                    f'"{key}" must be a number for the {function} operation.',
                    notes=[f"`{key}` has inferred type {attribute.value_type.value}"],
                )
            )
        elif function in STRING_AGGREGATES and attribute.value_type != ValueType.STRING:
            diagnostics.append(
                self._error(
                    key_node,
                    "UVL2204",
                    f'"{key}" must be a string for the {function} operation.',
                    notes=[f"`{key}` has inferred type {attribute.value_type.value}"],
                )
            )

    def _check_item(self, item: SyntaxNode, diagnostics: list[Diagnostic]) -> None:
        text = self._text(item).strip()
        if text.startswith("!"):
            text = text[1:].strip()

        parts = text.split(".")
        feature = parts[0]
        key = parts[1] if len(parts) > 1 else None

        entry = self.table.lookup_feature(feature)
        if entry is not None:
            if key and entry.key(key) is None:
                diagnostics.append(
                    self._error(
                        item,
                        "UVL2205",
                        f'"{key}" is not a valid key for the feature "{feature}".',
                        help_items=self._suggest(key, entry.key_names),
                    )
                )
            return

        if _QUOTED_ID_RE.fullmatch(text) or self.table.has_feature(text):
            return
        diagnostics.append(
            self._error(
                item,
                "UVL2206",
                f'"{text}" is neither a valid ID nor a declared feature.',
                help_items=self._suggest(text, self.table.feature_names),
            )
        )
        for word in text.split():
            if self.table.has_feature(word):
                diagnostics.append(
                    self._error(item, "UVL2207", f'"{word}" has to be separated by an operator.')
                )

    def _all_keys(self) -> list[str]:
        return sorted({key for entry in self.table for key in entry.key_names})

    def _suggest(self, name: str, candidates: list[str]) -> list[str]:
        matches = difflib.get_close_matches(name, candidates, n=1, cutoff=0.75)
        return [f"Did you mean `{matches[0]}`?"] if matches else []

    def _error(
        self,
        node: SyntaxNode,
        code: str,
        message: str,
        *,
        notes: list[str] | None = None,
        help_items: list[str] | None = None,
    ) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            code=code,
            message=message,
            span=self.source.span(node.start, node.end),
            notes=notes or [],
            help=help_items or [],
        )

    def _text(self, node: SyntaxNode) -> str:
        return self.source.slice(node.start, node.end)


def check_constraints(
    tree: SyntaxNode, source: SourceText, table: DeclarationTable
) -> list[Diagnostic]:
    return ConstraintChecker(source, table).check(tree)
