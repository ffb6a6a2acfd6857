from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from uvllint.diag.diagnostic import Diagnostic, DiagnosticLabel, Severity
from uvllint.diag.source import SourceText, Span
from uvllint.parse.syntax import NodeKind, SyntaxNode

LOGGER = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"-?\d+")
_FLOAT_RE = re.compile(r"-?(?:\d+\.\d*|\.\d+)")


class ValueType(str, Enum):
    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"
    UNKNOWN = "Unknown"

    @property
    def is_numeric(self) -> bool:
        return self in (ValueType.INTEGER, ValueType.FLOAT)


@dataclass(frozen=True, slots=True)
class AttributeKey:
    key: str
    value_type: ValueType
    span: Span


@dataclass(frozen=True, slots=True)
class FeatureEntry:
    name: str
    span: Span
    keys: tuple[AttributeKey, ...] = ()

    def key(self, name: str) -> AttributeKey | None:
        for attribute in self.keys:
            if attribute.key == name:
                return attribute
        return None

    @property
    def key_names(self) -> list[str]:
        return [attribute.key for attribute in self.keys]


@dataclass(slots=True)
class DeclarationTable:
    features: dict[str, FeatureEntry] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[FeatureEntry]:
        return iter(self.features.values())

    def has_feature(self, name: str) -> bool:
        return name in self.features

    def lookup_feature(self, name: str) -> FeatureEntry | None:
        return self.features.get(name)

    def lookup_key(self, key: str) -> AttributeKey | None:
        # Keys are not scoped at aggregate call sites: the first owner wins.
        for entry in self.features.values():
            attribute = entry.key(key)
            if attribute is not None:
                return attribute
        return None

    @property
    def feature_names(self) -> list[str]:
        return list(self.features)


@dataclass(slots=True)
class DeclarationResult:
    table: DeclarationTable
    diagnostics: list[Diagnostic] = field(default_factory=list)


def infer_value_type(text: str | None) -> ValueType:
    if text is None:
        return ValueType.UNKNOWN
    if _INTEGER_RE.fullmatch(text):
        return ValueType.INTEGER
    if _FLOAT_RE.fullmatch(text):
        # Integral decimals such as 12.0 count as integers.
        return ValueType.INTEGER if float(text).is_integer() else ValueType.FLOAT
    return ValueType.STRING


class DeclarationCollector:
    def __init__(self, source: SourceText) -> None:
        self.source = source

    def collect(self, tree: SyntaxNode) -> DeclarationResult:
        table = DeclarationTable()
        diagnostics: list[Diagnostic] = []

        for node in tree.walk():
            if node.kind != NodeKind.EXTENDED_FEATURE:
                continue
            feature_node = node.child(NodeKind.FEATURE)
            if feature_node is None:
                continue
            name = self._text(feature_node).strip()
            span = self.source.span(feature_node.start, feature_node.end)
            keys = self._collect_keys(name, node.child(NodeKind.ATTRIBUTE_ITEM), diagnostics)

            existing = table.lookup_feature(name)
            if existing is not None:
                diagnostics.append(self._duplicate_feature(name, span, existing.span))
                continue
            table.features[name] = FeatureEntry(name=name, span=span, keys=tuple(keys))

        LOGGER.debug("Collected %s feature declaration(s)", len(table))
        return DeclarationResult(table=table, diagnostics=diagnostics)

    def _collect_keys(
        self,
        feature: str,
        attribute_item: SyntaxNode | None,
        diagnostics: list[Diagnostic],
    ) -> list[AttributeKey]:
        if attribute_item is None:
            return []
        keys: list[AttributeKey] = []
        seen: set[str] = set()
        for selection in attribute_item.children_of(NodeKind.ATTRIBUTE_SELECTION):
            value_node = selection.child(NodeKind.VALUE)
            value_text = self._text(value_node).strip() if value_node is not None else None
            value_type = infer_value_type(value_text)
            for key_node in selection.children_of(NodeKind.KEY):
                key = self._text(key_node).strip()
                span = self.source.span(key_node.start, key_node.end)
                if key in seen:
                    diagnostics.append(
                        Diagnostic(
                            severity=Severity.ERROR,
                            code="UVL2002",
                            message=f'The key "{key}" is duplicated in the feature "{feature}".',
                            span=span,
                            help=[f"Remove or rename the repeated `{key}` attribute."],
                        )
                    )
                    continue
                seen.add(key)
                keys.append(AttributeKey(key=key, value_type=value_type, span=span))
        return keys

    def _duplicate_feature(self, name: str, span: Span, previous: Span) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            code="UVL2001",
            message=f'The feature "{name}" is defined more than once.',
            span=span,
            labels=[
                DiagnosticLabel(span=span, message="redefined here", is_primary=True),
                DiagnosticLabel(span=previous, message="first defined here"),
            ],
            notes=[f"first definition at {previous.filename}:{previous.line}:{previous.col}"],
            help=[f"Rename one of the declarations of `{name}`."],
        )

    def _text(self, node: SyntaxNode) -> str:
        return self.source.slice(node.start, node.end)


def collect_declarations(tree: SyntaxNode, source: SourceText) -> DeclarationResult:
    return DeclarationCollector(source).collect(tree)
