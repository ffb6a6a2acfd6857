from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class NodeKind(str, Enum):
    FEATURE_MODEL = "FeatureModel"
    INDENT = "indent"
    DEDENT = "dedent"
    FEATURES_SECTION = "FeaturesSection"
    CONSTRAINTS_SECTION = "ConstraintsSection"
    BLANK_LINE_START = "blankLineStart"
    COMMENT = "Comment"
    TREE = "Tree"
    INCLUDE_BLOCK = "IncludeBlock"
    IMPORT_BLOCK = "ImportBlock"
    FEATURE = "Feature"
    IMPORT_FEATURE = "ImportFeature"
    IMPORT_NAME = "ImportName"
    SPECIFIER = "Specifier"
    ROOT = "Root"
    FEATURE_BLOCK = "FeatureBlock"
    EXTENDED_FEATURE = "ExtendedFeature"
    TYPE = "Type"
    CARDINALITY = "Cardinality"
    MIN = "Min"
    MAX = "Max"
    ATTRIBUTE_ITEM = "AttributeItem"
    ATTRIBUTE_SELECTION = "AttributeSelection"
    KEY = "Key"
    VALUE = "Value"
    STATE_FEATURE = "StateFeature"
    STATE_BLOCK = "StateBlock"
    STATE = "State"
    COUNTER = "Counter"
    CONSTRAINTS_BLOCK = "ConstraintsBlock"
    CONSTRAINTS = "Constraints"
    OPERATION = "Operation"
    SIGNS = "Signs"
    NUMBER = "Number"
    OPEN_BRACKET = "OpenBracket"
    NUMERIC_OPERATOR = "NumericOperator"
    CLOSE_BRACKET = "CloseBracket"
    CONSTRAINT_SIGN = "ConstraintSign"
    CONSTRAINTS_ITEM = "ConstraintsItem"
    BOOLEAN_NEG = "BooleanNeg"
    BRACKET_ITEM = "BracketItem"
    SYMBOLIC_OPERATOR = "SymbolicOperator"
    BRACKETS = "Brackets"


RECOGNIZED_NODE_NAMES = frozenset(kind.value for kind in NodeKind)
_KINDS_BY_NAME = {kind.value: kind for kind in NodeKind}


@dataclass(frozen=True, slots=True)
class SyntaxNode:
    """Read-only view of one parser node: a grammar name, a span, ordered children."""

    name: str
    start: int
    end: int
    children: tuple[SyntaxNode, ...] = ()

    @property
    def kind(self) -> NodeKind | None:
        return _KINDS_BY_NAME.get(self.name)

    def child(self, kind: NodeKind) -> SyntaxNode | None:
        for node in self.children:
            if node.name == kind.value:
                return node
        return None

    def children_of(self, kind: NodeKind) -> list[SyntaxNode]:
        return [node for node in self.children if node.name == kind.value]

    def walk(self) -> Iterator[SyntaxNode]:
        stack: list[SyntaxNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def descendants_of(self, kind: NodeKind) -> list[SyntaxNode]:
        return [node for node in self.walk() if node is not self and node.name == kind.value]
