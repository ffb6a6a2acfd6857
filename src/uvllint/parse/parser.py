from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import cast

from lark import Lark, Token, Tree
from lark.exceptions import LarkError, UnexpectedInput
from lark.indenter import Indenter

from uvllint.diag.diagnostic import Diagnostic, Severity
from uvllint.diag.source import SourceText
from uvllint.parse.syntax import SyntaxNode

_EXPECTED_TOKEN_NAMES = {
    "_NL": "newline",
    "_INDENT": "indented block",
    "_DEDENT": "end of indented block",
    "SECTION_WORD": "section header",
    "GROUP_KEYWORD": "`mandatory`, `optional`, `alternative` or `or`",
    "RANGE": "`[min..max]`",
    "FEATURE_NAME": "feature name",
    "KEY": "attribute key",
    "VALUE": "attribute value",
    "FUNCTION": "aggregate function",
    "ITEM": "feature reference",
    "NUMBER": "number",
    "BANG": "`!`",
    "OPEN_PAREN": "`(`",
    "CLOSE_PAREN": "`)`",
    "CONSTRAINT_SIGN": "`=>`, `<=>`, `&` or `|`",
    "SYMBOLIC_OPERATOR": "comparison operator",
    "NUMERIC_OPERATOR": "arithmetic operator",
    "LBRACE": "`{`",
    "RBRACE": "`}`",
    "COMMA": "`,`",
    "EQUAL": "`=`",
    "$END": "end of input",
}


class UvlIndenter(Indenter):
    NL_type = "_NL"
    OPEN_PAREN_types: list[str] = []
    CLOSE_PAREN_types: list[str] = []
    INDENT_type = "_INDENT"
    DEDENT_type = "_DEDENT"
    tab_len = 4


class ParseFailure(Exception):
    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic


@lru_cache(maxsize=1)
def _parser() -> Lark:
    grammar = Path(__file__).with_name("grammar.lark").read_text(encoding="utf-8")
    return Lark(
        grammar,
        parser="lalr",
        lexer="contextual",
        postlex=UvlIndenter(),
        propagate_positions=True,
        maybe_placeholders=False,
        start="feature_model",
    )


def _friendly_expected(expected: list[str]) -> list[str]:
    normalized = [_EXPECTED_TOKEN_NAMES.get(token, token.lower()) for token in expected]
    return list(dict.fromkeys(normalized))


def _expected_note(expected: list[str]) -> str | None:
    if not expected:
        return None
    pretty = _friendly_expected(expected)
    limit = 8
    shown = pretty[:limit]
    extra = len(pretty) - len(shown)
    suffix = "" if extra <= 0 else f", ... (+{extra} more)"
    return f"expected one of: {', '.join(shown)}{suffix}"


def _syntax_hints(source: SourceText, line: int) -> list[str]:
    hints: list[str] = []
    text = source.line_text(line)
    indent = text[: len(text) - len(text.lstrip())]
    if " " in indent and "\t" in indent:
        hints.append("Indentation mixes tabs and spaces; use one consistently.")
    if text.count("(") != text.count(")"):
        hints.append("Unbalanced parentheses detected near this line.")
    if text.count("{") != text.count("}"):
        hints.append("Unbalanced braces detected near this line.")
    if text.count("[") != text.count("]"):
        hints.append("Unbalanced brackets detected near this line.")
    return hints


def _failure(source: SourceText, exc: LarkError) -> ParseFailure:
    raw_pos = getattr(exc, "pos_in_stream", None)
    pos = raw_pos if isinstance(raw_pos, int) and raw_pos >= 0 else len(source.text)
    pos = max(0, min(pos, max(len(source.text) - 1, 0)))
    span = source.span(pos, pos + 1)

    expected_raw = getattr(exc, "expected", None) or getattr(exc, "allowed", None) or []
    notes: list[str] = []
    expected_note = _expected_note(sorted(expected_raw))
    if expected_note is not None:
        notes.append(expected_note)
    if not isinstance(exc, UnexpectedInput):
        notes.append(str(exc))
    return ParseFailure(
        Diagnostic(
            severity=Severity.ERROR,
            code="UVL1001",
            message="parse error",
            span=span,
            notes=notes,
            help=_syntax_hints(source, span.line),
        )
    )


def parse_tree(text: str, filename: str | None = None) -> Tree[Token]:
    actual_name = filename or "<input>"
    if not text.endswith("\n"):
        text = text + "\n"
    try:
        return cast(Tree[Token], _parser().parse(text))
    except LarkError as exc:
        raise _failure(SourceText(text, actual_name), exc) from exc


def _node_name(rule: str) -> str:
    return "".join(part.capitalize() for part in rule.split("_"))


def to_syntax_node(tree: Tree[Token]) -> SyntaxNode:
    children = tuple(to_syntax_node(child) for child in tree.children if isinstance(child, Tree))
    if not tree.meta.empty:
        start, end = tree.meta.start_pos, tree.meta.end_pos
    elif children:
        start, end = children[0].start, children[-1].end
    else:
        start = end = 0
    return SyntaxNode(name=_node_name(str(tree.data)), start=start, end=end, children=children)


def parse_document(text: str, filename: str | None = None) -> SyntaxNode:
    return to_syntax_node(parse_tree(text, filename))
