from __future__ import annotations

from uvllint.diag.source import SourceText
from uvllint.parse.syntax import RECOGNIZED_NODE_NAMES, NodeKind, SyntaxNode
from uvllint.sema.unknown_nodes import check_unknown_nodes


def test_recognized_vocabulary_covers_every_node_kind() -> None:
    assert len(RECOGNIZED_NODE_NAMES) == len(NodeKind)
    assert "ExtendedFeature" in RECOGNIZED_NODE_NAMES
    assert "⚠" not in RECOGNIZED_NODE_NAMES


def test_recognized_nodes_produce_no_diagnostics() -> None:
    tree = SyntaxNode(
        name="Constraints",
        start=0,
        end=5,
        children=(
            SyntaxNode(name="ConstraintsItem", start=0, end=1),
            SyntaxNode(name="ConstraintSign", start=2, end=3),
            SyntaxNode(name="ConstraintsItem", start=4, end=5),
        ),
    )
    assert check_unknown_nodes(tree, SourceText("A & B")) == []


def test_error_recovery_nodes_are_reported() -> None:
    text = "A B"
    tree = SyntaxNode(
        name="Constraints",
        start=0,
        end=3,
        children=(
            SyntaxNode(name="ConstraintsItem", start=0, end=1),
            SyntaxNode(name="⚠", start=1, end=2),
            SyntaxNode(name="ConstraintsItem", start=2, end=3),
        ),
    )

    diagnostics = check_unknown_nodes(tree, SourceText(text, "gap.uvl"))

    assert [d.code for d in diagnostics] == ["UVL2301"]
    assert diagnostics[0].message == "Features have to be connected with \" or '"
    assert diagnostics[0].span.start_offset == 1
    assert "`⚠`" in diagnostics[0].notes[0]


def test_unknown_nodes_are_found_at_any_depth() -> None:
    tree = SyntaxNode(
        name="Mystery",
        start=0,
        end=2,
        children=(
            SyntaxNode(
                name="Tree",
                start=0,
                end=2,
                children=(SyntaxNode(name="Oddity", start=1, end=2),),
            ),
        ),
    )
    diagnostics = check_unknown_nodes(tree, SourceText("ab"))
    assert [d.notes[0] for d in diagnostics] == [
        "unrecognized syntax node `Mystery`",
        "unrecognized syntax node `Oddity`",
    ]
