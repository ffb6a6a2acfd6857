from __future__ import annotations

from uvllint.diag.source import SourceText
from uvllint.parse.syntax import SyntaxNode
from uvllint.sema.structure import check_structure


def _span_of(text: str, needle: str, name: str, after: int = 0) -> SyntaxNode:
    start = text.index(needle, after)
    return SyntaxNode(name=name, start=start, end=start + len(needle))


def _node(name: str, *children: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(
        name=name,
        start=min(c.start for c in children),
        end=max(c.end for c in children),
        children=tuple(children),
    )


def _codes(tree: SyntaxNode, text: str) -> list[str]:
    return [d.code for d in check_structure(tree, SourceText(text))]


def test_correct_section_headers_are_accepted() -> None:
    text = "features\n    Root\nconstraints\n    Root\n"
    features = SyntaxNode(name="FeaturesSection", start=0, end=18)
    constraints = SyntaxNode(name="ConstraintsSection", start=18, end=len(text))
    tree = _node("FeatureModel", features, constraints)

    assert _codes(tree, text) == []


def test_misspelled_features_header_is_reported_once() -> None:
    text = "Features\n    Root\n"
    section = SyntaxNode(name="FeaturesSection", start=0, end=len(text))

    diagnostics = check_structure(section, SourceText(text, "bad.uvl"))

    assert [d.code for d in diagnostics] == ["UVL2101"]
    assert diagnostics[0].message == 'The FeaturesSection must start with "features".'
    assert diagnostics[0].span.start_offset == 0
    assert diagnostics[0].span.end_offset == len(text)


def test_empty_sections_are_reported() -> None:
    text = "   "
    tree = _node(
        "FeatureModel",
        SyntaxNode(name="FeaturesSection", start=0, end=1),
        SyntaxNode(name="ConstraintsSection", start=1, end=3),
    )

    assert _codes(tree, text) == ["UVL2101", "UVL2101"]


def test_constraints_header_must_be_first_token() -> None:
    text = "Root constraints\n"
    section = SyntaxNode(name="ConstraintsSection", start=0, end=len(text))

    diagnostics = check_structure(section, SourceText(text))

    assert len(diagnostics) == 1
    assert '"constraints"' in diagnostics[0].message


def test_cardinality_in_order_is_accepted() -> None:
    text = "[2..5]"
    assert _codes(SyntaxNode(name="Cardinality", start=0, end=6), text) == []


def test_cardinality_with_whitespace_is_accepted() -> None:
    text = "[ 1 .. 3 ]"
    assert _codes(SyntaxNode(name="Counter", start=0, end=len(text)), text) == []


def test_reversed_cardinality_is_reported_once() -> None:
    text = "[5..2]"

    diagnostics = check_structure(SyntaxNode(name="Cardinality", start=0, end=6), SourceText(text))

    assert [d.code for d in diagnostics] == ["UVL2103"]
    assert "Min (5)" in diagnostics[0].message
    assert "Max (2)" in diagnostics[0].message


def test_malformed_ranges_are_reported() -> None:
    for text in ("[1..*]", "[-1..2]", "[1.2]", "[a..b]"):
        diagnostics = check_structure(
            SyntaxNode(name="Counter", start=0, end=len(text)), SourceText(text)
        )
        assert [d.code for d in diagnostics] == ["UVL2102"], text
        assert diagnostics[0].message == "The pattern is number1 .. number2."


def test_reserved_feature_name_carries_delete_fix() -> None:
    text = "features\n    features\n"
    feature = _span_of(text, "features", "Feature", after=1)
    tree = _node("ExtendedFeature", feature)

    diagnostics = check_structure(tree, SourceText(text))

    assert [d.code for d in diagnostics] == ["UVL2104"]
    fix = diagnostics[0].fix
    assert fix is not None
    assert (fix.start, fix.end) == (feature.start, feature.end)
    assert fix.apply(text) == "features\n    \n"


def test_ordinary_feature_name_has_no_diagnostic() -> None:
    text = "Constraints"
    tree = _node("ExtendedFeature", SyntaxNode(name="Feature", start=0, end=len(text)))
    assert _codes(tree, text) == []


def test_attribute_value_literals() -> None:
    good = ["12", "-4", '"any text"', "'ident_1'"]
    bad = ["12.5", "true", "'1abc'", "'with space'", '"open']
    for value in good + bad:
        text = f"F {{k {value}}}"
        value_node = _span_of(text, value, "Value")
        key_node = _span_of(text, "k", "Key", after=2)
        tree = _node(
            "ExtendedFeature",
            SyntaxNode(name="Feature", start=0, end=1),
            _node("AttributeItem", _node("AttributeSelection", key_node, value_node)),
        )
        expected = [] if value in good else ["UVL2105"]
        assert _codes(tree, text) == expected, value


def test_value_diagnostic_spans_the_value() -> None:
    text = "F {k true}"
    value_node = _span_of(text, "true", "Value")
    tree = _node(
        "ExtendedFeature",
        SyntaxNode(name="Feature", start=0, end=1),
        _node(
            "AttributeItem",
            _node("AttributeSelection", _span_of(text, "k", "Key"), value_node),
        ),
    )

    diagnostics = check_structure(tree, SourceText(text))

    assert diagnostics[0].span.start_offset == value_node.start
    assert diagnostics[0].span.end_offset == value_node.end
