from __future__ import annotations

from uvllint.diag.source import SourceText
from uvllint.parse.syntax import SyntaxNode
from uvllint.sema.declarations import ValueType, collect_declarations, infer_value_type


class _Cursor:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def leaf(self, name: str, needle: str) -> SyntaxNode:
        start = self.text.index(needle, self.pos)
        self.pos = start + len(needle)
        return SyntaxNode(name=name, start=start, end=self.pos)


def _node(name: str, *children: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(
        name=name,
        start=min(c.start for c in children),
        end=max(c.end for c in children),
        children=tuple(children),
    )


def _feature(cur: _Cursor, name: str, *attributes: tuple[str, str | None]) -> SyntaxNode:
    feature = cur.leaf("Feature", name)
    if not attributes:
        return _node("ExtendedFeature", feature)
    selections = []
    for key, value in attributes:
        parts = [cur.leaf("Key", key)]
        if value is not None:
            parts.append(cur.leaf("Value", value))
        selections.append(_node("AttributeSelection", *parts))
    return _node("ExtendedFeature", feature, _node("AttributeItem", *selections))


def test_infer_value_type_is_lexical() -> None:
    assert infer_value_type("12") == ValueType.INTEGER
    assert infer_value_type("-3") == ValueType.INTEGER
    assert infer_value_type("12.5") == ValueType.FLOAT
    assert infer_value_type("12.0") == ValueType.INTEGER
    assert infer_value_type("-3.0") == ValueType.INTEGER
    assert infer_value_type(".5") == ValueType.FLOAT
    assert infer_value_type('"abc"') == ValueType.STRING
    assert infer_value_type("'abc'") == ValueType.STRING
    assert infer_value_type('"12"') == ValueType.STRING
    assert infer_value_type(None) == ValueType.UNKNOWN


def test_collects_keys_with_inferred_types() -> None:
    text = "Shop {price 12, rate 12.5, name \"abc\", id 'abc', abstract}\n"
    cur = _Cursor(text)
    tree = _node(
        "Tree",
        _feature(
            cur,
            "Shop",
            ("price", "12"),
            ("rate", "12.5"),
            ("name", '"abc"'),
            ("id", "'abc'"),
            ("abstract", None),
        ),
    )

    result = collect_declarations(tree, SourceText(text, "shop.uvl"))

    assert result.diagnostics == []
    entry = result.table.lookup_feature("Shop")
    assert entry is not None
    types = {attribute.key: attribute.value_type for attribute in entry.keys}
    assert types == {
        "price": ValueType.INTEGER,
        "rate": ValueType.FLOAT,
        "name": ValueType.STRING,
        "id": ValueType.STRING,
        "abstract": ValueType.UNKNOWN,
    }


def test_feature_without_attributes_has_empty_entry() -> None:
    text = "Root\n"
    cur = _Cursor(text)
    result = collect_declarations(_node("Tree", _feature(cur, "Root")), SourceText(text))

    entry = result.table.lookup_feature("Root")
    assert entry is not None
    assert entry.keys == ()


def test_duplicate_feature_is_reported_and_first_entry_kept() -> None:
    text = "Cheese {price 2}\nCheese {name \"x\"}\n"
    cur = _Cursor(text)
    tree = _node(
        "Tree",
        _feature(cur, "Cheese", ("price", "2")),
        _feature(cur, "Cheese", ("name", '"x"')),
    )

    result = collect_declarations(tree, SourceText(text, "dup.uvl"))

    assert len(result.table) == 1
    entry = result.table.lookup_feature("Cheese")
    assert entry is not None
    assert entry.key_names == ["price"]
    assert [d.code for d in result.diagnostics] == ["UVL2001"]
    diag = result.diagnostics[0]
    assert '"Cheese"' in diag.message
    assert diag.span.line == 2
    assert any(label.message == "first defined here" for label in diag.labels)


def test_duplicate_key_is_reported_and_first_kept() -> None:
    text = 'Bread {price 1, price "x"}\n'
    cur = _Cursor(text)
    tree = _feature(cur, "Bread", ("price", "1"), ("price", '"x"'))

    result = collect_declarations(tree, SourceText(text))

    assert [d.code for d in result.diagnostics] == ["UVL2002"]
    assert result.diagnostics[0].message == 'The key "price" is duplicated in the feature "Bread".'
    entry = result.table.lookup_feature("Bread")
    assert entry is not None
    assert [(a.key, a.value_type) for a in entry.keys] == [("price", ValueType.INTEGER)]


def test_feature_name_is_trimmed_and_missing_children_are_skipped() -> None:
    text = "  Ham  \n"
    padded = SyntaxNode(name="Feature", start=0, end=7)
    tree = _node(
        "Tree",
        _node("ExtendedFeature", padded),
        SyntaxNode(name="ExtendedFeature", start=0, end=0),
    )

    result = collect_declarations(tree, SourceText(text))

    assert result.table.feature_names == ["Ham"]
    assert result.diagnostics == []


def test_lookup_key_returns_first_owner() -> None:
    text = "A {size 1}\nB {size \"big\"}\n"
    cur = _Cursor(text)
    tree = _node("Tree", _feature(cur, "A", ("size", "1")), _feature(cur, "B", ("size", '"big"')))

    table = collect_declarations(tree, SourceText(text)).table

    attribute = table.lookup_key("size")
    assert attribute is not None
    assert attribute.value_type == ValueType.INTEGER
    assert table.lookup_key("missing") is None


def test_empty_tree_yields_empty_table() -> None:
    result = collect_declarations(SyntaxNode(name="FeatureModel", start=0, end=0), SourceText(""))
    assert len(result.table) == 0
    assert result.diagnostics == []
