from __future__ import annotations

import pytest

from nix_samples import LIB_SOURCE, nested_lists, nested_sets

from nixdoc.errors import NixParseError
from nixdoc.parser import parse
from nixdoc.tree import Node, NodeKind, Tree


def _top(tree: Tree) -> Node:
    root = tree[tree.root]
    top = tree.child(root)
    assert top is not None
    return top


def _kinds(tree: Tree, node: Node) -> list[NodeKind]:
    return [child.kind for child in tree.children(node)]


def test_set_entry_shape() -> None:
    tree = parse("{ foo = 1; }")

    entry = next(node for node in tree.walk() if node.kind == NodeKind.SET_ENTRY)
    assert _kinds(tree, entry) == [
        NodeKind.ATTRIBUTE,
        NodeKind.TOKEN,
        NodeKind.VALUE,
        NodeKind.TOKEN,
    ]
    attribute = tree.child(entry)
    assert attribute is not None
    ident = tree.child(attribute)
    assert ident is not None
    assert ident.kind == NodeKind.IDENT
    assert ident.name == "foo"


def test_lambda_shape() -> None:
    tree = parse("a: b: a")

    outer = _top(tree)
    assert outer.kind == NodeKind.LAMBDA
    assert _kinds(tree, outer) == [NodeKind.IDENT, NodeKind.TOKEN, NodeKind.LAMBDA]


@pytest.mark.parametrize(
    "source",
    [
        "{ a, b ? 1, ... }: a",
        "{ a }: a",
        "{ }: 1",
        "{ ... }: 1",
        "args@{ a }: a",
        "{ a }@args: a",
    ],
)
def test_pattern_lambdas(source: str) -> None:
    tree = parse(source)

    top = _top(tree)
    assert top.kind == NodeKind.LAMBDA
    param = tree.child(top)
    assert param is not None
    assert param.kind == NodeKind.PATTERN


def test_empty_braces_without_colon_is_a_set() -> None:
    assert _top(parse("{ }")).kind == NodeKind.SET


def test_leading_bind_is_first_pattern_child() -> None:
    tree = parse("args@{ a }: a")

    pattern = tree.child(_top(tree))
    assert pattern is not None
    assert _kinds(tree, pattern)[0] == NodeKind.PAT_BIND


def test_identifier_carries_leading_comment() -> None:
    tree = parse("{\n  /* Docs. */\n  foo = 1;\n}")

    ident = next(node for node in tree.walk() if node.kind == NodeKind.IDENT)
    assert any(t.multiline and t.content == " Docs. " for t in ident.leading)


def test_walk_is_preorder_in_source_order() -> None:
    tree = parse("{ a = { b = 1; }; c = 2; }")

    names = [node.name for node in tree.walk() if node.kind == NodeKind.IDENT]
    assert names == ["a", "b", "c"]
    assert next(tree.walk()).kind == NodeKind.ROOT


def test_application_binds_tighter_than_operators() -> None:
    tree = parse("f x + g y")

    top = _top(tree)
    assert top.kind == NodeKind.OPERATION
    assert _kinds(tree, top) == [NodeKind.APPLY, NodeKind.TOKEN, NodeKind.APPLY]


def test_update_is_right_associative() -> None:
    tree = parse("a // b // c")

    top = _top(tree)
    assert _kinds(tree, top) == [NodeKind.IDENT, NodeKind.TOKEN, NodeKind.OPERATION]


def test_subtraction_is_left_associative() -> None:
    tree = parse("a - b - c")

    top = _top(tree)
    assert _kinds(tree, top) == [NodeKind.OPERATION, NodeKind.TOKEN, NodeKind.IDENT]


def test_select_with_or_default() -> None:
    tree = parse("a.b.c or d")

    top = _top(tree)
    assert top.kind == NodeKind.OR_DEFAULT
    select = tree.child(top)
    assert select is not None
    assert select.kind == NodeKind.SELECT


def test_let_in_and_inherit() -> None:
    tree = parse("let inherit (lib) id; x = 1; in id x")

    top = _top(tree)
    assert top.kind == NodeKind.LET_IN
    assert NodeKind.INHERIT in _kinds(tree, top)
    assert NodeKind.SET_ENTRY in _kinds(tree, top)


def test_string_interpolation_expression_is_in_tree() -> None:
    tree = parse('"x-${toString y}"')

    kinds = {node.kind for node in tree.walk()}
    assert NodeKind.INTERPOL in kinds
    assert NodeKind.APPLY in kinds


def test_realistic_library_file_parses() -> None:
    tree = parse(LIB_SOURCE)

    top = _top(tree)
    assert top.kind == NodeKind.LAMBDA
    entries = [node for node in tree.walk() if node.kind == NodeKind.SET_ENTRY]
    assert len(entries) == 25


@pytest.mark.parametrize(
    "source",
    [
        "{ a = 1 }",
        "let x = 1;",
        "if a then b",
        "(a",
        "{ a = ; }",
    ],
)
def test_malformed_input_raises(source: str) -> None:
    with pytest.raises(NixParseError):
        parse(source)


def test_trailing_tokens_raise() -> None:
    with pytest.raises(NixParseError, match="end of input"):
        parse("a )")


def test_multiplication_binds_tighter_than_addition() -> None:
    tree = parse("a + b * c")

    top = _top(tree)
    assert _kinds(tree, top) == [NodeKind.IDENT, NodeKind.TOKEN, NodeKind.OPERATION]


def test_not_applies_to_arithmetic_but_not_to_logic() -> None:
    assert _top(parse("!a + b")).kind == NodeKind.UNARY

    tree = parse("!a && b")
    top = _top(tree)
    assert top.kind == NodeKind.OPERATION
    assert _kinds(tree, top) == [NodeKind.UNARY, NodeKind.TOKEN, NodeKind.IDENT]


def test_negation_binds_tighter_than_has_attr() -> None:
    tree = parse("-a ? b")

    top = _top(tree)
    assert top.kind == NodeKind.OPERATION
    assert _kinds(tree, top) == [NodeKind.UNARY, NodeKind.TOKEN, NodeKind.ATTRIBUTE]


def test_deeply_nested_sets_parse() -> None:
    tree = parse(nested_sets(100))

    entries = [node for node in tree.walk() if node.kind == NodeKind.SET_ENTRY]
    assert len(entries) == 101


def test_excessive_nesting_raises_parse_error() -> None:
    with pytest.raises(NixParseError, match="nested too deeply") as exc_info:
        parse(nested_lists(5000))

    assert exc_info.value.line == 1
