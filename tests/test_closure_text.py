from __future__ import annotations

from typing import List, Optional

import pytest

from groovy_closure.closure_text import closure_text, siblings_text, text_between
from groovy_closure.psi import LambdaNode, as_lambda
from tests.support.harness import (
    Case,
    Token,
    Tree,
    convert_first,
    first_lambda,
    lambda_tree,
    node_text,
    parse_closure,
)

CONVERSION_CASES: List[Case] = [
    Case("expr-one-param", "(x) -> x + 1", "{x -> x + 1}"),
    Case("block-no-params", "() -> { println(x); return x }", "{ ->  println(x); return x }"),
    Case("block-two-params", "(a, b) -> { a + b }", "{a, b ->  a + b }"),
    Case("expr-no-params", "() -> 42", "{ -> 42}"),
    Case("bare-param", "x -> x * 2", "{x -> x * 2}"),
    Case("typed-default-params", "(int a, b = 2) -> a + b", "{int a, b = 2 -> a + b}"),
    Case("padded-params", "( a , b ) -> a", "{ a , b  -> a}"),
    Case("empty-params-with-space", "( ) -> 1", "{ -> 1}"),
    Case("comment-in-params", "(x /* arg */) -> // why\n  x", "{x /* arg */ -> // why\n  x}"),
    Case("comment-separator", "(a, b) -> /* sep */ { a + b }", "{a, b -> /* sep */  a + b }"),
    Case("empty-block", "(x) -> {}", "{x -> }"),
    Case("multiline-block", "(n) -> {\n  n * 2\n}", "{n -> \n  n * 2\n}"),
    Case("outer-of-nested", "(a) -> (b) -> a + b", "{a -> (b) -> a + b}"),
    Case("lambda-in-call", "foo((it) -> it.name, 1)", "{it -> it.name}"),
    Case("newline-before-arrow", "(a)\n-> a", "{a\n-> a}"),
    Case("newline-before-rpar", "(int a\n) -> a", "{int a\n -> a}"),
    Case("line-comment-in-params", "(a // first\n, b) -> a", "{a // first\n, b -> a}"),
    Case("missing-body", "(x) ->", None),
    Case("missing-body-in-call", "f((x) -> )", None),
]


@pytest.mark.parametrize("case", CONVERSION_CASES, ids=lambda case: case.name)
def test_closure_text(case: Case) -> None:
    assert convert_first(case.source) == case.expected


@pytest.mark.parametrize(
    "case",
    [case for case in CONVERSION_CASES if case.expected is not None],
    ids=lambda case: case.name,
)
def test_closure_text_reparses_with_same_header(case: Case) -> None:
    lam = first_lambda(case.source)
    closure = parse_closure(case.expected)
    labels = [ch.data if isinstance(ch, Tree) else ch.type for ch in closure.children]

    assert node_text(closure) == case.expected
    assert "ARROW" in labels
    assert ("paramlist" in labels) == (lam.parameter_list.parameters_count != 0)
    if "paramlist" in labels:
        params = closure.children[labels.index("paramlist")]
        assert [node_text(p) for p in params.children if isinstance(p, Tree)] == [
            node_text(p) for p in lam.parameter_list.parameters
        ]


def _params(left: Optional[str], right: Optional[str]) -> Tree:
    children: List[object] = []
    if left is not None:
        children.append(Token("LPAR", left))
    children += [
        Tree("param", [Token("IDENT", "a")]),
        Token("COMMA", ","),
        Token("WS", " "),
        Tree("param", [Token("IDENT", "b")]),
    ]
    if right is not None:
        children.append(Token("RPAR", right))
    return Tree("paramlist", children)


SEPARATOR = [Token("WS", " "), Token("ARROW", "->"), Token("WS", " ")]
DELIMITERS = [None, "(", "(*"]


@pytest.mark.parametrize("left", DELIMITERS, ids=lambda d: f"left-{len(d or '')}")
@pytest.mark.parametrize("right", [None, ")", "*)"], ids=lambda d: f"right-{len(d or '')}")
def test_param_delimiters_stripped_exactly(left: Optional[str], right: Optional[str]) -> None:
    params = _params(left, right)
    body = Token("IDENT", "a")
    lam = LambdaNode(lambda_tree(params, SEPARATOR, body))

    text = closure_text(lam)

    assert text == "{a, b -> a}"
    stripped = len(left or "") + len(right or "")
    assert len(text) == len(node_text(params)) - stripped + len(" -> ") + len("a") + 2


@pytest.mark.parametrize(
    ("lbrace", "rbrace"),
    [("{", "}"), ("{{", "}}"), ("{|", "}")],
)
def test_block_braces_stripped_exactly(lbrace: str, rbrace: str) -> None:
    block = Tree("block", [Token("LBRACE", lbrace), Token("WS", " "), Token("IDENT", "a"), Token("WS", " "), Token("RBRACE", rbrace)])
    lam = LambdaNode(lambda_tree(_params("(", ")"), SEPARATOR, block))

    assert closure_text(lam) == "{a, b ->  a }"


def test_empty_block_without_separator() -> None:
    params = Tree("paramlist", [Token("LPAR", "("), Token("RPAR", ")")])
    block = Tree("block", [Token("LBRACE", "{"), Token("RBRACE", "}")])

    assert closure_text(LambdaNode(lambda_tree(params, [], block))) == "{}"


def test_separator_copied_whatever_it_is() -> None:
    separator = [Token("WS", "\t"), Token("BLOCK_COMMENT", "/* => */"), Token("ARROW", "->"), Token("NEWLINE", "\n")]
    lam = LambdaNode(lambda_tree(_params("(", ")"), separator, Token("NUMBER", "1")))

    assert closure_text(lam) == "{a, b\t/* => */->\n1}"


def test_no_params_emits_no_param_text() -> None:
    params = Tree("paramlist", [Token("LPAR", "("), Token("WS", "   "), Token("RPAR", ")")])
    lam = LambdaNode(lambda_tree(params, SEPARATOR, Token("IDENT", "e")))

    assert closure_text(lam) == "{ -> e}"


@pytest.mark.parametrize(
    "separator",
    [[], [Token("ARROW", "->")], [Token("ARROW", "->"), Token("WS", "  ")]],
    ids=["nothing", "arrow", "arrow-space"],
)
def test_absent_body_returns_none(separator: List[Token]) -> None:
    lam = LambdaNode(lambda_tree(_params("(", ")"), separator, None))

    assert lam.body is None
    assert closure_text(lam) is None


def test_text_between() -> None:
    lpar, rpar = Token("LPAR", "("), Token("RPAR", ")")

    assert text_between("(abc)", lpar, rpar) == "abc"
    assert text_between("(abc)", lpar, None) == "abc)"
    assert text_between("(abc)", None, rpar) == "(abc"
    assert text_between("(abc)", None, None) == "(abc)"
    assert text_between("()", lpar, rpar) == ""


def test_siblings_text_stops_at_node_or_end() -> None:
    first = Token("IDENT", "a")
    stop = Token("IDENT", "d")
    parent = Tree("x", [first, Token("WS", " "), Token("IDENT", "b"), stop, Token("IDENT", "e")])

    assert siblings_text(parent, first, stop) == " b"
    assert siblings_text(parent, first, None) == " bde"
    assert siblings_text(parent, stop, None) == "e"
    assert siblings_text(parent, parent.children[-1], None) == ""


def test_as_lambda_view_is_required() -> None:
    with pytest.raises(TypeError):
        as_lambda(Tree("closure", []))
