from __future__ import annotations

import pytest

from groovy_closure.document import LambdaPointer
from groovy_closure.psi import find_lambdas
from tests.support.harness import LexError, ParseError, node_text, open_document


def _lambdas(doc):
    return list(find_lambdas(doc.tree))


def test_pointer_resolves_to_live_lambda() -> None:
    doc = open_document("def f = (x) -> x + 1\n")
    node = _lambdas(doc)[0]

    pointer = doc.pointer(node)
    lam = doc.resolve(pointer)

    assert lam is not None
    assert lam.node is node
    assert pointer.text == "(x) -> x + 1"


def test_pointer_requires_lambda() -> None:
    doc = open_document("x")
    with pytest.raises(TypeError):
        doc.pointer(doc.tree)


def test_pointer_requires_node_from_document() -> None:
    doc = open_document("(x) -> x")
    other = open_document("(x) -> x")
    with pytest.raises(ValueError):
        doc.pointer(_lambdas(other)[0])


def test_replace_updates_text_and_tree_together() -> None:
    doc = open_document("def f = (x) -> x + 1\n")
    lam = doc.resolve(doc.pointer(_lambdas(doc)[0]))

    closure = doc.replace_with_parsed_text(lam, "{x -> x + 1}")

    assert closure.data == "closure"
    assert doc.text == "def f = {x -> x + 1}\n"
    assert node_text(doc.tree) == doc.text
    assert doc.version == 1
    assert _lambdas(doc) == []


def test_other_pointers_survive_unrelated_edit() -> None:
    doc = open_document("a((x) -> x)\nb((y) -> y)")
    first, second = _lambdas(doc)
    keep = doc.pointer(second)

    doc.replace_with_parsed_text(doc.resolve(doc.pointer(first)), "{x -> x}")

    lam = doc.resolve(keep)
    assert lam is not None
    assert lam.text == "(y) -> y"


def test_pointer_goes_stale_when_lambda_replaced() -> None:
    doc = open_document("(a) -> (b) -> a + b")
    outer, inner = _lambdas(doc)
    outer_ptr, inner_ptr = doc.pointer(outer), doc.pointer(inner)

    doc.replace_with_parsed_text(doc.resolve(outer_ptr), "{a -> (b) -> a + b}")

    assert doc.resolve(outer_ptr) is None
    assert doc.resolve(inner_ptr) is None
    assert [node_text(n) for n in _lambdas(doc)] == ["(b) -> a + b"]


def test_resolve_unknown_path_is_none() -> None:
    doc = open_document("(x) -> x")

    assert doc.resolve(LambdaPointer((5, 2), "(x) -> x")) is None
    assert doc.resolve(LambdaPointer((0,), "(y) -> y")) is None


@pytest.mark.parametrize(
    ("text", "exc"),
    [
        pytest.param("{x -> ", ParseError, id="unclosed"),
        pytest.param("(x) -> x", ParseError, id="not-a-closure"),
        pytest.param("{x} + 1", ParseError, id="trailing"),
        pytest.param("{'x}", LexError, id="lex-error"),
    ],
)
def test_failed_replace_leaves_document_intact(text: str, exc: type) -> None:
    source = "def f = (x) -> x\n"
    doc = open_document(source)
    pointer = doc.pointer(_lambdas(doc)[0])

    with pytest.raises(exc):
        doc.replace_with_parsed_text(doc.resolve(pointer), text)

    assert doc.text == source
    assert doc.version == 0
    assert doc.resolve(pointer) is not None


@pytest.mark.parametrize(
    ("offset", "expected"),
    [
        (0, "(a) -> b((c) -> c)"),
        (8, "(a) -> b((c) -> c)"),
        (9, "(c) -> c"),
        (16, "(c) -> c"),
        (17, "(a) -> b((c) -> c)"),
        (18, None),
        (25, None),
    ],
)
def test_lambda_at(offset: int, expected) -> None:
    doc = open_document("(a) -> b((c) -> c)\nx = 1")
    node = doc.lambda_at(offset)

    assert (node_text(node) if node is not None else None) == expected
