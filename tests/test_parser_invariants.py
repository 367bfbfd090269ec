from __future__ import annotations

from textwrap import dedent
from typing import Iterator, List

import pytest

from groovy_closure.tree import is_trivia, iter_trees
from tests.support.harness import Token, Tree, node_text, parse_source

SOURCES: List[str] = [
    "",
    "   \n// only a comment\n",
    "(x) -> x + 1",
    "x -> x",
    "() -> { println(x); return x }",
    "(a, b) -> /* sep */ { a + b }",
    "def f = (int a = 1, b) ->\n    a * b\n",
    "list.each { it -> println it }\r\nfoo((a) -> { a }, [1, 2], { -> 0 })\r\n",
    "(x) -> (y) -> { def z = x + y; z }",
    "f((x) -> )",
    dedent(
        """\
        def total = items.collect { item ->
            item.price * item.qty   // line total
        }.sum()

        def check = (n) -> {
            /* guard */
            return n >= 0 && n % 2 == 0
        }
        """
    ),
]


def _leaves(node: object) -> Iterator[Token]:
    if isinstance(node, Token):
        yield node
        return
    for child in node.children:
        yield from _leaves(child)


@pytest.mark.parametrize("source", SOURCES)
def test_tree_text_is_source(source: str) -> None:
    assert node_text(parse_source(source)) == source


@pytest.mark.parametrize("source", SOURCES)
def test_leaves_are_contiguous(source: str) -> None:
    pos = 0
    for leaf in _leaves(parse_source(source)):
        assert leaf.start_pos == pos
        pos = leaf.end_pos
    assert pos == len(source)


@pytest.mark.parametrize("source", SOURCES)
def test_trivia_never_bounds_a_subtree(source: str) -> None:
    root = parse_source(source)
    for tree in iter_trees(root):
        if tree is root:
            continue
        leaves = list(_leaves(tree))
        assert leaves, tree
        assert not is_trivia(leaves[0]), (tree.data, leaves[0])
        assert not is_trivia(leaves[-1]), (tree.data, leaves[-1])


@pytest.mark.parametrize("source", SOURCES)
def test_lambda_starts_with_paramlist(source: str) -> None:
    for tree in iter_trees(parse_source(source), "lambda"):
        first = tree.children[0]
        assert isinstance(first, Tree) and first.data == "paramlist"
        assert any(isinstance(ch, Token) and ch.type == "ARROW" for ch in tree.children)
