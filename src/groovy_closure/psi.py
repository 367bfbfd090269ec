"""Read-only views over lambda trees.

A view wraps a parsed node and answers structural questions about it (which
token is the left delimiter, where the body starts) without copying or
mutating the tree. Lambda bodies are a closed union of BlockBody and
ExpressionBody.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Union

from lark import Token, Tree

from .tree import Node, is_token, is_tree, is_trivia, iter_trees, node_text, tree_children, tree_label


def _first_token(node: Tree, type_: str) -> Optional[Token]:
    children = tree_children(node)
    if children and isinstance(children[0], Token) and children[0].type == type_:
        return children[0]
    return None

def _last_token(node: Tree, type_: str) -> Optional[Token]:
    children = tree_children(node)
    if children and isinstance(children[-1], Token) and children[-1].type == type_:
        return children[-1]
    return None


@dataclass(frozen=True)
class ParameterList:
    node: Tree

    @property
    def left_delimiter(self) -> Optional[Token]:
        return _first_token(self.node, 'LPAR')

    @property
    def right_delimiter(self) -> Optional[Token]:
        return _last_token(self.node, 'RPAR')

    @property
    def parameters(self) -> List[Tree]:
        return [ch for ch in self.node.children if tree_label(ch) == 'param']

    @property
    def parameters_count(self) -> int:
        return len(self.parameters)

    @property
    def text(self) -> str:
        return node_text(self.node)


@dataclass(frozen=True)
class BlockBody:
    node: Tree

    @property
    def left_brace(self) -> Optional[Token]:
        return _first_token(self.node, 'LBRACE')

    @property
    def right_brace(self) -> Optional[Token]:
        return _last_token(self.node, 'RBRACE')

    @property
    def statements(self) -> List[Node]:
        return [
            ch for ch in self.node.children
            if is_tree(ch) or (ch.type not in ('LBRACE', 'RBRACE', 'SEMI') and not is_trivia(ch))
        ]

    @property
    def text(self) -> str:
        return node_text(self.node)


@dataclass(frozen=True)
class ExpressionBody:
    node: Node

    @property
    def text(self) -> str:
        return node_text(self.node)


LambdaBody = Union[BlockBody, ExpressionBody]


@dataclass(frozen=True)
class LambdaNode:
    """A `lambda` tree seen as parameter list + optional body."""

    node: Tree

    @property
    def parameter_list(self) -> ParameterList:
        return ParameterList(self.node.children[0])

    @property
    def body(self) -> Optional[LambdaBody]:
        # [paramlist, separator..., body?]; the body, when present, is last
        last = self.node.children[-1]
        if last is self.node.children[0]:
            return None
        if is_token(last) and (last.type == 'ARROW' or is_trivia(last)):
            return None
        if tree_label(last) == 'block':
            return BlockBody(last)
        return ExpressionBody(last)

    @property
    def text(self) -> str:
        return node_text(self.node)


def as_lambda(node: Node) -> LambdaNode:
    if tree_label(node) != 'lambda':
        raise TypeError(f"expected a 'lambda' node, got {tree_label(node) or type(node).__name__}")
    return LambdaNode(node)


def find_lambdas(root: Node) -> Iterator[Tree]:
    """Every lambda tree under root, outer lambdas before inner ones."""
    return iter_trees(root, 'lambda')
