"""Synthesis of closure-literal text from a lambda expression.

    (a, b) -> a + b        =>  {a, b -> a + b}
    (x) -> { foo(x) }      =>  {x ->  foo(x) }

Parameter text, the separator between parameters and body, and the body are
copied verbatim (comments and whitespace included); only the enclosing
delimiters change.
"""
from __future__ import annotations

from typing import List, Optional

from lark import Tree

from .psi import BlockBody, LambdaNode
from .tree import Node, SiblingRange, text_length


def text_between(text: str, left: Optional[Node], right: Optional[Node]) -> str:
    """Cut the length of `left` from the start of text and of `right` from the end.

    An absent delimiter cuts nothing.
    """
    start = text_length(left) if left is not None else 0
    end = len(text) - (text_length(right) if right is not None else 0)
    return text[start:end]


def siblings_text(parent: Tree, start: Node, stop: Optional[Node]) -> str:
    """Text of the siblings after `start`, up to `stop` or the last child."""
    return SiblingRange.between(parent, start, stop).text


def closure_text(lambda_node: LambdaNode) -> Optional[str]:
    """Closure source equivalent to lambda_node, or None if it has no body."""
    parameter_list = lambda_node.parameter_list
    body = lambda_node.body
    if body is None:
        return None

    parts: List[str] = ["{"]
    if parameter_list.parameters_count != 0:
        parts.append(text_between(
            parameter_list.text,
            parameter_list.left_delimiter,
            parameter_list.right_delimiter,
        ))
    parts.append(siblings_text(lambda_node.node, parameter_list.node, body.node))
    if isinstance(body, BlockBody):
        parts.append(text_between(body.text, body.left_brace, body.right_brace))
    else:
        parts.append(body.text)
    parts.append("}")
    return "".join(parts)
