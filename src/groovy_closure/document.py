"""Editable document hosting a lossless Groovy tree.

The document is the host side of the lambda-to-closure conversion: it hands
out opaque pointers to lambda nodes, re-resolves them later, and swaps a node
for a freshly parsed closure.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from lark import Tree

from .parser_rd import parse_closure, parse_source
from .psi import LambdaNode, as_lambda
from .tree import Node, Path, is_tree, node_at_path, node_text, path_of, replace_at_path, text_length, tree_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LambdaPointer:
    """Identifies a lambda by its child-index path and the text it had."""

    path: Path
    text: str


class Document:
    def __init__(self, text: str):
        self._tree = parse_source(text)
        self._text = text
        self.version = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def tree(self) -> Tree:
        return self._tree

    def pointer(self, node: Tree) -> LambdaPointer:
        lam = as_lambda(node)
        path = path_of(self._tree, lam.node)
        if path is None:
            raise ValueError("node is not part of this document")
        return LambdaPointer(path, lam.text)

    def resolve(self, pointer: LambdaPointer) -> Optional[LambdaNode]:
        """The live lambda the pointer refers to, or None if it went stale."""
        node = node_at_path(self._tree, pointer.path)
        if node is None or tree_label(node) != 'lambda' or node_text(node) != pointer.text:
            logger.debug("stale lambda pointer at path %s (document version %d)", pointer.path, self.version)
            return None
        return as_lambda(node)

    def replace_with_parsed_text(self, target: LambdaNode, text: str) -> Tree:
        """Parse text as a closure and substitute it for target.

        Tree and text are updated together; if text does not parse the
        document is left unchanged and the ParseError/LexError propagates.
        """
        path = path_of(self._tree, target.node)
        if path is None:
            raise ValueError("target is not part of this document")

        closure = parse_closure(text)
        new_tree = replace_at_path(self._tree, path, closure)

        self._tree, self._text = new_tree, node_text(new_tree)
        self.version += 1
        logger.debug("replaced lambda at path %s with %r", path, text)
        return closure

    def lambda_spans(self) -> Iterator[Tuple[Tree, int, int]]:
        """(lambda, start, end) offsets in document order."""
        def walk(node: Node, start: int) -> Iterator[Tuple[Tree, int, int]]:
            if not is_tree(node):
                return
            if node.data == 'lambda':
                yield node, start, start + text_length(node)
            offset = start
            for child in node.children:
                yield from walk(child, offset)
                offset += text_length(child)

        return walk(self._tree, 0)

    def lambda_at(self, offset: int) -> Optional[Tree]:
        """Innermost lambda whose text covers offset."""
        found = None
        for node, start, end in self.lambda_spans():
            if start <= offset < end:
                found = node
        return found
