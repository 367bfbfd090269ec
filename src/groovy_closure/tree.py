"""Shared helpers for working with the lossless Tree/Token nodes.

The parser builds plain Lark trees; every character of the source lives in
exactly one Token leaf, so the text of any node is the concatenation of its
leaves.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from lark import Token, Tree
from typing_extensions import TypeAlias, TypeGuard

Node: TypeAlias = Union[Tree, Token]
Path: TypeAlias = Tuple[int, ...]

TRIVIA_TYPES = frozenset({"WS", "NEWLINE", "LINE_COMMENT", "BLOCK_COMMENT"})


def is_tree(node: Node) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Node) -> TypeGuard[Token]:
    return isinstance(node, Token)

def is_trivia(node: Node) -> bool:
    return is_token(node) and node.type in TRIVIA_TYPES

def tree_label(node: Node) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: Node) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def significant_children(node: Node) -> List[Node]:
    return [ch for ch in tree_children(node) if not is_trivia(ch)]

def iter_trees(node: Node, label: Optional[str] = None) -> Iterator[Tree]:
    """Yield subtrees in document order, parents before their children."""
    if not is_tree(node):
        return
    if label is None or node.data == label:
        yield node
    for child in node.children:
        yield from iter_trees(child, label)


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

def node_text(node: Optional[Node]) -> str:
    """Verbatim source text of a node ('' for None)."""
    if node is None:
        return ""
    if is_token(node):
        return str(node)

    parts: List[str] = []
    stack: List[Node] = [node]
    while stack:
        current = stack.pop()
        if is_token(current):
            parts.append(str(current))
        else:
            stack.extend(reversed(current.children))
    return "".join(parts)

def text_length(node: Optional[Node]) -> int:
    return len(node_text(node))


# ---------------------------------------------------------------------------
# Sibling views
# ---------------------------------------------------------------------------

def index_of(parent: Tree, child: Node) -> int:
    """Position of child among parent's children, by identity."""
    for idx, ch in enumerate(parent.children):
        if ch is child:
            return idx

    raise ValueError(f"{child!r} is not a child of {parent.data!r}")


@dataclass(frozen=True)
class SiblingRange:
    """Read-only view over parent.children[start:stop]."""

    parent: Tree
    start: int
    stop: int

    @classmethod
    def between(cls, parent: Tree, after: Node, until: Optional[Node]) -> SiblingRange:
        """Siblings strictly after `after`, up to `until` (exclusive) or the end."""
        start = index_of(parent, after) + 1
        stop = len(parent.children)

        if until is not None:
            for idx in range(start, len(parent.children)):
                if parent.children[idx] is until:
                    stop = idx
                    break

        return cls(parent, start, stop)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return tuple(self.parent.children[self.start:self.stop])

    @property
    def text(self) -> str:
        return "".join(node_text(node) for node in self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return max(0, self.stop - self.start)


# ---------------------------------------------------------------------------
# Paths and spans
# ---------------------------------------------------------------------------

def node_at_path(root: Node, path: Sequence[int]) -> Optional[Node]:
    node = root
    for idx in path:
        if not is_tree(node) or idx >= len(node.children):
            return None
        node = node.children[idx]
    return node

def path_of(root: Node, target: Node) -> Optional[Path]:
    """Child-index path from root to target (by identity), or None."""
    if root is target:
        return ()
    if not is_tree(root):
        return None

    for idx, child in enumerate(root.children):
        sub = path_of(child, target)
        if sub is not None:
            return (idx,) + sub
    return None

def replace_at_path(root: Tree, path: Sequence[int], new: Node) -> Node:
    """Return a copy of root with the node at path swapped for new.

    Only the spine from root to the replaced node is rebuilt; untouched
    subtrees are shared with the old tree.
    """
    if not path:
        return new

    idx = path[0]
    children = list(root.children)
    children[idx] = replace_at_path(children[idx], path[1:], new)
    return Tree(root.data, children)


def pretty(node: Node, indent: str = '  ') -> str:
    """Pretty-print a tree, showing trivia tokens with their repr."""
    def _pretty(n: Node, level: int) -> str:
        if is_token(n):
            return f'{indent * level}{n.type}\t{str(n)!r}\n'
        lines = [f'{indent * level}{n.data}\n']
        for child in n.children:
            lines.append(_pretty(child, level + 1))
        return ''.join(lines)
    return _pretty(node, 0)
