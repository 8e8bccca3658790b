"""
rwsteps/symbolic/position.py
============================
Positions: paths of zero-based child indices into a term.

    resolve((join s1 (split1 s2 x)), (2, 1))  →  s2
    resolve(t, ())                           →  t
"""

from __future__ import annotations

from typing import Iterator, Optional, Tuple

from rwsteps.core.types import Node, Position, Term


def resolve(tree: Term, position: Position) -> Optional[Term]:
    """Subtree of ``tree`` at ``position``, or None if any index is out of range.

    Atoms and EMPTY have no children, so any non-empty position
    fails on them. Pure: the tree is never modified.
    """
    node = tree
    for index in position:
        if not isinstance(node, Node) or not 0 <= index < len(node.children):
            return None
        node = node.children[index]
    return node


def positions(tree: Term, prefix: Position = ()) -> Iterator[Tuple[Position, Term]]:
    """Pre-order walk yielding (position, subterm), root first."""
    stack = [(prefix, tree)]
    while stack:
        position, term = stack.pop()
        yield position, term
        if isinstance(term, Node):
            for i in range(len(term.children) - 1, -1, -1):
                stack.append((position + (i,), term.children[i]))


def replace_at(tree: Term, position: Position, subterm: Term) -> Term:
    """Copy of ``tree`` with the subtree at ``position`` replaced by ``subterm``."""
    ancestors = []
    node = tree
    for index in position:
        if not isinstance(node, Node) or not 0 <= index < len(node.children):
            raise IndexError(f"Position {list(position)} does not exist in the tree")
        ancestors.append(node)
        node = node.children[index]

    # rebuild the spine bottom-up
    result = subterm
    for parent, index in zip(reversed(ancestors), reversed(position)):
        children = list(parent.children)
        children[index] = result
        result = Node(tuple(children), parent.annotation)
    return result
