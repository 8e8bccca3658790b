"""
rwsteps/symbolic/marker.py
==========================
Rewrite markers: find, read, add and strip them.

The rewriting engine flags the subterm a step just produced. It may
arrive in two encodings:

    shape form:      (Rewrite=> C (join s1 y x))     3-child list, tag first
    annotated form:  (join s1 y x) with Annotation(FORWARD, "C")

Parsing lifts shape form into annotated form; ``locate`` and
``marker_at`` accept either so hand-built trees work too. Both forms
sit at the same position, which is what pairs an "after" snapshot
with its "before" snapshot.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Tuple

from rwsteps.core.types import Annotation, Atom, Direction, Empty, Node, Position, Term
from rwsteps.symbolic.position import replace_at, resolve
from rwsteps.symbolic.sexpr import lift_marker_shape, marker_shape


def _marker_of(term: Term) -> Optional[Annotation]:
    if term.annotation is not None:
        return term.annotation
    return marker_shape(term)


def locate(tree: Term) -> Optional[Tuple[Position, Direction]]:
    """Find the rewrite marker: depth-first, pre-order, left-most wins.

    A marked node is reported at its own position and never searched
    inside for a nested marker. Returns None if the tree has no marker.
    """
    stack: List[Tuple[Position, Term]] = [((), tree)]
    while stack:
        position, term = stack.pop()
        marker = _marker_of(term)
        if marker is not None:
            return position, marker.direction
        if isinstance(term, Node):
            for i in range(len(term.children) - 1, -1, -1):
                stack.append((position + (i,), term.children[i]))
    return None


def marker_at(tree: Term, position: Position) -> Optional[Annotation]:
    node = resolve(tree, position)
    if node is None:
        return None
    return _marker_of(node)


def lift_markers(term: Term) -> Term:
    """Convert every shape-encoded marker into an annotation. Idempotent.

    Post-order over an explicit stack; unchanged subtrees are reused
    as-is (compared by identity, never structurally).
    """
    if not isinstance(term, Node):
        return term
    done: List[Term] = []
    stack: List[Tuple[Term, bool]] = [(term, False)]
    while stack:
        node, expanded = stack.pop()
        if not isinstance(node, Node):
            done.append(node)
        elif not expanded:
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))
        else:
            n = len(node.children)
            children = tuple(done[-n:])
            del done[-n:]
            if any(new is not old for new, old in zip(children, node.children)):
                node = Node(children, node.annotation)
            done.append(lift_marker_shape(node))
    return done[0]


def strip_markers(term: Term) -> Term:
    """Remove every marker, leaving the plain rewritten shape."""
    done: List[Term] = []
    stack: List[Tuple[Term, bool]] = [(term, False)]
    while stack:
        node, expanded = stack.pop()
        if isinstance(node, Empty):
            done.append(node)
        elif isinstance(node, Atom):
            done.append(Atom(node.text) if node.annotation is not None else node)
        elif expanded:
            n = len(node.children)
            children = tuple(done[-n:])
            del done[-n:]
            done.append(Node(children))
        elif marker_shape(node) is not None:
            stack.append((node.children[2], False))
        else:
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))
    return done[0]


def mark(tree: Term, position: Position, direction: Direction, rule: str) -> Term:
    """Copy of ``tree`` with the subterm at ``position`` annotated.

    EMPTY cannot carry an annotation, so a step that produced ``()``
    is marked in shape form: ``(Rewrite=> RULE ())``.
    """
    target = resolve(tree, position)
    if target is None:
        raise IndexError(f"Position {list(position)} does not exist in the tree")
    if isinstance(target, Empty):
        marked: Term = Node((Atom(direction.tag), Atom(rule), target))
    else:
        marked = replace(target, annotation=Annotation(direction, rule))
    return replace_at(tree, position, marked)
