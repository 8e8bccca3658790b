"""
rwsteps/symbolic/sexpr.py
=========================
Symbolic expression text format: parse and print.

Grammar (LISP-like):
    term  := atom | "(" term* ")"
    atom  := any run of characters other than whitespace and parentheses

    "()"  parses to EMPTY
    "(Rewrite=> C (join s1 x y))" parses to the annotated term
        (join s1 x y) with Annotation(FORWARD, "C")

Printing is canonical (single spaces, no padding), so
"stringify subtree, then reparse" is a legitimate copy operation:
    parse(to_text(t)) == t   for every term t
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterator, List, Optional, Tuple

from rwsteps.core.exceptions import ParseError
from rwsteps.core.types import EMPTY, Annotation, Atom, Direction, Empty, Node, Term

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\(|\)|[^\s()]+")


def tokenize(text: str) -> Iterator[Tuple[str, int]]:
    """Yield (token, offset) pairs."""
    for m in _TOKEN.finditer(text):
        yield m.group(0), m.start()


# ─────────────────────────────────────────────
#  MARKER SHAPE
# ─────────────────────────────────────────────

def marker_shape(term: Term) -> Optional[Annotation]:
    """Annotation denoted by a shape-encoded marker ``(TAG RULE sub)``, if any."""
    if not isinstance(term, Node) or len(term.children) != 3:
        return None
    tag = term.children[0]
    if not isinstance(tag, Atom) or tag.annotation is not None:
        return None
    direction = Direction.from_tag(tag.text)
    if direction is None:
        return None
    return Annotation(direction=direction, rule=to_text(term.children[1]))


def lift_marker_shape(term: Term) -> Term:
    """Turn one marker-shaped node into its annotated subterm.

    Non-marker terms are returned unchanged. An EMPTY subterm cannot
    carry an annotation, so such a marker is left in shape form.
    """
    annotation = marker_shape(term)
    if annotation is None:
        return term
    inner = term.children[2]
    if isinstance(inner, Empty):
        logger.warning(f"Marker for rule '{annotation.rule}' wraps an empty term; kept as-is")
        return term
    return replace(inner, annotation=annotation)


# ─────────────────────────────────────────────
#  PARSE / PRINT
# ─────────────────────────────────────────────

def parse(text: str) -> Term:
    """Parse exactly one symbolic expression.

    Iterative, so nesting depth is not bounded by the recursion limit.
    Raises ParseError on empty input, unbalanced parentheses or
    trailing tokens after the first complete expression.
    """
    stack: List[List[Term]] = []
    opened: List[int] = []
    result: Optional[Term] = None

    for token, offset in tokenize(text):
        if result is not None:
            raise ParseError(f"Unexpected token {token!r} after complete expression", text, offset)
        if token == "(":
            stack.append([])
            opened.append(offset)
            continue
        if token == ")":
            if not stack:
                raise ParseError("Unbalanced ')'", text, offset)
            items = stack.pop()
            opened.pop()
            term = lift_marker_shape(Node(tuple(items))) if items else EMPTY
        else:
            term = Atom(token)

        if stack:
            stack[-1].append(term)
        else:
            result = term

    if stack:
        raise ParseError("Unclosed '('", text, opened[-1])
    if result is None:
        raise ParseError("Empty input", text, 0)
    return result


def to_text(term: Term) -> str:
    """Canonical text form. Total: never fails, at any nesting depth."""
    parts: List[str] = []
    stack: List[object] = [term]   # terms still to print, or literal text
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        close = ""
        if item.annotation is not None:
            parts.append(f"({item.annotation.direction.tag} {item.annotation.rule} ")
            close = ")"
        if isinstance(item, Empty):
            parts.append("()" + close)
        elif isinstance(item, Atom):
            parts.append(item.text + close)
        else:
            parts.append("(")
            stack.append(")" + close)
            for i in range(len(item.children) - 1, -1, -1):
                stack.append(item.children[i])
                if i:
                    stack.append(" ")
    return "".join(parts)


def copy_via_text(term: Term) -> Term:
    return parse(to_text(term))


def ast_size(term: Term) -> int:
    """Number of leaf tokens; EMPTY counts as one."""
    size = 0
    stack = [term]
    while stack:
        t = stack.pop()
        if isinstance(t, Node):
            stack.extend(t.children)
        else:
            size += 1
    return size
