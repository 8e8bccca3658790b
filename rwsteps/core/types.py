"""
rwsteps/core/types.py
=====================
Foundation type system for rwsteps.
Every module imports from here. No circular dependencies.

Structure:
  - Term = Atom | Node | Empty, an immutable symbolic expression tree
  - Annotation marks the single subterm a rewrite step just produced
  - Step is the output record: rule name, reported arguments, direction
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


# ─────────────────────────────────────────────
#  ENUMERATIONS
# ─────────────────────────────────────────────

class Direction(Enum):
    """Which way a rule was applied.

    FORWARD:  left pattern rewritten to right pattern
    BACKWARD: right pattern rewritten to left pattern

    The value is the sentinel tag the rewriting engine writes as the
    first element of a shape-encoded marker list.
    """
    FORWARD  = "Rewrite=>"
    BACKWARD = "Rewrite<="

    @property
    def tag(self) -> str:
        return self.value

    @property
    def is_forward(self) -> bool:
        return self is Direction.FORWARD

    @classmethod
    def from_tag(cls, text: str) -> Optional["Direction"]:
        for direction in cls:
            if direction.value == text:
                return direction
        return None

    @classmethod
    def from_bool(cls, forward: bool) -> "Direction":
        return cls.FORWARD if forward else cls.BACKWARD


# ─────────────────────────────────────────────
#  TERMS
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class Annotation:
    """Rewrite marker carried by the subterm a rule just produced."""
    direction: Direction
    rule:      str


@dataclass(frozen=True)
class Atom:
    """Leaf token: identifier, pattern variable (``?x``) or literal."""
    text:       str
    annotation: Optional[Annotation] = None

    def __str__(self) -> str:
        from rwsteps.symbolic.sexpr import to_text
        return to_text(self)


@dataclass(frozen=True)
class Node:
    """Ordered, non-empty list of child terms.

    The first child is conventionally the operator symbol, e.g.
    ``(join s1 x y)`` has children ``join, s1, x, y``.
    """
    children:   Tuple["Term", ...]
    annotation: Optional[Annotation] = None

    def __post_init__(self):
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))
        if not self.children:
            raise ValueError("Node must have at least one child; use EMPTY instead.")

    def __len__(self) -> int:
        return len(self.children)

    @property
    def head(self) -> "Term":
        return self.children[0]

    def __str__(self) -> str:
        from rwsteps.symbolic.sexpr import to_text
        return to_text(self)


@dataclass(frozen=True)
class Empty:
    """Absence of a term (``()``). A parser artifact, never real data."""
    annotation = None

    def __str__(self) -> str:
        return "()"


EMPTY = Empty()

Term = Union[Atom, Node, Empty]

# Zero-based child indices from a tree's root to a subtree.
Position = Tuple[int, ...]


# ─────────────────────────────────────────────
#  RULES
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class RuleSpec:
    """A named rewrite rule ``lhs => rhs`` plus its argument recipe.

    arg_positions are positions relative to the matched subterm whose
    text is reported as the step's arguments. In the reference rule
    sets every structural rule reports ``(1,)``, the stream label
    right after the operator symbol.

    Example:
        RuleSpec("C", parse("(join ?s1 ?x ?y)"), parse("(join ?s1 ?y ?x)"), ((1,),))
    """
    name:          str
    lhs:           Term
    rhs:           Term
    arg_positions: Tuple[Position, ...] = ()
    description:   str = ""

    def variables(self, side: str = "lhs") -> List[str]:
        """Pattern variables of one side, in first-occurrence order."""
        if side not in ("lhs", "rhs"):
            raise ValueError(f"side must be 'lhs' or 'rhs', got {side!r}")
        found: List[str] = []
        stack = [self.lhs if side == "lhs" else self.rhs]
        while stack:
            term = stack.pop()
            if isinstance(term, Atom):
                if term.text.startswith("?") and term.text not in found:
                    found.append(term.text)
            elif isinstance(term, Node):
                stack.extend(reversed(term.children))
        return found

    @property
    def reversible(self) -> bool:
        """True when the rhs binds every lhs variable (usable backward)."""
        return set(self.variables("lhs")) <= set(self.variables("rhs"))


# ─────────────────────────────────────────────
#  OUTPUT TYPES
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class Step:
    """One rewrite step of a proof: which rule, its arguments, its direction."""
    rule:      str
    args:      Tuple[str, ...] = ()
    direction: Direction = Direction.FORWARD

    def __post_init__(self):
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    @property
    def forward(self) -> bool:
        return self.direction.is_forward

    def to_dict(self, include_direction: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {"rw": self.rule, "args": list(self.args)}
        if include_direction:
            data["dir"] = self.forward
        return data


@dataclass(frozen=True)
class Explanation:
    """Full result of explaining one start term.

    trace[0] is the start term; every later snapshot carries exactly
    one annotation marking the subterm its step produced.
    len(steps) == len(trace) - 1 once steps are filled in.
    """
    start: Term
    best:  Term
    cost:  int
    trace: Tuple[Term, ...] = field(default_factory=tuple)
    steps: Tuple[Step, ...] = field(default_factory=tuple)

    @property
    def rules_used(self) -> List[str]:
        return [step.rule for step in self.steps]

    def summary(self) -> str:
        """One-line summary for logging / CLI output."""
        n = len(self.steps)
        return f"Explanation({n} step{'s' if n != 1 else ''}, best={self.best}, cost={self.cost})"
