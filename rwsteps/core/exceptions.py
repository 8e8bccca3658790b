"""
rwsteps/core/exceptions.py
==========================
Custom exception hierarchy for rwsteps.

All exceptions carry structured context so callers can
programmatically handle different failure modes. Every fatal
condition aborts the whole translation: no partial step list.
"""

from __future__ import annotations
from typing import List, Optional, Tuple


class RwStepsError(Exception):
    """Base exception for all rwsteps errors."""

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.context = context or {}


class ParseError(RwStepsError):
    """Raised when text is not exactly one well-formed symbolic expression
    (empty input, unbalanced parentheses, trailing tokens)."""

    def __init__(self, message: str, text: str = "", offset: int = 0):
        super().__init__(message, {"offset": offset})
        self.text = text
        self.offset = offset


class ReconstructError(RwStepsError):
    """Raised when a trace pair cannot be turned into a step.

    pair_index is the index of the "before" snapshot of the failing pair.
    """

    def __init__(self, message: str, pair_index: Optional[int] = None, context: Optional[dict] = None):
        ctx = dict(context or {})
        if pair_index is not None:
            ctx["pair_index"] = pair_index
        super().__init__(message, ctx)
        self.pair_index = pair_index


class MarkerNotFound(ReconstructError):
    """The "after" snapshot of a pair carries no rewrite marker.

    An upstream contract violation: every step of a well-formed
    trace marks the subterm it produced.
    """

    pass


class PositionMismatch(ReconstructError):
    """The marker position does not exist in the "before" snapshot."""

    def __init__(self, message: str, position: Tuple[int, ...], pair_index: Optional[int] = None):
        super().__init__(message, pair_index, {"position": list(position)})
        self.position = position


class UnknownRule(ReconstructError):
    """A marker names a rule the catalog does not declare (strict mode only)."""

    def __init__(self, message: str, rule_name: str, pair_index: Optional[int] = None):
        super().__init__(message, pair_index, {"rule": rule_name})
        self.rule_name = rule_name


class RuleDeclarationError(RwStepsError):
    """Raised when a rule declaration or a rule catalog is invalid."""

    def __init__(self, message: str, line: Optional[int] = None, errors: Optional[List[str]] = None):
        ctx: dict = {}
        if line is not None:
            ctx["line"] = line
        if errors:
            ctx["errors"] = list(errors)
        super().__init__(message, ctx)
        self.line = line
        self.errors = list(errors or [])


class UnknownRuleSet(RwStepsError, KeyError):
    """Raised when no rule set is registered under the requested name."""

    def __init__(self, name: str, available: List[str]):
        super().__init__(
            f"Rule set '{name}' not found. Available: {available}",
            {"rule_set": name, "available": list(available)},
        )
        self.name = name
        self.available = list(available)

    def __str__(self) -> str:
        return self.args[0]
