"""
rwsteps/symbolic/reconstruct.py
===============================
Proof trace → ordered list of Steps.

For each adjacent pair (before, after) of the trace:
    1. locate the marker in `after`     → position, direction
    2. resolve position in `before`     → subterm the rule matched
    3. read the marker at position      → rule name
    4. apply the rule's argument recipe → args
    5. Step(rule, args, direction)

The step list is all-or-nothing: the first failing pair aborts the
whole translation with an error naming the pair.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from rwsteps.core.exceptions import MarkerNotFound, PositionMismatch, UnknownRule
from rwsteps.core.types import Step, Term
from rwsteps.symbolic.marker import lift_markers, locate, marker_at, strip_markers
from rwsteps.symbolic.position import resolve
from rwsteps.symbolic.rules import RuleCatalog, extract_arguments
from rwsteps.symbolic.sexpr import to_text

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 80


def _preview(text: str) -> str:
    """``text`` cut to _PREVIEW_CHARS for error messages."""
    if len(text) <= _PREVIEW_CHARS:
        return text
    return f"{text[:_PREVIEW_CHARS - 3]}... ({len(text)} chars)"


def reconstruct(
    before: Term,
    after: Term,
    catalog: RuleCatalog,
    *,
    pair_index: Optional[int] = None,
    strict: bool = False,
) -> Step:
    """Rebuild the Step that turned ``before`` into ``after``.

    ``before`` must be marker-free (see strip_markers).

    Raises:
        MarkerNotFound:   `after` carries no marker
        PositionMismatch: the marker position does not exist in `before`
        UnknownRule:      strict and the marker names a rule not in the catalog
    """
    where = f" (pair {pair_index})" if pair_index is not None else ""

    found = locate(after)
    if found is None:
        raise MarkerNotFound(
            f"No rewrite marker in after snapshot{where}: {_preview(to_text(after))}",
            pair_index,
        )
    position, direction = found

    matched = resolve(before, position)
    if matched is None:
        raise PositionMismatch(
            f"Marker position {_preview(str(list(position)))} does not exist "
            f"in before snapshot{where}: {_preview(to_text(before))}",
            position,
            pair_index,
        )

    rule_name = marker_at(after, position).rule

    spec = catalog.get(rule_name)
    if spec is None:
        if strict:
            raise UnknownRule(
                f"Rule '{rule_name}' is not in catalog '{catalog.name}'{where}",
                rule_name,
                pair_index,
            )
        logger.warning(
            f"UnrecognizedRule: '{rule_name}' is not in catalog '{catalog.name}'{where}; "
            "reporting no arguments"
        )
        args: List[str] = []
    else:
        args = extract_arguments(spec, matched)

    return Step(rule=rule_name, args=tuple(args), direction=direction)


def build_steps(trace: Sequence[Term], catalog: RuleCatalog, *, strict: bool = False) -> List[Step]:
    """One Step per adjacent pair of ``trace``, in trace order.

    len(result) == len(trace) - 1 for a non-empty trace; [] for an empty one.
    """
    terms = [lift_markers(t) for t in trace]
    steps = []
    for i in range(len(terms) - 1):
        before = strip_markers(terms[i])
        step = reconstruct(before, terms[i + 1], catalog, pair_index=i, strict=strict)
        logger.debug(f"Step {i}: {step.rule} {list(step.args)} forward={step.forward}")
        steps.append(step)
    return steps


class StepReconstructor:
    """Catalog-bound translator from proof traces to steps.

    Usage:
        reconstructor = StepReconstructor(RuleCatalog.named("core"))
        steps = reconstructor.build([parse("(a b c)"), parse("(Rewrite=> C (a c b))")])
    """

    def __init__(self, catalog: RuleCatalog, strict: bool = False):
        self.catalog = catalog
        self.strict = strict

    def reconstruct(self, before: Term, after: Term, pair_index: Optional[int] = None) -> Step:
        return reconstruct(
            strip_markers(lift_markers(before)),
            lift_markers(after),
            self.catalog,
            pair_index=pair_index,
            strict=self.strict,
        )

    def build(self, trace: Sequence[Term]) -> List[Step]:
        steps = build_steps(trace, self.catalog, strict=self.strict)
        logger.info(f"Reconstructed {len(steps)} steps with catalog '{self.catalog.name}'")
        return steps
