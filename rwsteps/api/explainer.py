"""
rwsteps/api/explainer.py
========================
The main developer-facing API for rwsteps.

One class ties the pieces together: parse the start term, search
for a smaller equivalent, translate the proof trace into steps,
serialize them.

Public API:
    explainer = ProofExplainer()                       # "pure" rule set
    explanation = explainer.explain("(join s1 (split1 s2 x) (split2 s2 x))")
    print(explainer.to_json(explanation.steps))
    # [{"rw":"E","args":["s1"],"dir":true}]

    # Translate a trace produced elsewhere
    steps = explainer.steps_from_trace(["(a b c)", "(Rewrite=> C (a c b))"])
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional, Sequence, Union

from rwsteps.core.config import RwStepsConfig
from rwsteps.core.exceptions import RwStepsError
from rwsteps.core.types import Explanation, Step, Term
from rwsteps.symbolic.engine import RewriteSearch
from rwsteps.symbolic.reconstruct import StepReconstructor
from rwsteps.symbolic.rules import RuleCatalog
from rwsteps.symbolic.sexpr import parse, to_text

logger = logging.getLogger(__name__)

TermLike = Union[str, Term]


def steps_to_json(steps: Sequence[Step], include_direction: bool = True) -> str:
    """Compact JSON array, one object per step, in proof order."""
    return json.dumps([s.to_dict(include_direction) for s in steps], separators=(",", ":"))


def explanation_to_dict(explanation: Explanation, include_direction: bool = True) -> dict:
    return {
        "start": to_text(explanation.start),
        "best":  to_text(explanation.best),
        "cost":  explanation.cost,
        "steps": [s.to_dict(include_direction) for s in explanation.steps],
        "trace": [to_text(t) for t in explanation.trace],
    }


class ProofExplainer:
    """Explain rewrites of symbolic terms as named steps."""

    def __init__(self, config: Optional[RwStepsConfig] = None, catalog: Optional[RuleCatalog] = None):
        self.config = config or RwStepsConfig()
        errors = self.config.validate()
        if errors:
            raise RwStepsError(f"Invalid configuration: {'; '.join(errors)}", {"errors": errors})
        self.catalog = catalog or RuleCatalog.named(self.config.translator.rule_set)
        self._reconstructor = StepReconstructor(self.catalog, strict=self.config.translator.strict_rules)
        self._search = RewriteSearch(self.catalog, self.config.search)

    @staticmethod
    def _as_term(value: TermLike) -> Term:
        return parse(value) if isinstance(value, str) else value

    def explain(self, expr: TermLike) -> Explanation:
        """Search from ``expr`` and return the best term with its steps."""
        term = self._as_term(expr)
        try:
            explanation = self._search.run(term)
        except RecursionError:
            raise RwStepsError(
                f"Term is nested too deeply to search (recursion limit {sys.getrecursionlimit()})",
                {"stage": "search"},
            ) from None
        steps = self._reconstructor.build(explanation.trace)
        explanation = replace(explanation, steps=tuple(steps))
        logger.info(explanation.summary())
        return explanation

    def steps_from_trace(self, trace: Sequence[TermLike]) -> List[Step]:
        """Translate an externally produced proof trace."""
        return self._reconstructor.build([self._as_term(t) for t in trace])

    def to_json(self, steps: Sequence[Step]) -> str:
        return steps_to_json(steps, self.config.translator.include_direction)

    def to_dict(self, explanation: Explanation) -> dict:
        return explanation_to_dict(explanation, self.config.translator.include_direction)

    @property
    def rule_count(self) -> int:
        return len(self.catalog)
