"""
rwsteps/symbolic/engine.py
==========================
Bounded rewrite search: produces a best term and its proof trace.

This stands in for an external equality-saturation engine. It does
NOT build a congruence structure; it explores concrete terms
breadth-first, one rule application at a time, and remembers how it
reached each term so it can emit the same kind of trace:

    trace[0]   start term
    trace[k]   term after step k, with the rewritten subterm marked

Pattern convention: atoms starting with '?' are variables,
e.g. "?s1", "?x"; every other atom must match literally.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterator, List, Optional, Tuple

from rwsteps.core.config import SearchConfig
from rwsteps.core.types import Atom, Direction, Explanation, Node, Position, RuleSpec, Term
from rwsteps.symbolic.marker import mark, strip_markers
from rwsteps.symbolic.position import positions, replace_at
from rwsteps.symbolic.rules import RuleCatalog
from rwsteps.symbolic.sexpr import ast_size

logger = logging.getLogger(__name__)

Bindings = Dict[str, Term]   # variable → bound term


# ─────────────────────────────────────────────
#  MATCHING
# ─────────────────────────────────────────────

def is_variable(term: Term) -> bool:
    return isinstance(term, Atom) and term.text.startswith("?")


def match(pattern: Term, term: Term, bindings: Optional[Bindings] = None) -> Optional[Bindings]:
    """Match ``pattern`` against ``term``.

    Returns bindings θ with instantiate(pattern, θ) == term, or None.
    A variable used twice must bind structurally equal terms.

    Examples:
        match((join ?s ?x ?x), (join s1 a a))  → {"?s": s1, "?x": a}
        match((join ?s ?x ?x), (join s1 a b))  → None
    """
    theta = dict(bindings) if bindings else {}
    return theta if _match(pattern, term, theta) else None


def _match(pattern: Term, term: Term, theta: Bindings) -> bool:
    if is_variable(pattern):
        bound = theta.get(pattern.text)
        if bound is None:
            theta[pattern.text] = term
            return True
        return bound == term
    if isinstance(pattern, Atom):
        return isinstance(term, Atom) and term.text == pattern.text
    if isinstance(pattern, Node):
        if not isinstance(term, Node) or len(term.children) != len(pattern.children):
            return False
        return all(_match(p, t, theta) for p, t in zip(pattern.children, term.children))
    return pattern == term


def instantiate(pattern: Term, bindings: Bindings) -> Term:
    """Replace every variable in ``pattern`` by its bound term."""
    if is_variable(pattern):
        if pattern.text not in bindings:
            raise KeyError(f"Pattern variable {pattern.text} is unbound")
        return bindings[pattern.text]
    if isinstance(pattern, Node):
        return Node(tuple(instantiate(child, bindings) for child in pattern.children))
    return pattern


# ─────────────────────────────────────────────
#  SEARCH
# ─────────────────────────────────────────────

# parent term, position rewritten, rule name, direction
_Origin = Tuple[Term, Position, str, Direction]


class RewriteSearch:
    """Breadth-first rewriting towards the smallest reachable term.

    Usage:
        search = RewriteSearch(RuleCatalog.named("core"), SearchConfig(max_depth=4))
        explanation = search.run(parse("(join s1 (split1 s2 x) (split2 s2 x))"))
        explanation.best    # (block s1 x)
        explanation.trace   # [start, (Rewrite=> E (block s1 x))]
    """

    def __init__(self, catalog: RuleCatalog, config: Optional[SearchConfig] = None):
        self.catalog = catalog
        self.config = config or SearchConfig()
        self._directed = self._directed_rules()

    def _directed_rules(self) -> List[Tuple[RuleSpec, Direction, Term, Term]]:
        """(rule, direction, source pattern, target pattern) in catalog order."""
        directed = []
        for spec in self.catalog:
            if set(spec.variables("rhs")) <= set(spec.variables("lhs")):
                directed.append((spec, Direction.FORWARD, spec.lhs, spec.rhs))
            if self.config.bidirectional and spec.reversible:
                directed.append((spec, Direction.BACKWARD, spec.rhs, spec.lhs))
        return directed

    def rewrites(self, term: Term) -> Iterator[Tuple[Term, Position, str, Direction]]:
        """Every single-step rewrite of ``term``: (new term, position, rule, direction).

        Positions are visited pre-order; at each position rules go in
        catalog order, forward before backward. Rewrites that leave the
        term unchanged are skipped.
        """
        for position, subterm in positions(term):
            for spec, direction, source, target in self._directed:
                theta = match(source, subterm)
                if theta is None:
                    continue
                replacement = instantiate(target, theta)
                if replacement != subterm:
                    yield replace_at(term, position, replacement), position, spec.name, direction

    def run(self, start: Term) -> Explanation:
        """Search from ``start``; the trace leads to the smallest term found.

        Ties keep the first term found, so the result is deterministic.
        Hitting max_terms stops the search early with a warning.
        """
        start = strip_markers(start)
        origins: Dict[Term, Optional[_Origin]] = {start: None}
        depth: Dict[Term, int] = {start: 0}
        queue = deque([start])
        best, best_cost = start, ast_size(start)
        exhausted = False

        while queue and not exhausted:
            term = queue.popleft()
            if depth[term] >= self.config.max_depth:
                continue
            for new, position, rule, direction in self.rewrites(term):
                if new in origins:
                    continue
                if len(origins) >= self.config.max_terms:
                    exhausted = True
                    break
                origins[new] = (term, position, rule, direction)
                depth[new] = depth[term] + 1
                queue.append(new)
                cost = ast_size(new)
                if cost < best_cost:
                    best, best_cost = new, cost

        if exhausted:
            logger.warning(
                f"Search stopped after {len(origins)} terms (max_terms={self.config.max_terms}); "
                f"best so far has cost {best_cost}"
            )

        trace = self._trace_to(best, origins)
        logger.info(
            f"Search visited {len(origins)} terms: cost {ast_size(start)} → {best_cost} "
            f"in {len(trace) - 1} steps"
        )
        return Explanation(start=start, best=best, cost=best_cost, trace=tuple(trace))

    @staticmethod
    def _trace_to(target: Term, origins: Dict[Term, Optional[_Origin]]) -> List[Term]:
        chain = []
        term = target
        while origins[term] is not None:
            parent, position, rule, direction = origins[term]
            chain.append(mark(term, position, direction, rule))
            term = parent
        chain.append(term)
        chain.reverse()
        return chain
