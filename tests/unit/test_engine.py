"""
tests/unit/test_engine.py
=========================
Tests for pattern matching and the bounded rewrite search.
"""
import logging
import pytest
from rwsteps.core.config import SearchConfig
from rwsteps.core.types import EMPTY, Atom, Direction, Node
from rwsteps.symbolic.engine import RewriteSearch, instantiate, is_variable, match
from rwsteps.symbolic.marker import locate, strip_markers
from rwsteps.symbolic.reconstruct import build_steps
from rwsteps.symbolic.rules import Rule, RuleCatalog
from rwsteps.symbolic.sexpr import ast_size, parse


class TestMatching:
    def test_is_variable(self):
        assert is_variable(Atom("?x"))
        assert not is_variable(Atom("x"))
        assert not is_variable(parse("(?x)"))

    def test_match_binds_subterms(self):
        theta = match(parse("(join ?s ?x ?y)"), parse("(join s1 (f a) b)"))
        assert theta == {"?s": Atom("s1"), "?x": parse("(f a)"), "?y": Atom("b")}

    def test_repeated_variable_must_agree(self):
        pattern = Rule.E.spec.lhs
        assert match(pattern, parse("(join s1 (split1 s2 x) (split2 s2 x))")) is not None
        assert match(pattern, parse("(join s1 (split1 s2 x) (split2 s3 x))")) is None

    def test_literal_mismatch(self):
        assert match(parse("(join ?s ?x ?y)"), parse("(fork s a b)")) is None
        assert match(parse("(join ?s ?x ?y)"), parse("(join s a)")) is None
        assert match(parse("(join ?s ?x ?y)"), Atom("join")) is None

    def test_existing_bindings_respected(self):
        assert match(parse("(f ?x)"), parse("(f a)"), {"?x": Atom("b")}) is None
        assert match(parse("(f ?x)"), parse("(f a)"), {"?x": Atom("a")}) == {"?x": Atom("a")}

    def test_instantiate(self):
        theta = {"?s1": Atom("s"), "?x": parse("(f a)")}
        assert instantiate(Rule.E.spec.rhs, theta) == parse("(block s (f a))")

    def test_instantiate_unbound(self):
        with pytest.raises(KeyError):
            instantiate(parse("(f ?x)"), {})


class TestRewrites:
    def test_commutation_both_directions(self, core_catalog):
        search = RewriteSearch(core_catalog)
        found = list(search.rewrites(parse("(join s x y)")))
        assert found == [
            (parse("(join s y x)"), (), "C", Direction.FORWARD),
            (parse("(join s y x)"), (), "C", Direction.BACKWARD),
        ]

    def test_forward_only(self, core_catalog):
        search = RewriteSearch(core_catalog, SearchConfig(bidirectional=False))
        found = list(search.rewrites(parse("(join s x y)")))
        assert [(rule, d) for _, _, rule, d in found] == [("C", Direction.FORWARD)]

    def test_nested_positions(self, core_catalog):
        search = RewriteSearch(core_catalog, SearchConfig(bidirectional=False))
        found = list(search.rewrites(parse("(f (join s x y))")))
        assert found == [(parse("(f (join s y x))"), (1,), "C", Direction.FORWARD)]


class TestSearch:
    def test_block_fusion(self, core_catalog, fusable_expr):
        explanation = RewriteSearch(core_catalog).run(parse(fusable_expr))
        assert explanation.best == parse("(block s1 x)")
        assert explanation.cost == 3
        assert explanation.trace == (parse(fusable_expr), parse("(Rewrite=> E (block s1 x))"))

    def test_zero_depth_returns_start(self, core_catalog, fusable_expr):
        explanation = RewriteSearch(core_catalog, SearchConfig(max_depth=0)).run(parse(fusable_expr))
        assert explanation.best == parse(fusable_expr)
        assert explanation.trace == (parse(fusable_expr),)

    def test_pure_fusion(self, pure_catalog):
        start = parse("(join s1 (pure s2 x) (pure s3 y))")
        explanation = RewriteSearch(pure_catalog).run(start)
        assert explanation.cost == 6
        steps = build_steps(explanation.trace, pure_catalog)
        assert len(steps) == 3
        assert steps[-1].rule == "PE"

    def test_trace_is_well_formed(self, pure_catalog):
        start = parse("(join s1 (pure s2 x) (pure s3 y))")
        explanation = RewriteSearch(pure_catalog).run(start)
        assert explanation.trace[0] == start
        assert locate(explanation.trace[0]) is None
        for snapshot in explanation.trace[1:]:
            assert locate(snapshot) is not None
        assert strip_markers(explanation.trace[-1]) == explanation.best
        assert ast_size(explanation.best) == explanation.cost

    def test_markers_on_start_are_stripped(self, core_catalog):
        explanation = RewriteSearch(core_catalog).run(parse("(Rewrite=> C (a b c))"))
        assert explanation.start == parse("(a b c)")

    def test_budget_exhaustion_warns(self, core_catalog, caplog):
        start = parse("(join a (join b x y) (join c z w))")
        with caplog.at_level(logging.WARNING):
            explanation = RewriteSearch(core_catalog, SearchConfig(max_terms=3)).run(start)
        assert "max_terms=3" in caplog.text
        assert explanation.trace[0] == start

    def test_deterministic(self, pure_catalog):
        start = parse("(join s1 (pure s2 x) (pure s3 y))")
        a = RewriteSearch(pure_catalog).run(start)
        b = RewriteSearch(pure_catalog).run(start)
        assert a == b

    def test_projection_rules(self, full_catalog):
        explanation = RewriteSearch(full_catalog).run(parse("(split1 s (join t a b))"))
        assert explanation.best == Atom("a")
        steps = build_steps(explanation.trace, full_catalog)
        assert [(s.rule, s.args) for s in steps] == [("SL", ())]

    def test_projection_to_empty(self, full_catalog):
        explanation = RewriteSearch(full_catalog).run(parse("(split1 s (join t () b))"))
        assert explanation.best == EMPTY
        assert explanation.trace[-1] == Node((Atom("Rewrite=>"), Atom("SL"), EMPTY))
        steps = build_steps(explanation.trace, full_catalog)
        assert [(s.rule, s.args) for s in steps] == [("SL", ())]

    def test_custom_catalog(self):
        catalog = RuleCatalog([Rule.C], name="commute")
        explanation = RewriteSearch(catalog).run(parse("(join s x y)"))
        # commutation never shrinks a term
        assert explanation.best == parse("(join s x y)")
        assert len(explanation.trace) == 1
