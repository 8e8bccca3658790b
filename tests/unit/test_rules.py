"""tests/unit/test_rules.py — Rule declarations, catalogs, loading, validation"""
import logging
import pytest
from rwsteps.core.exceptions import RuleDeclarationError, UnknownRuleSet
from rwsteps.core.registry import Registry
from rwsteps.core.types import Atom, RuleSpec
from rwsteps.symbolic.rules import (
    CORE_RULES,
    FULL_RULES,
    PURE_RULES,
    RULE_SET_CATEGORY,
    Rule,
    RuleCatalog,
    RuleLoader,
    RuleValidator,
    extract_arguments,
    format_declaration,
)
from rwsteps.symbolic.sexpr import parse


class TestBuiltinRules:
    def test_rule_sets_are_ordered(self):
        assert [r.name for r in CORE_RULES] == ["E", "L", "R", "C"]
        assert [r.name for r in PURE_RULES] == ["E", "L", "R", "C", "PL", "PR", "PE"]
        assert [r.name for r in FULL_RULES][-2:] == ["SL", "SR"]

    def test_spec_patterns_parsed(self):
        spec = Rule.C.spec
        assert spec.name == "C"
        assert spec.lhs == parse("(join ?s1 ?x ?y)")
        assert spec.rhs == parse("(join ?s1 ?y ?x)")
        assert spec.arg_positions == ((1,),)

    def test_spec_is_cached(self):
        assert Rule.E.spec is Rule.E.spec

    def test_variables(self):
        assert Rule.E.spec.variables("lhs") == ["?s1", "?s2", "?x"]
        assert Rule.E.spec.variables("rhs") == ["?s1", "?x"]

    def test_reversible(self):
        assert Rule.C.spec.reversible
        assert not Rule.E.spec.reversible
        assert not Rule.SL.spec.reversible

    @pytest.mark.parametrize("rule", list(Rule))
    def test_arg_count_matches_recipe(self, rule):
        matched = rule.spec.lhs
        assert len(extract_arguments(rule.spec, matched)) == len(rule.arg_positions)


class TestExtractArguments:
    def test_stream_label(self):
        assert extract_arguments(Rule.E.spec, parse("(join s1 (split1 s2 x) (split2 s2 x))")) == ["s1"]

    def test_subterm_rendered_as_text(self):
        assert extract_arguments(Rule.C.spec, parse("(join (lbl 1) x y)")) == ["(lbl 1)"]

    def test_atom_match_reports_nothing(self):
        assert extract_arguments(Rule.C.spec, Atom("x")) == []

    def test_missing_position_reports_empty_string(self):
        spec = RuleSpec("N", parse("(f ?x)"), parse("?x"), ((3, 1), (1,)))
        assert extract_arguments(spec, parse("(f y)")) == ["", "y"]

    def test_list_without_arguments_reports_nothing(self):
        assert extract_arguments(Rule.C.spec, parse("(join)")) == []
        spec = RuleSpec("N", parse("(f ?x)"), parse("?x"), ((0,),))
        assert extract_arguments(spec, parse("(f)")) == []

    def test_nested_position(self):
        spec = RuleSpec("L2", Rule.L.spec.lhs, Rule.L.spec.rhs, ((1,), (3, 1)))
        assert extract_arguments(spec, parse("(join a x (join b y z))")) == ["a", "b"]


class TestRuleCatalog:
    def test_named(self, core_catalog):
        assert core_catalog.name == "core"
        assert core_catalog.names == ["E", "L", "R", "C"]
        assert len(core_catalog) == 4

    def test_lookup(self, pure_catalog):
        assert "PE" in pure_catalog
        assert "Z" not in pure_catalog
        assert pure_catalog.get("Z") is None
        assert pure_catalog.get("PL").lhs == parse("(join ?s1 (pure ?s2 ?x) ?y)")

    def test_extract_args_unknown_rule(self, core_catalog):
        assert core_catalog.extract_args("Z", parse("(a b c)")) == []
        assert core_catalog.extract_args("C", parse("(a b c)")) == ["b"]

    def test_superset_keeps_core_recipes(self, core_catalog, pure_catalog):
        term = parse("(join s1 x y)")
        for name in core_catalog.names:
            assert core_catalog.extract_args(name, term) == pure_catalog.extract_args(name, term)

    def test_unknown_rule_set(self):
        with pytest.raises(UnknownRuleSet) as exc:
            RuleCatalog.named("nope")
        assert "core" in exc.value.available
        assert isinstance(exc.value, KeyError)

    def test_duplicate_names_rejected(self):
        with pytest.raises(RuleDeclarationError) as exc:
            RuleCatalog([Rule.C, Rule.C.spec])
        assert any("Duplicate" in e for e in exc.value.errors)

    def test_registered_custom_rule_set(self):
        Registry.register("commute_only", (Rule.C,), category=RULE_SET_CATEGORY, override=True)
        try:
            assert RuleCatalog.named("commute_only").names == ["C"]
        finally:
            Registry.unregister("commute_only", category=RULE_SET_CATEGORY)


class TestRuleLoader:
    def test_parse_declaration(self):
        spec = RuleLoader.parse_declaration("E [1]: (join ?s1 (split1 ?s2 ?x) (split2 ?s2 ?x)) => (block ?s1 ?x)")
        assert spec == Rule.E.spec

    def test_nested_recipe(self):
        spec = RuleLoader.parse_declaration("L [1, 3.1]: (join ?s1 ?x (join ?s2 ?y ?z)) => (join ?s2 (join ?s1 ?x ?y) ?z)")
        assert spec.arg_positions == ((1,), (3, 1))

    def test_no_recipe(self):
        spec = RuleLoader.parse_declaration("SL: (split1 ?s1 (join ?s2 ?x ?y)) => ?x")
        assert spec == Rule.SL.spec

    def test_from_text_skips_comments(self):
        text = """
        # structural rules
        C [1]: (join ?s1 ?x ?y) => (join ?s1 ?y ?x)   # commutation

        PE [1]: (pure ?s1 (pure ?s2 ?x)) => (pure ?s1 ?x)
        """
        rules = RuleLoader.from_text(text)
        assert [r.name for r in rules] == ["C", "PE"]

    def test_malformed_line_reports_line(self):
        with pytest.raises(RuleDeclarationError) as exc:
            RuleLoader.from_text("C [1]: (join ?s1 ?x ?y) => (join ?s1 ?y ?x)\nbroken line\n")
        assert exc.value.line == 2

    def test_bad_pattern(self):
        with pytest.raises(RuleDeclarationError):
            RuleLoader.parse_declaration("C: (join ?s1 ?x => (join ?s1 ?y ?x)")

    def test_bad_recipe(self):
        with pytest.raises(RuleDeclarationError):
            RuleLoader.parse_declaration("C [one]: (join ?s1 ?x ?y) => (join ?s1 ?y ?x)")

    def test_text_round_trip(self, tmp_path):
        path = tmp_path / "pure.rules"
        path.write_text(RuleLoader.to_text([r.spec for r in PURE_RULES]))
        loaded = RuleLoader.from_file(str(path))
        assert loaded == [r.spec for r in PURE_RULES]

    def test_format_declaration(self):
        assert format_declaration(Rule.C.spec) == "C [1]: (join ?s1 ?x ?y) => (join ?s1 ?y ?x)"


class TestRuleValidator:
    def test_builtin_rules_valid(self):
        assert RuleValidator.validate([r.spec for r in FULL_RULES]) == []

    def test_empty_pattern(self):
        errors = RuleValidator.validate([RuleSpec("X", parse("()"), parse("x"))])
        assert any("empty" in e for e in errors)

    def test_marker_in_pattern(self):
        errors = RuleValidator.validate([RuleSpec("X", parse("(Rewrite=> C (a b))"), parse("x"))])
        assert any("marker" in e for e in errors)

    def test_bad_name(self):
        errors = RuleValidator.validate([RuleSpec("has space", parse("(a)"), parse("b"))])
        assert errors

    def test_bad_position(self):
        errors = RuleValidator.validate([RuleSpec("X", parse("(a ?x)"), parse("?x"), ((-1,),))])
        assert any("position" in e for e in errors)

    def test_unbound_rhs_variable_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            errors = RuleValidator.validate([RuleSpec("X", parse("(a ?x)"), parse("(b ?x ?y)"))])
        assert errors == []
        assert "not bound" in caplog.text
