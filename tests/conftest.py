"""
tests/conftest.py
==================
Shared pytest fixtures for all rwsteps tests.
"""

import pytest
from rwsteps.api.explainer import ProofExplainer
from rwsteps.core.config import RwStepsConfig
from rwsteps.symbolic.rules import RuleCatalog
from rwsteps.symbolic.sexpr import parse


# ─── CATALOGS ─────────────────────────────────────────────────────


@pytest.fixture
def core_catalog():
    return RuleCatalog.named("core")


@pytest.fixture
def pure_catalog():
    return RuleCatalog.named("pure")


@pytest.fixture
def full_catalog():
    return RuleCatalog.named("full")


# ─── TERMS & TRACES ───────────────────────────────────────────────


@pytest.fixture
def fusable_expr():
    return "(join s1 (split1 s2 x) (split2 s2 x))"


@pytest.fixture
def commute_trace():
    """Scenario A: one forward commutation at the root."""
    return [parse("(a b c)"), parse("(Rewrite=> C (a c b))")]


@pytest.fixture
def three_step_trace():
    """L forward at the root, C backward inside, C forward at the root."""
    return [
        parse("(join a x (join b y z))"),
        parse("(Rewrite=> L (join b (join a x y) z))"),
        parse("(join b (Rewrite<= C (join a y x)) z)"),
        parse("(Rewrite=> C (join b z (join a y x)))"),
    ]


# ─── EXPLAINERS ───────────────────────────────────────────────────


@pytest.fixture
def explainer():
    return ProofExplainer()


@pytest.fixture
def core_explainer():
    return ProofExplainer(RwStepsConfig.for_rule_set("core"))
