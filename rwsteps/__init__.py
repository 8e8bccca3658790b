"""
rwsteps/__init__.py — Public API exports
"""

from rwsteps.api.explainer import ProofExplainer, steps_to_json
from rwsteps.core.config import RwStepsConfig, SearchConfig, TranslatorConfig
from rwsteps.core.exceptions import (
    MarkerNotFound,
    ParseError,
    PositionMismatch,
    ReconstructError,
    RuleDeclarationError,
    RwStepsError,
    UnknownRule,
    UnknownRuleSet,
)
from rwsteps.core.types import (
    EMPTY,
    Annotation,
    Atom,
    Direction,
    Empty,
    Explanation,
    Node,
    RuleSpec,
    Step,
)
from rwsteps.symbolic.reconstruct import build_steps, reconstruct
from rwsteps.symbolic.rules import Rule, RuleCatalog, RuleLoader
from rwsteps.symbolic.sexpr import parse, to_text
from rwsteps.version import __version__

__all__ = [
    "ProofExplainer",
    "steps_to_json",
    "RwStepsConfig",
    "SearchConfig",
    "TranslatorConfig",
    "Atom",
    "Node",
    "Empty",
    "EMPTY",
    "Annotation",
    "Direction",
    "RuleSpec",
    "Step",
    "Explanation",
    "Rule",
    "RuleCatalog",
    "RuleLoader",
    "build_steps",
    "reconstruct",
    "parse",
    "to_text",
    "RwStepsError",
    "ParseError",
    "ReconstructError",
    "MarkerNotFound",
    "PositionMismatch",
    "UnknownRule",
    "UnknownRuleSet",
    "RuleDeclarationError",
    "__version__",
]
