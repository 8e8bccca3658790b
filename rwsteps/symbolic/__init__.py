"""rwsteps/symbolic — Terms, markers, rules and step reconstruction."""

from rwsteps.symbolic.sexpr import parse, to_text, copy_via_text, ast_size, tokenize
from rwsteps.symbolic.position import resolve, positions, replace_at
from rwsteps.symbolic.marker import locate, marker_at, lift_markers, strip_markers, mark
from rwsteps.symbolic.rules import (
    Rule,
    RuleCatalog,
    RuleLoader,
    RuleValidator,
    extract_arguments,
    format_declaration,
)
from rwsteps.symbolic.reconstruct import StepReconstructor, build_steps, reconstruct
from rwsteps.symbolic.engine import RewriteSearch, instantiate, match

__all__ = [
    "parse",
    "to_text",
    "copy_via_text",
    "ast_size",
    "tokenize",
    "resolve",
    "positions",
    "replace_at",
    "locate",
    "marker_at",
    "lift_markers",
    "strip_markers",
    "mark",
    "Rule",
    "RuleCatalog",
    "RuleLoader",
    "RuleValidator",
    "extract_arguments",
    "format_declaration",
    "StepReconstructor",
    "build_steps",
    "reconstruct",
    "RewriteSearch",
    "instantiate",
    "match",
]
