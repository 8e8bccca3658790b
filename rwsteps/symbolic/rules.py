"""
rwsteps/symbolic/rules.py
=========================
Rule management: declarations, catalogs, loading, validation.

Rules are the domain knowledge of rwsteps.
This module provides:
    1. Rule          — closed enum of every built-in rule, pattern and
                       argument recipe declared side by side
    2. RuleCatalog   — ordered, immutable rule table used for one run
    3. RuleLoader    — load rule declarations from text files
    4. RuleValidator — validate rule sets before building a catalog

Built-in rule sets (see Registry category "rule_set"):
    core  E L R C                 block fusion, re-association, commutation
    pure  core + PL PR PE         pushing and fusing "pure" wrappers
    full  pure + SL SR            split projections
"""

from __future__ import annotations

import functools
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from rwsteps.core.exceptions import ParseError, RuleDeclarationError, UnknownRuleSet
from rwsteps.core.registry import Registry
from rwsteps.core.types import Empty, Node, Position, RuleSpec, Term
from rwsteps.symbolic.position import resolve
from rwsteps.symbolic.sexpr import parse, to_text

logger = logging.getLogger(__name__)

RULE_SET_CATEGORY = "rule_set"


# ─────────────────────────────────────────────
#  BUILT-IN RULES
# ─────────────────────────────────────────────


class Rule(Enum):
    """Every built-in rule: (left pattern, right pattern, argument positions).

    ?s1 / ?s2 are stream labels, ?x ?y ?z sub-programs.
    """
    E  = ("(join ?s1 (split1 ?s2 ?x) (split2 ?s2 ?x))", "(block ?s1 ?x)", ((1,),))
    L  = ("(join ?s1 ?x (join ?s2 ?y ?z))", "(join ?s2 (join ?s1 ?x ?y) ?z)", ((1,),))
    R  = ("(join ?s1 (join ?s2 ?x ?y) ?z)", "(join ?s2 ?x (join ?s1 ?y ?z))", ((1,),))
    C  = ("(join ?s1 ?x ?y)", "(join ?s1 ?y ?x)", ((1,),))
    PL = ("(join ?s1 (pure ?s2 ?x) ?y)", "(pure ?s2 (join ?s1 ?x ?y))", ((1,),))
    PR = ("(join ?s1 ?x (pure ?s2 ?y))", "(pure ?s2 (join ?s1 ?x ?y))", ((1,),))
    PE = ("(pure ?s1 (pure ?s2 ?x))", "(pure ?s1 ?x)", ((1,),))
    SL = ("(split1 ?s1 (join ?s2 ?x ?y))", "?x", ())
    SR = ("(split2 ?s1 (join ?s2 ?x ?y))", "?y", ())

    def __init__(self, lhs: str, rhs: str, arg_positions: Tuple[Position, ...]):
        self.lhs_text = lhs
        self.rhs_text = rhs
        self.arg_positions = arg_positions

    @property
    def spec(self) -> RuleSpec:
        return _spec_of(self)


@functools.lru_cache(maxsize=None)
def _spec_of(rule: Rule) -> RuleSpec:
    return RuleSpec(
        name=rule.name,
        lhs=parse(rule.lhs_text),
        rhs=parse(rule.rhs_text),
        arg_positions=rule.arg_positions,
    )


CORE_RULES: Tuple[Rule, ...] = (Rule.E, Rule.L, Rule.R, Rule.C)
PURE_RULES: Tuple[Rule, ...] = CORE_RULES + (Rule.PL, Rule.PR, Rule.PE)
FULL_RULES: Tuple[Rule, ...] = PURE_RULES + (Rule.SL, Rule.SR)

Registry.register("core", CORE_RULES, category=RULE_SET_CATEGORY, override=True)
Registry.register("pure", PURE_RULES, category=RULE_SET_CATEGORY, override=True)
Registry.register("full", FULL_RULES, category=RULE_SET_CATEGORY, override=True)


# ─────────────────────────────────────────────
#  ARGUMENT EXTRACTION
# ─────────────────────────────────────────────


def extract_arguments(spec: RuleSpec, matched: Term) -> List[str]:
    """Apply a rule's argument recipe to the subterm it matched.

    A matched atom, or a list with no argument after its operator,
    reports nothing. Otherwise a recipe position missing from the
    matched subterm reports "".
    """
    if not isinstance(matched, Node) or len(matched.children) < 2:
        return []
    args = []
    for position in spec.arg_positions:
        found = resolve(matched, position)
        args.append(to_text(found) if found is not None else "")
    return args


# ─────────────────────────────────────────────
#  RULE CATALOG
# ─────────────────────────────────────────────


class RuleCatalog:
    """Ordered, immutable table of rules for one run.

    Built once at startup and never mutated. Construction validates the
    rules and raises RuleDeclarationError on any problem.

    Usage:
        catalog = RuleCatalog.named("pure")
        spec = catalog.get("C")
        args = catalog.extract_args("C", parse("(join s1 x y)"))   # ["s1"]
    """

    def __init__(self, rules: Iterable[Union[Rule, RuleSpec]], name: str = "custom"):
        specs = tuple(r.spec if isinstance(r, Rule) else r for r in rules)
        errors = RuleValidator.validate(specs)
        if errors:
            raise RuleDeclarationError(
                f"Invalid rule catalog '{name}': {'; '.join(errors)}",
                errors=errors,
            )
        self._name = name
        self._rules = specs
        self._by_name: Dict[str, RuleSpec] = {r.name: r for r in specs}
        for spec in specs:
            logger.debug(f"Rule added: {spec.name} (args={[list(p) for p in spec.arg_positions]})")

    @classmethod
    def named(cls, rule_set: str) -> "RuleCatalog":
        """Catalog for a rule set registered under ``rule_set``."""
        try:
            rules = Registry.get(rule_set, category=RULE_SET_CATEGORY)
        except KeyError:
            raise UnknownRuleSet(rule_set, Registry.names(RULE_SET_CATEGORY)) from None
        return cls(rules, name=rule_set)

    @property
    def name(self) -> str:
        return self._name

    @property
    def names(self) -> List[str]:
        return [r.name for r in self._rules]

    @property
    def rules(self) -> List[RuleSpec]:
        return list(self._rules)

    def get(self, rule_name: str) -> Optional[RuleSpec]:
        return self._by_name.get(rule_name)

    def __contains__(self, rule_name: object) -> bool:
        return rule_name in self._by_name

    def __iter__(self) -> Iterator[RuleSpec]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def extract_args(self, rule_name: str, matched: Term) -> List[str]:
        """Arguments of ``rule_name`` for ``matched``; [] for unknown rules."""
        spec = self._by_name.get(rule_name)
        if spec is None:
            return []
        return extract_arguments(spec, matched)

    def __repr__(self) -> str:
        return f"RuleCatalog({self._name!r}, {self.names})"


# ─────────────────────────────────────────────
#  RULE LOADER
# ─────────────────────────────────────────────


_DECLARATION = re.compile(
    r"^(?P<name>[^\s\[\]:]+)\s*(?:\[(?P<args>[^\]]*)\])?\s*:\s*(?P<lhs>.+?)\s+=>\s+(?P<rhs>.+)$"
)


class RuleLoader:
    """Load rule declarations from text.

    Format, one rule per line, '#' starts a comment:

        # name [recipe]: left => right
        E [1]:   (join ?s1 (split1 ?s2 ?x) (split2 ?s2 ?x)) => (block ?s1 ?x)
        L [1, 3.1]: (join ?s1 ?x (join ?s2 ?y ?z)) => (join ?s2 (join ?s1 ?x ?y) ?z)
        SL: (split1 ?s1 (join ?s2 ?x ?y)) => ?x

    A recipe entry "3.1" is the position (3, 1): child 1 of child 3.
    """

    @classmethod
    def from_file(cls, path: str) -> List[RuleSpec]:
        rules = cls.from_text(Path(path).read_text(encoding="utf-8"))
        logger.info(f"Loaded {len(rules)} rules from {path}")
        return rules

    @classmethod
    def from_text(cls, text: str) -> List[RuleSpec]:
        rules = []
        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            rules.append(cls.parse_declaration(line, lineno))
        return rules

    @classmethod
    def parse_declaration(cls, line: str, lineno: Optional[int] = None) -> RuleSpec:
        m = _DECLARATION.match(line.strip())
        if m is None:
            raise RuleDeclarationError(f"Malformed rule declaration: {line!r}", line=lineno)
        try:
            lhs = parse(m.group("lhs"))
            rhs = parse(m.group("rhs"))
        except ParseError as e:
            raise RuleDeclarationError(
                f"Rule '{m.group('name')}': bad pattern ({e})", line=lineno
            ) from e
        return RuleSpec(
            name=m.group("name"),
            lhs=lhs,
            rhs=rhs,
            arg_positions=cls._parse_recipe(m.group("args"), m.group("name"), lineno),
        )

    @staticmethod
    def _parse_recipe(text: Optional[str], name: str, lineno: Optional[int]) -> Tuple[Position, ...]:
        if not text or not text.strip():
            return ()
        recipe = []
        for entry in text.split(","):
            try:
                recipe.append(tuple(int(i) for i in entry.strip().split(".")))
            except ValueError:
                raise RuleDeclarationError(
                    f"Rule '{name}': bad argument position {entry.strip()!r}", line=lineno
                ) from None
        return tuple(recipe)

    @classmethod
    def to_text(cls, rules: Sequence[RuleSpec]) -> str:
        return "\n".join(format_declaration(r) for r in rules) + "\n"


def format_declaration(spec: RuleSpec) -> str:
    """``name [recipe]: lhs => rhs``, the inverse of RuleLoader.parse_declaration."""
    recipe = ""
    if spec.arg_positions:
        recipe = " [" + ", ".join(".".join(str(i) for i in p) for p in spec.arg_positions) + "]"
    return f"{spec.name}{recipe}: {to_text(spec.lhs)} => {to_text(spec.rhs)}"


# ─────────────────────────────────────────────
#  RULE VALIDATOR
# ─────────────────────────────────────────────


class RuleValidator:
    """Validate a rule set before building a catalog.

    Checks:
        1. No duplicate or malformed names
        2. Neither pattern is EMPTY or carries a marker
        3. Argument positions are tuples of non-negative ints
        4. Right-hand variables bound by the left (warning only)
    """

    @classmethod
    def validate(cls, rules: Sequence[RuleSpec]) -> List[str]:
        """Returns list of validation error strings. Empty = valid."""
        errors = []
        seen = set()

        for rule in rules:
            if not rule.name or re.search(r"[\s()\[\]:]", rule.name):
                errors.append(f"Invalid rule name: {rule.name!r}")
            if rule.name in seen:
                errors.append(f"Duplicate rule name: '{rule.name}'")
            seen.add(rule.name)

            for side, pattern in (("lhs", rule.lhs), ("rhs", rule.rhs)):
                if isinstance(pattern, Empty):
                    errors.append(f"Rule '{rule.name}': {side} is empty")
                elif cls._has_marker(pattern):
                    errors.append(f"Rule '{rule.name}': {side} contains a rewrite marker")

            for position in rule.arg_positions:
                if not isinstance(position, tuple) or not all(
                    isinstance(i, int) and i >= 0 for i in position
                ):
                    errors.append(f"Rule '{rule.name}': bad argument position {position!r}")

            unbound = set(rule.variables("rhs")) - set(rule.variables("lhs"))
            if unbound:
                logger.warning(
                    f"Rule '{rule.name}': rhs variables {sorted(unbound)} are not bound by lhs; "
                    "it can only be applied backward"
                )
        return errors

    @staticmethod
    def _has_marker(term: Term) -> bool:
        stack = [term]
        while stack:
            t = stack.pop()
            if t.annotation is not None:
                return True
            if isinstance(t, Node):
                stack.extend(t.children)
        return False
