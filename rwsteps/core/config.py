"""
rwsteps/core/config.py
======================
Global configuration for rwsteps.
All knobs in one place, validated at startup.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List


@dataclass
class TranslatorConfig:
    rule_set:          str  = "pure"   # "core" | "pure" | "full"
    include_direction: bool = True     # emit "dir" in each JSON step
    strict_rules:      bool = False    # unknown rule name → UnknownRule instead of []


@dataclass
class SearchConfig:
    max_depth:     int  = 6        # rewrite steps from the start term
    max_terms:     int  = 20000    # distinct terms visited before giving up
    bidirectional: bool = True     # also apply reversible rules right-to-left


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class RwStepsConfig:
    translator: TranslatorConfig = field(default_factory=TranslatorConfig)
    search:     SearchConfig     = field(default_factory=SearchConfig)
    server:     ServerConfig     = field(default_factory=ServerConfig)

    @classmethod
    def for_rule_set(cls, rule_set: str) -> "RwStepsConfig":
        """Pre-tuned configs per rule set."""
        cfg = cls()
        cfg.translator.rule_set = rule_set
        if rule_set == "core":
            cfg.search.max_depth = 8        # fewer rules → cheaper levels
        elif rule_set == "full":
            cfg.search.max_depth = 5        # projections widen every level
        return cfg

    def validate(self) -> List[str]:
        """Returns list of validation error strings. Empty = valid."""
        errors = []
        if not self.translator.rule_set:
            errors.append("translator.rule_set must not be empty")
        if self.search.max_depth < 0:
            errors.append(f"search.max_depth {self.search.max_depth} must be >= 0")
        if self.search.max_terms < 1:
            errors.append(f"search.max_terms {self.search.max_terms} must be >= 1")
        if not (0 < self.server.port < 65536):
            errors.append(f"server.port {self.server.port} not in 1..65535")
        return errors


# Singleton default config
DEFAULT_CONFIG = RwStepsConfig()
