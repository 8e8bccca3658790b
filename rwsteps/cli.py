"""
rwsteps/cli.py
==============
Command line entry point.

Usage:
    echo "(join s1 (split1 s2 x) (split2 s2 x))" | rwsteps
    # [{"rw":"E","args":["s1"],"dir":true}]

    rwsteps --rule-set core --no-dir < expr.txt
    rwsteps --trace trace.txt            # one snapshot per line, no search
    rwsteps --rules my.rules --explain   # custom declarations, trace on stderr

Exit status: 0 on success (exactly one JSON line on stdout),
1 on any translation error (diagnostic on stderr).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from rwsteps.api.explainer import ProofExplainer
from rwsteps.core.config import RwStepsConfig
from rwsteps.core.exceptions import RwStepsError
from rwsteps.core.registry import Registry
from rwsteps.symbolic.rules import RULE_SET_CATEGORY, RuleCatalog, RuleLoader
from rwsteps.symbolic.sexpr import to_text
from rwsteps.version import __version__

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rwsteps",
        description="Turn a rewrite proof into named rewrite steps (JSON on stdout).",
    )
    parser.add_argument("--rule-set", default="pure", choices=Registry.names(RULE_SET_CATEGORY),
                        help="Built-in rule set")
    parser.add_argument("--rules", default=None,
                        help="Path to a rule declaration file (overrides --rule-set)")
    parser.add_argument("--trace", default=None, metavar="FILE",
                        help="Translate a proof trace (one snapshot per line, '-' = stdin)")
    parser.add_argument("--no-dir", action="store_true",
                        help="Omit the 'dir' field from each step")
    parser.add_argument("--strict", action="store_true",
                        help="Fail on rule names missing from the catalog")
    parser.add_argument("--max-depth", type=int, default=None)
    parser.add_argument("--max-terms", type=int, default=None)
    parser.add_argument("--explain", action="store_true",
                        help="Print the proof trace to stderr")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _read(path: str) -> str:
    """Whole text of ``path``; "-" is stdin. Undecodable bytes are a RwStepsError."""
    source = "<stdin>" if path == "-" else path
    try:
        if path == "-":
            return sys.stdin.read()
        with open(path, encoding="utf-8") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise RwStepsError(
            f"{source} is not valid UTF-8 ({e.reason} at byte {e.start})",
            {"source": source, "offset": e.start},
        ) from e


def _config_from_args(args: argparse.Namespace) -> RwStepsConfig:
    cfg = RwStepsConfig.for_rule_set(args.rule_set)
    cfg.translator.include_direction = not args.no_dir
    cfg.translator.strict_rules = args.strict
    if args.max_depth is not None:
        cfg.search.max_depth = args.max_depth
    if args.max_terms is not None:
        cfg.search.max_terms = args.max_terms
    return cfg


def run(args: argparse.Namespace) -> str:
    """Execute one invocation and return the JSON line."""
    cfg = _config_from_args(args)
    catalog = None
    if args.rules:
        catalog = RuleCatalog(RuleLoader.from_file(args.rules), name=args.rules)
    explainer = ProofExplainer(cfg, catalog=catalog)

    if args.trace:
        snapshots = [line.strip() for line in _read(args.trace).splitlines() if line.strip()]
        steps = explainer.steps_from_trace(snapshots)
        return explainer.to_json(steps)

    explanation = explainer.explain(_read("-").strip())
    if args.explain:
        for snapshot in explanation.trace:
            print(to_text(snapshot), file=sys.stderr)
    return explainer.to_json(explanation.steps)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        output = run(args)
    except (RwStepsError, OSError, UnicodeDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
