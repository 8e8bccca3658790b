"""
rwsteps/deployment/server/routes.py
===================================
REST API routes for the rwsteps server.
"""
from __future__ import annotations
from typing import Dict, List, Optional
from fastapi import APIRouter
from pydantic import BaseModel

from rwsteps.api.explainer import ProofExplainer
from rwsteps.core.config import RwStepsConfig
from rwsteps.core.registry import Registry
from rwsteps.symbolic.rules import RULE_SET_CATEGORY, RuleCatalog, format_declaration

router = APIRouter()

# ─── Request/Response Models ────────────────────────────────────

class ExplainRequest(BaseModel):
    expr: str                            # "(join s1 (split1 s2 x) (split2 s2 x))"
    rule_set: str = "pure"
    include_direction: bool = True

class StepsRequest(BaseModel):
    trace: List[str]                     # ["(a b c)", "(Rewrite=> C (a c b))"]
    rule_set: str = "pure"
    include_direction: bool = True
    strict: bool = False

class StepModel(BaseModel):
    rw:   str
    args: List[str]
    dir:  Optional[bool] = None

class StepsResponse(BaseModel):
    steps: List[StepModel]

class ExplainResponse(BaseModel):
    start: str
    best:  str
    cost:  int
    steps: List[StepModel]
    trace: List[str]

# ─── Explainer instances ────────────────────────────────────────
# One per (rule set, strictness); catalogs are immutable so sharing is safe.
_explainers: Dict[tuple, ProofExplainer] = {}

def get_explainer(rule_set: str, strict: bool = False) -> ProofExplainer:
    key = (rule_set, strict)
    if key not in _explainers:
        cfg = RwStepsConfig.for_rule_set(rule_set)
        cfg.translator.strict_rules = strict
        _explainers[key] = ProofExplainer(cfg)
    return _explainers[key]

# ─── Routes ─────────────────────────────────────────────────────

@router.post("/explain", response_model=ExplainResponse, response_model_exclude_none=True)
async def explain(request: ExplainRequest):
    explainer = get_explainer(request.rule_set)
    explanation = explainer.explain(request.expr)
    steps = [s.to_dict(request.include_direction) for s in explanation.steps]
    body = explainer.to_dict(explanation)
    body["steps"] = steps
    return body

@router.post("/steps", response_model=StepsResponse, response_model_exclude_none=True)
async def steps(request: StepsRequest):
    explainer = get_explainer(request.rule_set, request.strict)
    result = explainer.steps_from_trace(request.trace)
    return {"steps": [s.to_dict(request.include_direction) for s in result]}

@router.get("/rules")
async def list_rules():
    return {
        name: [format_declaration(spec) for spec in RuleCatalog.named(name)]
        for name in Registry.names(RULE_SET_CATEGORY)
    }
