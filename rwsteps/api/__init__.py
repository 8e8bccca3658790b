"""rwsteps/api — Developer-facing facade."""

from rwsteps.api.explainer import ProofExplainer, explanation_to_dict, steps_to_json

__all__ = ["ProofExplainer", "explanation_to_dict", "steps_to_json"]
