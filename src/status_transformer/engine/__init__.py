"""Condition matching and transformation engine.

Formal model:
    Hook hᵢ = (Mᵢ, Sᵢ, Eᵢ) where:
        Mᵢ: matchers, each a quantified rule over (resources × conditions)
        Sᵢ: condition setters
        Eᵢ: event creators

    fire(hᵢ) = ∧ match(m) for m in Mᵢ
    run(H)   = for hᵢ in H: if fire(hᵢ) then apply(Sᵢ), apply(Eᵢ)
"""

from status_transformer.engine.context import (
    ConditionResult,
    EvaluationResult,
    EventResult,
    RunState,
    Severity,
)
from status_transformer.engine.evaluator import HookEvaluator, HookState, evaluate
from status_transformer.engine.matcher import evaluate_matcher
from status_transformer.engine.overrides import OverrideMode
from status_transformer.engine.predicate import match_condition
from status_transformer.engine.selector import select_resources

__all__ = [
    "ConditionResult",
    "EvaluationResult",
    "EventResult",
    "HookEvaluator",
    "HookState",
    "OverrideMode",
    "RunState",
    "Severity",
    "evaluate",
    "evaluate_matcher",
    "match_condition",
    "select_resources",
]
