"""Eligibility rule engine."""

from scholarship_engine.services.rule_engine.custom_conditions import (
    CustomConditionEvaluator,
    CustomConditionOutcome,
)
from scholarship_engine.services.rule_engine.engine import CriteriaEvaluator

__all__ = [
    "CriteriaEvaluator",
    "CustomConditionEvaluator",
    "CustomConditionOutcome",
]
