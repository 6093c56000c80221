"""Criterion evaluators for the built-in eligibility criteria."""

from .boolean_evaluator import BooleanEvaluator
from .list_evaluator import ListEvaluator
from .range_evaluator import RangeEvaluator

__all__ = [
    "BooleanEvaluator",
    "ListEvaluator",
    "RangeEvaluator",
]
