"""Evaluation of admin-authored custom conditions."""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from scholarship_engine.core.enums import BooleanOperator, ListOperator, RangeOperator
from scholarship_engine.core.exceptions import MissingFieldError, UnknownOperatorOrField
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import (
    BooleanCondition,
    CustomConditionBase,
    ListCondition,
    RangeBounds,
    RangeCondition,
)
from scholarship_engine.services.rule_engine.field_registry import (
    FieldAccessor,
    FieldKind,
    resolve_field,
)
from scholarship_engine.services.rule_engine.normalizers import matches_any, normalize_text

logger = logging.getLogger(__name__)


@dataclass
class CustomConditionOutcome:
    """
    Result of one custom condition.

    Attributes:
        passed: Whether the condition holds; False whenever it could not be evaluated
        diagnostic: Reason the condition failed closed, if it did
        applicant_value: Value read from the profile
    """

    passed: bool
    diagnostic: Optional[str] = None
    applicant_value: Any = None


class CustomConditionEvaluator:
    """
    Evaluator for range, boolean and list custom conditions.

    Field names resolve through a closed registry, and each condition type
    only accepts fields of a matching kind. Anything that cannot be
    evaluated (unknown type, field or operator, malformed value, missing
    applicant value where a comparison needs one) fails closed with a
    diagnostic and never raises.
    """

    def evaluate(
        self, condition: CustomConditionBase, profile: ApplicantProfile
    ) -> CustomConditionOutcome:
        """
        Evaluate one custom condition against a profile.

        Args:
            condition: Range, boolean, list or unsupported condition
            profile: Applicant snapshot

        Returns:
            CustomConditionOutcome with pass/fail, diagnostic and applicant value
        """
        applicant_value = None
        try:
            if not isinstance(condition, (RangeCondition, BooleanCondition, ListCondition)):
                raise UnknownOperatorOrField(
                    f"Unsupported condition type '{condition.condition_type}'",
                    condition_id=condition.id,
                )

            accessor = resolve_field(condition.student_field, condition.id)
            applicant_value = accessor(profile)

            if isinstance(condition, RangeCondition):
                passed = self._evaluate_range(condition, accessor, applicant_value)
            elif isinstance(condition, BooleanCondition):
                passed = self._evaluate_boolean(condition, accessor, applicant_value)
            else:
                passed = self._evaluate_list(condition, accessor, applicant_value)
        except (MissingFieldError, UnknownOperatorOrField) as e:
            logger.info("Custom condition %s failed closed: %s", condition.id, e)
            return CustomConditionOutcome(
                passed=False,
                diagnostic=f"{condition.id}: {e}",
                applicant_value=applicant_value,
            )

        return CustomConditionOutcome(passed=passed, applicant_value=applicant_value)

    # ==================== Range ====================

    def _evaluate_range(
        self, condition: RangeCondition, accessor: FieldAccessor, value: Any
    ) -> bool:
        """
        Numeric comparison.

        Operators: lt, lte, gt, gte, eq, neq against a number; between
        (inclusive), betweenExclusive and outside against {min, max}. An
        unset side of the bounds is open.
        """
        operator = self._parse_operator(RangeOperator, condition)
        self._require_kind(condition, accessor, FieldKind.NUMERIC)

        if value is None:
            raise MissingFieldError(accessor.name)
        value = float(value)

        if operator.takes_bounds:
            low, high = self._decode_bounds(condition, operator)
            if operator == RangeOperator.BETWEEN:
                return low <= value <= high
            elif operator == RangeOperator.BETWEEN_EXCLUSIVE:
                return low < value < high
            return value < low or value > high

        threshold = self._decode_threshold(condition, operator)
        if operator == RangeOperator.LT:
            return value < threshold
        elif operator == RangeOperator.LTE:
            return value <= threshold
        elif operator == RangeOperator.GT:
            return value > threshold
        elif operator == RangeOperator.GTE:
            return value >= threshold
        elif operator == RangeOperator.NEQ:
            return value != threshold
        return value == threshold

    @staticmethod
    def _decode_bounds(
        condition: RangeCondition, operator: RangeOperator
    ) -> tuple[float, float]:
        bounds = condition.value
        if not isinstance(bounds, RangeBounds):
            raise UnknownOperatorOrField(
                f"'{operator.value}' requires a {{min, max}} value, got {bounds!r}",
                condition_id=condition.id,
            )
        if bounds.min is None and bounds.max is None:
            raise UnknownOperatorOrField(
                f"'{operator.value}' requires at least one bound",
                condition_id=condition.id,
            )
        low = bounds.min if bounds.min is not None else -math.inf
        high = bounds.max if bounds.max is not None else math.inf
        return low, high

    @staticmethod
    def _decode_threshold(condition: RangeCondition, operator: RangeOperator) -> float:
        threshold = condition.value
        if isinstance(threshold, (int, float, str)) and not isinstance(threshold, bool):
            try:
                return float(threshold)
            except ValueError:
                pass
        raise UnknownOperatorOrField(
            f"'{operator.value}' requires a numeric value, got {threshold!r}",
            condition_id=condition.id,
        )

    # ==================== Boolean ====================

    def _evaluate_boolean(
        self, condition: BooleanCondition, accessor: FieldAccessor, value: Any
    ) -> bool:
        """
        Boolean check on a boolean field.

        `is`, `isTrue` and `isFalse` need a provided value; `isNot` and
        `isFalsy` pass for an absent flag; `isTruthy` fails for one.
        """
        operator = self._parse_operator(BooleanOperator, condition)
        self._require_kind(condition, accessor, FieldKind.BOOLEAN)

        if operator == BooleanOperator.IS_TRUTHY:
            return bool(value)
        elif operator == BooleanOperator.IS_FALSY:
            return not value
        elif operator in (BooleanOperator.IS_TRUE, BooleanOperator.IS_FALSE):
            if value is None:
                raise MissingFieldError(accessor.name)
            return bool(value) == (operator == BooleanOperator.IS_TRUE)

        expected = condition.value
        if not isinstance(expected, bool):
            raise UnknownOperatorOrField(
                f"'{operator.value}' requires a true/false value, got {expected!r}",
                condition_id=condition.id,
            )
        if operator == BooleanOperator.IS:
            if value is None:
                raise MissingFieldError(accessor.name)
            return bool(value) == expected
        return value is None or bool(value) != expected

    # ==================== List ====================

    def _evaluate_list(
        self, condition: ListCondition, accessor: FieldAccessor, value: Any
    ) -> bool:
        """
        Membership check, case-insensitive.

        - in: the applicant value is one of the listed values
        - notIn: the applicant value is not listed (an absent value passes)
        - includes: the applicant's collection holds at least one listed
          value, or a text value contains one of them
        - includesAll: like includes, but for every listed value
        - excludes: the opposite of includes (an absent value passes)
        - matchesAny: either side contains the other for some listed value
        """
        operator = self._parse_operator(ListOperator, condition)
        if accessor.kind not in (FieldKind.TEXT, FieldKind.COLLECTION):
            raise UnknownOperatorOrField(
                f"Field '{accessor.name}' cannot be used in a list condition",
                condition_id=condition.id,
            )

        if not isinstance(condition.value, tuple):
            raise UnknownOperatorOrField(
                f"List condition value must be a list, got {condition.value!r}",
                condition_id=condition.id,
            )
        allowed = {normalize_text(v) for v in condition.value} - {None}
        if not allowed:
            raise UnknownOperatorOrField(
                "List condition has no comparison values", condition_id=condition.id
            )

        if accessor.kind == FieldKind.COLLECTION:
            present = {normalize_text(v) for v in (value or ())} - {None}
        else:
            text = normalize_text(value)
            present = {text} if text is not None else set()

        def holds(item: str) -> bool:
            if accessor.kind == FieldKind.COLLECTION:
                return item in present
            return any(item in text for text in present)

        if operator == ListOperator.NOT_IN:
            return not (present & allowed)
        elif operator == ListOperator.EXCLUDES:
            return not any(holds(item) for item in allowed)

        if not present:
            raise MissingFieldError(accessor.name)

        if operator == ListOperator.IN:
            return bool(present & allowed)
        elif operator == ListOperator.INCLUDES:
            return any(holds(item) for item in allowed)
        elif operator == ListOperator.INCLUDES_ALL:
            return all(holds(item) for item in allowed)
        return any(matches_any(item, allowed, fuzzy=True) for item in present)

    # ==================== Helpers ====================

    @staticmethod
    def _parse_operator(operator_enum, condition: CustomConditionBase):
        try:
            return operator_enum(condition.operator)
        except ValueError:
            raise UnknownOperatorOrField(
                f"Unknown {condition.condition_type} operator '{condition.operator}'",
                condition_id=condition.id,
            ) from None

    @staticmethod
    def _require_kind(
        condition: CustomConditionBase, accessor: FieldAccessor, kind: FieldKind
    ) -> None:
        if accessor.kind != kind:
            raise UnknownOperatorOrField(
                f"Field '{accessor.name}' is {accessor.kind.value}, "
                f"expected {kind.value} for a {condition.condition_type} condition",
                condition_id=condition.id,
            )
