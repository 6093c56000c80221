"""Core enums for type safety across the engine."""

from enum import Enum


class RangeOperator(str, Enum):
    """Numeric comparison operators for range conditions."""

    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    EQ = "eq"
    NEQ = "neq"
    BETWEEN = "between"
    BETWEEN_EXCLUSIVE = "betweenExclusive"
    OUTSIDE = "outside"

    @property
    def takes_bounds(self) -> bool:
        """Operators compared against {min, max} rather than a single number."""
        return self in (
            RangeOperator.BETWEEN,
            RangeOperator.BETWEEN_EXCLUSIVE,
            RangeOperator.OUTSIDE,
        )


class BooleanOperator(str, Enum):
    """Operators for boolean conditions."""

    IS = "is"
    IS_NOT = "isNot"
    IS_TRUE = "isTrue"
    IS_FALSE = "isFalse"
    IS_TRUTHY = "isTruthy"
    IS_FALSY = "isFalsy"


class ListOperator(str, Enum):
    """Collection membership operators for list conditions."""

    IN = "in"
    NOT_IN = "notIn"
    INCLUDES = "includes"
    INCLUDES_ALL = "includesAll"
    EXCLUDES = "excludes"
    MATCHES_ANY = "matchesAny"


class ImportanceLevel(str, Enum):
    """Whether a custom condition gates eligibility or only informs it."""

    REQUIRED = "required"
    PREFERRED = "preferred"
    OPTIONAL = "optional"


class EvaluationStage(str, Enum):
    """Stages of eligibility evaluation, reported separately for explanation."""

    HARD_CONSTRAINTS = "hard_constraints"
    BOOLEAN_EXCLUSIONS = "boolean_exclusions"
    CUSTOM_CONDITIONS = "custom_conditions"


class CheckKind(str, Enum):
    """Shape of a single eligibility check."""

    RANGE = "range"
    LIST = "list"
    BOOLEAN = "boolean"
    CUSTOM = "custom"


class CriterionCategory(str, Enum):
    """Display grouping for eligibility checks."""

    ACADEMIC = "academic"
    FINANCIAL = "financial"
    LOCATION = "location"
    PERSONAL = "personal"
    STATUS = "status"
    CUSTOM = "custom"


class DecisionStatus(str, Enum):
    """Application workflow statuses known to the engine."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    DOCUMENTS_REQUIRED = "documents_required"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    APPROVED = "approved"
    REJECTED = "rejected"
    WAITLISTED = "waitlisted"
    WITHDRAWN = "withdrawn"


class ModelScope(str, Enum):
    """Which corpus a set of model weights was trained on."""

    OFFERING = "offering"
    GLOBAL = "global"


class ConfidenceLevel(str, Enum):
    """Confidence band of a prediction."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ContributionDirection(str, Enum):
    """Sign of a feature's contribution to the z-score."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class FactorGroup(str, Enum):
    """Named display categories for prediction factors."""

    ACADEMIC = "Academic"
    FINANCIAL = "Financial"
    PROGRAM_FIT = "Program Fit"
    APPLICATION_QUALITY = "Application Quality"
    ELIGIBILITY = "Eligibility"
