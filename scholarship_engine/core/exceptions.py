"""Exception taxonomy for the eligibility and scoring engines."""

from typing import Optional


class ScholarshipEngineError(Exception):
    """Base class for all engine errors."""


class MissingFieldError(ScholarshipEngineError):
    """
    An applicant field needed by a comparison is absent.

    Raised inside condition evaluation and converted into a failed check;
    it never escapes a criteria-set evaluation.
    """

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Applicant field '{field_name}' is not provided")


class UnknownOperatorOrField(ScholarshipEngineError):
    """A custom condition references an unregistered field or operator."""

    def __init__(self, message: str, condition_id: Optional[str] = None):
        self.condition_id = condition_id
        super().__init__(message)


class InsufficientDataError(ScholarshipEngineError):
    """
    Too few labeled samples to train a model.

    Callers are expected to fall back to the domain-knowledge weight vector.
    """

    def __init__(self, available: int, required: int, scope: str = "global"):
        self.available = available
        self.required = required
        self.scope = scope
        super().__init__(
            f"Insufficient training data for {scope} model: "
            f"need at least {required} samples, found {available}"
        )


class FeatureSchemaMismatchError(ScholarshipEngineError):
    """Model weights were trained on a different feature list than the extractor produces."""

    def __init__(self, expected: tuple, actual: tuple):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Feature schema mismatch: model expects {list(expected)}, "
            f"extractor produced {list(actual)}"
        )


class ModelNotFoundError(ScholarshipEngineError):
    """No offering or global model has been published."""
