"""Eligibility criteria and admin-authored custom conditions for an offering."""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    ValidationError,
    field_validator,
)

from scholarship_engine.core.enums import ImportanceLevel


# ==================== Custom Conditions ====================


class RangeBounds(BaseModel):
    """Bounds for the range operators that compare against `{min, max}`."""

    model_config = ConfigDict(frozen=True)

    min: Optional[float] = None
    max: Optional[float] = None


class CustomConditionBase(BaseModel):
    """
    Fields shared by every custom condition variant.

    `operator` and `value` are kept close to the authored input, and an
    unknown `condition_type` decodes to UnsupportedCondition. One bad
    condition is then reported as a failed check instead of rejecting the
    whole criteria set.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    student_field: str = Field(..., min_length=1)
    operator: str = Field(..., min_length=1)
    importance: ImportanceLevel = ImportanceLevel.REQUIRED
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return self.name or self.id


class RangeCondition(CustomConditionBase):
    """
    Numeric comparison; `value` is a threshold, or `{min, max}` for the
    between, betweenExclusive and outside operators.

    Values that fit neither shape are kept as given and fail at evaluation.
    """

    condition_type: Literal["range"] = "range"
    value: Any = None

    @field_validator("value", mode="before")
    @classmethod
    def parse_bounds(cls, v):
        if isinstance(v, dict) and v and set(v) <= {"min", "max"}:
            try:
                return RangeBounds.model_validate(v)
            except ValidationError:
                return v
        return v


class BooleanCondition(CustomConditionBase):
    """True/false check; `value` is the expected value for `is`/`isNot`."""

    condition_type: Literal["boolean"] = "boolean"
    value: Any = True


class ListCondition(CustomConditionBase):
    """Membership check against a list of allowed or disallowed values."""

    condition_type: Literal["list"] = "list"
    value: Any = ()

    @field_validator("value", mode="before")
    @classmethod
    def wrap_scalar(cls, v):
        """A single string is a one-element list."""
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        if isinstance(v, (list, tuple, set, frozenset)):
            return tuple(v)
        return v


class UnsupportedCondition(CustomConditionBase):
    """A condition whose type the engine does not know; it always fails."""

    condition_type: Optional[str] = None
    value: Any = None


CONDITION_TYPES = ("range", "boolean", "list")


def _condition_tag(v: Any) -> str:
    if isinstance(v, dict):
        tag = v.get("condition_type")
    else:
        tag = getattr(v, "condition_type", None)
    return tag if tag in CONDITION_TYPES else "unsupported"


CustomCondition = Annotated[
    Union[
        Annotated[RangeCondition, Tag("range")],
        Annotated[BooleanCondition, Tag("boolean")],
        Annotated[ListCondition, Tag("list")],
        Annotated[UnsupportedCondition, Tag("unsupported")],
    ],
    Discriminator(_condition_tag),
]


# ==================== Eligibility Criteria ====================


class EligibilityCriteria(BaseModel):
    """
    Per-offering eligibility rule set.

    Range bounds left unset leave that dimension unconstrained. An empty
    allow-list is a wildcard. Boolean flags set to True activate the
    corresponding requirement or exclusion.
    """

    model_config = ConfigDict(frozen=True)

    offering_id: Optional[str] = None

    # Range constraints
    min_gwa: Optional[float] = Field(None, ge=1.0, le=5.0)
    max_gwa: Optional[float] = Field(None, ge=1.0, le=5.0)
    min_annual_family_income: Optional[float] = Field(None, ge=0)
    max_annual_family_income: Optional[float] = Field(None, ge=0)
    min_units_enrolled: Optional[int] = Field(None, ge=0)
    min_units_passed: Optional[int] = Field(None, ge=0)
    min_household_size: Optional[int] = Field(None, ge=1)
    max_household_size: Optional[int] = Field(None, ge=1)

    # Set-membership allow-lists (empty = no restriction)
    eligible_classifications: tuple[str, ...] = ()
    eligible_colleges: tuple[str, ...] = ()
    eligible_courses: tuple[str, ...] = ()
    eligible_majors: tuple[str, ...] = ()
    eligible_st_brackets: tuple[str, ...] = ()
    eligible_provinces: tuple[str, ...] = ()
    eligible_citizenship: tuple[str, ...] = ()

    # Boolean requirements and exclusions
    requires_approved_thesis_outline: bool = False
    must_not_have_other_scholarship: bool = False
    must_not_have_thesis_grant: bool = False
    must_not_have_disciplinary_action: bool = False
    must_not_have_failing_grade: bool = False
    must_not_have_grade_of_4: bool = False
    must_not_have_incomplete_grade: bool = False
    must_be_graduating: bool = False
    filipino_only: bool = False

    required_documents: tuple[str, ...] = ()

    custom_conditions: tuple[CustomCondition, ...] = ()

    @field_validator(
        "eligible_classifications",
        "eligible_colleges",
        "eligible_courses",
        "eligible_majors",
        "eligible_st_brackets",
        "eligible_provinces",
        "eligible_citizenship",
        "required_documents",
        mode="before",
    )
    @classmethod
    def drop_blank_entries(cls, v):
        """Ignore None and blank entries so they cannot defeat the wildcard rule."""
        if v is None:
            return ()
        return tuple(str(item).strip() for item in v if item is not None and str(item).strip())

    @field_validator("required_documents")
    @classmethod
    def lowercase_documents(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(d.lower() for d in v)
