"""Applicant profile snapshot consumed by the eligibility and scoring engines."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApplicantProfile(BaseModel):
    """
    Immutable snapshot of an applicant at evaluation time.

    Every field is optional: the engines treat an absent value as "not
    provided" and never mutate the snapshot.

    Attributes:
        gwa: General weighted average on the inverted 1.0 (best) to 5.0 scale
        classification: Year level (Freshman, Sophomore, ..., Graduate)
        units_enrolled: Units enrolled in the current term
        units_passed: Total units passed
        college: Organizational unit
        course: Degree program
        major: Major or specialization
        annual_family_income: Annual family income
        st_bracket: Socialized tuition (subsidy) bracket
        household_size: Number of household members
        province_of_origin: Province of origin
        citizenship: Citizenship
        documents_submitted: Document types the applicant has on file
    """

    model_config = ConfigDict(frozen=True)

    # Academic standing
    gwa: Optional[float] = Field(None, ge=1.0, le=5.0)
    classification: Optional[str] = None
    units_enrolled: Optional[int] = Field(None, ge=0)
    units_passed: Optional[int] = Field(None, ge=0)

    # Affiliation
    college: Optional[str] = None
    course: Optional[str] = None
    major: Optional[str] = None

    # Financial standing
    annual_family_income: Optional[float] = Field(None, ge=0)
    st_bracket: Optional[str] = None
    household_size: Optional[int] = Field(None, ge=1)

    # Origin
    province_of_origin: Optional[str] = None
    citizenship: Optional[str] = None

    # Status flags
    has_existing_scholarship: Optional[bool] = None
    has_thesis_grant: Optional[bool] = None
    has_disciplinary_action: Optional[bool] = None
    has_failing_grade: Optional[bool] = None
    has_grade_of_4: Optional[bool] = None
    has_incomplete_grade: Optional[bool] = None
    has_approved_thesis_outline: Optional[bool] = None
    is_graduating: Optional[bool] = None

    documents_submitted: frozenset[str] = Field(default_factory=frozenset)

    @field_validator(
        "classification",
        "college",
        "course",
        "major",
        "st_bracket",
        "province_of_origin",
        "citizenship",
    )
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat whitespace-only strings as not provided."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("documents_submitted", mode="before")
    @classmethod
    def normalize_documents(cls, v):
        """Accept any iterable of document type names."""
        if v is None:
            return frozenset()
        return frozenset(str(d).strip().lower() for d in v if str(d).strip())
