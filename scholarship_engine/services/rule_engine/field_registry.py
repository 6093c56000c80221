"""Closed registry of applicant fields addressable by custom conditions."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from scholarship_engine.core.exceptions import UnknownOperatorOrField
from scholarship_engine.models.domain.applicant import ApplicantProfile


class FieldKind(str, Enum):
    """Value type produced by a field accessor."""

    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    TEXT = "text"
    COLLECTION = "collection"


@dataclass(frozen=True)
class FieldAccessor:
    """A typed read of one applicant field."""

    name: str
    kind: FieldKind
    read: Callable[[ApplicantProfile], Any]

    def __call__(self, profile: ApplicantProfile) -> Any:
        return self.read(profile)


def _attr(name: str, kind: FieldKind) -> FieldAccessor:
    return FieldAccessor(name=name, kind=kind, read=lambda p: getattr(p, name))


FIELD_REGISTRY: dict[str, FieldAccessor] = {
    accessor.name: accessor
    for accessor in (
        _attr("gwa", FieldKind.NUMERIC),
        _attr("units_enrolled", FieldKind.NUMERIC),
        _attr("units_passed", FieldKind.NUMERIC),
        _attr("annual_family_income", FieldKind.NUMERIC),
        _attr("household_size", FieldKind.NUMERIC),
        _attr("classification", FieldKind.TEXT),
        _attr("college", FieldKind.TEXT),
        _attr("course", FieldKind.TEXT),
        _attr("major", FieldKind.TEXT),
        _attr("st_bracket", FieldKind.TEXT),
        _attr("province_of_origin", FieldKind.TEXT),
        _attr("citizenship", FieldKind.TEXT),
        _attr("has_existing_scholarship", FieldKind.BOOLEAN),
        _attr("has_thesis_grant", FieldKind.BOOLEAN),
        _attr("has_disciplinary_action", FieldKind.BOOLEAN),
        _attr("has_failing_grade", FieldKind.BOOLEAN),
        _attr("has_grade_of_4", FieldKind.BOOLEAN),
        _attr("has_incomplete_grade", FieldKind.BOOLEAN),
        _attr("has_approved_thesis_outline", FieldKind.BOOLEAN),
        _attr("is_graduating", FieldKind.BOOLEAN),
        _attr("documents_submitted", FieldKind.COLLECTION),
    )
}

# Names used by records authored against the older camelCase profile shape
FIELD_ALIASES: dict[str, str] = {
    "annualFamilyIncome": "annual_family_income",
    "familyAnnualIncome": "annual_family_income",
    "unitsEnrolled": "units_enrolled",
    "unitsPassed": "units_passed",
    "householdSize": "household_size",
    "yearLevel": "classification",
    "stBracket": "st_bracket",
    "provinceOfOrigin": "province_of_origin",
    "hometown": "province_of_origin",
    "hasExistingScholarship": "has_existing_scholarship",
    "hasOtherScholarship": "has_existing_scholarship",
    "hasThesisGrant": "has_thesis_grant",
    "hasDisciplinaryAction": "has_disciplinary_action",
    "hasFailingGrade": "has_failing_grade",
    "hasGradeOf5": "has_failing_grade",
    "hasGradeOf4": "has_grade_of_4",
    "hasIncompleteGrade": "has_incomplete_grade",
    "hasINC": "has_incomplete_grade",
    "hasApprovedThesisOutline": "has_approved_thesis_outline",
    "hasApprovedThesis": "has_approved_thesis_outline",
    "isGraduating": "is_graduating",
    "documentsSubmitted": "documents_submitted",
}

_PROFILE_PREFIX = "studentProfile."


def resolve_field(name: str, condition_id: Optional[str] = None) -> FieldAccessor:
    """
    Look up the accessor for a custom condition's student_field.

    Args:
        name: Field name as authored (snake_case, known alias, or
            prefixed with "studentProfile.")
        condition_id: Condition id, for the error message

    Returns:
        The registered FieldAccessor

    Raises:
        UnknownOperatorOrField: If the name is not in the registry
    """
    key = name.strip()
    if key.startswith(_PROFILE_PREFIX):
        key = key[len(_PROFILE_PREFIX):]
    key = FIELD_ALIASES.get(key, key)

    accessor = FIELD_REGISTRY.get(key)
    if accessor is None:
        raise UnknownOperatorOrField(
            f"Unknown applicant field '{name}'", condition_id=condition_id
        )
    return accessor
