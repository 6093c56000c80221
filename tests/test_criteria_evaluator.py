"""Tests for the eligibility criteria evaluator."""

import pytest

from scholarship_engine.core.enums import CheckKind, CriterionCategory, EvaluationStage
from scholarship_engine.models.domain.applicant import ApplicantProfile
from scholarship_engine.models.domain.criteria import (
    BooleanCondition,
    EligibilityCriteria,
    RangeCondition,
)
from scholarship_engine.services.rule_engine import CriteriaEvaluator
from scholarship_engine.services.rule_engine.evaluators import RangeEvaluator


@pytest.fixture
def evaluator():
    return CriteriaEvaluator()


class TestGwaScenario:
    def test_better_gwa_is_eligible(self, evaluator):
        criteria = EligibilityCriteria(max_gwa=2.0, eligible_colleges=[])
        result = evaluator.evaluate(ApplicantProfile(gwa=1.75), criteria)
        assert result.is_eligible is True
        assert result.check("GWA Requirement").passed is True

    def test_worse_gwa_fails_only_the_gwa_check(self, evaluator):
        criteria = EligibilityCriteria(max_gwa=2.0, eligible_colleges=[])
        result = evaluator.evaluate(ApplicantProfile(gwa=2.5), criteria)
        assert result.is_eligible is False
        assert result.check("GWA Requirement").passed is False
        others = [c for c in result.checks if c.criterion != "GWA Requirement"]
        assert all(c.passed for c in others)

    def test_gwa_at_ceiling_passes(self, evaluator):
        criteria = EligibilityCriteria(max_gwa=2.0)
        result = evaluator.evaluate(ApplicantProfile(gwa=2.0), criteria)
        assert result.is_eligible is True

    def test_missing_gwa_fails(self, evaluator):
        criteria = EligibilityCriteria(max_gwa=2.0)
        result = evaluator.evaluate(ApplicantProfile(), criteria)
        check = result.check("GWA Requirement")
        assert check.passed is False
        assert check.applicant_value is None
        assert "not provided" in check.notes


class TestRangeCriteria:
    def test_income_ceiling_only(self, evaluator):
        criteria = EligibilityCriteria(max_annual_family_income=250000)
        assert evaluator.evaluate(
            ApplicantProfile(annual_family_income=100000), criteria
        ).is_eligible
        assert not evaluator.evaluate(
            ApplicantProfile(annual_family_income=300000), criteria
        ).is_eligible

    def test_income_zero_meets_default_floor(self, evaluator):
        criteria = EligibilityCriteria(max_annual_family_income=250000)
        result = evaluator.evaluate(ApplicantProfile(annual_family_income=0), criteria)
        assert result.is_eligible is True

    def test_units_minimums(self, evaluator):
        criteria = EligibilityCriteria(min_units_enrolled=15, min_units_passed=60)
        result = evaluator.evaluate(
            ApplicantProfile(units_enrolled=15, units_passed=59), criteria
        )
        assert result.check("Units Enrolled").passed is True
        assert result.check("Units Passed").passed is False

    def test_household_size_window(self, evaluator):
        criteria = EligibilityCriteria(min_household_size=3, max_household_size=6)
        assert evaluator.evaluate(ApplicantProfile(household_size=6), criteria).is_eligible
        assert not evaluator.evaluate(ApplicantProfile(household_size=7), criteria).is_eligible

    def test_unset_bounds_produce_no_checks(self, evaluator, full_profile, open_criteria):
        result = evaluator.evaluate(full_profile, open_criteria)
        assert result.checks == ()
        assert result.is_eligible is True


class TestListCriteria:
    @pytest.mark.parametrize("college", ["Anything", "College of Human Ecology", None])
    def test_empty_list_is_wildcard(self, evaluator, college):
        criteria = EligibilityCriteria(eligible_colleges=[])
        result = evaluator.evaluate(ApplicantProfile(college=college), criteria)
        assert result.is_eligible is True
        assert result.check("College") is None

    @pytest.mark.parametrize(
        "field,criteria_field",
        [
            ("classification", "eligible_classifications"),
            ("college", "eligible_colleges"),
            ("course", "eligible_courses"),
            ("major", "eligible_majors"),
            ("st_bracket", "eligible_st_brackets"),
            ("province_of_origin", "eligible_provinces"),
            ("citizenship", "eligible_citizenship"),
        ],
    )
    def test_absent_applicant_value_fails(self, evaluator, field, criteria_field):
        criteria = EligibilityCriteria(**{criteria_field: ["Something"]})
        result = evaluator.evaluate(ApplicantProfile(), criteria)
        assert result.is_eligible is False
        assert len(result.failed_checks) == 1
        assert result.failed_checks[0].applicant_value is None

    def test_year_level_aliases(self, evaluator):
        criteria = EligibilityCriteria(eligible_classifications=["Freshman", "Sophomore"])
        assert evaluator.evaluate(
            ApplicantProfile(classification="1st Year"), criteria
        ).is_eligible
        assert evaluator.evaluate(ApplicantProfile(classification="2"), criteria).is_eligible
        assert not evaluator.evaluate(
            ApplicantProfile(classification="Senior"), criteria
        ).is_eligible

    def test_st_bracket_codes_match_full_names(self, evaluator):
        criteria = EligibilityCriteria(eligible_st_brackets=["FDS", "PD80"])
        assert evaluator.evaluate(
            ApplicantProfile(st_bracket="Full Discount with Stipend"), criteria
        ).is_eligible
        assert evaluator.evaluate(
            ApplicantProfile(st_bracket="80% Partial Discount"), criteria
        ).is_eligible
        assert not evaluator.evaluate(
            ApplicantProfile(st_bracket="No Discount"), criteria
        ).is_eligible

    def test_college_code_matches_full_name(self, evaluator):
        criteria = EligibilityCriteria(eligible_colleges=["CAS"])
        result = evaluator.evaluate(
            ApplicantProfile(college="college of arts and sciences"), criteria
        )
        assert result.is_eligible is True

    def test_major_substring_match(self, evaluator):
        criteria = EligibilityCriteria(eligible_majors=["Computer Science"])
        result = evaluator.evaluate(ApplicantProfile(major="BS Computer Science"), criteria)
        assert result.is_eligible is True

    def test_province_case_insensitive(self, evaluator):
        criteria = EligibilityCriteria(eligible_provinces=["Laguna"])
        assert evaluator.evaluate(
            ApplicantProfile(province_of_origin="LAGUNA"), criteria
        ).is_eligible


class TestBooleanCriteria:
    def test_exclusion_triggered(self, evaluator):
        criteria = EligibilityCriteria(must_not_have_other_scholarship=True)
        result = evaluator.evaluate(ApplicantProfile(has_existing_scholarship=True), criteria)
        assert result.is_eligible is False
        assert result.boolean_exclusions.passed is False

    def test_exclusion_not_triggered_when_flag_absent(self, evaluator):
        criteria = EligibilityCriteria(must_not_have_disciplinary_action=True)
        result = evaluator.evaluate(ApplicantProfile(), criteria)
        assert result.is_eligible is True

    def test_requirement_needs_true_flag(self, evaluator):
        criteria = EligibilityCriteria(must_be_graduating=True)
        assert not evaluator.evaluate(ApplicantProfile(), criteria).is_eligible
        assert evaluator.evaluate(ApplicantProfile(is_graduating=True), criteria).is_eligible

    def test_filipino_only(self, evaluator):
        criteria = EligibilityCriteria(filipino_only=True)
        assert evaluator.evaluate(ApplicantProfile(citizenship="filipino"), criteria).is_eligible
        assert not evaluator.evaluate(
            ApplicantProfile(citizenship="American"), criteria
        ).is_eligible

    def test_disabled_flags_produce_no_checks(self, evaluator):
        result = evaluator.evaluate(
            ApplicantProfile(has_failing_grade=True), EligibilityCriteria()
        )
        assert result.boolean_exclusions.total == 0


class TestCustomConditionAggregation:
    def _failing(self, importance):
        return RangeCondition(
            id="min-units",
            student_field="units_passed",
            operator="gte",
            value=100,
            importance=importance,
        )

    def test_required_failure_blocks_eligibility(self, evaluator, full_profile):
        criteria = EligibilityCriteria(custom_conditions=[self._failing("required")])
        result = evaluator.evaluate(full_profile, criteria)
        assert result.is_eligible is False
        assert result.custom_conditions.passed is False

    def test_optional_failure_is_recorded_only(self, evaluator, full_profile):
        criteria = EligibilityCriteria(custom_conditions=[self._failing("optional")])
        result = evaluator.evaluate(full_profile, criteria)
        assert result.is_eligible is True
        assert result.check("min-units").passed is False

    def test_preferred_failure_is_recorded_only(self, evaluator, full_profile):
        criteria = EligibilityCriteria(custom_conditions=[self._failing("preferred")])
        assert evaluator.evaluate(full_profile, criteria).is_eligible is True

    def test_inactive_condition_skipped(self, evaluator, full_profile):
        condition = self._failing("required").model_copy(update={"is_active": False})
        criteria = EligibilityCriteria(custom_conditions=[condition])
        result = evaluator.evaluate(full_profile, criteria)
        assert result.is_eligible is True
        assert result.custom_conditions.total == 0
        assert result.checks == ()

    def test_unknown_field_fails_closed(self, evaluator, full_profile):
        condition = BooleanCondition(
            id="mystery", student_field="favorite_color", operator="isTruthy"
        )
        result = evaluator.evaluate(
            full_profile, EligibilityCriteria(custom_conditions=[condition])
        )
        assert result.is_eligible is False
        assert result.check("mystery").diagnostic is not None
        assert any("favorite_color" in d for d in result.diagnostics)


    def test_malformed_condition_fails_only_itself(self, evaluator, full_profile):
        criteria = EligibilityCriteria.model_validate(
            {
                "custom_conditions": [
                    {
                        "id": "conduct",
                        "condition_type": "boolean",
                        "student_field": "has_disciplinary_action",
                        "operator": "isFalsy",
                    },
                    {
                        "id": "window",
                        "condition_type": "range",
                        "student_field": "gwa",
                        "operator": "between",
                        "value": [1.0, 2.0],
                    },
                    {
                        "id": "pattern",
                        "condition_type": "regex",
                        "student_field": "course",
                        "operator": "matches",
                    },
                ]
            }
        )
        result = evaluator.evaluate(full_profile, criteria)
        assert result.custom_conditions.total == 3
        assert result.check("conduct").passed is True
        assert result.check("window").passed is False
        assert result.check("pattern").passed is False
        assert len(result.diagnostics) == 2
        assert result.is_eligible is False


class _BrokenRangeEvaluator(RangeEvaluator):
    def evaluate(self, context):
        raise RuntimeError("bounds table unavailable")


class TestEvaluatorFailure:
    def test_broken_family_fails_with_its_own_category(self, evaluator, full_profile):
        evaluator.register_evaluator(CheckKind.RANGE, _BrokenRangeEvaluator())
        criteria = EligibilityCriteria(max_gwa=2.0, eligible_colleges=["CAS"])
        result = evaluator.evaluate(full_profile, criteria)

        failed = result.check("Range Criteria")
        assert failed.passed is False
        assert failed.category == CriterionCategory.ACADEMIC
        assert failed.stage == EvaluationStage.HARD_CONSTRAINTS
        assert "bounds table unavailable" in failed.diagnostic
        assert result.check("College").passed is True
        assert result.is_eligible is False


class TestResultShape:
    def test_evaluation_is_exhaustive(self, evaluator):
        criteria = EligibilityCriteria(
            max_gwa=2.0,
            eligible_colleges=["CAS"],
            must_be_graduating=True,
        )
        result = evaluator.evaluate(ApplicantProfile(gwa=3.0, college="CEM"), criteria)
        assert len(result.checks) == 3
        assert len(result.failed_checks) == 3

    def test_stage_breakdown(self, evaluator):
        criteria = EligibilityCriteria(
            max_gwa=2.0,
            eligible_colleges=["CAS"],
            must_not_have_failing_grade=True,
        )
        result = evaluator.evaluate(ApplicantProfile(gwa=1.5, college="CEM"), criteria)
        assert result.hard_constraints.total == 2
        assert result.hard_constraints.passed_count == 1
        assert result.hard_constraints.failed_criteria == ("College",)
        assert result.boolean_exclusions.passed is True
        assert result.stage(EvaluationStage.CUSTOM_CONDITIONS).total == 0

    def test_eligibility_percentage(self, evaluator):
        criteria = EligibilityCriteria(max_gwa=2.0, eligible_colleges=["CAS"])
        result = evaluator.evaluate(ApplicantProfile(gwa=1.5, college="CEM"), criteria)
        assert result.eligibility_percentage == pytest.approx(0.5)

    def test_percentage_without_checks(self, evaluator, open_criteria):
        result = evaluator.evaluate(ApplicantProfile(), open_criteria)
        assert result.eligibility_percentage == 1.0

    def test_optional_custom_excluded_from_percentage(self, evaluator):
        condition = BooleanCondition(
            id="graduating",
            student_field="is_graduating",
            operator="isTruthy",
            importance="optional",
        )
        criteria = EligibilityCriteria(max_gwa=2.0, custom_conditions=[condition])
        result = evaluator.evaluate(ApplicantProfile(gwa=1.5), criteria)
        assert result.eligibility_percentage == 1.0

    def test_check_kinds(self, evaluator):
        criteria = EligibilityCriteria(
            max_gwa=2.0, eligible_colleges=["CAS"], filipino_only=True
        )
        result = evaluator.evaluate(ApplicantProfile(), criteria)
        kinds = [c.kind for c in result.checks]
        assert kinds == [CheckKind.RANGE, CheckKind.LIST, CheckKind.BOOLEAN]
