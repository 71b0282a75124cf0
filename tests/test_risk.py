"""
Tests for risk scoring, completeness and recommendations.
"""
import itertools
from types import SimpleNamespace

import pytest

from fitcoach.services import risk


def flags(**yes):
    data = {name: risk.NO for name in risk.MEDICAL_FLAGS}
    data.update(yes)
    return SimpleNamespace(**data)


def complete(**overrides):
    data = {
        "blood_pressure_systolic": 120,
        "blood_pressure_diastolic": 80,
        "resting_heart_rate": 70,
        "body_weight": 80,
        "allergies_details": None,
    }
    data.update({name: risk.NO for name in risk.MEDICAL_FLAGS})
    data.update(overrides)
    return SimpleNamespace(**data)


class TestRiskScore:
    def test_no_flags_scores_zero(self):
        assert risk.calculate_risk_score(flags()) == 0

    def test_each_weight(self):
        for name, points in risk.RISK_WEIGHTS:
            assert risk.calculate_risk_score(flags(**{name: "yes"})) == points

    def test_all_flags_capped_at_ten(self):
        every = {name: "yes" for name, _ in risk.RISK_WEIGHTS}
        assert risk.calculate_risk_score(flags(**every)) == 10

    def test_allergies_do_not_score(self):
        assert risk.calculate_risk_score(flags(has_allergies="yes")) == 0

    def test_missing_attributes_count_as_no(self):
        assert risk.calculate_risk_score(SimpleNamespace()) == 0
        assert risk.calculate_risk_score(SimpleNamespace(heart_problems="maybe")) == 0

    def test_monotonic_over_flag_subsets(self):
        """Adding a "yes" answer never lowers the score."""
        names = [name for name, _ in risk.RISK_WEIGHTS]
        for size in range(len(names)):
            for subset in itertools.combinations(names, size):
                base = risk.calculate_risk_score(flags(**{n: "yes" for n in subset}))
                assert 0 <= base <= 10
                for extra in set(names) - set(subset):
                    more = {n: "yes" for n in subset + (extra,)}
                    assert risk.calculate_risk_score(flags(**more)) >= base

    def test_scenario_heart_joint_medication(self):
        q = flags(heart_problems="yes", joint_problems="yes", blood_pressure_or_heart_medication="yes")
        score = risk.calculate_risk_score(q)
        assert score == 6
        level = risk.risk_level_for(score)
        assert level == "high"
        assert risk.build_recommendations(level, q.joint_problems, q.has_allergies) == (
            list(risk.HIGH_RISK_RECOMMENDATIONS) + list(risk.JOINT_RECOMMENDATIONS)
        )


class TestRiskLevel:
    @pytest.mark.parametrize("score, level", [
        (0, "low"), (2, "low"), (3, "moderate"), (5, "moderate"), (6, "high"), (10, "high"),
    ])
    def test_bands(self, score, level):
        assert risk.risk_level_for(score) == level

    def test_level_consistent_with_score(self):
        for score in range(0, 11):
            level = risk.risk_level_for(score)
            assert (level == "high") == (score >= 6)
            assert (level == "moderate") == (3 <= score < 6)
            assert (level == "low") == (score < 3)


class TestCompleteness:
    def test_complete_without_allergies(self):
        assert risk.is_questionnaire_complete(complete())

    @pytest.mark.parametrize("field", risk.REQUIRED_FIELDS)
    def test_clearing_any_required_field(self, field):
        assert not risk.is_questionnaire_complete(complete(**{field: None}))

    def test_blank_string_is_missing(self):
        assert not risk.is_questionnaire_complete(complete(heart_problems="  "))

    def test_allergies_need_details(self):
        assert not risk.is_questionnaire_complete(complete(has_allergies="yes"))
        assert not risk.is_questionnaire_complete(complete(has_allergies="yes", allergies_details="   "))
        assert risk.is_questionnaire_complete(complete(has_allergies="yes", allergies_details="Peanuts"))


class TestStatusBands:
    @pytest.mark.parametrize("systolic, diastolic, status", [
        (None, 70, "unknown"),
        (110, None, "unknown"),
        (119, 79, "normal"),
        (125, 79, "elevated"),
        (130, 70, "high"),
        (115, 80, "high"),
    ])
    def test_blood_pressure(self, systolic, diastolic, status):
        assert risk.blood_pressure_status(systolic, diastolic) == status

    @pytest.mark.parametrize("rate, status", [
        (None, "unknown"), (59, "bradycardia"), (60, "normal"), (100, "normal"), (101, "tachycardia"),
    ])
    def test_heart_rate(self, rate, status):
        assert risk.heart_rate_status(rate) == status


class TestRecommendations:
    def test_low_risk(self):
        assert risk.build_recommendations("low") == list(risk.LOW_RISK_RECOMMENDATIONS)

    def test_block_order(self):
        result = risk.build_recommendations("moderate", joint_problems="yes", has_allergies="yes")
        assert result == (
            list(risk.MODERATE_RISK_RECOMMENDATIONS)
            + list(risk.JOINT_RECOMMENDATIONS)
            + list(risk.ALLERGY_RECOMMENDATIONS)
        )
        assert len(result) == 7
