"""
Tests for the recommendation engine:
- rule ordering and priorities
- per-formula advice
- CKD stage boundaries
"""

import math

import pytest

from renalcalc.gfr import ComputedGFR, Formula, UnsetGFR
from renalcalc.recommendation import (
    ELDERLY_RECOMMENDATION,
    GENERAL_RECOMMENDATION,
    OVERWEIGHT_RECOMMENDATION,
    Priority,
    Severity,
    StageClassification,
    advise_formula,
    classify_stage,
    recommend,
)

GFR = ComputedGFR(cockcroft_gault=55.2, mdrd=61.0, ckd_epi=64.3, bsa_corrected=True)


def test_elderly_obese_patient_gets_three_recommendations_in_order():
    recommendations = recommend(age=70, bmi=32, gfr=GFR)
    assert recommendations == [GENERAL_RECOMMENDATION, ELDERLY_RECOMMENDATION, OVERWEIGHT_RECOMMENDATION]
    assert [r.priority for r in recommendations] == [Priority.NORMAL, Priority.HIGH, Priority.HIGH]


@pytest.mark.parametrize(
    "age, bmi, expected",
    [
        (40, 22.0, [GENERAL_RECOMMENDATION]),
        (65, 30.0, [GENERAL_RECOMMENDATION]),
        (65.9, 25.0, [GENERAL_RECOMMENDATION]),
        (66, 25.0, [GENERAL_RECOMMENDATION, ELDERLY_RECOMMENDATION]),
        (40, 30.1, [GENERAL_RECOMMENDATION, OVERWEIGHT_RECOMMENDATION]),
        (80, None, [GENERAL_RECOMMENDATION, ELDERLY_RECOMMENDATION]),
    ],
)
def test_rules_apply_independently(age, bmi, expected):
    """Thresholds are strict: completed age > 65 and BMI > 30."""
    assert recommend(age, bmi, GFR) == expected


def test_general_recommendation_endorses_ckd_epi():
    assert "CKD-EPI" in GENERAL_RECOMMENDATION.content
    assert "Cockcroft-Gault" in ELDERLY_RECOMMENDATION.content


def test_recommend_requires_computed_gfr():
    with pytest.raises(ValueError):
        recommend(70, 32, UnsetGFR())


@pytest.mark.parametrize(
    "formula, age, bmi, value, recommended, reason_fragment",
    [
        (Formula.COCKCROFT_GAULT, 70, 25, 50, True, "elderly"),
        (Formula.COCKCROFT_GAULT, 65.9, 25, 50, False, ""),
        (Formula.COCKCROFT_GAULT, 50, 35, 95, False, ""),
        (Formula.MDRD, 70, 35, 95, False, ""),
        (Formula.CKD_EPI, 70, 35, 40, True, "overweight"),
        (Formula.CKD_EPI, 50, 25, 75, True, "above 60"),
        (Formula.CKD_EPI, 50, None, 45, True, "general"),
        (Formula.CKD_EPI, 50, 25, 60, True, "general"),
    ],
)
def test_advise_formula(formula, age, bmi, value, recommended, reason_fragment):
    advice = advise_formula(formula, age, bmi, value)
    assert advice.formula is formula
    assert advice.recommended is recommended
    assert reason_fragment in advice.reason
    if not recommended:
        assert advice.reason == ""


@pytest.mark.parametrize(
    "value, stage, severity",
    [
        (120, 1, Severity.NORMAL),
        (90, 1, Severity.NORMAL),
        (89.999, 2, Severity.MILD),
        (60, 2, Severity.MILD),
        (59.9, 3, Severity.MODERATE),
        (30, 3, Severity.MODERATE),
        (29.99, 4, Severity.SEVERE),
        (15, 4, Severity.SEVERE),
        (14.999, 5, Severity.FAILURE),
        (0, 5, Severity.FAILURE),
    ],
)
def test_classify_stage_boundaries(value, stage, severity):
    """Lower bounds are inclusive."""
    assert classify_stage(value) == StageClassification(stage, severity)
    assert classify_stage(value).label == f"Stage {stage}"


@pytest.mark.parametrize("bad_value", [-0.1, -50, math.nan, math.inf, "90", None])
def test_classify_stage_rejects_impossible_values(bad_value):
    with pytest.raises(ValueError):
        classify_stage(bad_value)
