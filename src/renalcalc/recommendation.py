"""
Rule-based recommendations and CKD staging.

- `recommend` builds the ordered advisory list (general, age, weight).
- `advise_formula` flags which estimate to favor for a given profile.
- `classify_stage` maps a single GFR value to CKD stage 1..5.
"""

import math
from dataclasses import dataclass
from enum import Enum

from .gfr import ComputedGFR, Formula, GFRResult

ELDERLY_AGE = 65
OBESE_BMI = 30
ACCURATE_CKD_EPI_GFR = 60

# lower bound (inclusive) -> stage, checked top to bottom
STAGE_LOWER_BOUNDS = ((90, 1), (60, 2), (30, 3), (15, 4))


class Priority(Enum):
    NORMAL = "normal"
    HIGH = "high"


class Severity(Enum):
    """
    Severity tag for each CKD stage, from normal function to kidney failure.
    """
    NORMAL = "normal"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    FAILURE = "failure"


STAGE_SEVERITY = {
    1: Severity.NORMAL,
    2: Severity.MILD,
    3: Severity.MODERATE,
    4: Severity.SEVERE,
    5: Severity.FAILURE,
}


@dataclass(frozen=True)
class Recommendation:
    title: str
    content: str
    priority: Priority


@dataclass(frozen=True)
class FormulaAdvice:
    """
    Attributes:
        formula: The estimate the advice is about.
        recommended: True when this estimate should be favored for the patient.
        reason: Short justification, empty when not recommended.
    """

    formula: Formula
    recommended: bool
    reason: str = ""


@dataclass(frozen=True)
class StageClassification:
    stage: int
    severity: Severity

    @property
    def label(self) -> str:
        return f"Stage {self.stage}"


GENERAL_RECOMMENDATION = Recommendation(
    title="General recommendation",
    content=(
        "The CKD-EPI formula is currently considered the best available, "
        "with correction for the actual body surface area."
    ),
    priority=Priority.NORMAL,
)

ELDERLY_RECOMMENDATION = Recommendation(
    title="Elderly patient",
    content=(
        "For elderly patients CKD-EPI remains reliable, but some clinicians prefer "
        "Cockcroft-Gault for a more cautious approach."
    ),
    priority=Priority.HIGH,
)

OVERWEIGHT_RECOMMENDATION = Recommendation(
    title="Overweight patient",
    content=(
        "Use CKD-EPI with correction for the actual body surface area. "
        "Check drug-specific dosing recommendations."
    ),
    priority=Priority.HIGH,
)


def _is_elderly(age: float) -> bool:
    # age is counted in completed years, so 65.9 is not yet elderly
    return int(age) > ELDERLY_AGE


def recommend(age: float, bmi: float | None, gfr: GFRResult) -> list[Recommendation]:
    """
    Every applicable rule is emitted, always in the same order.
    Only meaningful once all three estimates exist.
    """
    if not isinstance(gfr, ComputedGFR):
        raise ValueError("Recommendations require computed GFR estimates")

    recommendations = [GENERAL_RECOMMENDATION]
    if _is_elderly(age):
        recommendations.append(ELDERLY_RECOMMENDATION)
    if bmi is not None and bmi > OBESE_BMI:
        recommendations.append(OVERWEIGHT_RECOMMENDATION)
    return recommendations


def advise_formula(formula: Formula, age: float, bmi: float | None, value: float) -> FormulaAdvice:
    """
    First matching rule wins; CKD-EPI is always favored, Cockcroft-Gault only
    for elderly patients, MDRD never.
    """
    if _is_elderly(age) and formula is Formula.COCKCROFT_GAULT:
        return FormulaAdvice(formula, True, "recommended for elderly patients (more cautious approach)")
    if bmi is not None and bmi > OBESE_BMI and formula is Formula.CKD_EPI:
        return FormulaAdvice(formula, True, "recommended for overweight patients (with BSA correction)")
    if value > ACCURATE_CKD_EPI_GFR and formula is Formula.CKD_EPI:
        return FormulaAdvice(formula, True, "more accurate for GFR above 60 mL/min/1.73m²")
    if formula is Formula.CKD_EPI:
        return FormulaAdvice(formula, True, "current general recommendation")
    return FormulaAdvice(formula, False)


def classify_stage(value: float) -> StageClassification:
    """
    Lower bounds are inclusive: 90 is stage 1, 89.999 is stage 2.
    Negative and non-finite values are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"GFR must be a number, got {type(value).__name__}")
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Cannot stage GFR value {value!r}")

    for lower_bound, stage in STAGE_LOWER_BOUNDS:
        if value >= lower_bound:
            return StageClassification(stage, STAGE_SEVERITY[stage])
    return StageClassification(5, STAGE_SEVERITY[5])
