"""
GFR estimation.

Three creatinine-based formulas are evaluated on a ValidatedPatient:

- Cockcroft-Gault (mL/min), creatinine in µmol/L with the 0.8136 factor.
- MDRD (175 coefficient), creatinine in mg/dL.
- CKD-EPI 2009, creatinine in mg/dL, branch chosen by the sex-specific kappa.

MDRD and CKD-EPI are multiplied by (BSA / 1.73) when a BSA is available.
Cockcroft-Gault is never corrected. This asymmetry, and re-correcting formulas
that are already normalized to 1.73 m², departs from the published equations;
the behavior is kept as-is for compatibility with the original calculator.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from enum import Enum

from .metrics import BodyMetrics
from .patient import Sex, ValidatedPatient

REFERENCE_BSA = 1.73

# sex -> (multiplier, kappa, alpha when Scr <= kappa)
_CKD_EPI_PARAMETERS = {
    Sex.FEMALE: (144, 0.7, -0.329),
    Sex.MALE: (141, 0.9, -0.411),
}
_CKD_EPI_HIGH_ALPHA = -1.209


class Formula(Enum):
    """
    The reported estimates, in display order.
    """
    COCKCROFT_GAULT = "Cockcroft-Gault"
    MDRD = "MDRD"
    CKD_EPI = "CKD-EPI"

    @property
    def label(self) -> str:
        return self.value

    @property
    def key(self) -> str:
        return self.name.lower()


def cockcroft_gault(patient: ValidatedPatient) -> float:
    sex_factor = 0.85 if patient.is_female else 1
    return ((140 - patient.age) * patient.weight * sex_factor) / (patient.creatinine * 0.8136)


def mdrd(patient: ValidatedPatient) -> float:
    sex_factor = 0.742 if patient.is_female else 1
    return 175 * patient.creatinine_mg_dl**-1.154 * patient.age**-0.203 * sex_factor


def ckd_epi_exponent(sex: Sex, scr: float) -> float:
    _, kappa, low_alpha = _CKD_EPI_PARAMETERS[sex]
    # a value exactly at kappa takes the low-creatinine branch
    return low_alpha if scr <= kappa else _CKD_EPI_HIGH_ALPHA


def ckd_epi(patient: ValidatedPatient) -> float:
    multiplier, kappa, _ = _CKD_EPI_PARAMETERS[patient.sex]
    scr = patient.creatinine_mg_dl
    return multiplier * (scr / kappa) ** ckd_epi_exponent(patient.sex, scr) * 0.993**patient.age


def bsa_correct(raw: float, bsa: float | None) -> float:
    """Scale a raw estimate to the patient's BSA; unchanged when BSA is missing."""
    if bsa is None:
        return raw
    return raw * (bsa / REFERENCE_BSA)


class GFRResult(metaclass=abc.ABCMeta):
    """
    Either no estimate at all (UnsetGFR) or all three (ComputedGFR).
    """

    @property
    @abc.abstractmethod
    def is_computed(self) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class UnsetGFR(GFRResult):

    @property
    def is_computed(self) -> bool:
        return False


@dataclass(frozen=True)
class ComputedGFR(GFRResult):
    """
    Attributes:
        cockcroft_gault: Creatinine clearance in mL/min, one decimal.
        mdrd: MDRD estimate, one decimal.
        ckd_epi: CKD-EPI estimate, one decimal.
        bsa_corrected: True when MDRD and CKD-EPI were scaled by the patient's BSA.
    """

    cockcroft_gault: float
    mdrd: float
    ckd_epi: float
    bsa_corrected: bool = False

    @property
    def is_computed(self) -> bool:
        return True

    def value(self, formula: Formula) -> float:
        return getattr(self, formula.key)

    def items(self) -> list[tuple[Formula, float]]:
        return [(formula, self.value(formula)) for formula in Formula]


def estimate_gfr(patient: ValidatedPatient, metrics: BodyMetrics, bsa_correction: bool = True) -> ComputedGFR:
    """
    Evaluate the three formulas at full precision, apply the BSA correction to
    MDRD and CKD-EPI when enabled and available, then round to one decimal.
    """
    bsa = metrics.bsa if bsa_correction else None
    result = ComputedGFR(
        cockcroft_gault=round(cockcroft_gault(patient), 1),
        mdrd=round(bsa_correct(mdrd(patient), bsa), 1),
        ckd_epi=round(bsa_correct(ckd_epi(patient), bsa), 1),
        bsa_corrected=bsa is not None,
    )
    logging.debug(f"Estimated GFR {result}")
    return result
