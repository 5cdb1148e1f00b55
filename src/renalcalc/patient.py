"""
Patient domain model.

Defines the raw PatientInput snapshot entered by a user, the Sex enumeration,
and the ValidatedPatient numeric record the GFR formulas operate on.
"""

import dataclasses
import math
import re
from dataclasses import dataclass
from enum import Enum

# Inclusive clinical ranges per numeric field: (low, high, unit)
VALID_RANGES = {
    "age": (18, 120, "years"),
    "weight": (30, 300, "kg"),
    "height": (100, 250, "cm"),
    "creatinine": (20, 2000, "µmol/L"),
}

INPUT_FIELDS = ("age", "weight", "height", "creatinine", "sex")

_DECIMAL_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


class Sex(Enum):
    """
    Biological sex as used by the renal formulas.
    """
    MALE = "Male"
    FEMALE = "Female"

    @classmethod
    def from_label(cls, label: str) -> "Sex":
        """
        Convert a user-entered label into the corresponding enum.
        Accepts the codes themselves (any case), M/F, and Homme/Femme.
        """
        key = str(label).strip().lower()
        mapping = {
            "male": cls.MALE,
            "m": cls.MALE,
            "homme": cls.MALE,
            "female": cls.FEMALE,
            "f": cls.FEMALE,
            "femme": cls.FEMALE,
        }
        try:
            return mapping[key]
        except KeyError:
            raise ValueError(f"Unknown sex label: {label!r}")


@dataclass(frozen=True)
class PatientInput:
    """
    A single snapshot of raw, possibly invalid form values.

    Attributes:
        age: Age in years, as entered.
        weight: Weight in kilograms, as entered.
        height: Height in centimeters, as entered.
        creatinine: Serum creatinine in µmol/L, as entered.
        sex: "Male", "Female" (or an accepted alias), or empty when unset.
    """

    age: str = ""
    weight: str = ""
    height: str = ""
    creatinine: str = ""
    sex: str = ""

    def replace(self, **changes: str) -> "PatientInput":
        # edits always produce a new snapshot
        return dataclasses.replace(self, **changes)


def parse_number(value) -> float | None:
    """
    Numeric interpretation of a raw field, or None when it is empty,
    non-numeric, NaN or infinite.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    # plain decimal notation only: no digit grouping, no "nan"/"inf" words
    if not _DECIMAL_PATTERN.fullmatch(text):
        return None
    number = float(text)
    if not math.isfinite(number):
        return None
    return number


@dataclass(frozen=True)
class ValidatedPatient:
    """
    Numeric patient record whose values are known to be in range.

    Attributes:
        age: Age in years.
        weight: Weight in kilograms.
        height: Height in centimeters.
        creatinine: Serum creatinine in µmol/L.
        sex: Biological sex.
    """

    age: float
    weight: float
    height: float
    creatinine: float
    sex: Sex

    def __post_init__(self):
        for field_name, (low, high, unit) in VALID_RANGES.items():
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{field_name} must be a number, got {type(value).__name__}")
            if not low <= value <= high:
                raise ValueError(f"{field_name} {value!r} outside [{low}, {high}] {unit}")

        if not isinstance(self.sex, Sex):
            raise ValueError(f"sex must be a Sex, got {type(self.sex).__name__}")

    @property
    def creatinine_mg_dl(self) -> float:
        """Serum creatinine converted to mg/dL."""
        return self.creatinine / 88.4

    @property
    def is_female(self) -> bool:
        return self.sex is Sex.FEMALE
