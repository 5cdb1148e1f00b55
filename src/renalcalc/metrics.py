"""
Body metrics derived from weight and height.

BMI and body surface area (Du Bois) are recomputed on demand whenever weight or
height change, whether or not the rest of the input is valid.
"""

from dataclasses import dataclass

from .patient import parse_number


@dataclass(frozen=True)
class BodyMetrics:
    """
    Attributes:
        bmi: Body mass index in kg/m², or None when unavailable.
        bsa: Body surface area in m², or None when unavailable.
    """

    bmi: float | None = None
    bsa: float | None = None


def _usable(weight_kg, height_cm) -> tuple[float, float] | None:
    weight = parse_number(weight_kg)
    height = parse_number(height_cm)
    if weight is None or height is None or weight <= 0 or height <= 0:
        return None
    return weight, height


def bmi(weight_kg, height_cm) -> float | None:
    """weight / height², height converted to meters; one decimal."""
    values = _usable(weight_kg, height_cm)
    if values is None:
        return None
    weight, height = values
    height_m = height / 100
    return round(weight / (height_m * height_m), 1)


def bsa(weight_kg, height_cm) -> float | None:
    """Du Bois body surface area; two decimals."""
    values = _usable(weight_kg, height_cm)
    if values is None:
        return None
    weight, height = values
    return round(0.007184 * height**0.725 * weight**0.425, 2)


def compute_metrics(weight_kg, height_cm) -> BodyMetrics:
    return BodyMetrics(bmi=bmi(weight_kg, height_cm), bsa=bsa(weight_kg, height_cm))
