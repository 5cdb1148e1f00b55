"""
Range validation of raw patient input.

`validate` never raises: it returns a field -> message mapping, empty when the
input may be passed on to the GFR formulas.
"""

import logging

from stairval.notepad import Notepad

from .patient import VALID_RANGES, PatientInput, Sex, ValidatedPatient, parse_number

ERROR_MESSAGES = {
    "age": "age must be between 18 and 120 years",
    "weight": "weight must be between 30 and 300 kg",
    "height": "height must be between 100 and 250 cm",
    "creatinine": "creatinine must be between 20 and 2000 µmol/L",
    "sex": "please select a sex",
}


def _in_range(raw: str, field_name: str) -> bool:
    low, high, _ = VALID_RANGES[field_name]
    value = parse_number(raw)
    # unparsable values fail the range check
    return value is not None and low <= value <= high


def _is_known_sex(raw: str) -> bool:
    try:
        Sex.from_label(raw)
    except ValueError:
        return False
    return True


def validate(patient: PatientInput) -> dict[str, str]:
    """
    Check every field independently and collect one message per failing field.
    """
    errors: dict[str, str] = {}
    for field_name in VALID_RANGES:
        if not _in_range(getattr(patient, field_name), field_name):
            errors[field_name] = ERROR_MESSAGES[field_name]
    if not _is_known_sex(patient.sex):
        errors["sex"] = ERROR_MESSAGES["sex"]
    return errors


def record_issues(patient: PatientInput, notepad: Notepad, context: str = "") -> dict[str, str]:
    """
    Run `validate` and write each field error into the notepad.
    `context` prefixes every message (e.g. "Row 3: ").
    """
    errors = validate(patient)
    for field_name, message in errors.items():
        notepad.add_error(f"{context}{field_name}: {message}")
    if errors:
        logging.debug(f"{context}rejected input on fields {sorted(errors)}")
    return errors


def to_validated(patient: PatientInput) -> ValidatedPatient:
    """
    Convert an input that passes `validate` into a numeric record.
    Raises ValueError listing the field errors otherwise.
    """
    errors = validate(patient)
    if errors:
        details = "; ".join(f"{name}: {message}" for name, message in errors.items())
        raise ValueError(f"Cannot use invalid patient input ({details})")
    return ValidatedPatient(
        age=parse_number(patient.age),
        weight=parse_number(patient.weight),
        height=parse_number(patient.height),
        creatinine=parse_number(patient.creatinine),
        sex=Sex.from_label(patient.sex),
    )
