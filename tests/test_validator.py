"""
Tests for range validation:
- every field independently checked with inclusive bounds
- unparsable values collapse into the range error
- `record_issues` mirrors errors into a notepad
- `to_validated` refuses invalid input
"""

import pytest
from stairval.notepad import create_notepad

from renalcalc.patient import PatientInput, Sex
from renalcalc.validator import ERROR_MESSAGES, record_issues, to_validated, validate


@pytest.mark.parametrize(
    "age, weight, height, creatinine, sex",
    [
        ("18", "30", "100", "20", "Male"),
        ("120", "300", "250", "2000", "Female"),
        ("65.5", "72.3", "168", "101.2", "F"),
    ],
)
def test_in_range_input_has_no_errors(age, weight, height, creatinine, sex):
    patient = PatientInput(age=age, weight=weight, height=height, creatinine=creatinine, sex=sex)
    assert validate(patient) == {}


@pytest.mark.parametrize(
    "field_name, bad_value",
    [
        ("age", "17"),
        ("age", "121"),
        ("weight", "29.9"),
        ("weight", "300.1"),
        ("height", "99"),
        ("height", "251"),
        ("creatinine", "19"),
        ("creatinine", "2001"),
        ("age", ""),
        ("weight", "heavy"),
        ("height", "nan"),
        ("age", "5_0"),
        ("height", "1_75"),
        ("sex", ""),
        ("sex", "unknown"),
    ],
)
def test_single_violation_reports_exactly_that_field(valid_input, field_name, bad_value):
    """One bad field gives one error key, whatever the other fields hold."""
    errors = validate(valid_input.replace(**{field_name: bad_value}))
    assert list(errors) == [field_name]
    assert errors[field_name] == ERROR_MESSAGES[field_name]


def test_empty_input_reports_every_field():
    errors = validate(PatientInput())
    assert set(errors) == {"age", "weight", "height", "creatinine", "sex"}
    assert errors["age"] == "age must be between 18 and 120 years"


@pytest.mark.parametrize("garbage", ["", " ", "--", "1,5", "0x10", "5_0", "∞", "None"])
def test_validate_never_raises(garbage):
    patient = PatientInput(age=garbage, weight=garbage, height=garbage, creatinine=garbage, sex=garbage)
    assert len(validate(patient)) == 5


def test_validate_does_not_mutate_input(valid_input):
    before = valid_input.replace()
    validate(valid_input)
    assert valid_input == before


def test_record_issues_writes_prefixed_errors():
    notepad = create_notepad("patient")
    errors = record_issues(PatientInput(age="10", weight="80", height="175", creatinine="88", sex="M"),
                           notepad, context="Row 3: ")
    assert list(errors) == ["age"]
    assert notepad.has_errors(include_subsections=True)
    messages = [issue.message for issue in notepad.errors()]
    assert messages == ["Row 3: age: age must be between 18 and 120 years"]


def test_record_issues_leaves_notepad_clean_for_valid_input(valid_input):
    notepad = create_notepad("patient")
    assert record_issues(valid_input, notepad) == {}
    assert not notepad.has_errors(include_subsections=True)


def test_to_validated_converts_numbers(valid_input):
    validated = to_validated(valid_input.replace(sex="f"))
    assert validated.age == 50.0
    assert validated.creatinine == 88.4
    assert validated.sex is Sex.FEMALE


def test_to_validated_rejects_invalid_input(valid_input):
    with pytest.raises(ValueError, match="creatinine"):
        to_validated(valid_input.replace(creatinine="5000"))
