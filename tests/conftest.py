import pytest

from renalcalc.patient import PatientInput, Sex, ValidatedPatient


@pytest.fixture
def valid_input() -> PatientInput:
    """
    Male, 50 years, 80 kg, 175 cm, creatinine 88.4 µmol/L (exactly 1.0 mg/dL).
    """
    return PatientInput(age="50", weight="80", height="175", creatinine="88.4", sex="Male")


@pytest.fixture
def reference_male() -> ValidatedPatient:
    return ValidatedPatient(age=50.0, weight=80.0, height=175.0, creatinine=88.4, sex=Sex.MALE)


@pytest.fixture
def reference_female() -> ValidatedPatient:
    return ValidatedPatient(age=50.0, weight=80.0, height=175.0, creatinine=88.4, sex=Sex.FEMALE)
