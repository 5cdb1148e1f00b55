import pathlib
import typing

import pandas as pd

from .patient import INPUT_FIELDS, PatientInput

REQUIRED_COLUMNS = INPUT_FIELDS

# Header aliases (after normalization) → PatientInput fields
RENAME_MAP = {
    "age_years": "age",
    "âge": "age",
    "poids": "weight",
    "weight_kg": "weight",
    "taille": "height",
    "height_cm": "height",
    "creat": "creatinine",
    "créatinine": "creatinine",
    "scr": "creatinine",
    "serum_creatinine": "creatinine",
    "sexe": "sex",
    "gender": "sex",
}


def normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    """
    - strip and lower-case every header
    - drop unit suffixes such as "(kg)" or "(µmol/L)"
    - spaces → underscore
    - apply renames from RENAME_MAP
    """
    df = df.copy()
    df.columns = (
        df.columns.astype(str)
        .str.strip()
        .str.replace(r"\s*\(.*?\)", "", regex=True)  # drop any "(…)"
        .str.replace(r"\s+", "_", regex=True)  # spaces → underscore
        .str.replace(":", "", regex=False)  # drop colons
        .str.lower()
    )
    return df.rename(
        columns={orig: target for orig, target in RENAME_MAP.items() if orig in df.columns}
    )


def load_patient_table(table_path: str) -> pd.DataFrame:
    """
    Read a CSV file or the first sheet of an .xlsx workbook, one patient per row.
    Every cell is kept as text so values reach the validator as entered.
    """
    suffix = pathlib.Path(table_path).suffix.lower()
    if suffix == ".xlsx":
        df = pd.read_excel(table_path, sheet_name=0, header=0, dtype=str, engine="openpyxl")
    else:
        df = pd.read_csv(table_path, dtype=str)
    return normalize_headers(df)


def _cell_to_text(value: typing.Any) -> str:
    # Handle None, NaN and pandas NA as an empty field
    if value is None or pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def rows_to_inputs(df: pd.DataFrame) -> list[tuple[typing.Any, PatientInput]]:
    """
    Convert each row of a normalized table into (row label, PatientInput).
    Missing columns become empty fields.
    """
    inputs = []
    for index, row in df.iterrows():
        patient = PatientInput(**{name: _cell_to_text(row.get(name)) for name in INPUT_FIELDS})
        inputs.append((index, patient))
    return inputs
