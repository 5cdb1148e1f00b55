import abc
import logging
import typing

from dataclasses import dataclass, field

import pandas as pd
from stairval.notepad import Notepad

from .gfr import ComputedGFR, Formula, GFRResult, UnsetGFR, estimate_gfr
from .loader import REQUIRED_COLUMNS, rows_to_inputs
from .metrics import BodyMetrics, compute_metrics
from .patient import PatientInput
from .recommendation import (
    FormulaAdvice,
    Recommendation,
    StageClassification,
    advise_formula,
    classify_stage,
    recommend,
)
from .validator import record_issues, to_validated


@dataclass(frozen=True)
class CalculationReport:
    """
    Everything one calculation produced for a single input snapshot.
    `gfr` is UnsetGFR, and the sequences/mappings below it are empty, whenever
    `errors` is not.
    """

    patient: PatientInput
    errors: dict[str, str]
    metrics: BodyMetrics
    gfr: GFRResult = field(default_factory=UnsetGFR)
    recommendations: tuple[Recommendation, ...] = ()
    advice: dict[Formula, FormulaAdvice] = field(default_factory=dict)
    stages: dict[Formula, StageClassification] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, typing.Any]:
        """Plain JSON-ready view of the report."""
        estimates = {}
        if isinstance(self.gfr, ComputedGFR):
            for formula, value in self.gfr.items():
                estimates[formula.key] = {
                    "formula": formula.label,
                    "value": value,
                    "stage": self.stages[formula].label,
                    "severity": self.stages[formula].severity.value,
                    "recommended": self.advice[formula].recommended,
                    "reason": self.advice[formula].reason,
                }
        return {
            "input": {
                "age": self.patient.age,
                "weight": self.patient.weight,
                "height": self.patient.height,
                "creatinine": self.patient.creatinine,
                "sex": self.patient.sex,
            },
            "errors": dict(self.errors),
            "bmi": self.metrics.bmi,
            "bsa": self.metrics.bsa,
            "bsa_corrected": isinstance(self.gfr, ComputedGFR) and self.gfr.bsa_corrected,
            "estimates": estimates,
            "recommendations": [
                {"title": r.title, "content": r.content, "priority": r.priority.value}
                for r in self.recommendations
            ],
        }


class Calculator(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def calculate(self, patient: PatientInput, notepad: Notepad, context: str = "") -> CalculationReport:
        # one immutable report per input snapshot
        raise NotImplementedError


class RenalCalculator(Calculator):
    def __init__(self, bsa_correction: bool = True):
        """
        - True : MDRD and CKD-EPI are scaled by the patient's BSA when known
        - False: all three estimates are reported uncorrected
        """
        self.bsa_correction = bsa_correction

    def calculate(self, patient: PatientInput, notepad: Notepad, context: str = "") -> CalculationReport:
        """
        Process:
        1) validate, writing field errors into the notepad
        2) compute BMI/BSA (independent of validity)
        3) stop there if anything was rejected
        4) estimate GFR, then advice, staging and recommendations
        """
        errors = record_issues(patient, notepad, context)
        metrics = compute_metrics(patient.weight, patient.height)
        if errors:
            return CalculationReport(patient=patient, errors=errors, metrics=metrics)

        validated = to_validated(patient)
        gfr = estimate_gfr(validated, metrics, bsa_correction=self.bsa_correction)

        # staging and advice work on the rounded, displayed values
        advice = {
            formula: advise_formula(formula, validated.age, metrics.bmi, value)
            for formula, value in gfr.items()
        }
        stages = {formula: classify_stage(value) for formula, value in gfr.items()}
        recommendations = tuple(recommend(validated.age, metrics.bmi, gfr))

        stage_labels = {formula.label: stage.label for formula, stage in stages.items()}
        logging.debug(f"{context}{len(recommendations)} recommendations, stages {stage_labels}")
        return CalculationReport(
            patient=patient,
            errors=errors,
            metrics=metrics,
            gfr=gfr,
            recommendations=recommendations,
            advice=advice,
            stages=stages,
        )

    def calculate_table(self, df: pd.DataFrame, notepad: Notepad) -> pd.DataFrame:
        """
        Run `calculate` on every row of a normalized patient table.
        Returns one report row per input row; rows that fail validation keep
        their metrics but have no estimates.
        """
        missing = sorted(set(REQUIRED_COLUMNS) - set(df.columns))
        if missing:
            notepad.add_error(f"Patient table: missing required columns: {missing}")
            return pd.DataFrame(columns=_report_columns())
        duplicated = sorted(set(df.columns[df.columns.duplicated()]) & set(REQUIRED_COLUMNS))
        if duplicated:
            notepad.add_error(f"Patient table: several headers map to the same columns: {duplicated}")
            return pd.DataFrame(columns=_report_columns())
        ignored = sorted(set(df.columns) - set(REQUIRED_COLUMNS))
        if ignored:
            notepad.add_warning(f"Patient table: ignoring unrecognized columns: {ignored}")

        rows = []
        # rows are numbered as in the sheet, where line 1 holds the headers
        for line, (_, patient) in enumerate(rows_to_inputs(df), start=2):
            report = self.calculate(patient, notepad, context=f"Row {line}: ")
            rows.append(_report_row(report))
        logging.info(f"Processed {len(rows)} patient rows")
        return pd.DataFrame(rows, columns=_report_columns())


def _report_columns() -> list[str]:
    columns = list(REQUIRED_COLUMNS) + ["bmi", "bsa"]
    columns += [formula.key for formula in Formula]
    columns += [f"{formula.key}_stage" for formula in Formula]
    columns += ["recommended_formula", "errors"]
    return columns


def _report_row(report: CalculationReport) -> dict[str, typing.Any]:
    row: dict[str, typing.Any] = {name: getattr(report.patient, name) for name in REQUIRED_COLUMNS}
    row["bmi"] = report.metrics.bmi
    row["bsa"] = report.metrics.bsa
    for formula in Formula:
        if isinstance(report.gfr, ComputedGFR):
            row[formula.key] = report.gfr.value(formula)
            row[f"{formula.key}_stage"] = report.stages[formula].label
        else:
            row[formula.key] = None
            row[f"{formula.key}_stage"] = ""
    row["recommended_formula"] = ", ".join(
        advice.formula.label for advice in report.advice.values() if advice.recommended
    )
    row["errors"] = "; ".join(f"{name}: {message}" for name, message in report.errors.items())
    return row
