"""
Command‑line interface for the renal function calculator.
Validates one patient (or a table of patients), then reports BMI, BSA,
the Cockcroft-Gault / MDRD / CKD-EPI estimates with CKD stage, and
formula recommendations.
"""

import click
import json
import logging
import pathlib
import sys
import typing

from datetime import datetime
from stairval.notepad import create_notepad

from .calculator import CalculationReport, RenalCalculator
from .gfr import ComputedGFR, Formula
from .loader import load_patient_table
from .patient import PatientInput
from .recommendation import Priority, Severity

SEVERITY_COLORS = {
    Severity.NORMAL: "green",
    Severity.MILD: "yellow",
    Severity.MODERATE: "bright_yellow",
    Severity.SEVERE: "red",
    Severity.FAILURE: "bright_red",
}


def logging_options(command):
    command = click.option(
        "--log-file-path",
        type=click.Path(dir_okay=False, writable=True),
        envvar="RENALCALC_LOG_FILE",
        help="Append timestamped logs to this file",
    )(command)
    command = click.option("--verbose", is_flag=True, help="Also emit debug logs to stderr")(command)
    command = click.option(
        "--bsa-correction/--no-bsa-correction",
        default=True,
        envvar="RENALCALC_BSA_CORRECTION",
        help="Scale MDRD and CKD-EPI by the patient's body surface area (default: on).",
    )(command)
    return command


@click.group()
def main():
    """renalcalc: renal function estimates from patient biometrics."""
    pass


@main.command(name="calculate")
@click.option("--age", default="", help="age in years (18-120)")
@click.option("--weight", default="", help="weight in kg (30-300)")
@click.option("--height", default="", help="height in cm (100-250)")
@click.option("--creatinine", default="", help="serum creatinine in µmol/L (20-2000)")
@click.option("--sex", default="", help="Male or Female")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@logging_options
def calculate(age: str, weight: str, height: str, creatinine: str, sex: str, as_json: bool,
              bsa_correction: bool, verbose: bool, log_file_path: typing.Optional[str]):
    """
    Validate a single patient and print the three GFR estimates.
    Exits with status 1 when any field is rejected.
    """
    _configure_logging(verbose, log_file_path)
    patient = PatientInput(age=age, weight=weight, height=height, creatinine=creatinine, sex=sex)
    logging.info("Beginning calculation for a single patient")

    notepad = create_notepad("patient")
    report = RenalCalculator(bsa_correction=bsa_correction).calculate(patient, notepad)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        if not report.is_valid:
            sys.exit(1)
        return

    _report_issues(notepad)
    _echo_metrics(report)
    if not report.is_valid:
        sys.exit(1)
    _echo_estimates(report)
    _echo_recommendations(report)


@main.command(name="calculate-table")
@click.option(
    "-i",
    "--input-path",
    "input_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="CSV file or .xlsx workbook, one patient per row",
)
@click.option(
    "-o",
    "--output-path",
    "output_path",
    type=click.Path(dir_okay=False, writable=True),
    help="where to write the CSV report (default: renal_reports/<timestamp>/report.csv)",
)
@logging_options
def calculate_table(input_path: str, output_path: typing.Optional[str], bsa_correction: bool,
                    verbose: bool, log_file_path: typing.Optional[str]):
    """
    Run the calculator on every row of a patient table and write a CSV report.
    """
    _configure_logging(verbose, log_file_path)
    logging.info(f"Beginning calculation for '{input_path}'")
    try:
        table = load_patient_table(input_path)
    except Exception as e:
        logging.error(f"Failed to read '{input_path}': {e}")
        click.echo(f"Error: cannot read patient table {input_path}: {e}", err=True)
        sys.exit(1)

    notepad = create_notepad("patient-table")
    report_df = RenalCalculator(bsa_correction=bsa_correction).calculate_table(table, notepad)
    _report_issues(notepad)
    if report_df.empty and notepad.has_errors(include_subsections=True):
        sys.exit(1)

    out = pathlib.Path(output_path) if output_path else _prepare_output_dir() / "report.csv"
    out.parent.mkdir(parents=True, exist_ok=True)
    report_df.to_csv(out, index=False)

    rejected = int((report_df["errors"] != "").sum()) if not report_df.empty else 0
    click.echo(f"Wrote {len(report_df)} patient rows to {out}")
    click.echo(f"Rejected {rejected} rows with invalid input")


def _configure_logging(verbose: bool, log_file_path: typing.Optional[str]) -> None:
    handlers: list[logging.Handler] = []
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, mode="a", encoding="utf-8"))
    if verbose:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(asctime)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
            force=True,
        )


def _report_issues(notepad):
    # if there were errors, show them
    if notepad.has_errors(include_subsections=True):
        click.echo("Errors found in input:")
        for err in notepad.errors():
            click.echo(f"- {err.message}")
    # show any warnings but keep going
    if notepad.has_warnings(include_subsections=True):
        click.echo("Warnings found in input:")
        for w in notepad.warnings():
            click.echo(f"- {w.message}")


def _prepare_output_dir() -> pathlib.Path:
    # use YYYY-MM-DD_HH-MM-SS for human-readable timestamps
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    report_output_dir = pathlib.Path.cwd() / "renal_reports" / timestamp
    report_output_dir.mkdir(parents=True, exist_ok=True)
    return report_output_dir


def _echo_metrics(report: CalculationReport) -> None:
    bmi = report.metrics.bmi
    bsa = report.metrics.bsa
    click.echo(f"BMI: {bmi} kg/m²" if bmi is not None else "BMI: unavailable")
    click.echo(f"BSA: {bsa} m²" if bsa is not None else "BSA: unavailable")


def _echo_estimates(report: CalculationReport) -> None:
    gfr = report.gfr
    if not isinstance(gfr, ComputedGFR):
        return
    for formula, value in gfr.items():
        unit = "mL/min" if formula is Formula.COCKCROFT_GAULT else "mL/min/1.73m²"
        stage = report.stages[formula]
        line = f"{formula.label:16} {value:>7} {unit:14} {stage.label}"
        advice = report.advice[formula]
        if advice.recommended:
            line += f"  [recommended: {advice.reason}]"
        click.echo(click.style(line, fg=SEVERITY_COLORS[stage.severity]))
    if gfr.bsa_corrected:
        click.echo(f"MDRD and CKD-EPI corrected for BSA {report.metrics.bsa} m²")


def _echo_recommendations(report: CalculationReport) -> None:
    click.echo("")  # a blank line before recommendations
    click.echo("Recommendations:")
    for recommendation in report.recommendations:
        title = recommendation.title
        if recommendation.priority is Priority.HIGH:
            title = click.style(f"{title} (high priority)", fg="red")
        click.echo(f"- {title}: {recommendation.content}")


if __name__ == "__main__":
    main()
