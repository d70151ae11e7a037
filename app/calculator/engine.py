# ==============================================================================
# app/calculator/engine.py
# ------------------------------------------------------------------------------
# Orchestrates the pipeline from uploaded files to payroll and incentive
# results. Every step returns its warnings alongside its result; nothing is
# kept between runs, so recalculating simply calls these functions again.
# ==============================================================================

import logging
from dataclasses import dataclass
from typing import Tuple

from app.models import AttendanceSheet, RosterWarning, SalarySheet, SalesSheet, SlabConfig
from .attendance import check_attendance_sheet, parse_attendance_sheet, parse_incentive_attendance_sheet
from .errors import ValidationError
from .incentive import calculate_incentives
from .ingest import read_grid
from .payroll import calculate_payroll
from .salary import check_salary_sheet, parse_salary_sheet
from .sales import parse_sales_sheet
from .schema import ALLOWED_EXTENSIONS, HEADER_SCAN_ROWS, MAX_UPLOAD_BYTES, SLAB_FIELDS
from .validator import (check_same_period, check_slabs, cross_validate_employees,
                        period_mismatch_warning, validate_upload)


# --- Configuration ---

class CalculationConfig:
    """
    The settings the pipeline reads. Built per request from the Flask config
    (or defaults) so that no state survives between calculations.
    """

    def __init__(self, header_scan_rows=HEADER_SCAN_ROWS, max_upload_bytes=MAX_UPLOAD_BYTES,
                 allowed_extensions=ALLOWED_EXTENSIONS):
        self.HEADER_SCAN_ROWS = header_scan_rows
        self.MAX_UPLOAD_BYTES = max_upload_bytes
        self.ALLOWED_EXTENSIONS = set(allowed_extensions)

    @classmethod
    def from_mapping(cls, mapping):
        return cls(
            header_scan_rows=mapping.get('HEADER_SCAN_ROWS', HEADER_SCAN_ROWS),
            max_upload_bytes=mapping.get('MAX_UPLOAD_BYTES', MAX_UPLOAD_BYTES),
            allowed_extensions=mapping.get('ALLOWED_EXTENSIONS', ALLOWED_EXTENSIONS),
        )


@dataclass(frozen=True)
class PayrollBatch:
    outlets: Tuple[AttendanceSheet, ...]
    salary: SalarySheet
    employee_list: Tuple[str, ...]
    warnings: Tuple[RosterWarning, ...]
    month: int
    year: int


@dataclass(frozen=True)
class IncentiveBatch:
    sales: SalesSheet
    attendance: AttendanceSheet
    warnings: Tuple[RosterWarning, ...]
    month: int
    year: int


# --- Helper Functions ---

def load_grid(upload, config):
    """
    Validates and decodes one upload.

    Args:
        upload (tuple): (filename, content bytes).
        config (CalculationConfig): Pipeline settings.

    Returns:
        list: The decoded grid.
    """
    filename, content = upload
    errors = validate_upload(filename, len(content) if content is not None else None,
                             allowed_extensions=config.ALLOWED_EXTENSIONS, max_bytes=config.MAX_UPLOAD_BYTES)
    if errors:
        raise ValidationError('Invalid upload', errors=errors, source=filename)
    return read_grid(content, filename).grid


def to_slab_config(slabs):
    if isinstance(slabs, SlabConfig):
        return slabs
    values = {key: float(str(slabs[key]).replace(',', '')) for key in SLAB_FIELDS}
    return SlabConfig(**values)


# --- Payroll ---

def prepare_payroll(outlet_uploads, salary_upload, config=None):
    """
    Parses the outlet attendance sheets and the salary sheet and reconciles the
    employee roster.

    Args:
        outlet_uploads (list): (filename, bytes) for each outlet attendance sheet.
        salary_upload (tuple): (filename, bytes) for the salary sheet.
        config (CalculationConfig): Optional pipeline settings.

    Returns:
        PayrollBatch: Parsed sheets, roster, warnings and the payroll period.

    Raises:
        PeriodMismatchError: If the outlets cover different months.
    """
    config = config or CalculationConfig()
    logging.info("=" * 80)
    logging.info("STARTING PAYROLL PREPARATION")
    logging.info("=" * 80)

    if not outlet_uploads:
        raise ValidationError('At least one attendance sheet is required')

    outlets = []
    for filename, content in outlet_uploads:
        grid = load_grid((filename, content), config)
        sheet = parse_attendance_sheet(grid, source=filename, scan_rows=config.HEADER_SCAN_ROWS)
        outlets.append(check_attendance_sheet(sheet))

    for other in outlets[1:]:
        check_same_period(outlets[0], other)

    salary_filename = salary_upload[0]
    salary_grid = load_grid(salary_upload, config)
    salary = check_salary_sheet(
        parse_salary_sheet(salary_grid, source=salary_filename, scan_rows=config.HEADER_SCAN_ROWS))

    attendance_names = []
    for sheet in outlets:
        attendance_names.extend(sheet.employee_names())
    employee_list, warnings = cross_validate_employees(attendance_names, salary.names())
    for warning in warnings:
        logging.log(logging.WARNING if warning.kind == 'warning' else logging.INFO, warning.message)

    if not employee_list:
        raise ValidationError('No employees found in the uploaded sheets')

    logging.info(f"--- Roster reconciled: {len(employee_list)} employee(s), {len(warnings)} warning(s). ---")
    return PayrollBatch(
        outlets=tuple(outlets),
        salary=salary,
        employee_list=tuple(employee_list),
        warnings=tuple(warnings),
        month=outlets[0].month,
        year=outlets[0].year,
    )


def calculate_payroll_batch(batch, advances=None, bonuses=None):
    """
    Calculates net salaries for a prepared batch.

    Args:
        batch (PayrollBatch): Output of prepare_payroll.
        advances (dict): Employee name -> list of {date, amount}.
        bonuses (dict): Employee name -> list of {date, amount}.

    Returns:
        tuple: (list of PayrollResult, list of RosterWarning)
    """
    logging.info(f"--- Calculating payroll for {len(batch.employee_list)} employee(s), "
                 f"period {batch.month}/{batch.year}. ---")
    results = calculate_payroll(batch.employee_list, batch.salary, batch.outlets,
                                batch.month, batch.year, advances=advances, bonuses=bonuses)
    logging.info("--- Payroll calculation finished. ---")
    return results, list(batch.warnings)


def run_payroll(outlet_uploads, salary_upload, advances=None, bonuses=None, config=None):
    batch = prepare_payroll(outlet_uploads, salary_upload, config=config)
    results, warnings = calculate_payroll_batch(batch, advances=advances, bonuses=bonuses)
    return batch, results, warnings


# --- Incentive ---

def prepare_incentive(sales_upload, attendance_upload, config=None):
    """
    Parses the sales and incentive attendance sheets. Sheets for different
    months are accepted with a warning, since only matching dates are used.

    Returns:
        IncentiveBatch: Parsed sheets, warnings and the attendance period.
    """
    config = config or CalculationConfig()
    logging.info("=" * 80)
    logging.info("STARTING INCENTIVE PREPARATION")
    logging.info("=" * 80)

    sales = parse_sales_sheet(load_grid(sales_upload, config), source=sales_upload[0],
                              scan_rows=config.HEADER_SCAN_ROWS)
    attendance = check_attendance_sheet(parse_incentive_attendance_sheet(
        load_grid(attendance_upload, config), source=attendance_upload[0], scan_rows=config.HEADER_SCAN_ROWS))

    warnings = []
    mismatch = period_mismatch_warning(sales, attendance)
    if mismatch:
        logging.warning(mismatch.message)
        warnings.append(mismatch)

    return IncentiveBatch(
        sales=sales,
        attendance=attendance,
        warnings=tuple(warnings),
        month=attendance.month,
        year=attendance.year,
    )


def calculate_incentive_batch(batch, slabs):
    """
    Validates the slabs and calculates the incentive report for a prepared batch.

    Returns:
        tuple: (IncentiveReport, list of RosterWarning including the report's own)
    """
    check_slabs(slabs)
    report = calculate_incentives(batch.sales.records, batch.attendance, to_slab_config(slabs))
    return report, list(batch.warnings) + list(report.warnings)


def run_incentive(sales_upload, attendance_upload, slabs, config=None):
    batch = prepare_incentive(sales_upload, attendance_upload, config=config)
    report, warnings = calculate_incentive_batch(batch, slabs)
    return batch, report, warnings
