# ==============================================================================
# app/calculator/validator.py
# ------------------------------------------------------------------------------
# Checks uploaded files, user supplied values and the employee roster.
# Validators return lists of human-readable error messages; the check_*
# helpers raise a typed error instead, for use inside the pipeline.
# ==============================================================================

import math
import os

from app.models import RosterWarning
from .dates import month_name, parse_entry_date
from .errors import PeriodMismatchError, ValidationError
from .schema import ALLOWED_EXTENSIONS, MAX_UPLOAD_BYTES, SLAB_FIELDS


def validate_upload(filename, size=None, allowed_extensions=ALLOWED_EXTENSIONS, max_bytes=MAX_UPLOAD_BYTES):
    """
    Validates the name and size of one uploaded file.

    Returns:
        list: Error messages; empty when the file is acceptable.
    """
    errors = []
    if not filename:
        errors.append('No file selected')
        return errors

    extension = os.path.splitext(filename)[1].lower()
    if extension not in allowed_extensions:
        errors.append(f"{filename}: Invalid file type. Please upload CSV or Excel file")
    if size is not None and size > max_bytes:
        errors.append(f"{filename}: File is larger than {max_bytes // (1024 * 1024)} MB")
    return errors


def cross_validate_employees(attendance_employees, salary_employees):
    """
    Reconciles employee names seen in attendance sheets with those in the
    salary sheet. Mismatches are advisory and never stop a calculation.

    Args:
        attendance_employees (iterable): Names found in any attendance sheet.
        salary_employees (iterable): Names found in the salary sheet.

    Returns:
        tuple: (employee_list, warnings) where employee_list is the sorted union
        of both name sets and warnings is a list of RosterWarning.
    """
    attendance_names = list(dict.fromkeys(attendance_employees))
    salary_names = list(dict.fromkeys(salary_employees))
    attendance_set, salary_set = set(attendance_names), set(salary_names)
    warnings = []

    for employee in attendance_names:
        if employee not in salary_set:
            warnings.append(RosterWarning(
                kind='warning',
                message=f"{employee} appears in attendance but not in salary sheet. Base salary will be 0.",
            ))

    for employee in salary_names:
        if employee not in attendance_set:
            warnings.append(RosterWarning(
                kind='info',
                message=f"{employee} appears in salary sheet but not in attendance. No deductions will apply.",
            ))

    employee_list = sorted(attendance_set | salary_set)
    return employee_list, warnings


def _to_float(value):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(',', '').strip()
        if value == '':
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def validate_slabs(slabs):
    """
    Validates the four slab settings.

    Args:
        slabs (dict | SlabConfig): slab1_amount, slab1_incentive, slab2_amount, slab2_incentive.

    Returns:
        list: Error messages, one per failing field.
    """
    if not isinstance(slabs, dict):
        slabs = {key: getattr(slabs, key, None) for key in SLAB_FIELDS}

    errors = []
    values = {}
    for key, label in SLAB_FIELDS.items():
        raw = slabs.get(key)
        value = _to_float(raw)
        if value is None:
            if raw is None or (isinstance(raw, str) and raw.strip() == ''):
                errors.append(f"{label} is required")
            else:
                errors.append(f"{label} must be a number")
            continue
        if value < 0:
            errors.append(f"{label} must be a positive number")
        values[key] = value

    if 'slab1_amount' in values and 'slab2_amount' in values:
        if values['slab2_amount'] <= values['slab1_amount']:
            errors.append('Slab 2 Amount must be greater than Slab 1 Amount')

    return errors


def check_slabs(slabs):
    errors = validate_slabs(slabs)
    if errors:
        raise ValidationError('Invalid slabs', errors=errors)


def validate_manual_entry(date, amount):
    """
    Validates one advance or bonus entry.

    Returns:
        list: Error messages; empty when the entry is usable.
    """
    errors = []
    if not date or not str(date).strip():
        errors.append('Date is required')
    elif parse_entry_date(str(date)) is None:
        errors.append('Date must be in DD/MM/YYYY format')

    if amount is None or (isinstance(amount, str) and amount.strip() == ''):
        errors.append('Amount is required')
    else:
        value = _to_float(amount)
        if value is None or value <= 0:
            errors.append('Amount must be a positive number')

    return errors


def check_same_period(first, second):
    """Raises PeriodMismatchError when two sheets cover different months."""
    if first.month != second.month or first.year != second.year:
        raise PeriodMismatchError(
            f"Attendance sheets must be for the same month and year "
            f"({first.source}: {month_name(first.month)} {first.year}, "
            f"{second.source}: {month_name(second.month)} {second.year})"
        )


def period_mismatch_warning(sales_sheet, attendance_sheet):
    """
    Incentive sheets may cover different months; only matching dates are used,
    so a mismatch becomes a warning instead of an error.
    """
    if sales_sheet.month == attendance_sheet.month and sales_sheet.year == attendance_sheet.year:
        return None
    return RosterWarning(
        kind='warning',
        message=(f"Sales sheet is for {month_name(sales_sheet.month)} {sales_sheet.year}, "
                 f"but attendance is for {month_name(attendance_sheet.month)} {attendance_sheet.year}. "
                 f"Only matching dates will be processed."),
    )
