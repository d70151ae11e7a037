# ==============================================================================
# app/calculator/payroll.py
# ------------------------------------------------------------------------------
# Net salary per employee: base salary adjusted by attendance, manual advances
# and manual bonuses.
# ==============================================================================

import logging

from app.models import ManualEntry, PayrollResult
from .attendance import merge_attendance, tally_attendance
from .dates import days_in_month, parse_entry_date
from .validator import validate_manual_entry


def _entry_fields(entry):
    if isinstance(entry, ManualEntry):
        return entry.date, entry.amount
    if isinstance(entry, dict):
        return entry.get('date'), entry.get('amount')
    date, amount = entry
    return date, amount


def clean_manual_entries(entries):
    """
    Keeps only usable advance/bonus entries. An entry with a missing or
    unreadable date, or an amount that is not a positive number, is dropped
    without raising so a half-filled form still calculates.

    Returns:
        tuple: ManualEntry items with dates normalised to DD/MM/YYYY.
    """
    if not isinstance(entries, (list, tuple)):
        if entries:
            logging.debug(f"Ignoring manual entries that are not a list: {entries!r}")
        return ()

    cleaned = []
    for entry in entries:
        try:
            date, amount = _entry_fields(entry)
        except (TypeError, ValueError):
            logging.debug(f"Ignoring malformed manual entry: {entry!r}")
            continue
        errors = validate_manual_entry(date, amount)
        if errors:
            logging.debug(f"Ignoring manual entry {entry!r}: {', '.join(errors)}")
            continue
        amount = float(str(amount).replace(',', '')) if isinstance(amount, str) else float(amount)
        cleaned.append(ManualEntry(date=str(parse_entry_date(str(date))), amount=amount))
    return tuple(cleaned)


def calculate_net_salary(employee_name, base_salary, month, year, attendance=(), advances=(), bonuses=()):
    """
    Calculates the net salary of one employee.

    Args:
        employee_name (str): Employee name.
        base_salary (float): Base monthly salary.
        month (int): Month number (1-12) of the payroll period.
        year (int): Year of the payroll period.
        attendance (sequence): One sequence of AttendanceRecord per outlet.
        advances (iterable): Advance entries ({date, amount}); cleaned here.
        bonuses (iterable): Bonus entries ({date, amount}); cleaned here.

    Returns:
        PayrollResult: The result with its attendance breakdown. Net salary is
        not clamped and may be negative.
    """
    month_days = days_in_month(month, year)
    daily_rate = base_salary / month_days

    combined = merge_attendance(*attendance)
    deduction_days, addition_days, breakdown = tally_attendance(combined)

    attendance_deduction = daily_rate * deduction_days
    attendance_addition = daily_rate * addition_days

    advances = clean_manual_entries(advances)
    bonuses = clean_manual_entries(bonuses)
    total_advances = sum(entry.amount for entry in advances)
    total_bonuses = sum(entry.amount for entry in bonuses)

    net_salary = base_salary - attendance_deduction - total_advances + attendance_addition + total_bonuses

    logging.debug(
        f"{employee_name}: base={base_salary:,.2f} rate={daily_rate:,.2f} "
        f"deduct={deduction_days}d/{attendance_deduction:,.2f} add={addition_days}d/{attendance_addition:,.2f} "
        f"advances={total_advances:,.2f} bonuses={total_bonuses:,.2f} net={net_salary:,.2f}"
    )

    return PayrollResult(
        name=employee_name,
        base_salary=base_salary,
        daily_rate=daily_rate,
        days_in_month=month_days,
        deduction_days=deduction_days,
        addition_days=addition_days,
        attendance_deduction=attendance_deduction,
        attendance_addition=attendance_addition,
        attendance_breakdown=breakdown,
        advances=advances,
        total_advances=total_advances,
        bonuses=bonuses,
        total_bonuses=total_bonuses,
        net_salary=net_salary,
        month=month,
        year=year,
    )


def calculate_payroll(employee_list, salary_sheet, attendance_sheets, month, year, advances=None, bonuses=None):
    """
    Runs calculate_net_salary for every employee on the roster, in roster order.
    Employees missing from the salary sheet get a base salary of 0; employees
    missing from an attendance sheet simply have no records from it.
    """
    advances = advances or {}
    bonuses = bonuses or {}
    results = []
    for employee_name in employee_list:
        results.append(calculate_net_salary(
            employee_name=employee_name,
            base_salary=salary_sheet.get(employee_name, 0.0),
            month=month,
            year=year,
            attendance=[sheet.records_for(employee_name) for sheet in attendance_sheets],
            advances=advances.get(employee_name, ()),
            bonuses=bonuses.get(employee_name, ()),
        ))
    return results


def summarize_payroll(results):
    """Totals across all payroll results, for summary rows and reports."""
    summary = {
        'employee_count': len(results),
        'total_base_salary': 0.0,
        'total_attendance_deduction': 0.0,
        'total_attendance_addition': 0.0,
        'total_advances': 0.0,
        'total_bonuses': 0.0,
        'total_net_salary': 0.0,
    }
    for result in results:
        summary['total_base_salary'] += result.base_salary
        summary['total_attendance_deduction'] += result.attendance_deduction
        summary['total_attendance_addition'] += result.attendance_addition
        summary['total_advances'] += result.total_advances
        summary['total_bonuses'] += result.total_bonuses
        summary['total_net_salary'] += result.net_salary
    return summary
