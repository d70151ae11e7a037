# ==============================================================================
# app/calculator/export.py
# ------------------------------------------------------------------------------
# Flat CSV tables built from calculation results, each ending in a TOTAL row.
# ==============================================================================

import pandas as pd

from .dates import month_name
from .errors import NoDataError


def format_currency(amount):
    """Formats an amount in rupees, e.g. 12345.678 -> '₹12,345.68'."""
    return f"₹{amount:,.2f}"


def _to_csv(rows, columns):
    return pd.DataFrame(rows, columns=columns).to_csv(index=False, lineterminator='\n')


def daily_incentive_csv(daily, month, year):
    """
    Returns:
        tuple: (filename, csv text) for the daily incentive table.
    """
    if not daily:
        raise NoDataError('No data to export')

    columns = ['Date', 'Net Sales', 'Slab Applied', 'Pool Amount', 'Present Count', 'Per Person Incentive']
    rows = [[str(day.date), f"{day.net_sales:.2f}", day.slab_applied, f"{day.pool:.2f}",
             day.present_count, f"{day.per_person:.2f}"] for day in daily]
    rows.append([
        'TOTAL',
        f"{sum(day.net_sales for day in daily):.2f}",
        '',
        f"{sum(day.pool for day in daily):.2f}",
        sum(day.present_count for day in daily),
        '',
    ])
    return f"Daily_Incentives_{month_name(month)}_{year}.csv", _to_csv(rows, columns)


def monthly_incentive_csv(monthly, month, year):
    if not monthly:
        raise NoDataError('No data to export')

    columns = ['Employee', 'Total Days Present', 'Total Incentive Earned']
    rows = [[entry.employee, entry.days_present, f"{entry.total_incentive:.2f}"] for entry in monthly]
    rows.append([
        'TOTAL',
        sum(entry.days_present for entry in monthly),
        f"{sum(entry.total_incentive for entry in monthly):.2f}",
    ])
    return f"Monthly_Incentive_Summary_{month_name(month)}_{year}.csv", _to_csv(rows, columns)


def payroll_summary_csv(results, month, year):
    if not results:
        raise NoDataError('No data to export')

    columns = ['Employee', 'Base Salary', 'Deduction Days', 'Attendance Deduction', 'Addition Days',
               'Attendance Addition', 'Advances', 'Bonuses', 'Net Salary']
    rows = [[r.name, f"{r.base_salary:.2f}", r.deduction_days, f"{r.attendance_deduction:.2f}",
             r.addition_days, f"{r.attendance_addition:.2f}", f"{r.total_advances:.2f}",
             f"{r.total_bonuses:.2f}", f"{r.net_salary:.2f}"] for r in results]
    rows.append([
        'TOTAL',
        f"{sum(r.base_salary for r in results):.2f}",
        sum(r.deduction_days for r in results),
        f"{sum(r.attendance_deduction for r in results):.2f}",
        sum(r.addition_days for r in results),
        f"{sum(r.attendance_addition for r in results):.2f}",
        f"{sum(r.total_advances for r in results):.2f}",
        f"{sum(r.total_bonuses for r in results):.2f}",
        f"{sum(r.net_salary for r in results):.2f}",
    ])
    return f"Payroll_Summary_{month_name(month)}_{year}.csv", _to_csv(rows, columns)
