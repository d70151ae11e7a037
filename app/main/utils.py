# ==============================================================================
# app/main/utils.py
# ------------------------------------------------------------------------------
# Converts calculation results into JSON-ready dictionaries for the front end.
# Field names follow the front end's camelCase convention.
# ==============================================================================

import json

from app.calculator.attendance import format_attendance_type
from app.calculator.dates import month_name
from app.calculator.export import format_currency
from app.calculator.payroll import summarize_payroll


def warning_to_dict(warning):
    return {'type': warning.kind, 'message': warning.message}


def _entries_to_list(entries):
    return [{'date': entry.date, 'amount': entry.amount} for entry in entries]


def payroll_result_to_dict(result):
    return {
        'employeeName': result.name,
        'baseSalary': result.base_salary,
        'dailyRate': result.daily_rate,
        'daysInMonth': result.days_in_month,
        'deductionDays': result.deduction_days,
        'additionDays': result.addition_days,
        'attendanceDeduction': result.attendance_deduction,
        'attendanceAddition': result.attendance_addition,
        'attendanceBreakdown': [
            {
                'date': str(entry.date),
                'marker': entry.marker,
                'days': entry.days,
                'type': entry.type,
                'label': entry.label,
                'display': format_attendance_type(entry),
            }
            for entry in result.attendance_breakdown
        ],
        'advances': _entries_to_list(result.advances),
        'totalAdvances': result.total_advances,
        'bonuses': _entries_to_list(result.bonuses),
        'totalBonuses': result.total_bonuses,
        'netSalary': result.net_salary,
        'netSalaryDisplay': format_currency(result.net_salary),
        'month': result.month,
        'year': result.year,
    }


def prepare_payroll_preview(batch):
    """Roster, period and warnings shown before the user enters advances and bonuses."""
    return {
        'month': batch.month,
        'monthName': month_name(batch.month),
        'year': batch.year,
        'employeeList': list(batch.employee_list),
        'outlets': [
            {'source': sheet.source, 'employees': sheet.employee_names(), 'dates': [str(d) for d in sheet.dates]}
            for sheet in batch.outlets
        ],
        'salaries': [{'employeeName': name, 'baseSalary': salary} for name, salary in batch.salary.salaries],
        'warnings': [warning_to_dict(w) for w in batch.warnings],
    }


def prepare_payroll_data(batch, results, warnings):
    summary = summarize_payroll(results)
    return {
        'month': batch.month,
        'monthName': month_name(batch.month),
        'year': batch.year,
        'employeeList': list(batch.employee_list),
        'calculations': [payroll_result_to_dict(r) for r in results],
        'summary': {
            'employeeCount': summary['employee_count'],
            'totalBaseSalary': summary['total_base_salary'],
            'totalAttendanceDeduction': summary['total_attendance_deduction'],
            'totalAttendanceAddition': summary['total_attendance_addition'],
            'totalAdvances': summary['total_advances'],
            'totalBonuses': summary['total_bonuses'],
            'totalNetSalary': summary['total_net_salary'],
            'totalNetSalaryDisplay': format_currency(summary['total_net_salary']),
        },
        'warnings': [warning_to_dict(w) for w in warnings],
    }


def prepare_incentive_data(batch, report, warnings):
    return {
        'month': batch.month,
        'monthName': month_name(batch.month),
        'year': batch.year,
        'employeeNames': list(report.employee_names),
        'dailyData': [
            {
                'date': str(day.date),
                'netSales': day.net_sales,
                'slabApplied': day.slab_applied,
                'pool': day.pool,
                'presentCount': day.present_count,
                'perPerson': day.per_person,
                'employeeBreakdown': dict(day.employee_breakdown),
            }
            for day in report.daily
        ],
        'monthlyData': [
            {'employee': m.employee, 'daysPresent': m.days_present, 'totalIncentive': m.total_incentive}
            for m in report.monthly
        ],
        'warnings': [warning_to_dict(w) for w in warnings],
    }


def parse_entries_field(raw):
    """
    Reads the advances/bonuses JSON posted with a payroll calculation.

    Returns:
        tuple: (advances, bonuses), each a dict of employee name -> list of entries.
    """
    if not raw or not raw.strip():
        return {}, {}
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError('entries must be a JSON object')
    advances = data.get('advances') or {}
    bonuses = data.get('bonuses') or {}
    if not isinstance(advances, dict) or not isinstance(bonuses, dict):
        raise ValueError('advances and bonuses must map employee names to lists of entries')
    for entries in list(advances.values()) + list(bonuses.values()):
        if not isinstance(entries, list):
            raise ValueError('advances and bonuses must map employee names to lists of entries')
    return advances, bonuses
