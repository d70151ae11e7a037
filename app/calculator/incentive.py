# ==============================================================================
# app/calculator/incentive.py
# ------------------------------------------------------------------------------
# Daily incentive pools from sales slabs, shared among the staff present on
# each day, and the resulting monthly totals per employee.
# ==============================================================================

import logging

from app.models import IncentiveDailyResult, IncentiveMonthlyResult, IncentiveReport, RosterWarning
from .errors import NoOverlapError
from .schema import INCENTIVE_PRESENT_MARKER, SLAB_LABELS


def apply_slab(net_sales, slabs):
    """
    Picks the pool for a day. Each slab includes its lower boundary.

    Returns:
        tuple: (pool, slab label)
    """
    if net_sales >= slabs.slab2_amount:
        return slabs.slab2_incentive, SLAB_LABELS['slab2']
    if net_sales >= slabs.slab1_amount:
        return slabs.slab1_incentive, SLAB_LABELS['slab1']
    return 0, SLAB_LABELS['none']


def _attendance_by_date(attendance_sheet):
    by_date = {}
    keys = {}
    for employee, records in attendance_sheet.employees:
        for record in records:
            key = str(record.date)
            keys.setdefault(key, record.date)
            by_date.setdefault(key, {})[employee] = record.marker
    return by_date, keys


def calculate_incentives(sales_records, attendance_sheet, slabs):
    """
    Matches sales days to attendance days and distributes each day's pool.

    Only dates present in both sheets are processed, in calendar order. Dates
    found in only one sheet are counted and reported as two aggregate warnings.
    An employee is present only when marked exactly 'P'. When nobody is present
    the pool is not paid out or carried over.

    Args:
        sales_records (iterable): SalesRecord items.
        attendance_sheet (AttendanceSheet): Parsed incentive attendance.
        slabs (SlabConfig): Validated slab settings.

    Returns:
        IncentiveReport: Daily results, monthly totals sorted by employee name,
        warnings and the employee names in sheet order.

    Raises:
        NoOverlapError: If the sheets share no date.
    """
    logging.info("--- Starting incentive calculation. ---")
    employee_names = list(dict.fromkeys(attendance_sheet.employee_names()))
    totals = {name: {'days_present': 0, 'total_incentive': 0.0} for name in employee_names}

    sales_by_date = {}
    date_keys = {}
    for sale in sales_records:
        key = str(sale.date)
        sales_by_date[key] = sale
        date_keys.setdefault(key, sale.date)

    attendance_by_date, attendance_keys = _attendance_by_date(attendance_sheet)
    for key, value in attendance_keys.items():
        date_keys.setdefault(key, value)

    sorted_keys = sorted(date_keys, key=lambda key: date_keys[key].sort_key)

    sales_only_dates = 0
    attendance_only_dates = 0
    daily = []

    for key in sorted_keys:
        has_sales = key in sales_by_date
        has_attendance = key in attendance_by_date
        if not (has_sales and has_attendance):
            if has_sales:
                sales_only_dates += 1
            else:
                attendance_only_dates += 1
            continue

        sale = sales_by_date[key]
        day_attendance = attendance_by_date[key]
        present = [name for name, marker in day_attendance.items() if marker == INCENTIVE_PRESENT_MARKER]
        present_count = len(present)

        pool, slab_applied = apply_slab(sale.net_sales, slabs)

        per_person = 0.0
        shares = {}
        if present_count > 0 and pool > 0:
            per_person = pool / present_count
            for name in present:
                totals[name]['days_present'] += 1
                totals[name]['total_incentive'] += per_person
                shares[name] = per_person

        breakdown = tuple((name, shares.get(name, 0.0)) for name in employee_names)
        logging.debug(f"{key}: net sales {sale.net_sales:,.2f} -> {slab_applied}, pool {pool:,.2f}, "
                      f"{present_count} present, {per_person:,.2f} each")

        daily.append(IncentiveDailyResult(
            date=date_keys[key],
            net_sales=sale.net_sales,
            slab_applied=slab_applied,
            pool=pool,
            present_count=present_count,
            per_person=per_person,
            employee_breakdown=breakdown,
        ))

    warnings = []
    if sales_only_dates > 0:
        warnings.append(RosterWarning(
            kind='warning',
            message=f"{sales_only_dates} date(s) found in sales sheet but not in attendance sheet. "
                    f"These dates were skipped.",
        ))
    if attendance_only_dates > 0:
        warnings.append(RosterWarning(
            kind='warning',
            message=f"{attendance_only_dates} date(s) found in attendance sheet but not in sales sheet. "
                    f"These dates were skipped.",
        ))
    for warning in warnings:
        logging.warning(warning.message)

    if not daily:
        raise NoOverlapError('No matching dates found between sales and attendance sheets. '
                             'Please verify the date formats and ranges.')

    monthly = tuple(sorted(
        (IncentiveMonthlyResult(employee=name, days_present=data['days_present'],
                                total_incentive=data['total_incentive'])
         for name, data in totals.items()),
        key=lambda result: result.employee,
    ))

    logging.info(f"--- Incentive calculation finished: {len(daily)} day(s), {len(monthly)} employee(s). ---")
    return IncentiveReport(
        daily=tuple(daily),
        monthly=monthly,
        warnings=tuple(warnings),
        employee_names=tuple(employee_names),
    )
