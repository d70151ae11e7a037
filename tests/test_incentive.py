# tests/test_incentive.py

import pytest

from app.calculator.attendance import parse_incentive_attendance_sheet
from app.calculator.errors import NoOverlapError
from app.calculator.incentive import apply_slab, calculate_incentives
from app.calculator.sales import parse_sales_sheet
from app.models import AttendanceRecord, AttendanceSheet, CanonicalDate, SalesRecord, SlabConfig

SLABS = SlabConfig(slab1_amount=30000, slab1_incentive=500, slab2_amount=50000, slab2_incentive=1000)


def _sale(day, amount, month=3):
    return SalesRecord(date=CanonicalDate(day, month, 2024), cash=amount, card=0, other=0, online=0,
                       net_sales=amount)


def _attendance(markers_by_employee, days, month=3):
    employees = tuple(
        (name, tuple(AttendanceRecord(date=CanonicalDate(day, month, 2024), marker=marker)
                     for day, marker in zip(days, markers)))
        for name, markers in markers_by_employee.items()
    )
    dates = tuple(CanonicalDate(day, month, 2024) for day in days)
    return AttendanceSheet(source='attendance.csv', employees=employees, dates=dates, month=month, year=2024)


@pytest.mark.parametrize('amount, expected', [
    (29999.99, (0, 'None')),
    (30000, (500, 'Slab 1')),
    (49999, (500, 'Slab 1')),
    (50000, (1000, 'Slab 2')),
    (120000, (1000, 'Slab 2')),
])
def test_apply_slab_boundaries_are_inclusive(amount, expected):
    assert apply_slab(amount, SLABS) == expected


def test_pool_is_split_among_present_staff():
    names = {name: ['P'] for name in ['E1', 'E2', 'E3', 'E4', 'E5']}
    names['E6'] = ['A']
    report = calculate_incentives([_sale(1, 40000)], _attendance(names, [1]), SLABS)

    day = report.daily[0]
    assert (day.slab_applied, day.pool, day.present_count) == ('Slab 1', 500, 5)
    assert day.per_person == pytest.approx(100)
    assert dict(day.employee_breakdown)['E6'] == 0
    assert sum(amount for _, amount in day.employee_breakdown) == pytest.approx(day.pool)
    assert report.warnings == ()


def test_nobody_present_pays_nothing():
    report = calculate_incentives([_sale(1, 60000)], _attendance({'Asha': ['X'], 'Bala': ['A']}, [1]), SLABS)

    day = report.daily[0]
    assert (day.pool, day.present_count, day.per_person) == (1000, 0, 0)
    assert all(amount == 0 for _, amount in day.employee_breakdown)
    assert all(m.total_incentive == 0 and m.days_present == 0 for m in report.monthly)


def test_only_common_dates_are_processed_with_aggregate_warnings():
    sales = [_sale(day, 35000) for day in (1, 2, 3, 4)]
    attendance = _attendance({'Asha': ['P', 'P', 'P']}, [3, 4, 5])
    report = calculate_incentives(sales, attendance, SLABS)

    assert [str(day.date) for day in report.daily] == ['03/03/2024', '04/03/2024']
    assert [w.message for w in report.warnings] == [
        '2 date(s) found in sales sheet but not in attendance sheet. These dates were skipped.',
        '1 date(s) found in attendance sheet but not in sales sheet. These dates were skipped.',
    ]


def test_no_common_dates_raises():
    with pytest.raises(NoOverlapError) as excinfo:
        calculate_incentives([_sale(1, 35000)], _attendance({'Asha': ['P']}, [2]), SLABS)
    assert excinfo.value.kind == 'no_overlap'


def test_daily_results_are_chronological():
    sales = [_sale(1, 35000, month=4), _sale(31, 35000), _sale(2, 35000)]
    attendance = _attendance({'Asha': ['P', 'P']}, [2, 31])
    attendance = AttendanceSheet(
        source=attendance.source,
        employees=(('Asha', attendance.employees[0][1] + (AttendanceRecord(CanonicalDate(1, 4, 2024), 'P'),)),),
        dates=attendance.dates + (CanonicalDate(1, 4, 2024),),
        month=3, year=2024,
    )
    report = calculate_incentives(sales, attendance, SLABS)

    assert [str(day.date) for day in report.daily] == ['02/03/2024', '31/03/2024', '01/04/2024']


def test_sheet_scenario(make_grid, sales_rows, incentive_attendance_rows):
    sales = parse_sales_sheet(make_grid(sales_rows))
    attendance = parse_incentive_attendance_sheet(make_grid(incentive_attendance_rows))
    report = calculate_incentives(sales.records, attendance, SLABS)

    assert len(report.daily) == 5
    assert all(day.slab_applied == 'Slab 1' for day in report.daily)
    assert [day.present_count for day in report.daily] == [3, 2, 0, 2, 2]
    assert report.employee_names == ('Asha', 'Bala', 'Chitra')

    monthly = {m.employee: m for m in report.monthly}
    assert [m.employee for m in report.monthly] == ['Asha', 'Bala', 'Chitra']
    assert monthly['Asha'].days_present == 4
    assert monthly['Asha'].total_incentive == pytest.approx(500 / 3 + 750)
    assert monthly['Bala'].days_present == 2
    assert monthly['Bala'].total_incentive == pytest.approx(500 / 3 + 250)
    assert monthly['Chitra'].days_present == 3
    assert monthly['Chitra'].total_incentive == pytest.approx(500 / 3 + 500)

    paid = sum(m.total_incentive for m in report.monthly)
    assert paid == pytest.approx(sum(day.pool for day in report.daily if day.present_count))


def test_monthly_totals_are_sorted_by_name_and_calculation_is_repeatable():
    sales = [_sale(1, 55000)]
    attendance = _attendance({'Zara': ['P'], 'Arun': ['P'], 'Meena': ['H']}, [1])

    first = calculate_incentives(sales, attendance, SLABS)
    second = calculate_incentives(sales, attendance, SLABS)

    assert [m.employee for m in first.monthly] == ['Arun', 'Meena', 'Zara']
    assert first.employee_names == ('Zara', 'Arun', 'Meena')
    assert [name for name, _ in first.daily[0].employee_breakdown] == ['Zara', 'Arun', 'Meena']
    assert first == second
