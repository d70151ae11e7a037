# tests/test_engine.py

import pytest

from app.calculator.engine import (CalculationConfig, calculate_incentive_batch, prepare_incentive,
                                   prepare_payroll, run_incentive, run_payroll)
from app.calculator.errors import NoDataError, PeriodMismatchError, SchemaError, ValidationError

SLABS = {'slab1_amount': 30000, 'slab1_incentive': 500, 'slab2_amount': 50000, 'slab2_incentive': 1000}


@pytest.fixture
def payroll_uploads(csv_bytes, xlsx_bytes, outlet1_rows, outlet2_rows, salary_rows):
    outlets = [('outlet1.csv', csv_bytes(outlet1_rows)), ('outlet2.xlsx', xlsx_bytes(outlet2_rows))]
    return outlets, ('salary.csv', csv_bytes(salary_rows))


# --- Payroll ---

def test_payroll_pipeline_from_uploaded_files(payroll_uploads):
    outlets, salary = payroll_uploads
    advances = {'Ravi': [{'date': '15/03/2024', 'amount': 1500}]}
    bonuses = {'Sita': [{'date': '31/03/2024', 'amount': 250}, {'date': 'bad', 'amount': 99}]}

    batch, results, warnings = run_payroll(outlets, salary, advances=advances, bonuses=bonuses)

    assert (batch.month, batch.year) == (3, 2024)
    assert batch.employee_list == ('Gita', 'Kiran', 'Mohan', 'Ravi', 'Sita')
    assert [r.name for r in results] == list(batch.employee_list)

    by_name = {r.name: r for r in results}
    assert by_name['Mohan'].net_salary == pytest.approx(17000 - 17000 / 31)
    assert by_name['Ravi'].net_salary == pytest.approx(31500 - 1500)
    assert by_name['Sita'].net_salary == pytest.approx(14750 + 250)
    assert by_name['Gita'].net_salary == pytest.approx(12000)
    assert by_name['Kiran'].net_salary == 0

    assert [(w.kind, w.message) for w in warnings] == [
        ('warning', 'Kiran appears in attendance but not in salary sheet. Base salary will be 0.'),
        ('info', 'Gita appears in salary sheet but not in attendance. No deductions will apply.'),
    ]


def test_payroll_outlets_must_cover_the_same_month(csv_bytes, outlet1_rows, salary_rows):
    april = [['Day', 'Date', 'Sita'], ['Monday', '01/04/2024', 'P']]
    outlets = [('outlet1.csv', csv_bytes(outlet1_rows)), ('outlet2.csv', csv_bytes(april))]

    with pytest.raises(PeriodMismatchError) as excinfo:
        prepare_payroll(outlets, ('salary.csv', csv_bytes(salary_rows)))
    assert 'March 2024' in str(excinfo.value)
    assert 'April 2024' in str(excinfo.value)


def test_payroll_names_the_sheet_with_a_bad_header(csv_bytes, outlet1_rows):
    outlets = [('outlet1.csv', csv_bytes(outlet1_rows))]
    salary = ('salary.csv', csv_bytes([['Employee', 'Pay'], ['Mohan', 100]]))

    with pytest.raises(SchemaError) as excinfo:
        prepare_payroll(outlets, salary)
    assert str(excinfo.value).startswith('salary.csv: ')


def test_payroll_rejects_unsupported_uploads(csv_bytes, salary_rows):
    with pytest.raises(ValidationError) as excinfo:
        prepare_payroll([('outlet1.pdf', b'%PDF')], ('salary.csv', csv_bytes(salary_rows)))
    assert excinfo.value.errors == ['outlet1.pdf: Invalid file type. Please upload CSV or Excel file']


def test_header_scan_rows_comes_from_config(csv_bytes, outlet1_rows, salary_rows):
    outlets = [('outlet1.csv', csv_bytes(outlet1_rows))]
    salary = ('salary.csv', csv_bytes(salary_rows))

    with pytest.raises(SchemaError):
        prepare_payroll(outlets, salary, config=CalculationConfig(header_scan_rows=1))

    config = CalculationConfig.from_mapping({'HEADER_SCAN_ROWS': 5})
    assert prepare_payroll(outlets, salary, config=config).month == 3


def test_recalculation_reuses_the_prepared_batch(payroll_uploads):
    from app.calculator.engine import calculate_payroll_batch

    batch = prepare_payroll(*payroll_uploads)
    first, _ = calculate_payroll_batch(batch)
    second, _ = calculate_payroll_batch(batch, advances={'Mohan': [{'date': '01/03/2024', 'amount': 100}]})

    mohan_before = next(r for r in first if r.name == 'Mohan')
    mohan_after = next(r for r in second if r.name == 'Mohan')
    assert mohan_before.net_salary - mohan_after.net_salary == pytest.approx(100)


# --- Incentive ---

def test_incentive_pipeline_from_uploaded_files(csv_bytes, xlsx_bytes, sales_rows, incentive_attendance_rows):
    batch, report, warnings = run_incentive(
        ('sales.xlsx', xlsx_bytes(sales_rows)),
        ('attendance.csv', csv_bytes(incentive_attendance_rows)),
        SLABS,
    )

    assert (batch.month, batch.year) == (3, 2024)
    assert len(report.daily) == 5
    assert warnings == []
    totals = {m.employee: m.total_incentive for m in report.monthly}
    assert totals['Asha'] == pytest.approx(500 / 3 + 750)


def test_incentive_period_mismatch_is_only_a_warning(csv_bytes, sales_rows):
    # Read month-first: 1 April, then 5 March.
    attendance_rows = [['Date', 'Asha'], ['04/01/2024', 'P'], ['03/05/2024', 'P']]
    batch, report, warnings = run_incentive(
        ('sales.csv', csv_bytes(sales_rows)), ('attendance.csv', csv_bytes(attendance_rows)), SLABS)

    assert (batch.month, batch.year) == (4, 2024)
    messages = [w.message for w in warnings]
    assert messages[0] == ('Sales sheet is for March 2024, but attendance is for April 2024. '
                           'Only matching dates will be processed.')
    assert '4 date(s) found in sales sheet but not in attendance sheet. These dates were skipped.' in messages
    assert [str(day.date) for day in report.daily] == ['05/03/2024']


def test_incentive_slabs_are_validated_before_calculating(csv_bytes, sales_rows, incentive_attendance_rows):
    batch = prepare_incentive(('sales.csv', csv_bytes(sales_rows)),
                              ('attendance.csv', csv_bytes(incentive_attendance_rows)))

    with pytest.raises(ValidationError) as excinfo:
        calculate_incentive_batch(batch, dict(SLABS, slab2_amount=30000))
    assert 'Slab 2 Amount must be greater than Slab 1 Amount' in excinfo.value.errors


def test_empty_sales_sheet(csv_bytes, incentive_attendance_rows):
    sales = ('sales.csv', csv_bytes([['Date', 'Cash', 'Card', 'Other', 'Online']]))
    with pytest.raises(NoDataError):
        run_incentive(sales, ('attendance.csv', csv_bytes(incentive_attendance_rows)), SLABS)
