# tests/conftest.py

import io
from datetime import date

import pandas as pd
import pytest

from config import Config


class TestConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False


@pytest.fixture
def app():
    from app import create_app

    app = create_app(TestConfig)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def _csv_bytes(rows):
    buffer = io.StringIO()
    pd.DataFrame(rows).to_csv(buffer, index=False, header=False)
    return buffer.getvalue().encode('utf-8')


@pytest.fixture
def csv_bytes():
    """Builds CSV file contents from a list of rows."""
    return _csv_bytes


@pytest.fixture
def xlsx_bytes():
    """Builds an .xlsx workbook (single sheet, no header) from a list of rows."""
    def build(rows):
        buffer = io.BytesIO()
        pd.DataFrame(rows).to_excel(buffer, header=False, index=False)
        return buffer.getvalue()
    return build


@pytest.fixture
def make_grid():
    """Builds a grid of cells the same way the CSV reader does."""
    from app.calculator.ingest import to_cell

    def build(rows):
        return [[to_cell(value, coerce_numbers=True) for value in row] for row in rows]
    return build


def _march_rows(columns, markers):
    """Day, Date, <employees> rows for March 2024; `markers` maps (employee, day) -> marker."""
    rows = []
    for day in range(1, 32):
        current = date(2024, 3, day)
        row = [current.strftime('%A'), current.strftime('%d/%m/%Y')]
        row.extend(markers.get((name, day), 'P') for name in columns)
        rows.append(row)
    return rows


@pytest.fixture
def outlet1_rows():
    columns = ['Mohan', 'Ravi', 'XXXX']
    markers = {('Mohan', 5): 'A', ('Ravi', 10): 'H', ('Ravi', 11): 'O'}
    rows = [['Outlet 1 Attendance - March 2024', '', '', '', ''],
            ['Day', 'Date'] + columns]
    return rows + _march_rows(columns, markers)


@pytest.fixture
def outlet2_rows():
    columns = ['Ravi', 'Sita', 'Kiran']
    markers = {('Sita', 20): 'N'}
    markers.update({('Ravi', day): 'X' for day in range(1, 32)})
    rows = [['Day', 'Date'] + columns]
    return rows + _march_rows(columns, markers)


@pytest.fixture
def salary_rows():
    return [
        ['Staff Pay Register - March 2024', ''],
        ['Name', 'Salary'],
        ['Mohan', 17000],
        ['Ravi', 31000],
        ['Sita', 15500],
        ['Gita', 12000],
    ]


@pytest.fixture
def sales_rows():
    rows = [['Daily Sales Report', '', '', '', '', ''],
            ['Date', 'Cash', 'Card', 'Other', 'Online', 'Notes']]
    for day in range(1, 6):
        rows.append([f'2024-03-{day:02d}', 20000, 15000, 1000, 10000, ''])
    rows.append(['Sub Total', 100000, 75000, 5000, 50000, ''])
    return rows


@pytest.fixture
def incentive_attendance_rows():
    # 03/01 .. 03/05 read month-first as 1-5 March 2024.
    return [
        ['Date', 'Asha', 'Bala', 'Chitra'],
        ['03/01/2024', 'P', 'P', 'P'],
        ['03/02/2024', 'P', 'A', 'P'],
        ['03/03/2024', 'X', 'X', 'X'],
        ['03/04/2024', 'P', 'P', ''],
        ['03/05/2024', 'p', 'H', 'P'],
    ]
