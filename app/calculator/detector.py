# ==============================================================================
# app/calculator/detector.py
# ------------------------------------------------------------------------------
# Locates the header row and the named columns of each known sheet shape.
# Sheets often carry a few rows of metadata above the header, so each detector
# searches the first HEADER_SCAN_ROWS rows before giving up.
# ==============================================================================

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .errors import NoDataError, SchemaError
from .ingest import cell_at, cell_text
from .schema import EXPECTED_SHEETS, HEADER_SCAN_ROWS, PLACEHOLDER_PATTERN


@dataclass(frozen=True)
class AttendanceLayout:
    header_row: int
    date_column: int
    # (employee name, column index) in sheet order
    employee_columns: Tuple[Tuple[str, int], ...]


@dataclass(frozen=True)
class SalaryLayout:
    header_row: int
    name_column: int
    salary_column: int


@dataclass(frozen=True)
class SalesLayout:
    header_row: int
    columns: Dict[str, int]


def ensure_rows(grid, sheet_label, source=None):
    if not grid or len(grid) < 2:
        raise NoDataError(f"{sheet_label} is empty or invalid", source=source)


def _lower(cell):
    return cell_text(cell).lower()


def is_placeholder_name(text):
    text = text.strip()
    return text == '' or re.match(PLACEHOLDER_PATTERN, text, re.IGNORECASE) is not None


def _employee_columns(header, first_column):
    columns = []
    for index in range(first_column, len(header)):
        name = cell_text(header[index])
        if is_placeholder_name(name):
            continue
        columns.append((name.strip(), index))
    return tuple(columns)


def _detect_attendance(grid, sheet_type, source, scan_rows):
    rules = EXPECTED_SHEETS[sheet_type]
    keywords = rules['header_keywords']
    ensure_rows(grid, 'Attendance sheet', source)

    for i, row in enumerate(grid[:scan_rows]):
        if all(keyword in _lower(cell_at(row, position)) for position, keyword in enumerate(keywords)):
            columns = _employee_columns(row, rules['first_employee_column'])
            logging.debug(f"Attendance header found at row {i + 1} with {len(columns)} employee column(s).")
            return AttendanceLayout(header_row=i, date_column=rules['date_column'], employee_columns=columns)

    wanted = ' and '.join(f'"{k.title()}"' for k in keywords)
    raise SchemaError(f"header row not found: could not find header row with {wanted} column(s)", source=source)


def detect_attendance_layout(grid, source=None, scan_rows=HEADER_SCAN_ROWS):
    """Header row is the first whose first cell contains 'day' and second contains 'date'."""
    return _detect_attendance(grid, 'attendance', source, scan_rows)


def detect_incentive_attendance_layout(grid, source=None, scan_rows=HEADER_SCAN_ROWS):
    """Header row is the first whose first cell contains 'date'."""
    return _detect_attendance(grid, 'incentive_attendance', source, scan_rows)


def detect_salary_layout(grid, source=None, scan_rows=HEADER_SCAN_ROWS):
    """
    Searches cell by cell for a 'name' and a 'salary' column. The first match of
    each kind is kept across rows; the header row is the row at which both
    have been seen.
    """
    ensure_rows(grid, 'Salary sheet', source)
    name_column = salary_column = None

    for i, row in enumerate(grid[:scan_rows]):
        for j, cell in enumerate(row):
            text = _lower(cell)
            if name_column is None and 'name' in text:
                name_column = j
            if salary_column is None and 'salary' in text:
                salary_column = j
        if name_column is not None and salary_column is not None:
            return SalaryLayout(header_row=i, name_column=name_column, salary_column=salary_column)

    raise SchemaError('header row not found: could not find "Name" and "Salary" columns in salary sheet',
                      source=source)


def detect_sales_layout(grid, source=None, scan_rows=HEADER_SCAN_ROWS):
    """Finds the single row holding date, cash, card, other and online columns."""
    required = EXPECTED_SHEETS['sales']['required_columns']
    ensure_rows(grid, 'Sales sheet', source)
    best_missing: List[str] = list(required)

    for i, row in enumerate(grid[:scan_rows]):
        columns = {}
        for j, cell in enumerate(row):
            text = _lower(cell).strip()
            if text in required and text not in columns:
                columns[text] = j
        missing = [name for name in required if name not in columns]
        if not missing:
            return SalesLayout(header_row=i, columns=columns)
        if len(missing) < len(best_missing):
            best_missing = missing

    labels = ', '.join(name.title() for name in best_missing)
    raise SchemaError(f"Could not find required columns in sales sheet: {labels}", source=source)
