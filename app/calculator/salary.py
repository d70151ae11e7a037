# ==============================================================================
# app/calculator/salary.py
# ------------------------------------------------------------------------------
# Reads base monthly salaries from a salary sheet.
# ==============================================================================

import logging

from app.models import SalarySheet
from .detector import detect_salary_layout
from .errors import ValidationError
from .ingest import cell_at, cell_number, cell_text
from .schema import HEADER_SCAN_ROWS


def parse_salary_sheet(grid, source='Salary sheet', scan_rows=HEADER_SCAN_ROWS):
    """
    Extracts (name, salary) pairs below the detected header row. Rows without a
    name are skipped; a salary that cannot be read counts as 0. When a name is
    listed twice the later salary wins, at the position of the first listing.
    """
    layout = detect_salary_layout(grid, source=source, scan_rows=scan_rows)
    salaries = {}

    for row in grid[layout.header_row + 1:]:
        name = cell_text(cell_at(row, layout.name_column)).strip()
        if not name:
            continue
        salary = cell_number(cell_at(row, layout.salary_column), default=0.0)
        if salary < 0:
            logging.warning(f"{source}: negative salary for '{name}' treated as 0.")
            salary = 0.0
        salaries[name] = salary

    logging.info(f"{source}: {len(salaries)} salary record(s).")
    return SalarySheet(source=source, salaries=tuple(salaries.items()))


def check_salary_sheet(sheet):
    if not sheet.salaries:
        raise ValidationError('No employees found in salary sheet', source=sheet.source)
    return sheet
