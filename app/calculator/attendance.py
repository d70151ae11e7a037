# ==============================================================================
# app/calculator/attendance.py
# ------------------------------------------------------------------------------
# Reads per-employee attendance markers out of a detected attendance grid and
# tallies them into deduction and addition days.
# ==============================================================================

import logging

from app.models import AttendanceRecord, AttendanceSheet, BreakdownEntry
from .dates import parse_attendance_date, parse_incentive_date
from .detector import detect_attendance_layout, detect_incentive_attendance_layout
from .errors import NoDataError, ValidationError
from .ingest import Number, cell_at, cell_text, is_blank
from .schema import ATTENDANCE_MARKERS, DEFAULT_MARKER, HEADER_SCAN_ROWS


def read_marker(cell):
    # A numeric zero counts as an empty cell.
    if isinstance(cell, Number) and cell.value == 0:
        return DEFAULT_MARKER
    marker = cell_text(cell).strip().upper()
    return marker or DEFAULT_MARKER


def _normalize(grid, layout, parse_date, source):
    records = {name: [] for name, _ in layout.employee_columns}
    dates = []
    month = year = None

    for offset, row in enumerate(grid[layout.header_row + 1:]):
        date_cell = cell_at(row, layout.date_column)
        if is_blank(date_cell):
            continue

        parsed = parse_date(date_cell)
        if parsed is None:
            logging.warning(f"{source}: skipping row {layout.header_row + offset + 2}, "
                            f"unreadable date '{cell_text(date_cell)}'.")
            continue

        # The first readable date decides the sheet's month and year.
        if month is None:
            month, year = parsed.month, parsed.year

        dates.append(parsed)
        for name, column in layout.employee_columns:
            records[name].append(AttendanceRecord(date=parsed, marker=read_marker(cell_at(row, column))))

    logging.info(f"{source}: {len(records)} employee(s), {len(dates)} date(s), period {month}/{year}.")
    return AttendanceSheet(
        source=source,
        employees=tuple((name, tuple(entries)) for name, entries in records.items()),
        dates=tuple(dates),
        month=month,
        year=year,
    )


def parse_attendance_sheet(grid, source='Attendance sheet', scan_rows=HEADER_SCAN_ROWS):
    """
    Parses a payroll attendance sheet (Day, Date, <employees>...). Dates are
    read as DD/MM/YYYY or spreadsheet serials.

    Returns:
        AttendanceSheet: Markers per employee in sheet column order.
    """
    layout = detect_attendance_layout(grid, source=source, scan_rows=scan_rows)
    return _normalize(grid, layout, parse_attendance_date, source)


def parse_incentive_attendance_sheet(grid, source='Attendance sheet', scan_rows=HEADER_SCAN_ROWS):
    """Parses an incentive attendance sheet (Date, <employees>...) with ambiguous date handling."""
    layout = detect_incentive_attendance_layout(grid, source=source, scan_rows=scan_rows)
    return _normalize(grid, layout, parse_incentive_date, source)


def check_attendance_sheet(sheet):
    """Raises when a parsed attendance sheet cannot be used for a calculation."""
    if not sheet.employees:
        raise ValidationError('No employees found in attendance sheet', source=sheet.source)
    if not sheet.dates:
        raise NoDataError('No dates found in attendance sheet', source=sheet.source)
    if not sheet.month or not sheet.year:
        raise NoDataError('Could not detect month/year from attendance sheet', source=sheet.source)
    return sheet


# --- Tallying ---

def merge_attendance(*sequences):
    """
    Combines attendance records from several outlets into one chronological
    sequence. The sort is stable, so records on the same date keep the order
    in which the outlets were passed.
    """
    combined = []
    for sequence in sequences:
        if sequence:
            combined.extend(sequence)
    return sorted(combined, key=lambda record: record.date.sort_key)


def tally_attendance(records):
    """
    Sums deduction and addition day-equivalents over a sequence of records.

    Returns:
        tuple: (deduction_days, addition_days, breakdown) where breakdown lists
        every record that changed the salary, in input order.
    """
    deduction_days = 0.0
    addition_days = 0.0
    breakdown = []

    for record in records:
        marker = record.marker.upper()
        config = ATTENDANCE_MARKERS.get(marker)
        if not config:
            # Unknown markers carry no deduction or addition.
            continue
        if config['days'] <= 0 or config['type'] == 'neutral':
            continue

        if config['type'] == 'deduction':
            deduction_days += config['days']
        else:
            addition_days += config['days']
        breakdown.append(BreakdownEntry(
            date=record.date, marker=marker, days=config['days'],
            type=config['type'], label=config['label'],
        ))

    return deduction_days, addition_days, tuple(breakdown)


def format_attendance_type(entry):
    """Formats a breakdown entry as e.g. 'A (1 day)' or 'N (1.5 days)'."""
    days = entry.days
    shown = int(days) if float(days).is_integer() else days
    unit = 'day' if days == 1 else 'days'
    return f"{entry.marker} ({shown} {unit})"
