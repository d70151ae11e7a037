# ==============================================================================
# app/calculator/dates.py
# ------------------------------------------------------------------------------
# Date handling shared by the sheet normalizers and the calculators.
#
# Two slash-date policies exist side by side:
#   - payroll attendance sheets are always read day-first (DD/MM/YYYY);
#   - incentive attendance and sales sheets go through resolve_day_month(),
#     which guesses month-first when both leading numbers are 12 or less.
# Both are kept as they are; unifying them would change which days match.
# ==============================================================================

import calendar
import math
import re
from datetime import timedelta

from app.models import CanonicalDate
from .ingest import EXCEL_EPOCH, EXCEL_LEAP_BUG_SERIAL, Number, Text
from .schema import MONTH_NAMES

_LEADING_INT = re.compile(r'^\s*[+-]?\d+')

# Serial of 31/12/9999, the last day a spreadsheet can hold.
MAX_SERIAL = 2958465


def _parse_int(text):
    """Reads the leading integer of a string, ignoring any trailing text."""
    match = _LEADING_INT.match(text)
    if not match:
        return None
    return int(match.group(0))


def make_date(day, month, year):
    """Builds a CanonicalDate, or None when a part is missing or out of range."""
    if day is None or month is None or year is None:
        return None
    if not 1 <= day <= 31 or not 1 <= month <= 12:
        return None
    return CanonicalDate(day=day, month=month, year=year)


def from_serial(serial):
    """Converts a spreadsheet serial day number into a CanonicalDate."""
    if not math.isfinite(serial):
        return None
    whole = int(serial)
    if whole < 1 or whole > MAX_SERIAL:
        return None
    if whole < EXCEL_LEAP_BUG_SERIAL:
        whole += 1
    moment = EXCEL_EPOCH + timedelta(days=whole)
    return make_date(moment.day, moment.month, moment.year)


def resolve_day_month(first, second):
    """
    Decides which of the first two parts of an a/b/yyyy date is the day.

    Returns:
        tuple: (day, month)
    """
    if first is not None and first > 12:
        return first, second
    if second is not None and second > 12:
        return second, first
    # Ambiguous: assume month-first.
    return second, first


def parse_day_first(text):
    """Parses DD/MM/YYYY."""
    parts = text.strip().split('/')
    if len(parts) != 3:
        return None
    return make_date(_parse_int(parts[0]), _parse_int(parts[1]), _parse_int(parts[2]))


def parse_ambiguous_slash(text):
    """Parses DD/MM/YYYY or MM/DD/YYYY using resolve_day_month()."""
    parts = text.strip().split('/')
    if len(parts) != 3:
        return None
    day, month = resolve_day_month(_parse_int(parts[0]), _parse_int(parts[1]))
    return make_date(day, month, _parse_int(parts[2]))


def parse_iso(text):
    """Parses YYYY-MM-DD."""
    parts = text.strip().split('-')
    if len(parts) != 3:
        return None
    return make_date(_parse_int(parts[2]), _parse_int(parts[1]), _parse_int(parts[0]))


def parse_attendance_date(cell):
    """Date cell of a payroll attendance sheet."""
    if isinstance(cell, Number):
        return from_serial(cell.value)
    if isinstance(cell, Text):
        return parse_day_first(cell.value)
    return None


def parse_incentive_date(cell):
    """Date cell of an incentive attendance sheet."""
    if isinstance(cell, Number):
        return from_serial(cell.value)
    if isinstance(cell, Text):
        return parse_ambiguous_slash(cell.value)
    return None


def parse_sales_date(cell):
    """Date cell of a sales sheet: serial, YYYY-MM-DD, or slash format."""
    if isinstance(cell, Number):
        return from_serial(cell.value)
    if isinstance(cell, Text):
        text = cell.value.strip()
        if '-' in text:
            return parse_iso(text)
        if '/' in text:
            return parse_ambiguous_slash(text)
    return None


def parse_entry_date(text):
    """Date typed with a manual advance or bonus: DD/MM/YYYY or YYYY-MM-DD."""
    text = (text or '').strip()
    if re.match(r'^\d{2}/\d{2}/\d{4}$', text):
        return parse_day_first(text)
    if re.match(r'^\d{4}-\d{2}-\d{2}$', text):
        return parse_iso(text)
    return None


def days_in_month(month, year):
    return calendar.monthrange(int(year), int(month))[1]


def month_name(month):
    try:
        month = int(month)
    except (TypeError, ValueError):
        return ''
    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return ''
