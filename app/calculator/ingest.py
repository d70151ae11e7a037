# ==============================================================================
# app/calculator/ingest.py
# ------------------------------------------------------------------------------
# Turns an uploaded CSV or Excel file into a plain grid of typed cells.
# Nothing here knows about attendance, salary or sales sheets; the detector and
# the normalizers work on the grid this module produces.
# ==============================================================================

import csv
import io
import logging
import numbers
import os
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import List

import pandas as pd

from .errors import IngestError

# Spreadsheet serial day 0 in the 1900 date system.
EXCEL_EPOCH = datetime(1899, 12, 30)
# Serials before 1 March 1900 are shifted by the phantom 29 February 1900.
EXCEL_LEAP_BUG_SERIAL = 61

_NUMERIC_TEXT = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


# --- Cell variants ---

@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Number:
    value: float


class _Empty:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(_Empty, cls).__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'Empty'

    def __bool__(self):
        return False


EMPTY = _Empty()


@dataclass(frozen=True)
class TabularFile:
    grid: List[list]
    filename: str


# --- Cell helpers ---

def cell_at(row, index):
    """Returns the cell at `index`, or EMPTY for short rows."""
    if 0 <= index < len(row):
        return row[index]
    return EMPTY


def cell_text(cell):
    """String form of a cell, as it would be shown in the sheet."""
    if isinstance(cell, Text):
        return cell.value
    if isinstance(cell, Number):
        if float(cell.value).is_integer():
            return str(int(cell.value))
        return str(cell.value)
    return ''


def is_blank(cell):
    return cell_text(cell).strip() == ''


def cell_number(cell, default=0.0):
    """Numeric value of a cell. Text is parsed with thousands separators removed."""
    if isinstance(cell, Number):
        return cell.value
    if isinstance(cell, Text):
        text = cell.value.replace(',', '').strip()
        try:
            return float(text)
        except ValueError:
            return default
    return default


def datetime_to_serial(value):
    if isinstance(value, datetime):
        moment = value.replace(tzinfo=None)
    else:
        moment = datetime(value.year, value.month, value.day)
    delta = moment - EXCEL_EPOCH
    serial = delta.days + delta.seconds / 86400.0
    if serial < EXCEL_LEAP_BUG_SERIAL:
        serial -= 1
    return serial


def to_cell(value, coerce_numbers=False):
    """Resolves a raw value read by pandas or csv into a Text, Number or EMPTY cell."""
    if value is None:
        return EMPTY
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return EMPTY
        if coerce_numbers and _NUMERIC_TEXT.match(text):
            return Number(float(text))
        return Text(text)
    if isinstance(value, bool):
        return Text(str(value).upper())
    if isinstance(value, (datetime, date)):
        if pd.isna(value):
            return EMPTY
        return Number(datetime_to_serial(value))
    if isinstance(value, numbers.Number):
        if pd.isna(value):
            return EMPTY
        return Number(float(value))
    if pd.isna(value):
        return EMPTY
    text = str(value).strip()
    return Text(text) if text else EMPTY


def _trim(grid):
    rows = []
    for row in grid:
        end = len(row)
        while end > 0 and row[end - 1] is EMPTY:
            end -= 1
        rows.append(row[:end])
    while rows and not rows[-1]:
        rows.pop()
    return rows


def frame_to_grid(df, coerce_numbers=False):
    """Converts a header-less DataFrame into a ragged grid of cells."""
    grid = []
    for values in df.itertuples(index=False, name=None):
        grid.append([to_cell(value, coerce_numbers) for value in values])
    return _trim(grid)


# --- Format readers ---

def _decode(content):
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError:
        logging.warning("File is not valid UTF-8; decoding as latin-1.")
        return content.decode('latin-1')


def _read_delimited(content):
    text = _decode(content)
    sample = text[:4096]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=',;\t|')
    except csv.Error:
        dialect = csv.excel
    rows = list(csv.reader(io.StringIO(text), dialect))
    # Ragged rows are padded with None by the DataFrame constructor.
    return frame_to_grid(pd.DataFrame(rows), coerce_numbers=True)


def _read_workbook(content):
    # Only the first sheet is used; later sheets are ignored.
    df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=object)
    return frame_to_grid(df)


def read_grid(content, filename):
    """
    Decodes an uploaded file into a grid of cells.

    Args:
        content (bytes): The raw file contents.
        filename (str): The declared file name; its extension picks the reader.

    Returns:
        TabularFile: The grid together with the file name.

    Raises:
        IngestError: If the file type is unsupported or the content is unreadable.
    """
    extension = os.path.splitext(filename or '')[1].lower()
    try:
        if extension == '.csv':
            grid = _read_delimited(content)
        elif extension in ('.xlsx', '.xls'):
            grid = _read_workbook(content)
        else:
            raise IngestError(f"Unsupported file type '{extension or 'none'}'. Please upload a CSV or Excel file.",
                              source=filename)
    except IngestError:
        raise
    except Exception as e:
        logging.error(f"Failed to read '{filename}': {e}", exc_info=True)
        raise IngestError(f"Failed to parse file: {e}", source=filename) from e

    logging.info(f"Read '{filename}': {len(grid)} rows.")
    return TabularFile(grid=grid, filename=filename)
