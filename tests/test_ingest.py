# tests/test_ingest.py

from datetime import datetime

import pytest

from app.calculator.dates import parse_attendance_date
from app.calculator.errors import IngestError, ParseError
from app.calculator.ingest import (EMPTY, Number, Text, cell_at, cell_number, cell_text,
                                   datetime_to_serial, read_grid)


def test_csv_cells_are_typed_once(csv_bytes):
    content = csv_bytes([['Name', 'Salary'], ['Mohan', 17000], ['Ravi', '']])
    grid = read_grid(content, 'salary.csv').grid

    assert grid[0] == [Text('Name'), Text('Salary')]
    assert grid[1] == [Text('Mohan'), Number(17000.0)]
    # Trailing empty cells are trimmed, leaving a short row.
    assert grid[2] == [Text('Ravi')]
    assert cell_at(grid[2], 1) is EMPTY


def test_csv_drops_trailing_blank_rows_and_keeps_inner_ones():
    content = b'Title\n\nName,Salary\nMohan,100\n,\n\n'
    grid = read_grid(content, 'salary.csv').grid

    assert len(grid) == 4
    assert grid[1] == []
    assert grid[-1] == [Text('Mohan'), Number(100.0)]


def test_csv_handles_ragged_rows():
    content = b'Date,Cash\n2024-03-01,10,extra,cells\n'
    grid = read_grid(content, 'sales.csv').grid

    assert grid[0] == [Text('Date'), Text('Cash')]
    assert grid[1] == [Text('2024-03-01'), Number(10.0), Text('extra'), Text('cells')]


def test_csv_delimiter_is_sniffed():
    content = b'Date;Cash;Card\n2024-03-01;10;20\n2024-03-02;30;40\n'
    grid = read_grid(content, 'sales.csv').grid

    assert grid[0] == [Text('Date'), Text('Cash'), Text('Card')]
    assert grid[2] == [Text('2024-03-02'), Number(30.0), Number(40.0)]


def test_csv_with_bom_and_latin1_fallback():
    assert read_grid('﻿Name\n'.encode('utf-8'), 'a.csv').grid == [[Text('Name')]]
    assert read_grid('José\n'.encode('latin-1'), 'b.csv').grid == [[Text('José')]]


def test_xlsx_reads_first_sheet_and_converts_dates_to_serials(xlsx_bytes):
    content = xlsx_bytes([
        ['Day', 'Date', 'Mohan'],
        ['Friday', datetime(2024, 3, 1), 'P'],
    ])
    tabular = read_grid(content, 'outlet1.xlsx')

    assert tabular.filename == 'outlet1.xlsx'
    date_cell = tabular.grid[1][1]
    assert isinstance(date_cell, Number)
    assert date_cell.value == 45352
    assert str(parse_attendance_date(date_cell)) == '01/03/2024'


def test_unsupported_extension_is_an_ingest_error():
    with pytest.raises(IngestError) as excinfo:
        read_grid(b'whatever', 'notes.txt')
    assert 'notes.txt' in str(excinfo.value)


def test_corrupt_workbook_names_the_file():
    with pytest.raises(ParseError) as excinfo:
        read_grid(b'not really a workbook', 'salary.xlsx')
    assert excinfo.value.source == 'salary.xlsx'
    assert 'salary.xlsx' in str(excinfo.value)


def test_cell_helpers():
    assert cell_text(Number(17000.0)) == '17000'
    assert cell_text(Number(0.5)) == '0.5'
    assert cell_text(EMPTY) == ''
    assert cell_number(Text('1,250.50')) == 1250.5
    assert cell_number(Text('n/a')) == 0.0
    assert cell_number(EMPTY, default=3.0) == 3.0


def test_serial_conversion_handles_the_1900_leap_bug():
    assert datetime_to_serial(datetime(1900, 1, 1)) == 1
    assert datetime_to_serial(datetime(1900, 3, 1)) == 61
    assert datetime_to_serial(datetime(2024, 1, 1)) == 45292
