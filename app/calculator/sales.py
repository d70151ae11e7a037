# ==============================================================================
# app/calculator/sales.py
# ------------------------------------------------------------------------------
# Reads daily revenue per channel from a sales sheet and derives net sales.
# ==============================================================================

import logging

from app.models import SalesRecord, SalesSheet
from .dates import parse_sales_date
from .detector import detect_sales_layout
from .errors import NoDataError
from .ingest import cell_at, cell_number, cell_text, is_blank
from .schema import EXPECTED_SHEETS, HEADER_SCAN_ROWS, ONLINE_SALES_FACTOR


def net_sales(cash, card, other, online, online_factor=ONLINE_SALES_FACTOR):
    """Revenue counted toward incentive slabs; online sales are weighted down."""
    return (cash + card + other) + (online * online_factor)


def _is_subtotal(cell):
    text = cell_text(cell).lower().strip()
    return any(keyword in text for keyword in EXPECTED_SHEETS['sales']['skip_row_keywords'])


def parse_sales_sheet(grid, source='Sales sheet', scan_rows=HEADER_SCAN_ROWS):
    """
    Parses a sales sheet into one SalesRecord per data row.

    Rows with an empty date, a subtotal label or an unreadable date are
    skipped. Channel amounts that cannot be read count as 0.

    Raises:
        SchemaError: If the header row is missing.
        NoDataError: If no row produced a record.
    """
    layout = detect_sales_layout(grid, source=source, scan_rows=scan_rows)
    columns = layout.columns
    records = []
    month = year = None

    for offset, row in enumerate(grid[layout.header_row + 1:]):
        excel_row_num = layout.header_row + offset + 2
        date_cell = cell_at(row, columns['date'])
        if is_blank(date_cell) or _is_subtotal(date_cell):
            continue

        parsed = parse_sales_date(date_cell)
        if parsed is None:
            logging.warning(f"{source}: skipping row {excel_row_num}, unreadable date '{cell_text(date_cell)}'.")
            continue

        if month is None:
            month, year = parsed.month, parsed.year

        amounts = {name: cell_number(cell_at(row, columns[name]), default=0.0)
                   for name in EXPECTED_SHEETS['sales']['numeric_columns']}
        record = SalesRecord(
            date=parsed,
            cash=amounts['cash'],
            card=amounts['card'],
            other=amounts['other'],
            online=amounts['online'],
            net_sales=net_sales(amounts['cash'], amounts['card'], amounts['other'], amounts['online']),
        )
        logging.debug(f"{source}: row {excel_row_num} {record.date} net sales {record.net_sales:,.2f}")
        records.append(record)

    if not records:
        raise NoDataError('No valid sales data found in the sheet', source=source)

    logging.info(f"{source}: {len(records)} sales day(s), period {month}/{year}.")
    return SalesSheet(source=source, records=tuple(records), month=month, year=year)
