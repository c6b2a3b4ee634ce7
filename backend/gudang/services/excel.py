import io
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from ..models import Transaction, TransactionType

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE = "Stock Transactions"

# header, column width
COLUMNS = [
    ("Date", 18),
    ("Type", 10),
    ("Product", 30),
    ("Variation", 20),
    ("Quantity", 10),
    ("User", 20),
    ("Notes", 30),
]

TYPE_LABELS = {
    TransactionType.stock_in: "Stock In",
    TransactionType.stock_out: "Stock Out",
    TransactionType.stock_return: "Return",
    TransactionType.cancel: "Cancel",
}

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE6F3FF")


def transaction_row(entry: Transaction) -> list:
    variation = entry.variation
    product = variation.product if variation else None
    return [
        entry.created_at,
        TYPE_LABELS.get(entry.type, str(entry.type)),
        product.name if product else "",
        variation.label if variation else "Default",
        entry.quantity,
        entry.user.name if entry.user else "",
        entry.notes or "",
    ]


def build_transactions_workbook(entries: Iterable[Transaction]) -> bytes:
    """One row per ledger entry under a styled header row; returns the .xlsx bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append([header for header, _ in COLUMNS])
    for idx, (_, width) in enumerate(COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL

    for entry in entries:
        ws.append(transaction_row(entry))
        ws.cell(row=ws.max_row, column=1).number_format = "yyyy-mm-dd hh:mm"

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def report_filename(start: str, end: str) -> str:
    return f"stock-report-{start}-{end}.xlsx"
