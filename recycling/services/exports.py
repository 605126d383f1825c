"""Export matrices for payment and inventory reports, plus CSV/XLSX writers.

A matrix is a plain list of rows (lists of str / Decimal / int) that can be
written to CSV or to a worksheet unchanged.
"""
from __future__ import annotations

import csv
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO, StringIO
from typing import Iterable, List, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font

from .aggregation import PAPER_CODES, MamaPayment, SupplierSummary
from .normalize import ZERO
from .store import Store, performance_level, sell_rate


Row = List[object]


def period_label(start: date, end: date) -> str:
    return f"Period: {start:%d/%m/%Y} to {end:%d/%m/%Y}"


def export_filename(prefix: str, start: date, end: date, ext: str) -> str:
    return f"{prefix}_{start:%Y_%m_%d}_to_{end:%Y_%m_%d}.{ext}"


def mama_payment_export_rows(payments: Sequence[MamaPayment], start: date, end: date) -> List[Row]:
    body = [[p.mama_name, p.account_number, p.total_amount] for p in payments]
    total = sum((row[2] for row in body), ZERO)
    return [
        ["Mamas Payment Report"],
        [period_label(start, end)],
        [],
        ["Mama Name", "Account Number", "Total Payment (Birr)"],
        *body,
        [],
        ["Total", "", total],
    ]


def janitor_payment_export_rows(suppliers: Sequence[SupplierSummary], start: date, end: date) -> List[Row]:
    header = ["Supplier", "Janitor", "Account", "Collection Type"]
    for code in PAPER_CODES:
        header += [f"{code} (kg)", f"{code} (Birr)"]
    header += ["Total Weight (kg)", "Total Payment (Birr)"]

    body: List[Row] = []
    for supplier in suppliers:
        for janitor in supplier.janitors.values():
            row: Row = [supplier.supplier_name, janitor.janitor_name, janitor.janitor_account, janitor.collection_type]
            for code in PAPER_CODES:
                paper = janitor.paper_types.get(code)
                row += [paper.weight if paper else ZERO, paper.amount if paper else ZERO]
            row += [janitor.total_weight, janitor.total_amount]
            body.append(row)

    totals: Row = ["Total", "", "", ""]
    for col in range(4, len(header)):
        totals.append(sum((row[col] for row in body), ZERO))

    return [
        ["Janitor Payment Report"],
        [period_label(start, end)],
        [],
        header,
        *body,
        [],
        totals,
    ]


def store_export_rows(store: Store, as_of: date) -> List[Row]:
    header = [
        "Paper Type",
        "Total Stock (kg)",
        "Total Bags",
        "Collected This Month (kg)",
        "Sold This Month (kg)",
        "Price per kg (ETB)",
        "Revenue (ETB)",
        "Sales Rate (%)",
        "Performance",
    ]
    body: List[Row] = []
    for item in store.values():
        rate = sell_rate(item)
        body.append([
            item.type,
            item.total_kg,
            item.total_bags,
            item.collected,
            item.sold,
            item.price_per_kg,
            item.revenue,
            rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP),
            performance_level(rate),
        ])
    totals: Row = [
        "Total",
        sum((r[1] for r in body), ZERO),
        sum(r[2] for r in body),
        sum((r[3] for r in body), ZERO),
        sum((r[4] for r in body), ZERO),
        "",
        sum((r[6] for r in body), ZERO),
        "",
        "",
    ]
    return [
        ["Detailed Inventory & Sales Report"],
        [f"As of: {as_of:%d/%m/%Y}"],
        [],
        header,
        *body,
        [],
        totals,
    ]


def rows_to_csv(rows: Iterable[Row]) -> str:
    sio = StringIO()
    writer = csv.writer(sio)
    for row in rows:
        writer.writerow(["" if v is None else v for v in row])
    return sio.getvalue()


def rows_to_xlsx(sheets: Sequence[Tuple[str, Iterable[Row]]]) -> bytes:
    """Write one worksheet per ``(title, rows)`` and return the workbook bytes."""
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets:
        ws = wb.create_sheet(title=title[:31])
        for row in rows:
            ws.append(list(row))
        if ws.max_row >= 1:
            ws.cell(row=1, column=1).font = Font(bold=True, size=14)
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()
