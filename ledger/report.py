"""Monthly spreadsheet report.

The report is assembled as a DataFrame first (one expense per row, sorted
chronologically, followed by a TOTAL row and a budget summary) and then written
to a single-sheet workbook with openpyxl.
"""

from datetime import date as _date
from io import BytesIO
from typing import Iterable, List, Optional, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from ledger import aggregation as agg
from ledger.domain import Category, Expense
from ledger.months import month_name

COLUMNS = ["Date", "Category", "Description", "Amount"]
COLUMN_WIDTHS = [12, 20, 30, 12]
EMPTY_DESCRIPTION = "-"


def display_date(iso_date: str) -> str:
    d = _date.fromisoformat(iso_date)
    return f"{d:%b} {d.day}, {d.year}"


def money(x) -> str:
    return f"${x:.2f}"


def _row(date: Optional[str] = None, category: Optional[str] = None,
         description: Optional[str] = None, amount=None) -> dict:
    return dict(zip(COLUMNS, (date, category, description, amount)))


def build_report_frame(month_expenses: Iterable[Expense], categories: Sequence[Category]) -> pd.DataFrame:
    month_expenses = sorted(month_expenses, key=lambda e: e.date)
    spent_total = agg.total_spent(month_expenses)
    budget_total = agg.total_budget(categories)

    rows: List[dict] = [
        _row(
            display_date(e.date),
            agg.category_name(categories, e.category_id),
            e.description or EMPTY_DESCRIPTION,
            e.amount,
        )
        for e in month_expenses
    ]

    rows.append(_row())
    rows.append(_row("", "", "TOTAL", spent_total))
    rows.append(_row())
    rows.append(_row("", "Budget Summary", "", ""))

    for c in categories:
        spent = agg.category_spent(c.id, month_expenses)
        if spent > 0 or c.budget > 0:
            rows.append(_row("", c.name, f"{money(spent)} / {money(c.budget)}", spent))

    rows.append(_row())
    rows.append(_row("", "Total Budget", f"{money(spent_total)} / {money(budget_total)}", budget_total))

    return pd.DataFrame(rows, columns=COLUMNS, dtype=object)


def sheet_title(month: str) -> str:
    return month_name(month)


def report_filename(month: str) -> str:
    return f"Budget_{month}_{sheet_title(month).replace(' ', '_')}.xlsx"


def write_workbook(frame: pd.DataFrame, month: str) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title(month)

    for r in dataframe_to_rows(frame, index=False, header=True):
        ws.append([None if pd.isna(v) else v for v in r])

    for idx, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width

    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()
