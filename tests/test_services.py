from decimal import Decimal

import pytest

from ledger.domain import Category, Expense
from ledger.errors import PreconditionError
from ledger.services import BudgetService, ReportService, calc_totals


def make_sample():
    cats = (
        Category("g", "Groceries", Decimal("500"), "#10b981", "🛒"),
        Category("f", "Fun", Decimal("0"), "#8b5cf6", "🎬"),
    )
    exps = (
        Expense("e1", "g", Decimal("120"), "market", "2024-02-03"),
        Expense("e2", "g", Decimal("80"), "", "2024-02-10"),
        Expense("e3", "f", Decimal("30"), "cinema", "2024-03-01"),
    )
    return cats, exps


def test_monthly_report_totals():
    cats, exps = make_sample()
    rpt = BudgetService().monthly_report("2024-02", exps, cats)

    assert rpt["month"] == "2024-02"
    assert [e.id for e in rpt["expenses"]] == ["e2", "e1"]
    result = rpt["result"]
    assert result["total_spent"] == 200
    assert result["total_budget"] == 500
    assert result["remaining"] == 300
    assert result["percentage_used"] == 40


def test_monthly_report_category_status():
    cats, exps = make_sample()
    statuses = BudgetService().monthly_report("2024-03", exps, cats)["result"]["category_status"]

    groceries, fun = statuses
    assert groceries.spent == 0
    assert not groceries.over_budget
    assert fun.spent == 30
    assert fun.percentage == 0
    assert fun.over_budget
    assert fun.over_amount == 30


def test_monthly_report_records_steps():
    cats, exps = make_sample()
    rpt = BudgetService().monthly_report("2024-02", exps, cats)

    names = [s["calculator"] for s in rpt["steps"]]
    assert names == ["calc_totals", "calc_category_status", "calc_breakdown"]
    assert [b.name for b in rpt["result"]["breakdown"]] == ["Groceries"]


def test_custom_calculators_see_earlier_results():
    def calc_flag(month, expenses, categories, acc):
        return {"over": acc["remaining"] < 0}

    cats, exps = make_sample()
    svc = BudgetService(calculators=[calc_totals, calc_flag])
    rpt = svc.monthly_report("2024-03", exps, cats)

    assert rpt["result"]["remaining"] == 470
    assert rpt["result"]["over"] is False


def test_export_month_requires_expenses():
    cats, exps = make_sample()
    with pytest.raises(PreconditionError):
        ReportService().export_month("2023-01", exps, cats)


def test_export_month_returns_named_workbook():
    cats, exps = make_sample()
    name, payload = ReportService().export_month("2024-02", exps, cats)

    assert name == "Budget_2024-02_February_2024.xlsx"
    assert payload[:2] == b"PK"
