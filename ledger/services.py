from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, NamedTuple, Sequence, Tuple

from ledger import aggregation as agg
from ledger import report
from ledger.domain import Category, Expense
from ledger.errors import PreconditionError


class CategoryStatus(NamedTuple):
    category: Category
    spent: Decimal
    percentage: Decimal
    over_budget: bool
    over_amount: Decimal


Calculator = Callable[[str, Tuple[Expense, ...], Tuple[Category, ...], Dict[str, Any]], Dict[str, Any]]


def calc_totals(month, expenses, categories, acc):
    budget = agg.total_budget(categories)
    spent = agg.total_spent(expenses)
    return {
        "total_budget": budget,
        "total_spent": spent,
        "remaining": agg.remaining(budget, spent),
        "percentage_used": agg.percentage_used(spent, budget),
    }


def calc_category_status(month, expenses, categories, acc):
    statuses = []
    for c in categories:
        spent = agg.category_spent(c.id, expenses)
        statuses.append(CategoryStatus(
            category=c,
            spent=spent,
            percentage=agg.percentage_used(spent, c.budget),
            over_budget=agg.is_over_budget(c, spent),
            over_amount=agg.over_amount(c, spent),
        ))
    return {"category_status": tuple(statuses)}


def calc_breakdown(month, expenses, categories, acc):
    return {"breakdown": agg.spending_breakdown(categories, expenses)}


DEFAULT_CALCULATORS: Tuple[Calculator, ...] = (calc_totals, calc_category_status, calc_breakdown)


class BudgetService:
    """Month view over the store's collections using injected calculators.

    calculators: functions taking (month, month_expenses, categories, acc) -> dict,
    run in order; ``acc`` holds everything earlier calculators produced.
    """

    def __init__(self, calculators: Sequence[Calculator] = DEFAULT_CALCULATORS):
        self.calculators = calculators

    def monthly_report(
        self, month: str, expenses: Iterable[Expense], categories: Iterable[Category]
    ) -> Dict[str, Any]:
        month_expenses = agg.expenses_in_month(expenses, month)
        categories = tuple(categories)
        view = {"month": month, "expenses": agg.sort_by_date_desc(month_expenses), "steps": [], "result": {}}

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(month, month_expenses, categories, acc)
            view["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            acc.update(out)

        view["result"] = acc
        return view


class ReportService:
    """Spreadsheet export of one month."""

    def export_month(
        self, month: str, expenses: Iterable[Expense], categories: Iterable[Category]
    ) -> Tuple[str, bytes]:
        month_expenses = agg.expenses_in_month(expenses, month)
        if not month_expenses:
            raise PreconditionError(f"No expenses to download for {month}")
        frame = report.build_report_frame(month_expenses, tuple(categories))
        return report.report_filename(month), report.write_workbook(frame, month)
