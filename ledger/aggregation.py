from decimal import Decimal
from functools import reduce
from typing import Iterable, NamedTuple, Tuple

from ledger.domain import UNKNOWN_CATEGORY, Category, Expense
from ledger.functional import safe_category
from ledger.months import by_month

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class BreakdownItem(NamedTuple):
    name: str
    spent: Decimal
    color: str


def expenses_in_month(expenses: Iterable[Expense], month: str) -> Tuple[Expense, ...]:
    return tuple(filter(by_month(month), expenses))


def category_spent(cat_id: str, month_expenses: Iterable[Expense]) -> Decimal:
    return reduce(
        lambda acc, e: acc + e.amount if e.category_id == cat_id else acc,
        month_expenses,
        ZERO,
    )


def total_budget(categories: Iterable[Category]) -> Decimal:
    return reduce(lambda acc, c: acc + c.budget, categories, ZERO)


def total_spent(month_expenses: Iterable[Expense]) -> Decimal:
    return reduce(lambda acc, e: acc + e.amount, month_expenses, ZERO)


def remaining(budget: Decimal, spent: Decimal) -> Decimal:
    return budget - spent


def percentage_used(spent: Decimal, budget: Decimal) -> Decimal:
    if budget <= 0:
        return ZERO
    return spent / budget * HUNDRED


def is_over_budget(category: Category, spent: Decimal) -> bool:
    return spent > category.budget


def over_amount(category: Category, spent: Decimal) -> Decimal:
    return max(spent - category.budget, ZERO)


def sort_by_date_desc(expenses: Iterable[Expense]) -> Tuple[Expense, ...]:
    return tuple(sorted(expenses, key=lambda e: e.date, reverse=True))


def category_name(categories: Iterable[Category], cat_id: str) -> str:
    return safe_category(categories, cat_id).map(lambda c: c.name).get_or_else(UNKNOWN_CATEGORY.name)


def spending_breakdown(
    categories: Iterable[Category], month_expenses: Iterable[Expense]
) -> Tuple[BreakdownItem, ...]:
    month_expenses = tuple(month_expenses)
    items = (
        BreakdownItem(c.name, category_spent(c.id, month_expenses), c.color)
        for c in categories
    )
    return tuple(item for item in items if item.spent > 0)
