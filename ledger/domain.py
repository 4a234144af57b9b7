from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Final


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    budget: Decimal  # evergreen, not per month
    color: str       # "#rrggbb"
    icon: str


@dataclass(frozen=True)
class Expense:
    id: str
    category_id: str  # weak reference, may dangle
    amount: Decimal
    description: str  # may be empty
    date: str         # "YYYY-MM-DD"


UNKNOWN_CATEGORY: Final[Category] = Category(
    id="", name="Unknown", budget=Decimal("0"), color="#94a3b8", icon="❔"
)

DEFAULT_CATEGORIES: Final[tuple[Category, ...]] = (
    Category("1", "Groceries", Decimal("500"), "#10b981", "🛒"),
    Category("2", "Transportation", Decimal("200"), "#3b82f6", "🚗"),
    Category("3", "Entertainment", Decimal("150"), "#8b5cf6", "🎬"),
    Category("4", "Utilities", Decimal("300"), "#f59e0b", "⚡"),
    Category("5", "Dining Out", Decimal("250"), "#ef4444", "🍽️"),
)


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _to_number(value: Decimal) -> int | float:
    # JSON has no decimal type; integral values stay integers
    return int(value) if value == value.to_integral_value() else float(value)


def category_to_dict(c: Category) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "budget": _to_number(c.budget),
        "color": c.color,
        "icon": c.icon,
    }


def category_from_dict(d: dict) -> Category:
    return Category(
        id=str(d["id"]),
        name=d.get("name", ""),
        budget=to_decimal(d.get("budget", 0)),
        color=d.get("color", UNKNOWN_CATEGORY.color),
        icon=d.get("icon", ""),
    )


def expense_to_dict(e: Expense) -> dict:
    return {
        "id": e.id,
        "categoryId": e.category_id,
        "amount": _to_number(e.amount),
        "description": e.description,
        "date": e.date,
    }


def expense_from_dict(d: dict) -> Expense:
    return Expense(
        id=str(d["id"]),
        category_id=str(d.get("categoryId", "")),
        amount=to_decimal(d.get("amount", 0)),
        description=d.get("description") or "",
        date=d["date"],
    )
