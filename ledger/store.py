"""In-memory entity store for categories and expenses.

Collections are held as tuples and replaced on every mutation, so a reader
holding a previous snapshot never sees it change. Each mutation publishes
``CATEGORIES_CHANGED`` and/or ``EXPENSES_CHANGED`` on the store's bus once the
new state is fully in place.
"""

import logging
from dataclasses import replace
from typing import Callable, Iterable, Tuple, TypeVar
from uuid import uuid4

from ledger.domain import Category, Expense, DEFAULT_CATEGORIES, to_decimal
from ledger.events import CATEGORIES_CHANGED, EXPENSES_CHANGED, Event, EventBus
from ledger.functional import Maybe, safe_category

logger = logging.getLogger(__name__)

R = TypeVar('R', Category, Expense)

_DECIMAL_FIELDS = {"budget", "amount"}


def new_id() -> str:
    return uuid4().hex


def append_record(records: Tuple[R, ...], record: R) -> Tuple[R, ...]:
    return records + (record,)


def replace_record(records: Tuple[R, ...], record: R) -> Tuple[R, ...]:
    return tuple(record if r.id == record.id else r for r in records)


def without(records: Tuple[R, ...], pred: Callable[[R], bool]) -> Tuple[R, ...]:
    return tuple(r for r in records if not pred(r))


def _find(records: Tuple[R, ...], record_id: str) -> R:
    for r in records:
        if r.id == record_id:
            return r
    raise KeyError(record_id)


def _merge(record: R, changes: dict) -> R:
    if "id" in changes:
        raise ValueError("id is immutable")
    fields = {
        k: to_decimal(v) if k in _DECIMAL_FIELDS else v
        for k, v in changes.items()
    }
    return replace(record, **fields)


class EntityStore:

    def __init__(
        self,
        categories: Iterable[Category] = DEFAULT_CATEGORIES,
        expenses: Iterable[Expense] = (),
        bus: EventBus | None = None,
    ):
        self.bus = bus or EventBus()
        self._categories: Tuple[Category, ...] = tuple(categories)
        self._expenses: Tuple[Expense, ...] = tuple(expenses)

    @property
    def categories(self) -> Tuple[Category, ...]:
        return self._categories

    @property
    def expenses(self) -> Tuple[Expense, ...]:
        return self._expenses

    def subscribe(self, kind: str, handler: Callable[[Event, dict], dict]) -> None:
        self.bus.subscribe(kind, handler)

    def get_category(self, category_id: str) -> Maybe[Category]:
        return safe_category(self._categories, category_id)

    # categories

    def add_category(self, name: str, budget, color: str, icon: str) -> Category:
        category = Category(
            id=new_id(), name=name, budget=to_decimal(budget), color=color, icon=icon
        )
        self._categories = append_record(self._categories, category)
        self._categories_changed()
        return category

    def update_category(self, category_id: str, **changes) -> Category:
        updated = _merge(_find(self._categories, category_id), changes)
        self._categories = replace_record(self._categories, updated)
        self._categories_changed()
        return updated

    def delete_category(self, category_id: str) -> None:
        # both collections are swapped before anyone is notified
        categories = without(self._categories, lambda c: c.id == category_id)
        expenses = without(self._expenses, lambda e: e.category_id == category_id)
        removed_category = len(categories) != len(self._categories)
        removed_expenses = len(self._expenses) - len(expenses)
        self._categories, self._expenses = categories, expenses
        logger.debug(
            "Deleted category %s with %d expense(s)", category_id, removed_expenses
        )
        if removed_category:
            self._categories_changed()
        if removed_expenses:
            self._expenses_changed()

    # expenses

    def add_expense(self, category_id: str, amount, description: str, date: str) -> Expense:
        expense = Expense(
            id=new_id(),
            category_id=category_id,
            amount=to_decimal(amount),
            description=description or "",
            date=date,
        )
        self._expenses = append_record(self._expenses, expense)
        self._expenses_changed()
        return expense

    def update_expense(self, expense_id: str, **changes) -> Expense:
        updated = _merge(_find(self._expenses, expense_id), changes)
        self._expenses = replace_record(self._expenses, updated)
        self._expenses_changed()
        return updated

    def delete_expense(self, expense_id: str) -> None:
        before = len(self._expenses)
        self._expenses = without(self._expenses, lambda e: e.id == expense_id)
        if len(self._expenses) != before:
            self._expenses_changed()

    # wholesale

    def replace(self, categories: Iterable[Category], expenses: Iterable[Expense]) -> None:
        self._categories = tuple(categories)
        self._expenses = tuple(expenses)
        self._categories_changed()
        self._expenses_changed()

    def reset(self) -> None:
        self.replace(DEFAULT_CATEGORIES, ())

    def _categories_changed(self) -> None:
        self.bus.publish(CATEGORIES_CHANGED, {"categories": self._categories})

    def _expenses_changed(self) -> None:
        self.bus.publish(EXPENSES_CHANGED, {"expenses": self._expenses})
