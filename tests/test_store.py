from decimal import Decimal

import pytest

from ledger.domain import Category, Expense, DEFAULT_CATEGORIES
from ledger.events import CATEGORIES_CHANGED, EXPENSES_CHANGED
from ledger.store import EntityStore, append_record, replace_record, without


def make_store():
    cats = (
        Category("c1", "Groceries", Decimal("500"), "#10b981", "🛒"),
        Category("c2", "Transport", Decimal("200"), "#3b82f6", "🚗"),
    )
    exps = (
        Expense("e1", "c1", Decimal("120"), "market", "2024-02-03"),
        Expense("e2", "c1", Decimal("80"), "", "2024-02-10"),
        Expense("e3", "c2", Decimal("15"), "bus", "2024-02-11"),
    )
    return EntityStore(cats, exps)


def test_default_store_holds_template():
    store = EntityStore()
    assert store.categories == DEFAULT_CATEGORIES
    assert store.expenses == ()


def test_add_category_assigns_fresh_id():
    store = make_store()
    a = store.add_category("Gym", "40", "#000000", "🏋")
    b = store.add_category("Gym", "40", "#000000", "🏋")

    assert a.id != b.id
    assert a.budget == Decimal("40")
    assert store.categories[-2:] == (a, b)


def test_update_category_merges_fields():
    store = make_store()
    updated = store.update_category("c1", budget=650, name="Food")

    assert updated.id == "c1"
    assert updated.name == "Food"
    assert updated.budget == Decimal("650")
    assert updated.color == "#10b981"
    assert store.categories[0] == updated


def test_update_category_rejects_unknown_id_and_id_change():
    store = make_store()
    with pytest.raises(KeyError):
        store.update_category("missing", name="x")
    with pytest.raises(ValueError):
        store.update_category("c1", id="c9")


def test_delete_category_cascades_to_expenses():
    store = make_store()
    store.delete_category("c1")

    assert [c.id for c in store.categories] == ["c2"]
    assert [e.id for e in store.expenses] == ["e3"]


def test_delete_category_is_atomic_for_observers():
    store = make_store()
    seen = []

    def observer(event, payload):
        seen.append(([c.id for c in store.categories], [e.id for e in store.expenses]))
        return {}

    store.subscribe(CATEGORIES_CHANGED, observer)
    store.subscribe(EXPENSES_CHANGED, observer)
    store.delete_category("c1")

    assert seen
    assert all(state == (["c2"], ["e3"]) for state in seen)


def test_delete_unknown_category_is_noop():
    store = make_store()
    events = []
    store.subscribe(CATEGORIES_CHANGED, lambda e, p: events.append(e) or {})
    store.delete_category("nope")

    assert len(store.categories) == 2
    assert events == []


def test_delete_missing_category_still_purges_its_expenses():
    store = EntityStore(
        (Category("c2", "Transport", Decimal("200"), "#3b82f6", "🚗"),),
        (
            Expense("e1", "c1", Decimal("120"), "market", "2024-02-03"),
            Expense("e3", "c2", Decimal("15"), "bus", "2024-02-11"),
        ),
    )
    events = []
    store.subscribe(CATEGORIES_CHANGED, lambda e, p: events.append(e) or {})
    store.subscribe(EXPENSES_CHANGED, lambda e, p: events.append(e) or {})

    store.delete_category("c1")

    assert [e.id for e in store.expenses] == ["e3"]
    assert len(store.categories) == 1
    assert events == [EXPENSES_CHANGED]


def test_add_and_delete_expense_without_cascade():
    store = make_store()
    e = store.add_expense("c2", "9.99", "", "2024-03-01")
    assert e.amount == Decimal("9.99")
    assert e in store.expenses

    store.delete_expense(e.id)
    assert e not in store.expenses
    assert len(store.categories) == 2


def test_update_expense():
    store = make_store()
    updated = store.update_expense("e2", amount="85.50", description="fix")
    assert updated.amount == Decimal("85.50")
    assert updated.description == "fix"
    assert updated.date == "2024-02-10"


def test_reset_restores_template():
    store = make_store()
    store.add_expense("c1", 5, "x", "2024-01-01")
    store.reset()

    assert store.categories == DEFAULT_CATEGORIES
    assert store.expenses == ()


def test_mutation_publishes_full_collection():
    store = make_store()
    payloads = []
    store.subscribe(EXPENSES_CHANGED, lambda e, p: payloads.append(p) or {})
    store.add_expense("c1", 1, "", "2024-02-01")

    assert len(payloads) == 1
    assert payloads[0]["expenses"] == store.expenses


def test_record_transforms_return_new_tuples():
    e1 = Expense("e1", "c1", Decimal("1"), "", "2024-01-01")
    e2 = Expense("e2", "c1", Decimal("2"), "", "2024-01-02")
    records = (e1,)

    grown = append_record(records, e2)
    assert grown is not records
    assert records == (e1,)

    changed = Expense("e1", "c1", Decimal("5"), "", "2024-01-01")
    assert replace_record(grown, changed) == (changed, e2)
    assert without(grown, lambda r: r.id == "e1") == (e2,)


def test_get_category_tolerates_missing():
    store = make_store()
    assert store.get_category("c1").is_some()
    assert store.get_category("zzz").is_none()
