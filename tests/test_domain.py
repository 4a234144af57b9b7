from decimal import Decimal

from ledger.domain import (
    Category,
    Expense,
    DEFAULT_CATEGORIES,
    category_from_dict,
    category_to_dict,
    expense_from_dict,
    expense_to_dict,
    to_decimal,
)
from ledger.events import EventBus


def test_default_categories():
    assert [c.name for c in DEFAULT_CATEGORIES] == [
        "Groceries", "Transportation", "Entertainment", "Utilities", "Dining Out",
    ]
    assert [c.id for c in DEFAULT_CATEGORIES] == ["1", "2", "3", "4", "5"]
    assert DEFAULT_CATEGORIES[0].budget == Decimal("500")


def test_expense_wire_format_uses_camel_case():
    e = Expense("e1", "c1", Decimal("19.99"), "", "2024-02-03")
    d = expense_to_dict(e)

    assert d == {"id": "e1", "categoryId": "c1", "amount": 19.99, "description": "", "date": "2024-02-03"}
    assert expense_from_dict(d).amount == Decimal("19.99")


def test_integral_amounts_stay_integers():
    c = Category("c1", "Rent", Decimal("1200"), "#000000", "🏠")
    assert category_to_dict(c)["budget"] == 1200
    assert isinstance(category_to_dict(c)["budget"], int)


def test_from_dict_tolerates_missing_optional_fields():
    e = expense_from_dict({"id": 17, "categoryId": "c1", "amount": 3, "date": "2024-01-01"})
    assert e.id == "17"
    assert e.description == ""

    c = category_from_dict({"id": "x", "name": "Misc", "budget": "0"})
    assert c.budget == 0
    assert c.icon == ""


def test_to_decimal():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("2.50") == Decimal("2.50")


def test_event_bus_publish_and_unsubscribe():
    bus = EventBus()

    def handler(event, payload):
        return {"seen": payload["n"], "name": event.name}

    bus.subscribe("X", handler)
    assert bus.publish("X", {"n": 1}) == [{"seen": 1, "name": "X"}]
    assert bus.publish("Y", {"n": 1}) == []

    bus.unsubscribe("X", handler)
    assert bus.publish("X", {"n": 2}) == []
