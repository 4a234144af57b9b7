from decimal import Decimal

from ledger.domain import Category
from ledger.functional import Left, Nothing, Right, Some, safe_category
from ledger.validation import check_password, check_signup, password_problems


def test_strong_password_passes():
    result = check_password("Str0ng!pass")
    assert result.is_right()
    assert result.get_or_else(None) == "Str0ng!pass"


def test_each_rule_reports_its_own_message():
    problems = password_problems("abc")
    assert problems == [
        "Password must be at least 8 characters",
        "Password must contain at least one uppercase letter",
        "Password must contain at least one number",
        "Password must contain at least one special character",
    ]


def test_symbol_must_come_from_fixed_set():
    assert password_problems("Abcdefg1~") == ["Password must contain at least one special character"]
    assert password_problems("Abcdefg1{") == []


def test_check_signup_requires_fields():
    result = check_signup("", "Str0ng!pass")
    assert result.is_left()
    assert result.get_error() == ["Email and password are required"]


def test_check_signup_passes_through_policy_errors():
    result = check_signup("a@b.c", "short")
    assert result.is_left()
    assert "Password must be at least 8 characters" in result.get_error()

    ok = check_signup(" a@b.c ", "Str0ng!pass")
    assert ok == Right(("a@b.c", "Str0ng!pass"))


def test_maybe_and_either_basics():
    assert Some(2).map(lambda x: x * 2) == Some(4)
    assert Nothing().map(lambda x: x * 2).is_none()
    assert Nothing().get_or_else(7) == 7
    assert Left(["bad"]).get_or_else("x") == "x"
    assert Left(["bad"]).is_left()


def test_safe_category():
    cats = (Category("g", "Groceries", Decimal("1"), "#fff", "🛒"),)
    assert safe_category(cats, "g").is_some()
    assert safe_category(cats, "zzz") == Nothing()
