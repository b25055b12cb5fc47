"""Tests for the category catalog."""
import pytest
from pydantic import ValidationError

from dompet.models.transaction import TransactionKind
from dompet.services.catalog import (
    FALLBACK_ICON,
    all_expense_categories,
    all_income_categories,
    describe,
    is_valid_category,
    lookup,
)


def test_catalog_sizes_and_kinds():
    """Income and expense catalogs are disjoint and tagged with their kind."""
    income = all_income_categories()
    expense = all_expense_categories()

    assert len(income) == 7
    assert len(expense) == 21
    assert all(c.kind == TransactionKind.INCOME for c in income)
    assert all(c.kind == TransactionKind.EXPENSE for c in expense)
    assert not {c.code for c in income} & {c.code for c in expense}


def test_lookup_known_code():
    entry = lookup("food")
    assert entry is not None
    assert entry.label == "Jajan/Makanan"
    assert entry.icon == "🍔"
    assert entry.kind == TransactionKind.EXPENSE


def test_lookup_respects_kind():
    """A code only resolves inside its own catalog when a kind is given."""
    assert lookup("salary", "income") is not None
    assert lookup("salary", TransactionKind.EXPENSE) is None
    assert lookup("food", "bogus") is None


def test_lookup_unknown_returns_none():
    assert lookup("crypto") is None
    assert lookup("") is None
    assert lookup(None) is None


def test_describe_falls_back_for_unknown_code():
    """Unknown codes never raise; they render with the raw code and a generic icon."""
    assert describe("transport") == ("Transportasi", "🚗")
    assert describe("crypto") == ("crypto", FALLBACK_ICON)
    assert describe(None) == ("other", FALLBACK_ICON)


def test_is_valid_category():
    assert is_valid_category("freelance", "income")
    assert not is_valid_category("freelance", "expense")
    assert not is_valid_category("nope", "expense")


def test_catalog_entries_are_immutable():
    entry = lookup("food")
    with pytest.raises(ValidationError):
        entry.label = "changed"
    assert lookup("food").label == "Jajan/Makanan"
