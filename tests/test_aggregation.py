"""Tests for the monthly reports of the aggregation engine."""
from datetime import date

import pytest

from dompet.models.transaction import Transaction, TransactionKind
from dompet.services.aggregation import (
    category_pivot,
    expense_breakdown,
    filter_transactions,
    ledger,
    monthly_totals,
    person_comparison,
    snapshot,
    top_expenses,
    trend,
)


def make_tx(tx_id, kind, category, amount, day, owner="aegg", description=None, subtitle=None):
    return Transaction(
        id=tx_id,
        owner=owner,
        kind=kind,
        category=category,
        amount=amount,
        date=date.fromisoformat(day),
        description=description,
        subtitle=subtitle,
    )


@pytest.fixture
def march_transactions():
    """The three-transaction March 2026 scenario, deliberately out of date order."""
    return [
        make_tx("t1", "expense", "food", 50000, "2026-03-02"),
        make_tx("t2", "income", "salary", 500000, "2026-03-01", description="Gaji Maret"),
        make_tx("t3", "expense", "transport", 20000, "2026-03-05", owner="peppaa"),
    ]


@pytest.fixture
def mixed_transactions(march_transactions):
    """March plus neighbouring months and a different year."""
    return march_transactions + [
        make_tx("t4", "expense", "food", 15000, "2026-02-28"),
        make_tx("t5", "income", "freelance", 250000, "2026-04-01"),
        make_tx("t6", "expense", "food", 99999, "2025-03-10"),
    ]


def test_monthly_totals_end_to_end(march_transactions):
    """Income, expense and balance for the March scenario."""
    totals = monthly_totals(march_transactions, 2026, 3)

    assert totals.income == 500000
    assert totals.expense == 70000
    assert totals.balance == 430000
    assert totals.count == 3
    assert totals.savings_rate == pytest.approx(86.0)
    assert totals.skipped == 0


def test_monthly_totals_filters_by_month_and_year(mixed_transactions):
    totals = monthly_totals(mixed_transactions, 2026, 3)
    assert (totals.income, totals.expense, totals.balance) == (500000, 70000, 430000)

    feb = monthly_totals(mixed_transactions, 2026, 2)
    assert (feb.income, feb.expense, feb.balance) == (0, 15000, -15000)
    assert feb.savings_rate == 0.0


def test_monthly_totals_empty_month_is_zero():
    totals = monthly_totals([], 2026, 7)
    assert (totals.income, totals.expense, totals.balance) == (0, 0, 0)
    assert totals.count == 0


def test_monthly_totals_rejects_bad_month():
    with pytest.raises(ValueError):
        monthly_totals([], 2026, 0)


def test_ledger_end_to_end(march_transactions):
    """Rows come out in date order with the balance after each row."""
    result = ledger(march_transactions, 2026, 3)

    assert [r.transaction_id for r in result.rows] == ["t2", "t1", "t3"]
    assert [r.date for r in result.rows] == [date(2026, 3, 1), date(2026, 3, 2), date(2026, 3, 5)]
    assert [(r.in_amount, r.out_amount) for r in result.rows] == [(500000, 0), (0, 50000), (0, 20000)]
    assert [r.running_balance for r in result.rows] == [500000, 450000, 430000]
    assert result.total_in == 500000
    assert result.total_out == 70000
    assert result.final_balance == 430000


def test_ledger_running_balance_is_consistent(mixed_transactions):
    rows = ledger(mixed_transactions, 2026, 3).rows
    assert rows[0].running_balance == rows[0].in_amount - rows[0].out_amount
    for prev, row in zip(rows, rows[1:]):
        assert row.running_balance == prev.running_balance + row.in_amount - row.out_amount


def test_ledger_same_day_keeps_input_order():
    transactions = [
        make_tx("b", "expense", "food", 10, "2026-05-03"),
        make_tx("a", "income", "gift", 100, "2026-05-03"),
        make_tx("c", "expense", "food", 5, "2026-05-01"),
    ]
    rows = ledger(transactions, 2026, 5).rows
    assert [r.transaction_id for r in rows] == ["c", "b", "a"]
    assert [r.running_balance for r in rows] == [-5, -15, 85]


def test_ledger_label_falls_back_to_category(march_transactions):
    rows = ledger(march_transactions, 2026, 3).rows
    assert rows[0].label == "Gaji Maret"
    assert rows[1].label == "Jajan/Makanan"
    assert rows[1].category_tag == "food"


def test_ledger_empty_month():
    result = ledger([], 2026, 3)
    assert result.rows == []
    assert result.final_balance == 0


def test_category_pivot_percentages(march_transactions):
    pivot = category_pivot(march_transactions, 2026, 3)

    assert pivot.count == 3
    assert pivot.total_income == 500000
    assert pivot.total_expense == 70000
    assert [r.category for r in pivot.rows] == ["salary", "food", "transport"]

    food = pivot.rows[1]
    assert food.label == "Jajan/Makanan"
    assert food.icon == "🍔"
    assert food.pct_of_expense == pytest.approx(50000 / 70000 * 100)
    assert food.pct_of_income == 0

    assert sum(r.pct_of_income for r in pivot.rows) == pytest.approx(100)
    assert sum(r.pct_of_expense for r in pivot.rows) == pytest.approx(100)


def test_category_pivot_sums_both_kinds_in_one_category():
    """A category holding income and expense keeps both sums."""
    transactions = [
        make_tx("1", "expense", "gift", 30, "2026-03-01"),
        make_tx("2", "income", "gift", 70, "2026-03-02"),
    ]
    row = category_pivot(transactions, 2026, 3).rows[0]
    assert (row.income, row.expense) == (70, 30)
    assert row.pct_of_income == pytest.approx(100)
    assert row.pct_of_expense == pytest.approx(100)


def test_category_pivot_ties_break_by_code_and_zero_totals():
    transactions = [
        make_tx("1", "expense", "transport", 10, "2026-03-01"),
        make_tx("2", "expense", "bills", 10, "2026-03-01"),
        make_tx("3", "expense", "unknown_code", 10, "2026-03-01"),
    ]
    pivot = category_pivot(transactions, 2026, 3)
    assert [r.category for r in pivot.rows] == ["bills", "transport", "unknown_code"]
    assert sum(r.pct_of_income for r in pivot.rows) == 0
    assert pivot.rows[2].label == "unknown_code"
    assert pivot.rows[2].icon == "💰"


def test_trend_crosses_year_boundary():
    """Anchored at January the window starts in the previous August."""
    transactions = [
        make_tx("1", "income", "salary", 1000, "2025-08-15"),
        make_tx("2", "expense", "food", 300, "2025-12-31"),
        make_tx("3", "expense", "food", 50, "2026-01-01"),
        make_tx("4", "income", "salary", 999, "2025-07-31"),
    ]
    points = trend(transactions, 2026, 1, window_size=6)

    assert len(points) == 6
    assert [(p.year, p.month) for p in points] == [
        (2025, 8), (2025, 9), (2025, 10), (2025, 11), (2025, 12), (2026, 1),
    ]
    assert [p.month_label for p in points] == ["Agu", "Sep", "Okt", "Nov", "Des", "Jan"]
    assert points[0].income == 1000
    assert points[4].savings == -300
    assert points[5].expense == 50


def test_trend_default_window_and_validation(march_transactions):
    points = trend(march_transactions, 2026, 3)
    assert len(points) == 6
    assert points[-1].savings == 430000
    with pytest.raises(ValueError):
        trend(march_transactions, 2026, 3, window_size=0)


def test_person_comparison(march_transactions):
    result = person_comparison(march_transactions, 2026, 3)
    assert (result.owner_a, result.owner_b) == ("aegg", "peppaa")
    assert result.total_a == 50000
    assert result.total_b == 20000
    assert result.percent_a == pytest.approx(50000 / 70000 * 100)
    assert result.percent_a + result.percent_b == pytest.approx(100)


def test_person_comparison_empty_is_even_split():
    result = person_comparison([], 2026, 3)
    assert result.percent_a == 50
    assert result.percent_b == 50


def test_person_comparison_ignores_other_owners():
    transactions = [make_tx("1", "expense", "food", 100, "2026-03-01", owner="guest")]
    result = person_comparison(transactions, 2026, 3)
    assert (result.total_a, result.total_b) == (0, 0)
    assert result.percent_a == 50


def test_malformed_records_are_skipped_and_counted(march_transactions):
    """Bad rows never abort a report."""
    broken = march_transactions + [
        {"id": "x1", "owner": "aegg", "kind": "refund", "category": "food", "amount": 5, "date": "2026-03-01"},
        {"id": "x2", "owner": "aegg", "kind": "expense", "category": "food", "amount": float("nan"), "date": "2026-03-01"},
        Transaction.model_construct(id="x3", owner="aegg", kind=TransactionKind.EXPENSE, category="food",
                                    amount=-10.0, date=date(2026, 3, 1)),
        "not a transaction",
    ]
    totals = monthly_totals(broken, 2026, 3)
    assert (totals.income, totals.expense) == (500000, 70000)
    assert totals.skipped == 4

    assert ledger(broken, 2026, 3).skipped == 4
    assert category_pivot(broken, 2026, 3).skipped == 4


def test_snapshot_accepts_plain_mappings():
    valid, skipped = snapshot([
        {"owner": "aegg", "kind": "income", "category": "salary", "amount": "100", "date": "2026-03-01"},
    ])
    assert skipped == 0
    assert valid[0].kind == TransactionKind.INCOME
    assert valid[0].amount == 100.0


def test_top_expenses_and_breakdown(march_transactions):
    top = top_expenses(march_transactions, 2026, 3, limit=1)
    assert [t.transaction_id for t in top] == ["t1"]
    assert top[0].icon == "🍔"

    shares = expense_breakdown(march_transactions, 2026, 3)
    assert [(s.category, s.percentage) for s in shares] == [("food", 71), ("transport", 29)]
    assert expense_breakdown([], 2026, 3) == []


def test_filter_transactions(mixed_transactions):
    expenses = filter_transactions(mixed_transactions, kind=TransactionKind.EXPENSE)
    assert [t.id for t in expenses] == ["t3", "t1", "t4", "t6"]

    peppaa = filter_transactions(mixed_transactions, owner="peppaa")
    assert [t.id for t in peppaa] == ["t3"]
