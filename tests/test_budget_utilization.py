"""Tests for budget utilization."""
from datetime import date

import pytest

from dompet.models.budget import Budget, BudgetPeriod
from dompet.models.transaction import Transaction
from dompet.services.aggregation import budget_utilization


def expense(tx_id, category, amount, day, kind="expense"):
    return Transaction(
        id=tx_id,
        owner="aegg",
        kind=kind,
        category=category,
        amount=amount,
        date=date.fromisoformat(day),
    )


@pytest.fixture
def transactions():
    return [
        expense("1", "food", 300000, "2026-03-03"),
        expense("2", "food", 450000, "2026-03-20"),
        expense("3", "food", 100000, "2026-02-10"),
        expense("4", "transport", 50000, "2026-03-04"),
        expense("5", "food", 999999, "2026-03-05", kind="income"),
        expense("6", "internet", 100000, "2025-11-01"),
        expense("7", "internet", 150000, "2026-03-01"),
    ]


def test_monthly_budget_counts_only_that_months_expenses(transactions):
    budgets = [Budget(id="b1", owner="aegg", category="food", amount=1000000)]
    report = budget_utilization(transactions, budgets, 2026, 3)

    row = report.rows[0]
    assert row.budget_id == "b1"
    assert row.period_scope == "month"
    assert row.spent == 750000
    assert row.remaining == 250000
    assert row.percent_used == pytest.approx(75.0)
    assert row.is_over is False
    assert row.label == "Jajan/Makanan"


def test_overspent_budget_caps_percent_and_goes_negative(transactions):
    budgets = [Budget(id="b1", owner="aegg", category="food", amount=500000)]
    row = budget_utilization(transactions, budgets, 2026, 3).rows[0]

    assert row.spent == 750000
    assert row.remaining == -250000
    assert row.percent_used == 100
    assert row.is_over is True


def test_exactly_on_budget_is_not_over(transactions):
    budgets = [Budget(id="b1", owner="aegg", category="transport", amount=50000)]
    row = budget_utilization(transactions, budgets, 2026, 3).rows[0]
    assert row.percent_used == 100
    assert row.is_over is False


def test_zero_ceiling_has_zero_percent(transactions):
    budgets = [Budget(id="b1", owner="aegg", category="transport", amount=0)]
    row = budget_utilization(transactions, budgets, 2026, 3).rows[0]
    assert row.percent_used == 0
    assert row.is_over is True


def test_duplicate_budgets_are_reported_per_row(transactions):
    """Two budgets for one category are not merged."""
    budgets = [
        Budget(id="b1", owner="aegg", category="food", amount=1000000),
        Budget(id="b2", owner="peppaa", category="food", amount=200000),
    ]
    report = budget_utilization(transactions, budgets, 2026, 3)

    assert [r.budget_id for r in report.rows] == ["b1", "b2"]
    assert [r.spent for r in report.rows] == [750000, 750000]
    assert report.total_budget == 1200000
    assert report.total_spent == 1500000
    assert report.total_remaining == -300000


@pytest.mark.parametrize("period", [BudgetPeriod.WEEKLY, BudgetPeriod.YEARLY])
def test_weekly_and_yearly_budgets_count_all_time(transactions, period):
    """Known simplification: non-monthly budgets are not bucketed and see every expense ever."""
    budgets = [Budget(id="b1", owner="aegg", category="internet", amount=200000, period=period)]
    row = budget_utilization(transactions, budgets, 2026, 3).rows[0]

    assert row.period_scope == "all_time"
    assert row.spent == 250000
    assert row.is_over is True


def test_percent_used_stays_in_range(transactions):
    budgets = [
        Budget(id=str(i), owner="aegg", category="food", amount=amount)
        for i, amount in enumerate([0, 1, 750000, 10 ** 9])
    ]
    for row in budget_utilization(transactions, budgets, 2026, 3).rows:
        assert 0 <= row.percent_used <= 100
        assert row.is_over == (row.spent > row.ceiling)


def test_no_budgets_and_malformed_budgets(transactions):
    report = budget_utilization(transactions, [], 2026, 3)
    assert report.rows == []
    assert report.total_budget == 0

    report = budget_utilization(transactions, [{"category": "food", "amount": -5, "owner": "aegg"}], 2026, 3)
    assert report.rows == []
    assert report.skipped == 1
