"""
Ledger and budget analytics over an in-memory snapshot of transactions.

Every function here is pure: it takes the whole collection the caller has
fetched, does its own filtering, and returns a fresh report model. Nothing is
cached between calls.

Malformed records never abort a report. They are skipped, logged and counted
in the report's ``skipped`` field so one bad row cannot blank the dashboard.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from dompet.config import settings
from dompet.models.budget import Budget, BudgetPeriod
from dompet.models.reports import (
    BudgetReport,
    BudgetUtilization,
    CategoryPivot,
    CategoryShare,
    Ledger,
    LedgerRow,
    MonthlyTotals,
    Overview,
    PersonComparison,
    PivotRow,
    Recap,
    RecapGroup,
    TopExpense,
    TrendPoint,
)
from dompet.models.savings import SavingsAccount
from dompet.models.transaction import Transaction, TransactionKind
from dompet.services.catalog import describe
from dompet.utils.dates import check_month, in_month, month_label, shift_month
from dompet.utils.privacy import describe_record

logger = logging.getLogger(__name__)

INCOME = TransactionKind.INCOME
EXPENSE = TransactionKind.EXPENSE

# ---------------------------------------------------------------------------
# Snapshot normalization (skip-and-count)
# ---------------------------------------------------------------------------


def _usable_amount(amount: Any) -> bool:
    return (
        isinstance(amount, (int, float))
        and not isinstance(amount, bool)
        and math.isfinite(amount)
        and amount >= 0
    )


def _coerce_transaction(record: Any) -> Optional[Transaction]:
    if isinstance(record, Transaction):
        # model_construct() skips validation, so recheck what the reports rely on
        if (
            isinstance(record.kind, TransactionKind)
            and _usable_amount(record.amount)
            and isinstance(record.date, date)
        ):
            return record
        return None
    try:
        return Transaction.model_validate(record)
    except ValidationError:
        return None


def _coerce_budget(record: Any) -> Optional[Budget]:
    if isinstance(record, Budget):
        if isinstance(record.period, BudgetPeriod) and _usable_amount(record.amount):
            return record
        return None
    try:
        return Budget.model_validate(record)
    except ValidationError:
        return None


def snapshot(transactions: Optional[Iterable[Any]]) -> Tuple[List[Transaction], int]:
    """
    Validate a transaction collection.

    Args:
        transactions: Transaction models or plain mappings

    Returns:
        (usable transactions in input order, number of skipped records)
    """
    valid: List[Transaction] = []
    skipped = 0
    for record in transactions or ():
        tx = _coerce_transaction(record)
        if tx is None:
            skipped += 1
            logger.warning("Skipping malformed transaction: %s", describe_record(record))
            continue
        valid.append(tx)
    return valid, skipped


def budget_snapshot(budgets: Optional[Iterable[Any]]) -> Tuple[List[Budget], int]:
    valid: List[Budget] = []
    skipped = 0
    for record in budgets or ():
        budget = _coerce_budget(record)
        if budget is None:
            skipped += 1
            logger.warning("Skipping malformed budget: %s", describe_record(record))
            continue
        valid.append(budget)
    return valid, skipped


def _in_month(transactions: List[Transaction], year: int, month: int) -> List[Transaction]:
    check_month(month)
    return [tx for tx in transactions if in_month(tx.date, year, month)]


def _sum(transactions: Iterable[Transaction], kind: TransactionKind) -> float:
    return sum((tx.amount for tx in transactions if tx.kind == kind), 0.0)


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def _label(tx: Transaction) -> str:
    if tx.description and tx.description.strip():
        return tx.description
    return describe(tx.category)[0]


# ---------------------------------------------------------------------------
# Monthly reports
# ---------------------------------------------------------------------------


def monthly_totals(transactions: Iterable[Any], year: int, month: int) -> MonthlyTotals:
    """Income, expense and balance for one calendar month. Empty months are all zeros."""
    valid, skipped = snapshot(transactions)
    monthly = _in_month(valid, year, month)

    income = _sum(monthly, INCOME)
    expense = _sum(monthly, EXPENSE)
    balance = income - expense

    return MonthlyTotals(
        year=year,
        month=month,
        income=income,
        expense=expense,
        balance=balance,
        savings_rate=_percent(balance, income),
        count=len(monthly),
        skipped=skipped,
    )


def category_pivot(transactions: Iterable[Any], year: int, month: int) -> CategoryPivot:
    """
    Group a month's transactions by category.

    Income and expense are summed separately for every category, whatever
    the catalog says the category is. Rows are ordered by combined amount,
    largest first, with the category code breaking ties.

    Returns:
        CategoryPivot with one row per category present in the month
    """
    valid, skipped = snapshot(transactions)
    monthly = _in_month(valid, year, month)

    total_income = _sum(monthly, INCOME)
    total_expense = _sum(monthly, EXPENSE)

    grouped: Dict[str, Dict[str, float]] = defaultdict(lambda: {"income": 0.0, "expense": 0.0})
    for tx in monthly:
        grouped[tx.category][tx.kind.value] += tx.amount

    rows = []
    for category, sums in grouped.items():
        label, icon = describe(category)
        rows.append(PivotRow(
            category=category,
            label=label,
            icon=icon,
            income=sums["income"],
            expense=sums["expense"],
            pct_of_income=_percent(sums["income"], total_income),
            pct_of_expense=_percent(sums["expense"], total_expense),
        ))
    rows.sort(key=lambda r: (-(r.expense + r.income), r.category))

    return CategoryPivot(
        year=year,
        month=month,
        rows=rows,
        total_income=total_income,
        total_expense=total_expense,
        count=len(monthly),
        skipped=skipped,
    )


def budget_utilization(
    transactions: Iterable[Any],
    budgets: Iterable[Any],
    year: int,
    month: int,
) -> BudgetReport:
    """
    Compare spending against every budget row.

    Budgets are not merged by category: two rows for the same category give
    two utilization rows. Monthly budgets count the expenses of the given
    month. Weekly and yearly budgets count every expense of the category
    ever recorded (``period_scope == "all_time"``); they are not bucketed
    into weeks or years.

    Args:
        transactions: Full transaction collection
        budgets: Full budget collection
        year: Reference year
        month: Reference month (1-12)

    Returns:
        BudgetReport with one row per budget, in input order
    """
    check_month(month)
    valid, skipped = snapshot(transactions)
    valid_budgets, skipped_budgets = budget_snapshot(budgets)

    expenses = [tx for tx in valid if tx.kind == EXPENSE]

    rows = []
    for budget in valid_budgets:
        if budget.period == BudgetPeriod.MONTHLY:
            scope = "month"
            matching = (tx for tx in expenses if in_month(tx.date, year, month))
        else:
            # TODO: bucket weekly/yearly budgets by their own window once the rule is decided
            scope = "all_time"
            matching = iter(expenses)

        spent = sum((tx.amount for tx in matching if tx.category == budget.category), 0.0)
        ceiling = budget.amount
        percent_used = min(spent / ceiling * 100, 100.0) if ceiling > 0 else 0.0
        label, icon = describe(budget.category)

        rows.append(BudgetUtilization(
            budget_id=budget.id,
            category=budget.category,
            label=label,
            icon=icon,
            period=budget.period,
            period_scope=scope,
            ceiling=ceiling,
            spent=spent,
            remaining=ceiling - spent,
            percent_used=percent_used,
            is_over=spent > ceiling,
        ))

    total_budget = sum((r.ceiling for r in rows), 0.0)
    total_spent = sum((r.spent for r in rows), 0.0)

    return BudgetReport(
        year=year,
        month=month,
        rows=rows,
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=sum((r.remaining for r in rows), 0.0),
        skipped=skipped + skipped_budgets,
    )


def ledger(transactions: Iterable[Any], year: int, month: int) -> Ledger:
    """
    Chronological ledger of one month with a running balance.

    Rows are sorted by date; transactions on the same day keep their input
    order. Each row carries the balance after applying itself, starting
    from zero at the beginning of the month.
    """
    valid, skipped = snapshot(transactions)
    monthly = sorted(_in_month(valid, year, month), key=lambda tx: tx.date)

    balance = 0.0
    total_in = 0.0
    total_out = 0.0
    rows = []
    for tx in monthly:
        in_amount = tx.amount if tx.kind == INCOME else 0.0
        out_amount = tx.amount if tx.kind == EXPENSE else 0.0
        balance += in_amount - out_amount
        total_in += in_amount
        total_out += out_amount
        rows.append(LedgerRow(
            transaction_id=tx.id,
            date=tx.date,
            label=_label(tx),
            category_tag=tx.category,
            kind=tx.kind,
            owner=tx.owner,
            subtitle=tx.subtitle,
            in_amount=in_amount,
            out_amount=out_amount,
            running_balance=balance,
        ))

    return Ledger(
        year=year,
        month=month,
        rows=rows,
        total_in=total_in,
        total_out=total_out,
        final_balance=rows[-1].running_balance if rows else 0.0,
        skipped=skipped,
    )


def trend(
    transactions: Iterable[Any],
    anchor_year: int,
    anchor_month: int,
    window_size: Optional[int] = None,
) -> List[TrendPoint]:
    """
    Monthly income/expense/savings for a rolling window.

    Args:
        transactions: Full transaction collection
        anchor_year: Year of the last month in the window
        anchor_month: Last month in the window (1-12), included
        window_size: Number of months, defaults to ``settings.trend_window``

    Returns:
        window_size points, oldest first
    """
    check_month(anchor_month)
    if window_size is None:
        window_size = settings.trend_window
    if window_size < 1:
        raise ValueError(f"window_size must be at least 1, got {window_size}")

    valid, _ = snapshot(transactions)

    buckets: Dict[Tuple[int, int], Dict[str, float]] = defaultdict(lambda: {"income": 0.0, "expense": 0.0})
    for tx in valid:
        buckets[(tx.date.year, tx.date.month)][tx.kind.value] += tx.amount

    points = []
    for offset in range(window_size - 1, -1, -1):
        year, month = shift_month(anchor_year, anchor_month, -offset)
        sums = buckets.get((year, month), {"income": 0.0, "expense": 0.0})
        points.append(TrendPoint(
            year=year,
            month=month,
            month_label=month_label(month),
            income=sums["income"],
            expense=sums["expense"],
            savings=sums["income"] - sums["expense"],
        ))
    return points


def person_comparison(
    transactions: Iterable[Any],
    year: int,
    month: int,
    owner_a: Optional[str] = None,
    owner_b: Optional[str] = None,
) -> PersonComparison:
    """
    Split a month's expenses between the two workspace members.

    Expenses recorded by anyone else are left out. When neither member spent
    anything the split is 50/50.
    """
    owner_a = owner_a or settings.owner_a
    owner_b = owner_b or settings.owner_b

    valid, skipped = snapshot(transactions)
    expenses = [tx for tx in _in_month(valid, year, month) if tx.kind == EXPENSE]

    total_a = sum((tx.amount for tx in expenses if tx.owner == owner_a), 0.0)
    total_b = sum((tx.amount for tx in expenses if tx.owner == owner_b), 0.0)
    combined = total_a + total_b

    if combined > 0:
        percent_a = total_a / combined * 100
        percent_b = total_b / combined * 100
    else:
        percent_a = percent_b = 50.0

    return PersonComparison(
        year=year,
        month=month,
        owner_a=owner_a,
        owner_b=owner_b,
        total_a=total_a,
        total_b=total_b,
        percent_a=percent_a,
        percent_b=percent_b,
        skipped=skipped,
    )


def top_expenses(transactions: Iterable[Any], year: int, month: int, limit: int = 5) -> List[TopExpense]:
    """Biggest single expenses of the month."""
    valid, _ = snapshot(transactions)
    expenses = [tx for tx in _in_month(valid, year, month) if tx.kind == EXPENSE]
    expenses.sort(key=lambda tx: (-tx.amount, tx.date))

    result = []
    for tx in expenses[: max(0, limit)]:
        result.append(TopExpense(
            transaction_id=tx.id,
            date=tx.date,
            label=_label(tx),
            category=tx.category,
            icon=describe(tx.category)[1],
            owner=tx.owner,
            amount=tx.amount,
        ))
    return result


def expense_breakdown(transactions: Iterable[Any], year: int, month: int, limit: int = 8) -> List[CategoryShare]:
    """Expense share per category for the month, largest first, percentages rounded half up."""
    valid, _ = snapshot(transactions)
    expenses = [tx for tx in _in_month(valid, year, month) if tx.kind == EXPENSE]
    total = _sum(expenses, EXPENSE)

    by_category: Dict[str, float] = defaultdict(float)
    for tx in expenses:
        by_category[tx.category] += tx.amount

    ordered = sorted(by_category.items(), key=lambda item: (-item[1], item[0]))
    shares = []
    for category, amount in ordered[: max(0, limit)]:
        label, icon = describe(category)
        shares.append(CategoryShare(
            category=category,
            label=label,
            icon=icon,
            amount=amount,
            percentage=math.floor(amount / total * 100 + 0.5) if total > 0 else 0,
        ))
    return shares


# ---------------------------------------------------------------------------
# Recap (grouping by subtitle) and history
# ---------------------------------------------------------------------------


def subtitles(transactions: Iterable[Any]) -> List[str]:
    """Distinct non-empty subtitles, sorted."""
    valid, _ = snapshot(transactions)
    return sorted({tx.subtitle for tx in valid if tx.subtitle})


def _matches(tx: Transaction, needle: str) -> bool:
    haystacks = (tx.description, tx.subtitle, tx.category)
    return any(h is not None and needle in h.casefold() for h in haystacks)


def recap(
    transactions: Iterable[Any],
    subtitle: Optional[str] = None,
    search: Optional[str] = None,
) -> Recap:
    """
    Group transactions by their subtitle across all months.

    Args:
        transactions: Full transaction collection
        subtitle: Only keep this subtitle; None keeps every group
        search: Case-insensitive substring matched against description,
            subtitle and category code

    Returns:
        Recap with labeled groups sorted by label and the ungrouped bucket
        (subtitle None) last. Rows inside a group are newest first.
    """
    valid, skipped = snapshot(transactions)

    filtered = valid
    if subtitle is not None:
        filtered = [tx for tx in filtered if tx.subtitle == subtitle]
    needle = (search or "").strip().casefold()
    if needle:
        filtered = [tx for tx in filtered if _matches(tx, needle)]

    grouped: Dict[Optional[str], List[Transaction]] = {}
    for tx in filtered:
        grouped.setdefault(tx.subtitle, []).append(tx)

    def group_order(key: Optional[str]):
        if key is None:
            return (1, "", "")
        return (0, key.casefold(), key)

    groups = []
    for key in sorted(grouped, key=group_order):
        members = sorted(grouped[key], key=lambda tx: tx.date, reverse=True)
        income = _sum(members, INCOME)
        expense = _sum(members, EXPENSE)
        groups.append(RecapGroup(
            subtitle=key,
            transactions=members,
            total_income=income,
            total_expense=expense,
            net=income - expense,
            count=len(members),
        ))

    return Recap(
        groups=groups,
        subtitles=sorted({tx.subtitle for tx in valid if tx.subtitle}),
        skipped=skipped,
    )


def filter_transactions(
    transactions: Iterable[Any],
    kind: Optional[TransactionKind] = None,
    owner: Optional[str] = None,
) -> List[Transaction]:
    """Transaction history, newest first, optionally narrowed to one kind and/or owner."""
    valid, _ = snapshot(transactions)
    result = [
        tx for tx in valid
        if (kind is None or tx.kind == kind) and (owner is None or tx.owner == owner)
    ]
    result.sort(key=lambda tx: tx.date, reverse=True)
    return result


# ---------------------------------------------------------------------------
# Dashboard overview
# ---------------------------------------------------------------------------


def total_savings(accounts: Iterable[SavingsAccount]) -> float:
    return sum((a.balance for a in accounts), 0.0)


def overview(
    transactions: Iterable[Any],
    budgets: Iterable[Any],
    accounts: Iterable[SavingsAccount],
    year: int,
    month: int,
) -> Overview:
    """
    Dashboard summary for one month.

    total_balance is the month's balance plus everything held in savings
    accounts.
    """
    valid, skipped = snapshot(transactions)
    totals = monthly_totals(valid, year, month).model_copy(update={"skipped": skipped})
    savings = total_savings(accounts)
    breakdown = expense_breakdown(valid, year, month, limit=1)
    budget_rows = budget_utilization(valid, budgets, year, month).rows

    return Overview(
        totals=totals,
        total_savings=savings,
        total_balance=totals.balance + savings,
        top_category=breakdown[0] if breakdown else None,
        top_expenses=top_expenses(valid, year, month),
        budgets=budget_rows[:5],
    )
