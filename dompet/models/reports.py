"""Derived report models returned by the aggregation engine.

None of these are persisted; every call recomputes them from the snapshot
it is given.
"""
from datetime import date as Date
from typing import List, Optional
from pydantic import BaseModel, Field

from dompet.models.budget import BudgetPeriod
from dompet.models.transaction import Transaction, TransactionKind


class MonthlyTotals(BaseModel):
    """Income, expense and balance for one calendar month."""

    year: int
    month: int
    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0
    savings_rate: float = Field(default=0.0, description="balance / income * 100, 0 without income")
    count: int = 0
    skipped: int = 0


class PivotRow(BaseModel):
    """One category of the monthly pivot table."""

    category: str
    label: str
    icon: str
    income: float = 0.0
    expense: float = 0.0
    pct_of_income: float = 0.0
    pct_of_expense: float = 0.0


class CategoryPivot(BaseModel):
    year: int
    month: int
    rows: List[PivotRow] = Field(default_factory=list)
    total_income: float = 0.0
    total_expense: float = 0.0
    count: int = 0
    skipped: int = 0


class BudgetUtilization(BaseModel):
    """Spent amount against one budget row."""

    budget_id: Optional[str]
    category: str
    label: str
    icon: str
    period: BudgetPeriod
    period_scope: str = Field(..., description="'month' or 'all_time' for weekly/yearly budgets")
    ceiling: float
    spent: float
    remaining: float
    percent_used: float = Field(..., ge=0, le=100)
    is_over: bool


class BudgetReport(BaseModel):
    year: int
    month: int
    rows: List[BudgetUtilization] = Field(default_factory=list)
    total_budget: float = 0.0
    total_spent: float = 0.0
    total_remaining: float = 0.0
    skipped: int = 0


class LedgerRow(BaseModel):
    """One ledger line with the balance after applying it."""

    transaction_id: Optional[str]
    date: Date
    label: str
    category_tag: str
    kind: TransactionKind
    owner: str
    subtitle: Optional[str] = None
    in_amount: float = 0.0
    out_amount: float = 0.0
    running_balance: float = 0.0


class Ledger(BaseModel):
    year: int
    month: int
    rows: List[LedgerRow] = Field(default_factory=list)
    total_in: float = 0.0
    total_out: float = 0.0
    final_balance: float = 0.0
    skipped: int = 0


class TrendPoint(BaseModel):
    year: int
    month: int
    month_label: str
    income: float = 0.0
    expense: float = 0.0
    savings: float = 0.0


class PersonComparison(BaseModel):
    """Expense split between the two workspace members."""

    year: int
    month: int
    owner_a: str
    owner_b: str
    total_a: float = 0.0
    total_b: float = 0.0
    percent_a: float = 50.0
    percent_b: float = 50.0
    skipped: int = 0


class TopExpense(BaseModel):
    transaction_id: Optional[str]
    date: Date
    label: str
    category: str
    icon: str
    owner: str
    amount: float


class CategoryShare(BaseModel):
    """Slice of the monthly expense breakdown."""

    category: str
    label: str
    icon: str
    amount: float
    percentage: int


class RecapGroup(BaseModel):
    """Transactions sharing one subtitle."""

    subtitle: Optional[str] = Field(None, description="None for the ungrouped bucket")
    transactions: List[Transaction] = Field(default_factory=list)
    total_income: float = 0.0
    total_expense: float = 0.0
    net: float = 0.0
    count: int = 0


class Recap(BaseModel):
    groups: List[RecapGroup] = Field(default_factory=list)
    subtitles: List[str] = Field(default_factory=list)
    skipped: int = 0


class Overview(BaseModel):
    """Dashboard summary for one month."""

    totals: MonthlyTotals
    total_savings: float = 0.0
    total_balance: float = 0.0
    top_category: Optional[CategoryShare] = None
    top_expenses: List[TopExpense] = Field(default_factory=list)
    budgets: List[BudgetUtilization] = Field(default_factory=list)
