from .catalog import (
    CategoryEntry,
    lookup,
    describe,
    is_valid_category,
    all_income_categories,
    all_expense_categories,
)
from .aggregation import (
    monthly_totals,
    category_pivot,
    budget_utilization,
    ledger,
    trend,
    person_comparison,
    top_expenses,
    expense_breakdown,
    recap,
    subtitles,
    filter_transactions,
    total_savings,
    overview,
)
from .ingestion import validate_batch, BulkIngestionService

__all__ = [
    "CategoryEntry",
    "lookup",
    "describe",
    "is_valid_category",
    "all_income_categories",
    "all_expense_categories",
    "monthly_totals",
    "category_pivot",
    "budget_utilization",
    "ledger",
    "trend",
    "person_comparison",
    "top_expenses",
    "expense_breakdown",
    "recap",
    "subtitles",
    "filter_transactions",
    "total_savings",
    "overview",
    "validate_batch",
    "BulkIngestionService",
]
