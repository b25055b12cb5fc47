from .transaction import Transaction, TransactionCreate, TransactionUpdate, TransactionKind
from .budget import Budget, BudgetCreate, BudgetUpdate, BudgetPeriod
from .savings import (
    SavingsAccount,
    SavingsAccountCreate,
    SavingsAccountType,
    SavingsAdjustment,
    SavingsDirection,
)
from .ingestion import DraftRow, BatchValidation, BulkCreateResult, BulkUploadRequest, IngestResult
from .reports import (
    MonthlyTotals,
    PivotRow,
    CategoryPivot,
    BudgetUtilization,
    BudgetReport,
    LedgerRow,
    Ledger,
    TrendPoint,
    PersonComparison,
    TopExpense,
    CategoryShare,
    RecapGroup,
    Recap,
    Overview,
)

__all__ = [
    "Transaction",
    "TransactionCreate",
    "TransactionUpdate",
    "TransactionKind",
    "Budget",
    "BudgetCreate",
    "BudgetUpdate",
    "BudgetPeriod",
    "SavingsAccount",
    "SavingsAccountCreate",
    "SavingsAccountType",
    "SavingsAdjustment",
    "SavingsDirection",
    "DraftRow",
    "BatchValidation",
    "BulkCreateResult",
    "BulkUploadRequest",
    "IngestResult",
    "MonthlyTotals",
    "PivotRow",
    "CategoryPivot",
    "BudgetUtilization",
    "BudgetReport",
    "LedgerRow",
    "Ledger",
    "TrendPoint",
    "PersonComparison",
    "TopExpense",
    "CategoryShare",
    "RecapGroup",
    "Recap",
    "Overview",
]
