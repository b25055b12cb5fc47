"""FastAPI main application."""
import logging
from datetime import date
from typing import List, Optional, Tuple

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse

from dompet.config import settings
from dompet.errors import (
    BatchRejectedError,
    InsufficientFundsError,
    InvalidCategoryError,
    RecordNotFoundError,
    StoreError,
    UnknownOwnerError,
)
from dompet.models.budget import Budget, BudgetCreate, BudgetUpdate
from dompet.models.ingestion import BulkUploadRequest, IngestResult
from dompet.models.reports import (
    BudgetReport,
    CategoryPivot,
    CategoryShare,
    Ledger,
    MonthlyTotals,
    Overview,
    PersonComparison,
    Recap,
    TopExpense,
    TrendPoint,
)
from dompet.models.savings import SavingsAccount, SavingsAccountCreate, SavingsAdjustment
from dompet.models.transaction import Transaction, TransactionCreate, TransactionKind, TransactionUpdate
from dompet.services import aggregation
from dompet.services.catalog import all_expense_categories, all_income_categories
from dompet.services.ingestion import BulkIngestionService, parse_upload
from dompet.storage.database import get_db

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("dompet")

app = FastAPI(title=settings.app_name, debug=settings.debug)


def _check_owner(owner: str) -> str:
    if owner not in settings.owners:
        raise UnknownOwnerError(owner)
    return owner


def _period(year: Optional[int], month: Optional[int]) -> Tuple[int, int]:
    today = date.today()
    return (year or today.year, month or today.month)


@app.exception_handler(UnknownOwnerError)
async def unknown_owner_handler(request, exc: UnknownOwnerError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request, exc: RecordNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidCategoryError)
async def invalid_category_handler(request, exc: InvalidCategoryError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(BatchRejectedError)
async def batch_rejected_handler(request, exc: BatchRejectedError):
    validation = exc.validation
    return JSONResponse(
        status_code=400,
        content={
            "detail": validation.error,
            "accepted_count": len(validation.accepted),
            "rejected_count": validation.rejected_count,
            "first_error": validation.first_error,
        },
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": settings.app_name, "version": "1.0.0"}


@app.get("/categories")
async def list_categories():
    """Income and expense catalog."""
    return {
        "income": [c.model_dump() for c in all_income_categories()],
        "expense": [c.model_dump() for c in all_expense_categories()],
    }


# ============== TRANSACTIONS ==============


@app.get("/transactions", response_model=List[Transaction])
async def list_transactions(
    owner: Optional[str] = Query(None, description="Only this member's transactions"),
    kind: Optional[TransactionKind] = Query(None),
):
    """Transaction history, newest first."""
    stores = get_db()
    if owner:
        _check_owner(owner)
    return aggregation.filter_transactions(stores.transactions.list_transactions(), kind=kind, owner=owner)


@app.post("/transactions", response_model=Transaction, status_code=201)
async def create_transaction(
    tx: TransactionCreate,
    owner: str = Query(..., description="Workspace member"),
):
    stores = get_db()
    return stores.transactions.create_transaction(_check_owner(owner), tx)


@app.put("/transactions/{tx_id}", response_model=Transaction)
async def update_transaction(
    tx_id: str,
    changes: TransactionUpdate,
    owner: str = Query(..., description="Workspace member"),
):
    stores = get_db()
    return stores.transactions.update_transaction(tx_id, _check_owner(owner), changes)


@app.delete("/transactions/{tx_id}")
async def delete_transaction(tx_id: str, owner: str = Query(...)):
    stores = get_db()
    stores.transactions.delete_transaction(tx_id, _check_owner(owner))
    return {"success": True}


@app.post("/transactions/bulk", response_model=IngestResult)
async def bulk_create_transactions(
    request: BulkUploadRequest,
    owner: str = Query(..., description="Workspace member"),
):
    """
    Validate a batch of draft rows and store the valid ones in one write.

    Returns 400 with accepted/rejected counts when no row is valid.
    """
    stores = get_db()
    service = BulkIngestionService(stores.transactions)
    try:
        return service.ingest(_check_owner(owner), request.rows, subtitle=request.subtitle)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Error storing transactions: {e}")


@app.post("/transactions/upload", response_model=IngestResult)
async def upload_transactions(
    file: UploadFile = File(...),
    owner: str = Query(..., description="Workspace member"),
    subtitle: Optional[str] = Query(None, description="Subtitle for rows without one"),
):
    """
    Upload transactions from a CSV or JSON file.

    Expected CSV format:
    date,kind,category,amount,description,subtitle

    Expected JSON format:
    [{"date": "...", "kind": "...", "category": "...", "amount": ..., ...}, ...]
    """
    _check_owner(owner)
    content = await file.read()
    try:
        rows = parse_upload(file.filename or "", content.decode("utf-8-sig"))
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Unreadable upload %s from %s: %s", file.filename, owner, e)
        raise HTTPException(status_code=400, detail=str(e))

    stores = get_db()
    service = BulkIngestionService(stores.transactions)
    try:
        return service.ingest(owner, rows, subtitle=subtitle)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Error storing transactions: {e}")


# ============== BUDGETS ==============


@app.get("/budgets", response_model=List[Budget])
async def list_budgets(owner: Optional[str] = Query(None)):
    stores = get_db()
    if owner:
        _check_owner(owner)
    return stores.budgets.list_budgets(owner)


@app.post("/budgets", response_model=Budget, status_code=201)
async def create_budget(budget: BudgetCreate, owner: str = Query(...)):
    """Create a budget; an existing budget of the owner for the category is updated instead."""
    stores = get_db()
    return stores.budgets.create_budget(_check_owner(owner), budget)


@app.put("/budgets/{budget_id}", response_model=Budget)
async def update_budget(budget_id: str, changes: BudgetUpdate, owner: str = Query(...)):
    stores = get_db()
    return stores.budgets.update_budget(budget_id, _check_owner(owner), changes)


@app.delete("/budgets/{budget_id}")
async def delete_budget(budget_id: str, owner: str = Query(...)):
    stores = get_db()
    stores.budgets.delete_budget(budget_id, _check_owner(owner))
    return {"success": True}


# ============== SAVINGS ==============


@app.get("/savings", response_model=List[SavingsAccount])
async def list_savings(owner: Optional[str] = Query(None)):
    stores = get_db()
    if owner:
        _check_owner(owner)
    return stores.savings.list_accounts(owner)


@app.post("/savings", response_model=SavingsAccount, status_code=201)
async def create_savings(account: SavingsAccountCreate, owner: str = Query(...)):
    stores = get_db()
    return stores.savings.create_account(_check_owner(owner), account)


@app.post("/savings/{account_id}/adjust", response_model=SavingsAccount)
async def adjust_savings(account_id: str, adjustment: SavingsAdjustment, owner: str = Query(...)):
    """Deposit into or withdraw from a savings account."""
    stores = get_db()
    try:
        return stores.savings.adjust_balance(account_id, _check_owner(owner), adjustment)
    except InsufficientFundsError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/savings/{account_id}")
async def delete_savings(account_id: str, owner: str = Query(...)):
    stores = get_db()
    stores.savings.delete_account(account_id, _check_owner(owner))
    return {"success": True}


# ============== REPORTS ==============
# Every report is recomputed from the full workspace snapshot.


@app.get("/reports/totals", response_model=MonthlyTotals)
async def report_totals(year: Optional[int] = None, month: Optional[int] = Query(None, ge=1, le=12)):
    year, month = _period(year, month)
    return aggregation.monthly_totals(get_db().transactions.list_transactions(), year, month)


@app.get("/reports/pivot", response_model=CategoryPivot)
async def report_pivot(year: Optional[int] = None, month: Optional[int] = Query(None, ge=1, le=12)):
    year, month = _period(year, month)
    return aggregation.category_pivot(get_db().transactions.list_transactions(), year, month)


@app.get("/reports/budgets", response_model=BudgetReport)
async def report_budgets(year: Optional[int] = None, month: Optional[int] = Query(None, ge=1, le=12)):
    year, month = _period(year, month)
    stores = get_db()
    return aggregation.budget_utilization(
        stores.transactions.list_transactions(),
        stores.budgets.list_budgets(),
        year,
        month,
    )


@app.get("/reports/ledger", response_model=Ledger)
async def report_ledger(year: Optional[int] = None, month: Optional[int] = Query(None, ge=1, le=12)):
    year, month = _period(year, month)
    return aggregation.ledger(get_db().transactions.list_transactions(), year, month)


@app.get("/reports/trend", response_model=List[TrendPoint])
async def report_trend(
    year: Optional[int] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    window: Optional[int] = Query(None, ge=1, le=60, description="Months in the window"),
):
    year, month = _period(year, month)
    return aggregation.trend(get_db().transactions.list_transactions(), year, month, window)


@app.get("/reports/people", response_model=PersonComparison)
async def report_people(year: Optional[int] = None, month: Optional[int] = Query(None, ge=1, le=12)):
    year, month = _period(year, month)
    return aggregation.person_comparison(get_db().transactions.list_transactions(), year, month)


@app.get("/reports/top-expenses", response_model=List[TopExpense])
async def report_top_expenses(
    year: Optional[int] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    limit: int = Query(5, ge=1, le=50),
):
    year, month = _period(year, month)
    return aggregation.top_expenses(get_db().transactions.list_transactions(), year, month, limit)


@app.get("/reports/breakdown", response_model=List[CategoryShare])
async def report_breakdown(
    year: Optional[int] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    limit: int = Query(8, ge=1, le=50),
):
    year, month = _period(year, month)
    return aggregation.expense_breakdown(get_db().transactions.list_transactions(), year, month, limit)


@app.get("/reports/recap", response_model=Recap)
async def report_recap(
    subtitle: Optional[str] = Query(None, description="Only this subtitle"),
    search: Optional[str] = Query(None, description="Search description, subtitle or category"),
):
    return aggregation.recap(get_db().transactions.list_transactions(), subtitle=subtitle, search=search)


@app.get("/reports/overview", response_model=Overview)
async def report_overview(year: Optional[int] = None, month: Optional[int] = Query(None, ge=1, le=12)):
    year, month = _period(year, month)
    stores = get_db()
    return aggregation.overview(
        stores.transactions.list_transactions(),
        stores.budgets.list_budgets(),
        stores.savings.list_accounts(),
        year,
        month,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
