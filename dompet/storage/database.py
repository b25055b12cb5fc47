"""Database storage layer using SQLite."""
import logging
import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import List, NamedTuple, Optional

from dompet.config import settings
from dompet.errors import InsufficientFundsError, InvalidCategoryError, RecordNotFoundError
from dompet.models.budget import Budget, BudgetCreate, BudgetUpdate
from dompet.models.ingestion import BulkCreateResult
from dompet.models.savings import (
    SavingsAccount,
    SavingsAccountCreate,
    SavingsAdjustment,
    SavingsDirection,
)
from dompet.models.transaction import Transaction, TransactionCreate, TransactionUpdate
from dompet.services.catalog import is_valid_category

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteStore(ABC):
    """Connection handling shared by the stores."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._init_db()

    @abstractmethod
    def _init_db(self):
        """Create the store's tables if they do not exist."""

    @contextmanager
    def _get_conn(self):
        """Get database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()


class TransactionStore(SqliteStore):
    """Storage for transactions."""

    _COLUMNS = (
        "id, owner, kind, category, subtitle, amount, currency, "
        "description, date, receipt_ref, created_at"
    )

    def _init_db(self):
        """Initialize database tables."""
        with self._get_conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    id TEXT PRIMARY KEY,
                    owner TEXT NOT NULL,
                    kind TEXT NOT NULL CHECK (kind IN ('income', 'expense')),
                    category TEXT NOT NULL,
                    subtitle TEXT,
                    amount REAL NOT NULL CHECK (amount >= 0),
                    currency TEXT NOT NULL,
                    description TEXT,
                    date TEXT NOT NULL,
                    receipt_ref TEXT,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_owner_date
                ON transactions(owner, date)
            """)
            conn.commit()

    @staticmethod
    def _to_row(tx_id: str, owner: str, tx: TransactionCreate) -> tuple:
        return (
            tx_id,
            owner,
            tx.kind.value,
            tx.category,
            tx.subtitle,
            tx.amount,
            tx.currency,
            tx.description,
            tx.date.isoformat(),
            tx.receipt_ref,
            _now(),
        )

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Transaction:
        return Transaction(
            id=row["id"],
            owner=row["owner"],
            kind=row["kind"],
            category=row["category"],
            subtitle=row["subtitle"],
            amount=row["amount"],
            currency=row["currency"],
            description=row["description"],
            date=date.fromisoformat(row["date"]),
            receipt_ref=row["receipt_ref"],
        )

    def list_transactions(self, owner: Optional[str] = None) -> List[Transaction]:
        """Get transactions, for one owner or the whole workspace, in entry order."""
        with self._get_conn() as conn:
            query = f"SELECT {self._COLUMNS} FROM transactions"
            params = []
            if owner:
                query += " WHERE owner = ?"
                params.append(owner)
            query += " ORDER BY rowid ASC"
            rows = conn.execute(query, params).fetchall()
            return [self._from_row(row) for row in rows]

    def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        with self._get_conn() as conn:
            row = conn.execute(
                f"SELECT {self._COLUMNS} FROM transactions WHERE id = ?", (tx_id,)
            ).fetchone()
            return self._from_row(row) if row else None

    def create_transaction(self, owner: str, tx: TransactionCreate) -> Transaction:
        """Insert one transaction and return it with its new id."""
        tx_id = str(uuid.uuid4())
        with self._get_conn() as conn:
            conn.execute(
                f"INSERT INTO transactions ({self._COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                self._to_row(tx_id, owner, tx),
            )
            conn.commit()
        return Transaction(id=tx_id, owner=owner, **tx.model_dump())

    def bulk_create_transactions(self, owner: str, items: List[TransactionCreate]) -> BulkCreateResult:
        """
        Insert a batch of transactions in a single database transaction.

        Either every row is written or none is.

        Returns:
            BulkCreateResult with the number of rows written, or an error
        """
        rows = [self._to_row(str(uuid.uuid4()), owner, tx) for tx in items]
        with self._get_conn() as conn:
            try:
                conn.executemany(
                    f"INSERT INTO transactions ({self._COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    rows,
                )
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.warning("Bulk insert of %d transactions failed: %s", len(rows), e)
                return BulkCreateResult(count=0, error=str(e))
        return BulkCreateResult(count=len(rows))

    def update_transaction(self, tx_id: str, owner: str, changes: TransactionUpdate) -> Transaction:
        """
        Apply a partial update to one of the owner's transactions.

        Raises:
            RecordNotFoundError: No such transaction for the owner
            InvalidCategoryError: The merged category does not belong to the merged kind
        """
        existing = self.get_transaction(tx_id)
        if existing is None or existing.owner != owner:
            raise RecordNotFoundError("Transaction", tx_id)

        updated = Transaction.model_validate({
            **existing.model_dump(),
            **changes.model_dump(exclude_unset=True),
        })
        if not is_valid_category(updated.category, updated.kind):
            raise InvalidCategoryError(updated.category, updated.kind.value)

        with self._get_conn() as conn:
            conn.execute("""
                UPDATE transactions
                SET kind = ?, category = ?, subtitle = ?, amount = ?, currency = ?,
                    description = ?, date = ?, receipt_ref = ?
                WHERE id = ? AND owner = ?
            """, (
                updated.kind.value,
                updated.category,
                updated.subtitle,
                updated.amount,
                updated.currency,
                updated.description,
                updated.date.isoformat(),
                updated.receipt_ref,
                tx_id,
                owner,
            ))
            conn.commit()
        return updated

    def delete_transaction(self, tx_id: str, owner: str) -> None:
        with self._get_conn() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ? AND owner = ?", (tx_id, owner)
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise RecordNotFoundError("Transaction", tx_id)


class BudgetStore(SqliteStore):
    """Storage for budgets."""

    def _init_db(self):
        """Initialize database tables."""
        with self._get_conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS budgets (
                    id TEXT PRIMARY KEY,
                    owner TEXT NOT NULL,
                    category TEXT NOT NULL,
                    amount REAL NOT NULL CHECK (amount >= 0),
                    period TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.commit()

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Budget:
        return Budget(
            id=row["id"],
            owner=row["owner"],
            category=row["category"],
            amount=row["amount"],
            period=row["period"],
        )

    def list_budgets(self, owner: Optional[str] = None) -> List[Budget]:
        """Get budgets ordered by category."""
        with self._get_conn() as conn:
            query = "SELECT * FROM budgets"
            params = []
            if owner:
                query += " WHERE owner = ?"
                params.append(owner)
            query += " ORDER BY category ASC, rowid ASC"
            return [self._from_row(row) for row in conn.execute(query, params).fetchall()]

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        with self._get_conn() as conn:
            row = conn.execute("SELECT * FROM budgets WHERE id = ?", (budget_id,)).fetchone()
            return self._from_row(row) if row else None

    def create_budget(self, owner: str, budget: BudgetCreate) -> Budget:
        """
        Create a budget, or update the owner's existing budget for the same category.

        Returns:
            The stored budget
        """
        with self._get_conn() as conn:
            existing = conn.execute(
                "SELECT id FROM budgets WHERE owner = ? AND category = ? ORDER BY rowid LIMIT 1",
                (owner, budget.category),
            ).fetchone()

            if existing:
                budget_id = existing["id"]
                conn.execute(
                    "UPDATE budgets SET amount = ?, period = ? WHERE id = ?",
                    (budget.amount, budget.period.value, budget_id),
                )
            else:
                budget_id = str(uuid.uuid4())
                conn.execute("""
                    INSERT INTO budgets (id, owner, category, amount, period, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (budget_id, owner, budget.category, budget.amount, budget.period.value, _now()))
            conn.commit()
        return Budget(id=budget_id, owner=owner, **budget.model_dump())

    def update_budget(self, budget_id: str, owner: str, changes: BudgetUpdate) -> Budget:
        existing = self.get_budget(budget_id)
        if existing is None or existing.owner != owner:
            raise RecordNotFoundError("Budget", budget_id)

        updated = Budget.model_validate({
            **existing.model_dump(),
            **changes.model_dump(exclude_unset=True),
        })
        with self._get_conn() as conn:
            conn.execute(
                "UPDATE budgets SET category = ?, amount = ?, period = ? WHERE id = ? AND owner = ?",
                (updated.category, updated.amount, updated.period.value, budget_id, owner),
            )
            conn.commit()
        return updated

    def delete_budget(self, budget_id: str, owner: str) -> None:
        with self._get_conn() as conn:
            cursor = conn.execute(
                "DELETE FROM budgets WHERE id = ? AND owner = ?", (budget_id, owner)
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise RecordNotFoundError("Budget", budget_id)


class SavingsStore(SqliteStore):
    """Storage for savings accounts and their deposit/withdraw log."""

    def _init_db(self):
        """Initialize database tables."""
        with self._get_conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS savings_accounts (
                    id TEXT PRIMARY KEY,
                    owner TEXT NOT NULL,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    bank_code TEXT,
                    balance REAL NOT NULL,
                    icon TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS savings_transactions (
                    id TEXT PRIMARY KEY,
                    account_id TEXT NOT NULL,
                    owner TEXT NOT NULL,
                    amount REAL NOT NULL,
                    direction TEXT NOT NULL,
                    description TEXT,
                    date TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.commit()

    @staticmethod
    def _from_row(row: sqlite3.Row) -> SavingsAccount:
        return SavingsAccount(
            id=row["id"],
            owner=row["owner"],
            name=row["name"],
            type=row["type"],
            bank_code=row["bank_code"],
            balance=row["balance"],
            icon=row["icon"],
        )

    def list_accounts(self, owner: Optional[str] = None) -> List[SavingsAccount]:
        with self._get_conn() as conn:
            query = "SELECT * FROM savings_accounts"
            params = []
            if owner:
                query += " WHERE owner = ?"
                params.append(owner)
            query += " ORDER BY rowid ASC"
            return [self._from_row(row) for row in conn.execute(query, params).fetchall()]

    def create_account(self, owner: str, account: SavingsAccountCreate) -> SavingsAccount:
        account_id = str(uuid.uuid4())
        now = _now()
        with self._get_conn() as conn:
            conn.execute("""
                INSERT INTO savings_accounts
                (id, owner, name, type, bank_code, balance, icon, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                account_id,
                owner,
                account.name,
                account.type.value,
                account.bank_code,
                account.balance,
                account.icon,
                now,
                now,
            ))
            conn.commit()
        return SavingsAccount(id=account_id, owner=owner, **account.model_dump())

    def adjust_balance(self, account_id: str, owner: str, adjustment: SavingsAdjustment) -> SavingsAccount:
        """
        Deposit into or withdraw from an account and log the movement.

        Raises:
            RecordNotFoundError: No such account for the owner
            InsufficientFundsError: Withdrawal larger than the balance
        """
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT * FROM savings_accounts WHERE id = ? AND owner = ?", (account_id, owner)
            ).fetchone()
            if row is None:
                raise RecordNotFoundError("Savings account", account_id)

            account = self._from_row(row)
            if adjustment.direction == SavingsDirection.DEPOSIT:
                balance = account.balance + adjustment.amount
            else:
                if adjustment.amount > account.balance:
                    raise InsufficientFundsError(account_id, account.balance, adjustment.amount)
                balance = account.balance - adjustment.amount

            conn.execute(
                "UPDATE savings_accounts SET balance = ?, updated_at = ? WHERE id = ?",
                (balance, _now(), account_id),
            )
            conn.execute("""
                INSERT INTO savings_transactions
                (id, account_id, owner, amount, direction, description, date, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                str(uuid.uuid4()),
                account_id,
                owner,
                adjustment.amount,
                adjustment.direction.value,
                adjustment.description,
                (adjustment.date or date.today()).isoformat(),
                _now(),
            ))
            conn.commit()
        return account.model_copy(update={"balance": balance})

    def delete_account(self, account_id: str, owner: str) -> None:
        with self._get_conn() as conn:
            cursor = conn.execute(
                "DELETE FROM savings_accounts WHERE id = ? AND owner = ?", (account_id, owner)
            )
            if cursor.rowcount == 0:
                raise RecordNotFoundError("Savings account", account_id)
            conn.execute("DELETE FROM savings_transactions WHERE account_id = ?", (account_id,))
            conn.commit()


class Stores(NamedTuple):
    transactions: TransactionStore
    budgets: BudgetStore
    savings: SavingsStore


# Global instances
_stores: Optional[Stores] = None


def init_db(db_path: Optional[str] = None) -> Stores:
    """(Re)create the store instances, e.g. to point them at a test database."""
    global _stores
    path = db_path or settings.database_path
    _stores = Stores(
        transactions=TransactionStore(path),
        budgets=BudgetStore(path),
        savings=SavingsStore(path),
    )
    return _stores


def get_db() -> Stores:
    """Get database store instances."""
    if _stores is None:
        return init_db()
    return _stores
