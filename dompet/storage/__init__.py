from .database import TransactionStore, BudgetStore, SavingsStore, Stores, init_db, get_db

__all__ = ["TransactionStore", "BudgetStore", "SavingsStore", "Stores", "init_db", "get_db"]
