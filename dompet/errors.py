"""Exceptions raised by the stores and services."""


class DompetError(Exception):
    """Base class for application errors."""


class RecordNotFoundError(DompetError):
    """No record with the given id exists for the owner."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class UnknownOwnerError(DompetError):
    """Owner is not one of the two workspace members."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"Unknown owner: {owner}")


class InsufficientFundsError(DompetError):
    """Withdrawal larger than the savings account balance."""

    def __init__(self, account_id: str, balance: float, requested: float):
        self.account_id = account_id
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Cannot withdraw {requested} from account {account_id} (balance {balance})"
        )


class BatchRejectedError(DompetError):
    """Bulk batch in which no row passed validation."""

    def __init__(self, validation):
        self.validation = validation
        super().__init__(validation.error or "Batch rejected")


class StoreError(DompetError):
    """The transaction store failed to write."""


class InvalidCategoryError(DompetError):
    """Category code not in the catalog for the transaction kind."""

    def __init__(self, category: str, kind: str):
        self.category = category
        self.kind = kind
        super().__init__(f"unknown {kind} category '{category}'")
