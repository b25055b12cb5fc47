"""Transaction data models."""
from datetime import date as Date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class TransactionKind(str, Enum):
    """Direction of a money movement."""

    INCOME = "income"
    EXPENSE = "expense"


class TransactionBase(BaseModel):
    """Fields shared by stored and submitted transactions."""

    kind: TransactionKind = Field(..., description="income or expense; amounts are never signed")
    category: str = Field(..., min_length=1, description="Category code from the catalog")
    subtitle: Optional[str] = Field(None, description="Recap grouping label, None when ungrouped")
    amount: float = Field(..., ge=0, allow_inf_nan=False, description="Non-negative amount")
    currency: str = Field(default="IDR", description="Currency code, carried for display only")
    description: Optional[str] = Field(None, description="Free text label")
    date: Date = Field(..., description="Calendar date used for monthly grouping")
    receipt_ref: Optional[str] = Field(None, description="Pointer to an externally stored receipt")


class Transaction(TransactionBase):
    """Transaction model."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "5f0c8a1e-4c1f-4d1e-9c55-2b1d2e0f9a10",
                "owner": "aegg",
                "kind": "expense",
                "category": "food",
                "subtitle": "Trip Bandung",
                "amount": 50000,
                "currency": "IDR",
                "description": "Batagor",
                "date": "2026-03-02",
            }
        }
    )

    id: Optional[str] = None
    owner: str = Field(..., description="Workspace member who recorded it")


class TransactionCreate(TransactionBase):
    """Transaction creation payload. The category must belong to the kind."""

    @model_validator(mode="after")
    def check_category(self):
        from dompet.services.catalog import is_valid_category

        if not is_valid_category(self.category, self.kind):
            raise ValueError(f"unknown {self.kind.value} category '{self.category}'")
        return self


class TransactionUpdate(BaseModel):
    """Partial transaction update."""

    kind: Optional[TransactionKind] = None
    category: Optional[str] = Field(None, min_length=1)
    subtitle: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    currency: Optional[str] = None
    description: Optional[str] = None
    date: Optional[Date] = None
    receipt_ref: Optional[str] = None
