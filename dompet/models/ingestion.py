"""Bulk ingestion models."""
from datetime import date as Date
from typing import List, Optional, Union
from pydantic import BaseModel, Field

from dompet.models.transaction import TransactionCreate


class DraftRow(BaseModel):
    """One user-entered row of a bulk batch, before validation.

    Fields are kept loose on purpose: the validator decides what is usable.
    """

    kind: str = Field(default="expense")
    category: str = Field(default="food")
    subtitle: Optional[str] = None
    amount: Optional[Union[float, str]] = None
    description: Optional[str] = None
    date: Optional[Union[Date, str]] = None


class BatchValidation(BaseModel):
    """Outcome of validating a bulk batch."""

    accepted: List[TransactionCreate] = Field(default_factory=list)
    rejected_count: int = 0
    first_error: Optional[str] = None
    error: Optional[str] = Field(None, description="Set when no row validated")

    @property
    def ok(self) -> bool:
        return self.error is None


class BulkCreateResult(BaseModel):
    """What the store reports after a bulk insert."""

    count: int = 0
    error: Optional[str] = None


class BulkUploadRequest(BaseModel):
    subtitle: Optional[str] = Field(None, description="Batch-level subtitle for rows without one")
    rows: List[DraftRow] = Field(..., min_length=1)


class IngestResult(BaseModel):
    """Response from a bulk import."""

    owner: str
    accepted_count: int
    rejected_count: int
    first_error: Optional[str] = None
    message: str
