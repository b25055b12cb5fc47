"""Budget data models."""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class BudgetPeriod(str, Enum):
    """Period a budget ceiling applies to."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BudgetCreate(BaseModel):
    """Budget creation payload."""

    category: str = Field(..., min_length=1, description="Expense category code")
    amount: float = Field(..., ge=0, allow_inf_nan=False, description="Ceiling")
    period: BudgetPeriod = Field(default=BudgetPeriod.MONTHLY)


class Budget(BudgetCreate):
    """Budget model."""

    id: Optional[str] = None
    owner: str = Field(..., description="Workspace member who created it")


class BudgetUpdate(BaseModel):
    """Partial budget update."""

    category: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    period: Optional[BudgetPeriod] = None
