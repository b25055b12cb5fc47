"""Savings account models."""
from datetime import date as Date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class SavingsAccountType(str, Enum):
    CASH = "cash"
    DIGITAL = "digital"


class SavingsDirection(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class SavingsAccountCreate(BaseModel):
    """Savings account creation payload."""

    name: str = Field(..., min_length=1)
    type: SavingsAccountType = Field(default=SavingsAccountType.CASH)
    bank_code: Optional[str] = Field(None, description="Bank or e-wallet code, e.g. bca, dana")
    balance: float = Field(default=0.0, ge=0, allow_inf_nan=False, description="Opening balance")
    icon: Optional[str] = None


class SavingsAccount(SavingsAccountCreate):
    """Savings account model."""

    id: Optional[str] = None
    owner: str


class SavingsAdjustment(BaseModel):
    """Deposit into or withdrawal from a savings account."""

    amount: float = Field(..., gt=0, allow_inf_nan=False)
    direction: SavingsDirection
    description: Optional[str] = None
    date: Optional[Date] = Field(None, description="Defaults to today")
