from datetime import date as Date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from painel.schemas.finance import MAX_AMOUNT


class PersonalTransactionCreate(BaseModel):
    amount: Decimal = Field(gt=0, le=MAX_AMOUNT, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    date: Date


class PersonalTransactionOut(BaseModel):
    id: int
    kind: Literal["expense", "income"]
    amount: Decimal
    category: str
    description: str
    date: datetime


class PendingPaymentCreate(BaseModel):
    amount: Decimal = Field(gt=0, le=MAX_AMOUNT, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    due_date: Date


class PendingReceiptCreate(BaseModel):
    amount: Decimal = Field(gt=0, le=MAX_AMOUNT, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    expected_date: Date


class PendingPaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: Decimal
    category: str
    description: Optional[str] = None
    due_date: datetime
    completed: bool


class PendingReceiptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: Decimal
    category: str
    description: Optional[str] = None
    expected_date: datetime
    completed: bool


class CompletedToggle(BaseModel):
    completed: bool


class PersonalReport(BaseModel):
    start: datetime
    end: datetime
    total_expenses: Decimal
    total_income: Decimal
    balance: Decimal
    transactions: List[PersonalTransactionOut]
    pending_payments: List[PendingPaymentOut]
    pending_receipts: List[PendingReceiptOut]
