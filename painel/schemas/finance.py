from datetime import date as Date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_AMOUNT = Decimal("999999999.99")
MAX_FIXED_FEE = Decimal("999999.99")


class InvestmentCreate(BaseModel):
    project_id: int
    amount: Decimal = Field(gt=0, le=MAX_AMOUNT, decimal_places=2)
    date: Date


class InvestmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    amount: Decimal
    date: datetime
    created_at: datetime


class RevenueCreate(BaseModel):
    project_id: int
    gross_amount: Decimal = Field(gt=0, le=MAX_AMOUNT, decimal_places=2)
    gateway_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=2)
    gateway_fixed_fee: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_FIXED_FEE, decimal_places=2)
    date: Date


class RevenueOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    gross_amount: Decimal
    gateway_percentage: Decimal
    gateway_fixed_fee: Decimal
    net_amount: Decimal
    date: datetime
    created_at: datetime


class FinancialHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    project_id: int
    date: Date
    investment_amount: Decimal
    revenue_amount: Decimal
    net_profit: Decimal
    roi: Decimal


class TotalsOut(BaseModel):
    total_investment: Decimal
    total_revenue: Decimal
    net_profit: Decimal
    roi: Decimal


class WindowOut(BaseModel):
    selector: Literal["today", "week", "month", "custom"]
    start: datetime
    end: datetime
    total_investment: Decimal
    total_revenue: Decimal
    total_profit: Decimal


class InvestmentWriteOut(BaseModel):
    investment: InvestmentOut
    # None quando o histórico do dia não pôde ser atualizado
    history: Optional[FinancialHistoryOut] = None


class RevenueWriteOut(BaseModel):
    revenue: RevenueOut
    history: Optional[FinancialHistoryOut] = None
