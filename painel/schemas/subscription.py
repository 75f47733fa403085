from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from painel.database import as_utc

SubscriptionStatus = Literal["active", "inactive", "suspended", "cancelled", "waiting_payment"]


class SubscriptionPlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    duration_months: int
    price: Decimal
    description: Optional[str] = None


class SubscriptionCreate(BaseModel):
    user_id: int
    plan_name: str = Field(min_length=1, max_length=100)
    status: SubscriptionStatus = "active"
    price: Optional[Decimal] = Field(default=None, ge=0, le=Decimal("999999.99"), decimal_places=2)
    notes: Optional[str] = Field(default=None, max_length=1000)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_trial: bool = False
    trial_end_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_dates(self):
        self.plan_name = self.plan_name.strip()
        if not self.plan_name:
            raise ValueError("Nome do plano é obrigatório")
        if self.start_date and self.end_date and as_utc(self.end_date) < as_utc(self.start_date):
            raise ValueError("A data final não pode ser anterior à data inicial")
        return self


class SubscriptionStatusUpdate(BaseModel):
    status: SubscriptionStatus


class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    plan_name: str
    status: str
    price: Optional[Decimal] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    is_trial: bool
    trial_end_at: Optional[datetime] = None
    notes: Optional[str] = None


class AccessOut(BaseModel):
    state: str
    granted: bool
    redirect_to: Optional[str] = None
    subscription: Optional[SubscriptionOut] = None


class AdminUserOut(BaseModel):
    id: int
    nome: Optional[str] = None
    email: str
    roles: List[str]
    subscriptions: List[SubscriptionOut]
