from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from painel.config import TRIAL_DAYS
from painel.database import utcnow
from painel.models.subscription import Subscription, SubscriptionPlan
from painel.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Plano:
    nome: str
    duracao_meses: int
    preco: Decimal
    descricao: str


PLANOS_PADRAO: tuple[Plano, ...] = (
    Plano(nome="Mensal", duracao_meses=1, preco=Decimal("29.90"), descricao="Acesso completo por 1 mês"),
    Plano(nome="Trimestral", duracao_meses=3, preco=Decimal("79.90"), descricao="Acesso completo por 3 meses"),
    Plano(nome="Anual", duracao_meses=12, preco=Decimal("299.90"), descricao="Acesso completo por 12 meses"),
)


def add_months(dt: datetime, months: int) -> datetime:
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def ensure_default_plans(db: Session) -> bool:
    if db.query(SubscriptionPlan.id).first() is not None:
        return False

    for plano in PLANOS_PADRAO:
        db.add(
            SubscriptionPlan(
                name=plano.nome,
                duration_months=plano.duracao_meses,
                price=plano.preco,
                description=plano.descricao,
            )
        )
    db.commit()
    logger.info("Planos padrão cadastrados")
    return True


def start_trial(user: User, now: datetime | None = None) -> Subscription:
    now = now or utcnow()
    return Subscription(
        user=user,
        plan_name="Teste grátis",
        status="active",
        price=Decimal("0.00"),
        start_date=now,
        is_trial=True,
        trial_end_at=now + timedelta(days=TRIAL_DAYS),
    )


def request_plan(user: User, plano: SubscriptionPlan, now: datetime | None = None) -> Subscription:
    """Inicia a assinatura aguardando pagamento via PIX (nenhum pagamento é processado)."""
    now = now or utcnow()
    price = Decimal(plano.price)
    return Subscription(
        user=user,
        plan_name=plano.name,
        status="waiting_payment",
        price=price,
        start_date=now,
        end_date=add_months(now, plano.duration_months),
        is_trial=False,
        notes=f"Aguardando pagamento via PIX - R$ {price:.2f}",
    )
