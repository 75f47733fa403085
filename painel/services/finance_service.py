from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from painel.database import to_db_instant
from painel.finance.aggregator import money, to_decimal
from painel.finance.history import refresh_history_after_write
from painel.finance.windows import BUSINESS_TZ, business_date, local_midnight_utc
from painel.models.finance import FinancialHistory, Investment, Revenue
from painel.services.records import remove, save

logger = logging.getLogger(__name__)


def compute_net_amount(gross_amount, gateway_percentage, gateway_fixed_fee) -> Decimal:
    """Valor líquido = bruto - bruto * percentual / 100 - taxa fixa (pode ficar negativo)."""
    gross = to_decimal(gross_amount)
    percentage_fee = gross * to_decimal(gateway_percentage) / Decimal(100)
    return money(gross - percentage_fee - to_decimal(gateway_fixed_fee))


def entry_instant(when: date | datetime) -> datetime:
    """Instante UTC (naive) de uma data digitada no fuso de negócio.

    Uma data pura vira 00:00 local; um datetime sem fuso é tratado como hora
    local de negócio.
    """
    if isinstance(when, datetime):
        if when.tzinfo is None:
            when = when.replace(tzinfo=BUSINESS_TZ)
        return to_db_instant(when)
    return to_db_instant(local_midnight_utc(when))


def add_investment(
    db: Session, user_id: int, project_id: int, amount, when: date | datetime
) -> tuple[Investment, FinancialHistory | None]:
    investment = save(
        db,
        Investment(
            user_id=user_id,
            project_id=project_id,
            amount=money(amount),
            date=entry_instant(when),
        ),
        "adicionar investimento",
    )
    logger.info("Investimento %s adicionado ao projeto %s", investment.id, project_id)
    # Um rollback do histórico não pode expirar o registro que já foi gravado
    db.expunge(investment)

    # Só depois da gravação confirmada recalculamos o dia
    history = refresh_history_after_write(db, user_id, project_id, business_date(investment.date))
    return investment, history


def add_revenue(
    db: Session,
    user_id: int,
    project_id: int,
    gross_amount,
    gateway_percentage,
    gateway_fixed_fee,
    when: date | datetime,
) -> tuple[Revenue, FinancialHistory | None]:
    revenue = save(
        db,
        Revenue(
            user_id=user_id,
            project_id=project_id,
            gross_amount=money(gross_amount),
            gateway_percentage=to_decimal(gateway_percentage),
            gateway_fixed_fee=money(gateway_fixed_fee),
            net_amount=compute_net_amount(gross_amount, gateway_percentage, gateway_fixed_fee),
            date=entry_instant(when),
        ),
        "adicionar faturamento",
    )
    logger.info("Faturamento %s adicionado ao projeto %s", revenue.id, project_id)
    db.expunge(revenue)

    history = refresh_history_after_write(db, user_id, project_id, business_date(revenue.date))
    return revenue, history


def delete_transaction(db: Session, row: Investment | Revenue) -> FinancialHistory | None:
    user_id, project_id, day = row.user_id, row.project_id, business_date(row.date)
    remove(db, row, "excluir transação")
    # O conjunto do dia mudou: recalcula do zero
    return refresh_history_after_write(db, user_id, project_id, day)
