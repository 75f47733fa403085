"""Histórico financeiro diário por projeto (project_financial_history).

Cada linha (projeto, dia) é sempre recalculada por inteiro a partir dos
investimentos e faturamentos do dia; nunca somamos deltas. Rodar de novo com as
mesmas linhas produz exatamente o mesmo resultado.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from painel.database import utcnow
from painel.errors import DataUnavailable
from painel.finance.aggregator import investment_amounts, revenue_amounts, roi_percent, sum_amounts
from painel.finance.windows import day_window
from painel.models.finance import FinancialHistory
from painel.realtime import queue_change

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    investment_amount: Decimal
    revenue_amount: Decimal
    net_profit: Decimal
    roi: Decimal


def compute_snapshot(investments: Iterable, revenues: Iterable) -> Snapshot:
    investment = sum_amounts(investments)
    revenue = sum_amounts(revenues)
    net_profit = revenue - investment
    return Snapshot(
        investment_amount=investment,
        revenue_amount=revenue,
        net_profit=net_profit,
        roi=roi_percent(net_profit, investment),
    )


def _write_snapshot(db: Session, user_id: int, project_id: int, day: date, snap: Snapshot) -> None:
    values = {
        "user_id": user_id,
        "project_id": project_id,
        "date": day,
        "investment_amount": snap.investment_amount,
        "revenue_amount": snap.revenue_amount,
        "net_profit": snap.net_profit,
        "roi": snap.roi,
        "updated_at": utcnow(),
    }
    update_cols = {k: v for k, v in values.items() if k not in ("project_id", "date")}

    dialect = db.get_bind().dialect.name
    if dialect in ("sqlite", "postgresql"):
        insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
        stmt = insert(FinancialHistory).values(created_at=utcnow(), **values)
        stmt = stmt.on_conflict_do_update(index_elements=["project_id", "date"], set_=update_cols)
        db.execute(stmt)
        return

    row = (
        db.query(FinancialHistory)
        .filter(FinancialHistory.project_id == project_id, FinancialHistory.date == day)
        .first()
    )
    if row is None:
        db.add(FinancialHistory(**values))
    else:
        for key, value in update_cols.items():
            setattr(row, key, value)


def upsert_financial_history(db: Session, user_id: int, project_id: int, day: date) -> FinancialHistory:
    window = day_window(day)
    snap = compute_snapshot(
        investment_amounts(db, user_id, project_id, window),
        revenue_amounts(db, user_id, project_id, window),
    )

    try:
        _write_snapshot(db, user_id, project_id, day, snap)
        db.flush()
        row = (
            db.query(FinancialHistory)
            .filter(FinancialHistory.project_id == project_id, FinancialHistory.date == day)
            .populate_existing()
            .one()
        )
        queue_change(db, FinancialHistory.__tablename__, "UPSERT", {"id": row.id, "user_id": user_id, "project_id": project_id})
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise DataUnavailable("Não foi possível atualizar o histórico financeiro.") from exc

    logger.debug(
        "Histórico do projeto %s em %s: investimento=%s faturamento=%s roi=%s",
        project_id, day, snap.investment_amount, snap.revenue_amount, snap.roi,
    )
    return row


def refresh_history_after_write(db: Session, user_id: int, project_id: int, day: date) -> FinancialHistory | None:
    """Recalcula o dia após gravar um investimento/faturamento.

    Uma falha aqui não desfaz a gravação que já foi confirmada: o histórico fica
    desatualizado até a próxima gravação no mesmo projeto e dia.
    """
    try:
        return upsert_financial_history(db, user_id, project_id, day)
    except DataUnavailable:
        db.rollback()
        logger.warning(
            "Histórico financeiro do projeto %s em %s ficou desatualizado", project_id, day, exc_info=True
        )
        return None
