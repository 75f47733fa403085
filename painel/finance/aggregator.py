"""Somatórios financeiros (projetos e finanças pessoais).

Tudo aqui é leitura: as funções buscam as linhas do usuário no banco e somam
em `Decimal`, nunca em float.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from painel.database import to_db_instant
from painel.errors import DataUnavailable
from painel.finance.windows import TimeWindow
from painel.models.finance import Investment, Revenue
from painel.models.personal import PersonalExpense, PersonalIncome

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # str() evita herdar o erro binário de um float
    return Decimal(str(value))


def money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_amounts(values: Iterable) -> Decimal:
    total = ZERO
    for value in values:
        total += to_decimal(value)
    return money(total)


def roi_percent(net_profit: Decimal, investment: Decimal) -> Decimal:
    if investment <= 0:
        return ZERO
    return money(net_profit / investment * 100)


@dataclass(frozen=True)
class ProjectTotals:
    total_investment: Decimal
    total_revenue: Decimal

    @property
    def net_profit(self) -> Decimal:
        return self.total_revenue - self.total_investment

    @property
    def roi(self) -> Decimal:
        return roi_percent(self.net_profit, self.total_investment)


@dataclass(frozen=True)
class WindowTotals:
    total_investment: Decimal
    total_revenue: Decimal
    total_profit: Decimal


@dataclass(frozen=True)
class PersonalTotals:
    total_expenses: Decimal
    total_income: Decimal
    balance: Decimal


def _scalars(db: Session, column, *criteria) -> list:
    try:
        return list(db.query(column).filter(*criteria).all())
    except SQLAlchemyError as exc:
        logger.exception("Falha ao ler %s", column)
        raise DataUnavailable("Não foi possível carregar os dados financeiros.") from exc


def _window_criteria(model, window: TimeWindow) -> tuple:
    return (
        model.date >= to_db_instant(window.start),
        model.date <= to_db_instant(window.end),
    )


def _project_criteria(model, user_id: int, project_id: int | None) -> tuple:
    criteria = (model.user_id == user_id,)
    if project_id is not None:
        criteria += (model.project_id == project_id,)
    return criteria


def investment_amounts(db: Session, user_id: int, project_id: int | None = None, window: TimeWindow | None = None) -> list:
    criteria = _project_criteria(Investment, user_id, project_id)
    if window is not None:
        criteria += _window_criteria(Investment, window)
    return [row[0] for row in _scalars(db, Investment.amount, *criteria)]


def revenue_amounts(db: Session, user_id: int, project_id: int | None = None, window: TimeWindow | None = None) -> list:
    criteria = _project_criteria(Revenue, user_id, project_id)
    if window is not None:
        criteria += _window_criteria(Revenue, window)
    return [row[0] for row in _scalars(db, Revenue.net_amount, *criteria)]


def aggregate_project_totals(db: Session, user_id: int, project_id: int) -> ProjectTotals:
    """Totais de todo o período de um projeto; não depende de filtro de datas."""
    return ProjectTotals(
        total_investment=sum_amounts(investment_amounts(db, user_id, project_id)),
        total_revenue=sum_amounts(revenue_amounts(db, user_id, project_id)),
    )


def aggregate_global_totals(db: Session, user_id: int) -> ProjectTotals:
    return ProjectTotals(
        total_investment=sum_amounts(investment_amounts(db, user_id)),
        total_revenue=sum_amounts(revenue_amounts(db, user_id)),
    )


def aggregate_window(db: Session, user_id: int, window: TimeWindow, project_id: int | None = None) -> WindowTotals:
    investment = sum_amounts(investment_amounts(db, user_id, project_id, window))
    revenue = sum_amounts(revenue_amounts(db, user_id, project_id, window))
    return WindowTotals(total_investment=investment, total_revenue=revenue, total_profit=revenue - investment)


def aggregate_personal(db: Session, user_id: int, window: TimeWindow) -> PersonalTotals:
    expenses = sum_amounts(
        row[0]
        for row in _scalars(
            db,
            PersonalExpense.amount,
            PersonalExpense.user_id == user_id,
            *_window_criteria(PersonalExpense, window),
        )
    )
    income = sum_amounts(
        row[0]
        for row in _scalars(
            db,
            PersonalIncome.amount,
            PersonalIncome.user_id == user_id,
            *_window_criteria(PersonalIncome, window),
        )
    )
    return PersonalTotals(total_expenses=expenses, total_income=income, balance=income - expenses)
