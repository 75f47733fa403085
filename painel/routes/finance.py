from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from painel.auth.security import require_access
from painel.database import get_db
from painel.finance.aggregator import aggregate_global_totals, aggregate_window
from painel.finance.windows import resolve_window
from painel.models.finance import Investment, Revenue
from painel.models.project import Project
from painel.models.user import User
from painel.schemas.finance import (
    FinancialHistoryOut,
    InvestmentCreate,
    InvestmentOut,
    InvestmentWriteOut,
    RevenueCreate,
    RevenueOut,
    RevenueWriteOut,
    TotalsOut,
    WindowOut,
)
from painel.services.finance_service import add_investment, add_revenue, delete_transaction
from painel.services.records import get_owned_or_404, list_for_user

router = APIRouter(tags=["Financeiro"])


def _history_out(row) -> Optional[FinancialHistoryOut]:
    return FinancialHistoryOut.model_validate(row) if row is not None else None


@router.get("/investments", response_model=List[InvestmentOut])
def listar_investimentos(
    project_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    criteria = [Investment.project_id == project_id] if project_id is not None else []
    return list_for_user(db, Investment, user.id, *criteria, order_by=Investment.date.desc())


@router.post("/investments", response_model=InvestmentWriteOut, status_code=status.HTTP_201_CREATED)
def criar_investimento(
    payload: InvestmentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    get_owned_or_404(db, Project, payload.project_id, user.id, "Projeto não encontrado")
    investimento, historico = add_investment(db, user.id, payload.project_id, payload.amount, payload.date)
    return InvestmentWriteOut(
        investment=InvestmentOut.model_validate(investimento),
        history=_history_out(historico),
    )


@router.delete("/investments/{investment_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_investimento(
    investment_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    investimento = get_owned_or_404(db, Investment, investment_id, user.id, "Investimento não encontrado")
    delete_transaction(db, investimento)


@router.get("/revenues", response_model=List[RevenueOut])
def listar_faturamentos(
    project_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    criteria = [Revenue.project_id == project_id] if project_id is not None else []
    return list_for_user(db, Revenue, user.id, *criteria, order_by=Revenue.date.desc())


@router.post("/revenues", response_model=RevenueWriteOut, status_code=status.HTTP_201_CREATED)
def criar_faturamento(
    payload: RevenueCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    get_owned_or_404(db, Project, payload.project_id, user.id, "Projeto não encontrado")
    faturamento, historico = add_revenue(
        db,
        user.id,
        payload.project_id,
        payload.gross_amount,
        payload.gateway_percentage,
        payload.gateway_fixed_fee,
        payload.date,
    )
    return RevenueWriteOut(
        revenue=RevenueOut.model_validate(faturamento),
        history=_history_out(historico),
    )


@router.delete("/revenues/{revenue_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_faturamento(
    revenue_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    faturamento = get_owned_or_404(db, Revenue, revenue_id, user.id, "Faturamento não encontrado")
    delete_transaction(db, faturamento)


@router.get("/dashboard/totals", response_model=TotalsOut)
def totais_gerais(db: Session = Depends(get_db), user: User = Depends(require_access)):
    totals = aggregate_global_totals(db, user.id)
    return TotalsOut(
        total_investment=totals.total_investment,
        total_revenue=totals.total_revenue,
        net_profit=totals.net_profit,
        roi=totals.roi,
    )


@router.get("/dashboard/summary", response_model=WindowOut)
def resumo_do_periodo(
    selector: str = Query("today"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    project_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    window = resolve_window(selector, start_date, end_date)
    if project_id is not None:
        get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    totals = aggregate_window(db, user.id, window, project_id)
    return WindowOut(
        selector=selector,
        start=window.start,
        end=window.end,
        total_investment=totals.total_investment,
        total_revenue=totals.total_revenue,
        total_profit=totals.total_profit,
    )
