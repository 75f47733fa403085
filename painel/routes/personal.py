from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from painel.auth.security import require_access
from painel.database import get_db, to_db_instant
from painel.finance.aggregator import aggregate_personal
from painel.finance.windows import resolve_window
from painel.models.personal import PendingPayment, PendingReceipt, PersonalExpense, PersonalIncome
from painel.models.user import User
from painel.schemas.personal import (
    CompletedToggle,
    PendingPaymentCreate,
    PendingPaymentOut,
    PendingReceiptCreate,
    PendingReceiptOut,
    PersonalReport,
    PersonalTransactionCreate,
    PersonalTransactionOut,
)
from painel.services.finance_service import entry_instant
from painel.services.records import get_owned_or_404, list_for_user, remove, save

router = APIRouter(prefix="/personal", tags=["Finanças pessoais"])

_MODELS = {"expense": PersonalExpense, "income": PersonalIncome}


def _transaction_out(row, kind: str) -> PersonalTransactionOut:
    return PersonalTransactionOut(
        id=row.id,
        kind=kind,
        amount=row.amount,
        category=row.category,
        description=row.description or "",
        date=row.date,
    )


@router.get("/report", response_model=PersonalReport)
def relatorio(
    selector: str = Query("today"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    window = resolve_window(selector, start_date, end_date)
    totals = aggregate_personal(db, user.id, window)

    transacoes = []
    for kind, model in _MODELS.items():
        rows = list_for_user(
            db,
            model,
            user.id,
            model.date >= to_db_instant(window.start),
            model.date <= to_db_instant(window.end),
        )
        transacoes.extend(_transaction_out(row, kind) for row in rows)
    transacoes.sort(key=lambda t: t.date, reverse=True)

    # O filtro de categoria vale só para a lista, não para os totais
    if category:
        transacoes = [t for t in transacoes if t.category == category]

    pagamentos = list_for_user(
        db, PendingPayment, user.id, PendingPayment.completed.is_(False), order_by=PendingPayment.due_date.asc()
    )
    recebimentos = list_for_user(
        db, PendingReceipt, user.id, PendingReceipt.completed.is_(False), order_by=PendingReceipt.expected_date.asc()
    )

    return PersonalReport(
        start=window.start,
        end=window.end,
        total_expenses=totals.total_expenses,
        total_income=totals.total_income,
        balance=totals.balance,
        transactions=transacoes,
        pending_payments=[PendingPaymentOut.model_validate(r) for r in pagamentos],
        pending_receipts=[PendingReceiptOut.model_validate(r) for r in recebimentos],
    )


def _criar(db: Session, user: User, kind: str, payload: PersonalTransactionCreate) -> PersonalTransactionOut:
    row = _MODELS[kind](
        user_id=user.id,
        amount=payload.amount,
        category=payload.category.strip(),
        description=payload.description,
        date=entry_instant(payload.date),
    )
    label = "despesa" if kind == "expense" else "receita"
    return _transaction_out(save(db, row, f"adicionar {label}"), kind)


def _excluir(db: Session, user: User, kind: str, transaction_id: int) -> None:
    row = get_owned_or_404(db, _MODELS[kind], transaction_id, user.id, "Transação não encontrada")
    remove(db, row, "excluir transação")


@router.post("/expenses", response_model=PersonalTransactionOut, status_code=status.HTTP_201_CREATED)
def criar_despesa(
    payload: PersonalTransactionCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    return _criar(db, user, "expense", payload)


@router.delete("/expenses/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_despesa(transaction_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    _excluir(db, user, "expense", transaction_id)


@router.post("/incomes", response_model=PersonalTransactionOut, status_code=status.HTTP_201_CREATED)
def criar_receita(
    payload: PersonalTransactionCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    return _criar(db, user, "income", payload)


@router.delete("/incomes/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_receita(transaction_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    _excluir(db, user, "income", transaction_id)


@router.post("/pending-payments", response_model=PendingPaymentOut, status_code=status.HTTP_201_CREATED)
def criar_pagamento_pendente(
    payload: PendingPaymentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    row = PendingPayment(
        user_id=user.id,
        amount=payload.amount,
        category=payload.category.strip(),
        description=payload.description,
        due_date=entry_instant(payload.due_date),
    )
    return save(db, row, "adicionar pagamento pendente")


@router.patch("/pending-payments/{payment_id}", response_model=PendingPaymentOut)
def marcar_pagamento(
    payment_id: int,
    payload: CompletedToggle,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    row = get_owned_or_404(db, PendingPayment, payment_id, user.id, "Pagamento não encontrado")
    row.completed = payload.completed
    return save(db, row, "atualizar pagamento")


@router.delete("/pending-payments/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_pagamento(payment_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    row = get_owned_or_404(db, PendingPayment, payment_id, user.id, "Pagamento não encontrado")
    remove(db, row, "excluir pagamento")


@router.post("/pending-receipts", response_model=PendingReceiptOut, status_code=status.HTTP_201_CREATED)
def criar_recebimento_pendente(
    payload: PendingReceiptCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    row = PendingReceipt(
        user_id=user.id,
        amount=payload.amount,
        category=payload.category.strip(),
        description=payload.description,
        expected_date=entry_instant(payload.expected_date),
    )
    return save(db, row, "adicionar recebimento pendente")


@router.patch("/pending-receipts/{receipt_id}", response_model=PendingReceiptOut)
def marcar_recebimento(
    receipt_id: int,
    payload: CompletedToggle,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    row = get_owned_or_404(db, PendingReceipt, receipt_id, user.id, "Recebimento não encontrado")
    row.completed = payload.completed
    return save(db, row, "atualizar recebimento")


@router.delete("/pending-receipts/{receipt_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_recebimento(receipt_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    row = get_owned_or_404(db, PendingReceipt, receipt_id, user.id, "Recebimento não encontrado")
    remove(db, row, "excluir recebimento")
