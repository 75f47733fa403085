import logging
from typing import List

from fastapi import APIRouter, Depends, Form, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from painel.auth.security import get_access_decision, get_current_user
from painel.database import get_db
from painel.models.subscription import Subscription, SubscriptionPlan
from painel.models.user import User
from painel.schemas.subscription import AccessOut, SubscriptionOut, SubscriptionPlanOut
from painel.services.records import list_for_user, save
from painel.users.access import AccessDecision
from painel.users.plans import ensure_default_plans, request_plan

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Planos"])


@router.get("/planos")
def planos_page(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    decision: AccessDecision = Depends(get_access_decision),
):
    ensure_default_plans(db)
    planos = (
        db.query(SubscriptionPlan)
        .filter(SubscriptionPlan.is_active.is_(True))
        .order_by(SubscriptionPlan.duration_months.asc())
        .all()
    )
    return {
        "user": {"id": user.id, "nome": user.nome, "email": user.email},
        "access": _access_out(decision),
        "planos": [SubscriptionPlanOut.model_validate(p) for p in planos],
    }


@router.post("/planos/escolher")
def escolher_plano(
    plano_id: int = Form(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if user.is_admin:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admin não precisa de plano.")

    plano = (
        db.query(SubscriptionPlan)
        .filter(SubscriptionPlan.id == plano_id, SubscriptionPlan.is_active.is_(True))
        .first()
    )
    if not plano:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Plano inválido")

    # TODO: integrar com a API de PIX; por enquanto a assinatura só fica aguardando pagamento
    save(db, request_plan(user, plano), "processar assinatura")
    logger.info("Usuário %s escolheu o plano %s", user.id, plano.name)

    return RedirectResponse(url="/planos", status_code=status.HTTP_303_SEE_OTHER)


def _access_out(decision: AccessDecision) -> AccessOut:
    return AccessOut(
        state=decision.state.value,
        granted=decision.granted,
        redirect_to=decision.redirect_to,
        subscription=SubscriptionOut.model_validate(decision.subscription) if decision.subscription else None,
    )


@router.get("/access", response_model=AccessOut)
def verificar_acesso(decision: AccessDecision = Depends(get_access_decision)):
    return _access_out(decision)


@router.get("/subscriptions/me", response_model=List[SubscriptionOut])
def minhas_assinaturas(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return list_for_user(db, Subscription, user.id, order_by=Subscription.start_date.desc())
