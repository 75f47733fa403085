from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from painel.database import as_utc
from painel.errors import DataUnavailable
from painel.models.subscription import Subscription
from painel.models.user import User, UserRole

logger = logging.getLogger(__name__)

LOGIN_PAGE = "/auth/login-page"
PLANS_PAGE = "/planos"


class AccessState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    ADMIN_OVERRIDE = "admin_override"
    ACTIVE_SUBSCRIPTION = "active_subscription"
    ACTIVE_TRIAL = "active_trial"
    EXPIRED_TRIAL = "expired_trial"
    EXPIRED_SUBSCRIPTION = "expired_subscription"
    NO_SUBSCRIPTION = "no_subscription"


@dataclass(frozen=True)
class AccessDecision:
    state: AccessState
    granted: bool
    redirect_to: str | None = None
    subscription: Subscription | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _has_admin_role(db: Session, user_id: int) -> bool:
    return (
        db.query(UserRole.id)
        .filter(UserRole.user_id == user_id, UserRole.role == "admin")
        .first()
        is not None
    )


def _active_subscription(db: Session, user_id: int) -> Subscription | None:
    # Pode haver mais de uma linha ativa no histórico; vale a mais recente
    return (
        db.query(Subscription)
        .filter(Subscription.user_id == user_id, Subscription.status == "active")
        .order_by(Subscription.start_date.desc(), Subscription.id.desc())
        .first()
    )


def evaluate_access(db: Session, user: User | None, now: datetime | None = None) -> AccessDecision:
    """Decide se o usuário pode usar a área protegida.

    As regras são avaliadas em ordem e a primeira que casar vence. Isto só
    controla a navegação; os dados continuam filtrados por `user_id` em cada
    consulta.
    """
    if user is None:
        return AccessDecision(AccessState.UNAUTHENTICATED, False, LOGIN_PAGE)

    now = as_utc(now) if now is not None else _utcnow()

    try:
        if _has_admin_role(db, user.id):
            return AccessDecision(AccessState.ADMIN_OVERRIDE, True)
        subscription = _active_subscription(db, user.id)
    except SQLAlchemyError as exc:
        logger.exception("Falha ao verificar assinatura do usuário %s", user.id)
        raise DataUnavailable("Não foi possível verificar sua assinatura.") from exc

    if subscription is None:
        return AccessDecision(AccessState.NO_SUBSCRIPTION, False, PLANS_PAGE)

    trial_end = as_utc(subscription.trial_end_at)
    if subscription.is_trial and trial_end is not None and now > trial_end:
        return AccessDecision(AccessState.EXPIRED_TRIAL, False, PLANS_PAGE, subscription)

    end_date = as_utc(subscription.end_date)
    if end_date is not None and now > end_date:
        return AccessDecision(AccessState.EXPIRED_SUBSCRIPTION, False, PLANS_PAGE, subscription)

    state = AccessState.ACTIVE_TRIAL if subscription.is_trial else AccessState.ACTIVE_SUBSCRIPTION
    return AccessDecision(state, True, None, subscription)
