import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from painel.auth.security import require_admin
from painel.database import get_db, to_db_instant, utcnow
from painel.models.subscription import Subscription
from painel.models.user import User, UserRole
from painel.schemas.subscription import (
    AdminUserOut,
    SubscriptionCreate,
    SubscriptionOut,
    SubscriptionStatusUpdate,
)
from painel.services.records import remove, save

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def _user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    return user


@router.get("/users", response_model=List[AdminUserOut])
def admin_listar_usuarios(
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin),
):
    usuarios = db.query(User).order_by(User.id.asc()).all()
    return [
        AdminUserOut(
            id=u.id,
            nome=u.nome,
            email=u.email,
            roles=sorted(r.role for r in u.roles),
            subscriptions=[SubscriptionOut.model_validate(s) for s in u.subscriptions],
        )
        for u in usuarios
    ]


@router.post("/users/{user_id}/admin", status_code=status.HTTP_204_NO_CONTENT)
def admin_conceder_admin(
    user_id: int,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin),
):
    user = _user_or_404(db, user_id)
    if not user.is_admin:
        save(db, UserRole(user_id=user.id, role="admin"), "conceder admin")
        logger.info("Admin %s concedeu papel admin ao usuário %s", admin_user.id, user.id)


@router.delete("/users/{user_id}/admin", status_code=status.HTTP_204_NO_CONTENT)
def admin_revogar_admin(
    user_id: int,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin),
):
    if user_id == admin_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Você não pode remover seu próprio acesso de admin")

    _user_or_404(db, user_id)
    role = db.query(UserRole).filter(UserRole.user_id == user_id, UserRole.role == "admin").first()
    if role:
        remove(db, role, "revogar admin")
        logger.info("Admin %s revogou papel admin do usuário %s", admin_user.id, user_id)


@router.get("/subscriptions", response_model=List[SubscriptionOut])
def admin_listar_assinaturas(
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin),
):
    return db.query(Subscription).order_by(Subscription.created_at.desc()).all()


@router.post("/subscriptions", response_model=SubscriptionOut, status_code=status.HTTP_201_CREATED)
def admin_criar_assinatura(
    payload: SubscriptionCreate,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin),
):
    _user_or_404(db, payload.user_id)
    assinatura = Subscription(
        user_id=payload.user_id,
        plan_name=payload.plan_name,
        status=payload.status,
        price=payload.price,
        notes=payload.notes.strip() if payload.notes else None,
        start_date=to_db_instant(payload.start_date) if payload.start_date else utcnow(),
        end_date=to_db_instant(payload.end_date) if payload.end_date else None,
        is_trial=payload.is_trial,
        trial_end_at=to_db_instant(payload.trial_end_at) if payload.trial_end_at else None,
    )
    return save(db, assinatura, "criar assinatura")


@router.patch("/subscriptions/{subscription_id}", response_model=SubscriptionOut)
def admin_alterar_status(
    subscription_id: int,
    payload: SubscriptionStatusUpdate,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin),
):
    assinatura = db.query(Subscription).filter(Subscription.id == subscription_id).first()
    if not assinatura:
        raise HTTPException(status_code=404, detail="Assinatura não encontrada")

    assinatura.status = payload.status
    return save(db, assinatura, "atualizar assinatura")


@router.delete("/subscriptions/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def admin_excluir_assinatura(
    subscription_id: int,
    db: Session = Depends(get_db),
    admin_user: User = Depends(require_admin),
):
    assinatura = db.query(Subscription).filter(Subscription.id == subscription_id).first()
    if not assinatura:
        raise HTTPException(status_code=404, detail="Assinatura não encontrada")
    remove(db, assinatura, "excluir assinatura")
