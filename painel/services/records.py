import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from painel.errors import DataUnavailable

logger = logging.getLogger(__name__)


def get_owned_or_404(db: Session, model, record_id: int, user_id: int, detail: str = "Registro não encontrado"):
    """Busca um registro do próprio usuário; de outro usuário é tratado como inexistente."""
    try:
        record = db.query(model).filter(model.id == record_id, model.user_id == user_id).first()
    except SQLAlchemyError as exc:
        logger.exception("Falha ao carregar %s %s", model.__tablename__, record_id)
        raise DataUnavailable("Erro ao carregar dados.") from exc
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return record


def save(db: Session, obj, action: str):
    try:
        db.add(obj)
        db.commit()
        db.refresh(obj)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Falha ao %s", action)
        raise DataUnavailable(f"Erro ao {action}.") from exc
    return obj


def remove(db: Session, obj, action: str) -> None:
    try:
        db.delete(obj)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Falha ao %s", action)
        raise DataUnavailable(f"Erro ao {action}.") from exc


def list_for_user(db: Session, model, user_id: int, *criteria, order_by=None) -> list:
    try:
        query = db.query(model).filter(model.user_id == user_id, *criteria)
        if order_by is not None:
            query = query.order_by(*(order_by if isinstance(order_by, tuple) else (order_by,)))
        return query.all()
    except SQLAlchemyError as exc:
        logger.exception("Falha ao listar %s", model.__tablename__)
        raise DataUnavailable("Erro ao carregar dados.") from exc
