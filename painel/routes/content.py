from typing import List, Type

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from painel.auth.security import require_access
from painel.database import get_db, to_db_instant
from painel.models.content import GlobalTask, Idea, Learning, PersonalNote
from painel.models.project import Project
from painel.models.user import User
from painel.schemas.content import (
    GlobalTaskCreate,
    GlobalTaskOut,
    GlobalTaskUpdate,
    IdeaBase,
    IdeaOut,
    LearningBase,
    LearningOut,
    PersonalNoteBase,
    PersonalNoteOut,
)
from painel.services.records import get_owned_or_404, list_for_user, remove, save

router = APIRouter(tags=["Conteúdo"])


def _dados(db: Session, user: User, payload: BaseModel) -> dict:
    data = payload.model_dump()
    # Só é possível vincular registros do próprio usuário
    if data.get("linked_project_id") is not None:
        get_owned_or_404(db, Project, data["linked_project_id"], user.id, "Projeto vinculado não encontrado")
    if data.get("linked_idea_id") is not None:
        get_owned_or_404(db, Idea, data["linked_idea_id"], user.id, "Ideia vinculada não encontrada")
    data["title"] = data["title"].strip()
    if data.get("reminder_date") is not None:
        data["reminder_date"] = to_db_instant(data["reminder_date"])
    return data


def _register_crud(path: str, model, payload_schema: Type[BaseModel], out_schema: Type[BaseModel], label: str, order_by):
    """Rotas de listar/criar/substituir/excluir para registros simples do usuário."""

    @router.get(path, response_model=List[out_schema], name=f"listar_{model.__tablename__}")
    def listar(db: Session = Depends(get_db), user: User = Depends(require_access)):
        return list_for_user(db, model, user.id, order_by=order_by)

    @router.post(path, response_model=out_schema, status_code=status.HTTP_201_CREATED, name=f"criar_{model.__tablename__}")
    def criar(payload: payload_schema, db: Session = Depends(get_db), user: User = Depends(require_access)):
        return save(db, model(user_id=user.id, **_dados(db, user, payload)), f"criar {label}")

    @router.put(path + "/{record_id}", response_model=out_schema, name=f"atualizar_{model.__tablename__}")
    def atualizar(
        record_id: int,
        payload: payload_schema,
        db: Session = Depends(get_db),
        user: User = Depends(require_access),
    ):
        row = get_owned_or_404(db, model, record_id, user.id)
        for key, value in _dados(db, user, payload).items():
            setattr(row, key, value)
        return save(db, row, f"atualizar {label}")

    @router.delete(path + "/{record_id}", status_code=status.HTTP_204_NO_CONTENT, name=f"excluir_{model.__tablename__}")
    def excluir(record_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
        row = get_owned_or_404(db, model, record_id, user.id)
        remove(db, row, f"excluir {label}")


_register_crud("/ideas", Idea, IdeaBase, IdeaOut, "ideia", Idea.created_at.desc())
_register_crud("/learnings", Learning, LearningBase, LearningOut, "aprendizado", Learning.date.desc())
_register_crud(
    "/personal-notes",
    PersonalNote,
    PersonalNoteBase,
    PersonalNoteOut,
    "anotação",
    # Fixadas primeiro
    (PersonalNote.is_pinned.desc(), PersonalNote.updated_at.desc()),
)


# --- Tarefas gerais (sem projeto) ---

@router.get("/global-tasks", response_model=List[GlobalTaskOut])
def listar_tarefas_gerais(db: Session = Depends(get_db), user: User = Depends(require_access)):
    return list_for_user(db, GlobalTask, user.id, order_by=GlobalTask.created_at.asc())


@router.post("/global-tasks", response_model=GlobalTaskOut, status_code=status.HTTP_201_CREATED)
def criar_tarefa_geral(
    payload: GlobalTaskCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    return save(db, GlobalTask(user_id=user.id, title=payload.title.strip()), "criar tarefa")


@router.patch("/global-tasks/{task_id}", response_model=GlobalTaskOut)
def atualizar_tarefa_geral(
    task_id: int,
    payload: GlobalTaskUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    tarefa = get_owned_or_404(db, GlobalTask, task_id, user.id, "Tarefa não encontrada")
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(tarefa, key, value)
    return save(db, tarefa, "atualizar tarefa")


@router.delete("/global-tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_tarefa_geral(task_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    tarefa = get_owned_or_404(db, GlobalTask, task_id, user.id, "Tarefa não encontrada")
    remove(db, tarefa, "excluir tarefa")
