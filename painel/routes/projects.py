from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from painel.auth.security import require_access
from painel.database import get_db
from painel.finance.aggregator import aggregate_project_totals
from painel.models.finance import FinancialHistory
from painel.models.project import Project, ProjectNote, Task
from painel.models.user import User
from painel.schemas.finance import FinancialHistoryOut, TotalsOut
from painel.schemas.project import (
    NoteOut,
    NoteUpdate,
    ProjectCreate,
    ProjectOut,
    ProjectUpdate,
    ProjectWithTotals,
    TaskCreate,
    TaskOut,
    TaskUpdate,
)
from painel.services.records import get_owned_or_404, list_for_user, remove, save

router = APIRouter(prefix="/projects", tags=["Projetos"])


def _with_totals(db: Session, project: Project) -> ProjectWithTotals:
    totals = aggregate_project_totals(db, project.user_id, project.id)
    return ProjectWithTotals(
        **ProjectOut.model_validate(project).model_dump(),
        total_investment=totals.total_investment,
        total_revenue=totals.total_revenue,
        net_profit=totals.net_profit,
        roi=totals.roi,
    )


@router.get("", response_model=List[ProjectWithTotals])
def listar_projetos(db: Session = Depends(get_db), user: User = Depends(require_access)):
    projetos = list_for_user(db, Project, user.id, order_by=Project.created_at.desc())
    return [_with_totals(db, p) for p in projetos]


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def criar_projeto(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    projeto = Project(user_id=user.id, **payload.model_dump())
    return save(db, projeto, "criar projeto")


@router.get("/{project_id}", response_model=ProjectWithTotals)
def obter_projeto(project_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    projeto = get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    return _with_totals(db, projeto)


@router.patch("/{project_id}", response_model=ProjectOut)
def atualizar_projeto(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    projeto = get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    for key, value in payload.model_dump(exclude_unset=True).items():
        if key in ("name", "status") and value is None:
            continue
        if key == "name":
            value = value.strip()
        setattr(projeto, key, value)
    return save(db, projeto, "atualizar projeto")


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_projeto(project_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    projeto = get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    # Investimentos, faturamentos, tarefas, notas e histórico vão junto
    remove(db, projeto, "excluir projeto")


@router.get("/{project_id}/totals", response_model=TotalsOut)
def totais_do_projeto(project_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    totals = aggregate_project_totals(db, user.id, project_id)
    return TotalsOut(
        total_investment=totals.total_investment,
        total_revenue=totals.total_revenue,
        net_profit=totals.net_profit,
        roi=totals.roi,
    )


@router.get("/{project_id}/history", response_model=List[FinancialHistoryOut])
def historico_do_projeto(project_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    return list_for_user(
        db,
        FinancialHistory,
        user.id,
        FinancialHistory.project_id == project_id,
        order_by=FinancialHistory.date.desc(),
    )


# --- Tarefas ---

def _task_or_404(db: Session, project_id: int, task_id: int, user_id: int) -> Task:
    tarefa = get_owned_or_404(db, Task, task_id, user_id, "Tarefa não encontrada")
    if tarefa.project_id != project_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tarefa não encontrada")
    return tarefa


@router.get("/{project_id}/tasks", response_model=List[TaskOut])
def listar_tarefas(project_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    return list_for_user(db, Task, user.id, Task.project_id == project_id, order_by=Task.created_at.asc())


@router.post("/{project_id}/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def criar_tarefa(
    project_id: int,
    payload: TaskCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    tarefa = Task(user_id=user.id, project_id=project_id, title=payload.title.strip())
    return save(db, tarefa, "criar tarefa")


@router.patch("/{project_id}/tasks/{task_id}", response_model=TaskOut)
def atualizar_tarefa(
    project_id: int,
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    tarefa = _task_or_404(db, project_id, task_id, user.id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(tarefa, key, value)
    return save(db, tarefa, "atualizar tarefa")


@router.delete("/{project_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_tarefa(
    project_id: int,
    task_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    tarefa = _task_or_404(db, project_id, task_id, user.id)
    remove(db, tarefa, "excluir tarefa")


# --- Notas (uma por projeto) ---

@router.get("/{project_id}/notes", response_model=NoteOut)
def obter_notas(project_id: int, db: Session = Depends(get_db), user: User = Depends(require_access)):
    projeto = get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    if projeto.note is None:
        return save(db, ProjectNote(user_id=user.id, project_id=project_id, content=""), "criar notas")
    return projeto.note


@router.put("/{project_id}/notes", response_model=NoteOut)
def salvar_notas(
    project_id: int,
    payload: NoteUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_access),
):
    projeto = get_owned_or_404(db, Project, project_id, user.id, "Projeto não encontrado")
    nota = projeto.note or ProjectNote(user_id=user.id, project_id=project_id)
    nota.content = payload.content
    return save(db, nota, "salvar notas")
