"""Feed de alterações das tabelas, para atualizar o painel sem recarregar.

As alterações são coletadas a cada flush da sessão e só são publicadas depois
do commit; um rollback descarta o que estava pendente.
"""
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

ALL_TABLES = "*"

# Feeds ligados a alguma sessão; `queue_change` entrega a todos eles
_attached: list = []
_attached_lock = threading.Lock()


@dataclass(frozen=True)
class Change:
    table: str
    event: str  # INSERT, UPDATE, DELETE ou UPSERT
    row: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"table": self.table, "event": self.event, "row": dict(self.row)}


Filter = Mapping[str, Any] | Callable[[Change], bool] | None


def _matches(change: Change, table: str, filter_: Filter) -> bool:
    if table != ALL_TABLES and table != change.table:
        return False
    if filter_ is None:
        return True
    if callable(filter_):
        return bool(filter_(change))
    return all(change.row.get(key) == value for key, value in filter_.items())


def _row_snapshot(obj) -> dict:
    # Só as chaves; o cliente recarrega o resto
    values = inspect(obj).dict
    return {key: values[key] for key in ("id", "user_id", "project_id") if values.get(key) is not None}


def queue_change(session: Session, table: str, event_name: str, row: Mapping[str, Any]) -> None:
    """Registra uma alteração feita fora do ORM (ex.: upsert via Core)."""
    change = Change(table, event_name, dict(row))
    with _attached_lock:
        feeds = list(_attached)
    for feed_ in feeds:
        if feed_.listens_to(session):
            feed_._pending(session).append(change)


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscribers: dict[int, tuple[str, Filter, Callable[[Change], None]]] = {}
        # Cada feed guarda as pendências da sessão na sua própria chave
        self._key = f"painel_pending_changes:{id(self)}"
        self._targets: list = []

    def subscribe(self, table: str, filter_: Filter, on_change: Callable[[Change], None]) -> Callable[[], None]:
        """Assina as alterações de `table` (ou `*`); devolve a função que cancela."""
        with self._lock:
            sub_id = next(self._ids)
            self._subscribers[sub_id] = (table, filter_, on_change)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(sub_id, None)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, change: Change) -> None:
        with self._lock:
            subscribers = list(self._subscribers.values())
        for table, filter_, on_change in subscribers:
            if not _matches(change, table, filter_):
                continue
            try:
                on_change(change)
            except Exception:
                # Um assinante com problema não pode impedir os demais
                logger.exception("Falha ao notificar assinante de %s", change.table)

    # --- integração com a sessão do SQLAlchemy ---

    def _collect(self, session: Session, flush_context) -> None:
        pending = self._pending(session)
        for obj, event_name in itertools.chain(
            ((o, "INSERT") for o in session.new),
            ((o, "UPDATE") for o in session.dirty if session.is_modified(o)),
            ((o, "DELETE") for o in session.deleted),
        ):
            table = getattr(obj, "__tablename__", None)
            if table:
                pending.append(Change(table, event_name, _row_snapshot(obj)))

    def _pending(self, session: Session) -> list:
        return session.info.setdefault(self._key, [])

    def _flush_pending(self, session: Session) -> None:
        for change in session.info.pop(self._key, []):
            self.publish(change)

    def _discard_pending(self, session: Session) -> None:
        session.info.pop(self._key, None)

    def attach(self, target=Session) -> None:
        if event.contains(target, "after_commit", self._flush_pending):
            return
        event.listen(target, "after_flush", self._collect)
        event.listen(target, "after_commit", self._flush_pending)
        event.listen(target, "after_soft_rollback", self._on_rollback)
        self._targets.append(target)
        with _attached_lock:
            if self not in _attached:
                _attached.append(self)

    def detach(self, target=Session) -> None:
        if not event.contains(target, "after_commit", self._flush_pending):
            return
        event.remove(target, "after_flush", self._collect)
        event.remove(target, "after_commit", self._flush_pending)
        event.remove(target, "after_soft_rollback", self._on_rollback)
        self._targets = [t for t in self._targets if t is not target]
        if not self._targets:
            with _attached_lock:
                if self in _attached:
                    _attached.remove(self)

    def listens_to(self, session: Session) -> bool:
        return any(
            target is session or (isinstance(target, type) and isinstance(session, target))
            for target in self._targets
        )

    def _on_rollback(self, session: Session, previous_transaction) -> None:
        self._discard_pending(session)


feed = ChangeFeed()
