import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool

from painel.auth.security import user_from_token
from painel.database import SessionLocal
from painel.errors import DataUnavailable
from painel.realtime import ALL_TABLES, feed
from painel.users.access import evaluate_access

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tempo real"])


def _usuario_liberado(token: str | None) -> int | None:
    """Id do usuário com acesso liberado, ou None. Roda fora do event loop."""
    with SessionLocal() as db:
        user = user_from_token(token, db)
        try:
            granted = evaluate_access(db, user).granted
        except DataUnavailable:
            granted = False
        return user.id if granted else None


@router.websocket("/ws/changes")
async def alteracoes(websocket: WebSocket):
    user_id = await run_in_threadpool(_usuario_liberado, websocket.cookies.get("access_token"))
    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = feed.subscribe(
        ALL_TABLES,
        {"user_id": user_id},
        lambda change: loop.call_soon_threadsafe(queue.put_nowait, change),
    )

    async def enviar():
        # Na (re)conexão o cliente recarrega tudo; depois só recebe as alterações
        await websocket.send_json({"event": "reload"})
        while True:
            change = await queue.get()
            await websocket.send_json(change.to_dict())

    async def receber():
        while True:
            await websocket.receive_text()

    tasks = [asyncio.create_task(enviar()), asyncio.create_task(receber())]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("Feed do usuário %s encerrado com erro: %r", user_id, exc)
    finally:
        for task in tasks:
            task.cancel()
        unsubscribe()
        logger.debug("Feed do usuário %s encerrado", user_id)
