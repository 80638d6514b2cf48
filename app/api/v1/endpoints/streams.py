"""WebSocket streams pushing live order snapshots to staff and customers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, HTTPException, WebSocket, status
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from app.core.security import SessionContext, resolve_token_user
from app.db import session as db_session
from app.services.order_notifications import Subscription, order_events
from app.services.order_queries import get_order

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


class LatestSnapshot:
    """Single-slot mailbox; a burst of offers collapses to the newest value.

    ``offer`` may be called from any thread, ``take`` only from the event loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._value: Any = None
        self._ready = asyncio.Event()

    def _set(self, value: Any) -> None:
        self._value = value
        self._ready.set()

    def offer(self, value: Any) -> None:
        self._loop.call_soon_threadsafe(self._set, value)

    async def take(self) -> Any:
        await self._ready.wait()
        self._ready.clear()
        return self._value


def _to_json(snapshot: BaseModel | list[BaseModel]) -> Any:
    if isinstance(snapshot, list):
        return [item.model_dump(mode="json") for item in snapshot]
    return snapshot.model_dump(mode="json")


def _authenticate(token: str | None) -> SessionContext | None:
    if not token:
        return None
    with db_session.SessionLocal() as db:
        try:
            user = resolve_token_user(db, token)
        except HTTPException:
            return None
        return SessionContext(user_id=user.id, role=user.role)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _stream(websocket: WebSocket, subscribe: Callable[[Callable[[Any], None]], Subscription]) -> None:
    """Send an initial snapshot, then every delivered snapshot, until the client leaves."""
    mailbox = LatestSnapshot(asyncio.get_running_loop())
    subscription = subscribe(lambda snapshot: mailbox.offer(_to_json(snapshot)))
    disconnected = asyncio.ensure_future(_wait_for_disconnect(websocket))
    try:
        await run_in_threadpool(subscription.refresh)
        while True:
            next_snapshot = asyncio.ensure_future(mailbox.take())
            done, _ = await asyncio.wait({next_snapshot, disconnected}, return_when=asyncio.FIRST_COMPLETED)
            if disconnected in done:
                next_snapshot.cancel()
                break
            await websocket.send_json(next_snapshot.result())
    finally:
        disconnected.cancel()
        subscription.cancel()
        logger.debug("[NOTIFY] Stream %s closed", subscription.name)


@router.websocket("/ws/active")
async def stream_active_orders(websocket: WebSocket, token: str | None = None) -> None:
    """Staff queue stream."""
    ctx = await run_in_threadpool(_authenticate, token)
    if ctx is None or not ctx.is_staff:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()
    await _stream(websocket, order_events.subscribe_active)


@router.websocket("/ws/mine")
async def stream_my_orders(websocket: WebSocket, token: str | None = None) -> None:
    """Customer order history stream."""
    ctx = await run_in_threadpool(_authenticate, token)
    if ctx is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()
    await _stream(websocket, lambda callback: order_events.subscribe_user(ctx.user_id, callback))


def _can_watch(ctx: SessionContext, order_id: str) -> bool:
    with db_session.SessionLocal() as db:
        order = get_order(db, order_id)
        return order is not None and (ctx.is_staff or order.user_id == ctx.user_id)


@router.websocket("/ws/{order_id}")
async def stream_order(websocket: WebSocket, order_id: str, token: str | None = None) -> None:
    """Single order status stream for the order-tracking screen."""
    ctx = await run_in_threadpool(_authenticate, token)
    if ctx is None or not await run_in_threadpool(_can_watch, ctx, order_id):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()
    await _stream(websocket, lambda callback: order_events.subscribe_order(order_id, callback))
