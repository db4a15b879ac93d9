"""WebSocket endpoint draining a user's notification inbox."""

from __future__ import annotations

import asyncio
import logging
import queue

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import AuthenticationError
from ..security import authenticate_token
from ..services.notifier import Notifier, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])

POLL_INTERVAL_SECONDS = 0.25


@router.websocket("/ws")
async def events(
    websocket: WebSocket,
    token: str | None = None,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    try:
        user = authenticate_token(db, token)
    except AuthenticationError as exc:
        logger.info("Rejected websocket: %s", exc.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    user_id = user.id
    db.close()

    await websocket.accept()
    inbox = notifier.subscribe(user_id)
    try:
        while True:
            try:
                # clients only talk to keep the connection alive
                await asyncio.wait_for(websocket.receive_text(), timeout=POLL_INTERVAL_SECONDS)
            except asyncio.TimeoutError:
                pass
            while True:
                try:
                    message = inbox.get_nowait()
                except queue.Empty:
                    break
                await websocket.send_json(message)
    except WebSocketDisconnect:
        pass
    finally:
        notifier.unsubscribe(user_id, inbox)
