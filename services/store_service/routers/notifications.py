"""Store notifications router: broadcasts and the live WebSocket feed.

Notifications are not persisted. A client connects to ``/notifications/ws``
(optionally with ``?token=<jwt>``) and receives every message published
while it stays connected. Admin tokens also receive admin notifications.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from jose import JWTError
from libs.auth.dependencies import decode_token, get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.common.errors import ValidationError
from libs.common.logging import get_logger
from libs.common.notifications import ADMINS, Notifier, get_notifier
from pydantic import ValidationError as TokenClaimsError
from services.store_service.schemas import NotificationCreate, NotificationSent

logger = get_logger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

EVENTS = {ADMINS: "admin-notification"}


def _message(payload: NotificationCreate) -> str:
    message = payload.message.strip()
    if not message:
        raise ValidationError("Message is required")
    return message


@router.post("", response_model=NotificationSent)
async def notify_users(
    payload: NotificationCreate,
    current_user: AuthUser = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    """Send a notification to every connected client."""
    delivered = await notifier.notify_all_users(_message(payload))
    return {"message": "Notification sent to users", "delivered": delivered}


@router.post("/admin", response_model=NotificationSent)
async def notify_admins(
    payload: NotificationCreate,
    current_user: AuthUser = Depends(require_admin),
    notifier: Notifier = Depends(get_notifier),
):
    """Send a notification to connected admins only."""
    delivered = await notifier.notify_admin(_message(payload))
    return {"message": "Notification sent to admins", "delivered": delivered}


@router.websocket("/ws")
async def notification_feed(
    websocket: WebSocket,
    token: Optional[str] = None,
    notifier: Notifier = Depends(get_notifier),
):
    user = None
    if token:
        try:
            user = decode_token(token.removeprefix("Bearer "))
        except (JWTError, TokenClaimsError):
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

    queue = notifier.subscribe(is_admin=bool(user and user.is_admin))
    await websocket.accept()
    await websocket.send_json(
        {"event": "connected", "user_id": user.user_id if user else None}
    )
    logger.info("Notification subscriber connected (%s)", user.user_id if user else "guest")

    async def forward():
        while True:
            item = await queue.get()
            await websocket.send_json(
                {
                    "event": EVENTS.get(item["audience"], "notification"),
                    "message": item["message"],
                    "timestamp": item["timestamp"],
                }
            )

    sender = asyncio.create_task(forward())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Notification subscriber disconnected")
    finally:
        sender.cancel()
        notifier.unsubscribe(queue)
