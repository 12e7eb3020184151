"""
Real-time notification fan-out.

Messages are not persisted: each connected subscriber receives them on an
``asyncio.Queue``. Admin notifications reach admin subscribers only; user
notifications reach everyone.
"""

import asyncio
from typing import Awaitable, Set

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger

logger = get_logger(__name__)

ADMINS = "admins"
USERS = "users"

_background_tasks: Set[asyncio.Task] = set()


def fire_and_forget(coro: Awaitable, description: str = "background task") -> asyncio.Task:
    """Schedule ``coro`` without awaiting it; failures are logged, never raised."""

    async def _runner():
        try:
            await coro
        except Exception:
            logger.exception("%s failed", description)

    task = asyncio.create_task(_runner())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


class Notifier:
    def __init__(self) -> None:
        self._subscribers: dict[str, Set[asyncio.Queue]] = {ADMINS: set(), USERS: set()}

    def subscribe(self, is_admin: bool = False) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers[USERS].add(queue)
        if is_admin:
            self._subscribers[ADMINS].add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        for audience in self._subscribers.values():
            audience.discard(queue)

    def _publish(self, audience: str, message: str) -> int:
        delivered = 0
        sent_at = utc_now().isoformat()
        for queue in list(self._subscribers[audience]):
            queue.put_nowait(
                {"audience": audience, "message": message, "timestamp": sent_at}
            )
            delivered += 1
        logger.info("Notification to %s (%d subscribers): %s", audience, delivered, message)
        return delivered

    async def notify_admin(self, message: str) -> int:
        return self._publish(ADMINS, message)

    async def notify_all_users(self, message: str) -> int:
        return self._publish(USERS, message)


notifier = Notifier()


def get_notifier() -> Notifier:
    return notifier
