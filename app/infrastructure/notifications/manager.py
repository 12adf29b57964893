"""Registry of open notification websockets, keyed by user id."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track each user's open sockets and push JSON messages to them.

    A user may hold several sockets (one per tab or device). Sockets that fail
    on send are treated as closed and forgotten.
    """

    def __init__(self) -> None:
        self._sockets: defaultdict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._sockets[user_id].add(websocket)
        logger.debug(
            "Websocket opened for user %s (%d open)", user_id, len(self._sockets[user_id])
        )

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        sockets = self._sockets.get(user_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._sockets[user_id]

    def is_connected(self, user_id: str) -> bool:
        return bool(self._sockets.get(user_id))

    def connection_count(self) -> int:
        return sum(len(sockets) for sockets in self._sockets.values())

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every socket of ``user_id``; return how many accepted it."""

        accepted = 0
        for websocket in tuple(self._sockets.get(user_id, ())):
            try:
                await websocket.send_json(message)
            except Exception as exc:
                logger.debug("Dropping stale websocket for user %s: %s", user_id, exc)
                self.disconnect(user_id, websocket)
                continue
            accepted += 1
        return accepted

    async def send_to_users(self, user_ids: Iterable[str], message: dict[str, Any]) -> int:
        """Send ``message`` to several users; return the number of users reached."""

        reached = 0
        for user_id in dict.fromkeys(user_ids):
            if await self.send_to_user(user_id, message):
                reached += 1
        return reached


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
