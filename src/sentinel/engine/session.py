"""
Session state — what the engine knows about the current connection.

SessionState is a plain value owned by the engine. SessionTracker holds
the only code that mutates it, one method per feed subscription.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sentinel.errors import MalformedPayload
from sentinel.feed.contracts import Summoner
from sentinel.notify.base import Notifier

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Process-scoped state shared by the reconcilers."""

    active_conversation_id: str | None = None
    local_user_id: int | None = None
    connected: bool = False

    def reset(self) -> None:
        self.active_conversation_id = None
        self.local_user_id = None
        self.connected = False


class SessionTracker:
    """Applies connection and session feed updates to a SessionState."""

    def __init__(self, state: SessionState, notifier: Notifier) -> None:
        self._state = state
        self._notifier = notifier

    async def handle_connect(self) -> None:
        # Nothing on screen can be trusted to match the remote state anymore
        logger.info("Feed connected, clearing notifications")
        self._state.connected = True
        await self._notifier.clear_all()

    async def handle_disconnect(self) -> None:
        logger.info("Feed disconnected, clearing notifications")
        self._state.reset()
        await self._notifier.clear_all()

    async def handle_current_summoner(self, payload: Any) -> None:
        if not payload:
            self._state.local_user_id = None
            return
        try:
            summoner = Summoner.from_payload(payload)
        except MalformedPayload as e:
            logger.warning("Ignoring current-summoner update: %s", e)
            self._state.local_user_id = None
            return
        self._state.local_user_id = summoner.summoner_id
        logger.debug("Local summoner is %s", summoner.summoner_id)

    async def handle_active_conversation(self, payload: Any) -> None:
        conversation_id = payload.get("id") if isinstance(payload, dict) else None
        if not isinstance(conversation_id, str) or not conversation_id:
            self._state.active_conversation_id = None
            return

        self._state.active_conversation_id = conversation_id
        # Opening a conversation dismisses whatever it had pending
        await self._notifier.hide_chat(conversation_id)
