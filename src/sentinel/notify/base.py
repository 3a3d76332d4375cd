"""
Notifier — the presentation boundary the engine delivers decisions to.

TrackingNotifier keeps the set of notifications it believes are on
screen, so hiding something that is not shown never reaches the
backend. Backends only implement the _present/_dismiss hooks.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sentinel.core.metrics import metrics

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Sink for show/hide decisions."""

    @abstractmethod
    async def show_invitation(
        self, invitation_id: str, icon_path: str, from_name: str, label: str
    ) -> None:
        ...

    @abstractmethod
    async def hide_invitation(self, invitation_id: str) -> None:
        """Hide an invitation notification. No-op if it is not shown."""
        ...

    @abstractmethod
    async def show_chat(
        self, conversation_id: str, icon_path: str, name: str, body: str
    ) -> None:
        ...

    @abstractmethod
    async def hide_chat(self, conversation_id: str) -> None:
        """Hide every notification for a conversation."""
        ...

    @abstractmethod
    async def clear_all(self) -> None:
        ...


class TrackingNotifier(Notifier):
    """Notifier that tracks visible notifications and makes hides idempotent."""

    def __init__(self) -> None:
        self._invitations: set[str] = set()
        self._chats: set[str] = set()

    @property
    def visible_invitations(self) -> frozenset[str]:
        return frozenset(self._invitations)

    @property
    def visible_chats(self) -> frozenset[str]:
        return frozenset(self._chats)

    async def show_invitation(
        self, invitation_id: str, icon_path: str, from_name: str, label: str
    ) -> None:
        replacing = invitation_id in self._invitations
        self._invitations.add(invitation_id)
        metrics.inc("notify.shown", labels={"kind": "invitation"})
        await self._present_invitation(
            invitation_id, icon_path, from_name, label, replacing
        )

    async def hide_invitation(self, invitation_id: str) -> None:
        if invitation_id not in self._invitations:
            return
        self._invitations.discard(invitation_id)
        metrics.inc("notify.hidden", labels={"kind": "invitation"})
        await self._dismiss_invitation(invitation_id)

    async def show_chat(
        self, conversation_id: str, icon_path: str, name: str, body: str
    ) -> None:
        replacing = conversation_id in self._chats
        self._chats.add(conversation_id)
        metrics.inc("notify.shown", labels={"kind": "chat"})
        await self._present_chat(conversation_id, icon_path, name, body, replacing)

    async def hide_chat(self, conversation_id: str) -> None:
        if conversation_id not in self._chats:
            return
        self._chats.discard(conversation_id)
        metrics.inc("notify.hidden", labels={"kind": "chat"})
        await self._dismiss_chat(conversation_id)

    async def clear_all(self) -> None:
        for invitation_id in list(self._invitations):
            await self.hide_invitation(invitation_id)
        for conversation_id in list(self._chats):
            await self.hide_chat(conversation_id)

    # ── Backend hooks ────────────────────────────────────────────

    @abstractmethod
    async def _present_invitation(
        self,
        invitation_id: str,
        icon_path: str,
        from_name: str,
        label: str,
        replacing: bool,
    ) -> None:
        ...

    @abstractmethod
    async def _dismiss_invitation(self, invitation_id: str) -> None:
        ...

    @abstractmethod
    async def _present_chat(
        self,
        conversation_id: str,
        icon_path: str,
        name: str,
        body: str,
        replacing: bool,
    ) -> None:
        ...

    @abstractmethod
    async def _dismiss_chat(self, conversation_id: str) -> None:
        ...
