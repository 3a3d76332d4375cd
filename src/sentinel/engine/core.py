"""
Sentinel — wires the reconcilers to a feed client and a notifier.

Every subscription handler is wrapped so that expected, per-event
failures (a lookup that failed, a request that timed out, a payload of
the wrong shape) are logged and counted without affecting other events.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Awaitable, Callable

from sentinel.core.metrics import metrics
from sentinel.errors import LookupFailure, MalformedPayload, TransportFailure
from sentinel.feed.client import FeedClient
from sentinel.feed.contracts import (
    ACTIVE_CONVERSATION_PATH,
    CURRENT_SUMMONER_PATH,
    INVITATIONS_PATH,
)
from sentinel.engine.assets import AssetCache
from sentinel.engine.conversations import ConversationWatcher
from sentinel.engine.invitations import InvitationReconciler
from sentinel.engine.session import SessionState, SessionTracker
from sentinel.notify.base import Notifier

logger = logging.getLogger(__name__)

_EXPECTED_FAILURES = (LookupFailure, TransportFailure, MalformedPayload)


class Sentinel:
    """The notification engine for one feed connection."""

    def __init__(
        self,
        feed: FeedClient,
        notifier: Notifier,
        icon_dir: str | os.PathLike,
    ) -> None:
        Path(icon_dir).mkdir(parents=True, exist_ok=True)

        self.feed = feed
        self.notifier = notifier
        self.session = SessionState()
        self.assets = AssetCache(feed, icon_dir)
        self.tracker = SessionTracker(self.session, notifier)
        self.invitations = InvitationReconciler(feed, self.assets, notifier)
        self.conversations = ConversationWatcher(
            feed, self.session, self.assets, notifier
        )

        feed.on_connected(self._isolated("connect", self.tracker.handle_connect))
        feed.on_disconnected(
            self._isolated("disconnect", self.tracker.handle_disconnect)
        )
        feed.observe(
            INVITATIONS_PATH,
            self._isolated("invitations", self.invitations.handle_update),
        )
        feed.observe(
            ACTIVE_CONVERSATION_PATH,
            self._isolated(
                "active_conversation", self.tracker.handle_active_conversation
            ),
        )
        feed.observe(
            CURRENT_SUMMONER_PATH,
            self._isolated("current_summoner", self.tracker.handle_current_summoner),
        )
        feed.on_event(self._isolated("conversation", self.conversations.handle_event))

    @staticmethod
    def _isolated(
        kind: str, handler: Callable[..., Awaitable[None]]
    ) -> Callable[..., Awaitable[None]]:
        async def run(*args: Any) -> None:
            try:
                await handler(*args)
            except _EXPECTED_FAILURES as e:
                metrics.inc("engine.failures", labels={"kind": kind})
                logger.warning("%s update skipped: %s", kind, e, extra={"kind": kind})

        return run
