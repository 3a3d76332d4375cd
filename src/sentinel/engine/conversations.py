"""
ConversationWatcher — detects genuinely new chat messages.

The feed republishes a whole conversation on every change (read markers,
presence, edits), so "the conversation changed" is not "a message
arrived". Instead the feed's unread counter is tracked per conversation
as a watermark: a message is new when the counter moves past the
watermark while the conversation is in the background.

The one exception is the active conversation while the client window is
unfocused: its counter never moves (the user "has it open"), so a
message from someone else is shown anyway.
"""

from __future__ import annotations

import logging

from sentinel.errors import MalformedPayload
from sentinel.feed.client import FeedClient
from sentinel.feed.contracts import Conversation, FeedEvent, conversation_id_from_path
from sentinel.engine.assets import AssetCache
from sentinel.engine.session import SessionState
from sentinel.notify.base import Notifier

logger = logging.getLogger(__name__)


class ConversationWatcher:
    def __init__(
        self,
        feed: FeedClient,
        session: SessionState,
        assets: AssetCache,
        notifier: Notifier,
    ) -> None:
        self._feed = feed
        self._session = session
        self._assets = assets
        self._notifier = notifier
        self._watermarks: dict[str, int] = {}

    def watermark(self, conversation_id: str) -> int:
        return self._watermarks.get(conversation_id, 0)

    async def handle_event(self, event: FeedEvent) -> None:
        conversation_id = conversation_id_from_path(event.path)
        if conversation_id is None:
            return
        if not isinstance(event.data, dict) or event.data.get("lastMessage") is None:
            return

        try:
            conversation = Conversation.from_payload(conversation_id, event.data)
        except MalformedPayload as e:
            logger.debug("Ignoring conversation update: %s", e, extra={"path": event.path})
            return

        if not conversation.notifiable:
            return

        show = self.should_show(conversation)

        # The watermark is a cursor, not a "shown" flag: it always advances,
        # and it does so before enrichment can suspend or fail
        self._watermarks[conversation_id] = conversation.unread_count

        if not show:
            return

        icon_path = await self._assets.resolve_icon_path(conversation.name)
        await self._notifier.show_chat(
            conversation_id,
            icon_path,
            conversation.name,
            conversation.last_message.body,
        )

    def should_show(self, conversation: Conversation) -> bool:
        conversation_id = conversation.conversation_id
        is_active = conversation_id == self._session.active_conversation_id

        if not is_active and self.watermark(conversation_id) < conversation.unread_count:
            return True

        return (
            is_active
            and not self._feed.is_focused
            and conversation.last_message.from_id != self._session.local_user_id
        )
