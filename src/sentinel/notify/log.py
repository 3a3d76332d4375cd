"""Headless notifier — writes every decision to the log."""

from __future__ import annotations

import logging

from sentinel.notify.base import TrackingNotifier

logger = logging.getLogger(__name__)


class LogNotifier(TrackingNotifier):
    async def _present_invitation(
        self, invitation_id, icon_path, from_name, label, replacing
    ) -> None:
        logger.info(
            "%s invitation from %s: %s",
            "Updated" if replacing else "New",
            from_name,
            label,
            extra={"invitation_id": invitation_id},
        )

    async def _dismiss_invitation(self, invitation_id) -> None:
        logger.info("Invitation %s dismissed", invitation_id, extra={"invitation_id": invitation_id})

    async def _present_chat(
        self, conversation_id, icon_path, name, body, replacing
    ) -> None:
        logger.info("Message from %s: %s", name, body, extra={"conversation_id": conversation_id})

    async def _dismiss_chat(self, conversation_id) -> None:
        logger.info(
            "Chat notifications dismissed for %s",
            conversation_id,
            extra={"conversation_id": conversation_id},
        )
