"""
InvitationReconciler — turns invitation snapshots into show/hide actions.

The feed never says "this invite was deleted"; it just sends a snapshot
without it. So every update is diffed against the previous snapshot:
ids that disappeared are hidden, and every id still present is shown or
hidden according to its own state.
"""

from __future__ import annotations

import logging
from typing import Any

from sentinel.errors import LookupFailure
from sentinel.feed.client import FeedClient
from sentinel.feed.contracts import Invitation, parse_invitation_list
from sentinel.engine.assets import AssetCache
from sentinel.engine.lookup import fetch_map, fetch_queue
from sentinel.notify.base import Notifier

logger = logging.getLogger(__name__)


class InvitationReconciler:
    def __init__(self, feed: FeedClient, assets: AssetCache, notifier: Notifier) -> None:
        self._feed = feed
        self._assets = assets
        self._notifier = notifier
        self._previous_ids: tuple[str, ...] = ()

    @property
    def previous_ids(self) -> tuple[str, ...]:
        return self._previous_ids

    async def handle_update(self, payload: Any) -> None:
        """Reconcile one full invitations snapshot."""
        invitations = parse_invitation_list(payload)
        current_ids = tuple(invite.invitation_id for invite in invitations)

        # Diff and replace the cursor before the first await, so an update
        # processed concurrently always diffs against a whole snapshot
        current = set(current_ids)
        removed = [i for i in self._previous_ids if i not in current]
        self._previous_ids = current_ids

        for invitation_id in removed:
            await self._notifier.hide_invitation(invitation_id)

        for invite in invitations:
            if invite.is_actionable:
                try:
                    await self._show(invite)
                except LookupFailure as e:
                    logger.warning(
                        "Skipping invitation %s: %s",
                        invite.invitation_id,
                        e,
                        extra={"invitation_id": invite.invitation_id},
                    )
            else:
                await self._notifier.hide_invitation(invite.invitation_id)

    async def _show(self, invite: Invitation) -> None:
        if invite.queue_id is None:
            raise LookupFailure("invitation has no queue id", subject=invite.invitation_id)

        queue = await fetch_queue(self._feed, invite.queue_id)
        game_map = await fetch_map(self._feed, queue.map_id)
        icon_path = await self._assets.resolve_icon_path(invite.from_name)

        await self._notifier.show_invitation(
            invite.invitation_id,
            icon_path,
            invite.from_name,
            describe_game(game_map.name, queue.short_name),
        )


def describe_game(map_name: str, queue_name: str) -> str:
    """Label shown under the sender's name, e.g. "Summoner's Rift - Draft"."""
    return f"{map_name} - {queue_name}"
