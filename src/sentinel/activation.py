"""
Notification activations — what happens when the user clicks.

Activations arrive as "action|arg1|arg2|..." plus free-form values
(e.g. the text typed into an inline reply box):

    focus                          bring the client to the front
    focus_chat|<conversationId>    ...and open that conversation
    invite|<invitationId>|accept   accept (and focus) or decline an invite
    reply|<conversationId>         send values["content"] as a message
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from sentinel.errors import InvalidActivation
from sentinel.feed.client import FeedClient
from sentinel.feed.contracts import (
    ACTIVE_CONVERSATION_PATH,
    CONVERSATIONS_PREFIX,
    INVITATIONS_PATH,
)

logger = logging.getLogger(__name__)

INVITE_RESPONSES = ("accept", "decline")


@dataclass(frozen=True)
class Activation:
    action: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse(cls, raw: str) -> Activation:
        parts = (raw or "").split("|")
        if not parts[0]:
            raise InvalidActivation(f"empty activation {raw!r}")
        return cls(action=parts[0], args=tuple(parts[1:]))

    def arg(self, index: int) -> str:
        if index >= len(self.args) or not self.args[index]:
            raise InvalidActivation(f"{self.action}: missing argument {index + 1}")
        return self.args[index]


class ActivationHandler:
    """Dispatches activations to feed requests."""

    def __init__(self, feed: FeedClient) -> None:
        self._feed = feed
        self._handlers: dict[
            str, Callable[[Activation, dict[str, str]], Awaitable[None]]
        ] = {
            "focus": self._focus,
            "focus_chat": self._focus_chat,
            "invite": self._invite,
            "reply": self._reply,
        }

    async def handle(self, raw: str, values: dict[str, str] | None = None) -> None:
        """Parse and run one activation. Raises InvalidActivation or TransportFailure."""
        activation = Activation.parse(raw)
        handler = self._handlers.get(activation.action)
        if handler is None:
            raise InvalidActivation(f"unknown action {activation.action!r}")

        logger.info("Activation: %s", activation.action)
        await handler(activation, values or {})

    async def _focus(self, activation: Activation, values: dict[str, str]) -> None:
        await self._feed.focus_main_window()

    async def _focus_chat(self, activation: Activation, values: dict[str, str]) -> None:
        conversation_id = activation.arg(0)
        await self._feed.focus_main_window()
        await self._feed.put(ACTIVE_CONVERSATION_PATH, {"id": conversation_id})

    async def _invite(self, activation: Activation, values: dict[str, str]) -> None:
        invitation_id = activation.arg(0)
        response = activation.arg(1)
        if response not in INVITE_RESPONSES:
            raise InvalidActivation(f"invite: unknown response {response!r}")

        await self._feed.post(f"{INVITATIONS_PATH}/{invitation_id}/{response}")
        if response != "decline":
            await self._feed.focus_main_window()

    async def _reply(self, activation: Activation, values: dict[str, str]) -> None:
        conversation_id = activation.arg(0)
        content = values.get("content")
        if not content:
            raise InvalidActivation("reply: no content")

        await self._feed.post(
            f"{CONVERSATIONS_PREFIX}{conversation_id}/messages", {"body": content}
        )
