"""
Feed Contracts — typed records for the payloads the League client pushes.

Every raw JSON payload is parsed exactly once, here, into a frozen
dataclass. Malformed payloads raise MalformedPayload; nothing past this
module touches untyped dicts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sentinel.errors import MalformedPayload

logger = logging.getLogger(__name__)

# ── Resource paths ───────────────────────────────────────────────

INVITATIONS_PATH = "/lol-lobby/v2/received-invitations"
ACTIVE_CONVERSATION_PATH = "/lol-chat/v1/conversations/active"
CURRENT_SUMMONER_PATH = "/lol-summoner/v1/current-summoner"
CONVERSATIONS_PREFIX = "/lol-chat/v1/conversations/"
SUMMONER_BY_NAME_PATH = "/lol-summoner/v1/summoners"
PROFILE_ICON_PATH = "/lol-game-data/assets/v1/profile-icons/{icon_id}.jpg"
QUEUE_PATH = "/lol-game-queues/v1/queues/{queue_id}"
MAP_PATH = "/lol-maps/v1/map/{map_id}"
UX_STATE_PATH = "/riotclient/ux-state/request"
UX_SHOW_PATH = "/riotclient/ux-show"

# Pseudo-conversations that aggregate or control the chat resource
RESERVED_CONVERSATION_IDS = frozenset({"notify", "active"})


class InvitationState(str, Enum):
    """Lifecycle state of a received lobby invitation."""

    PENDING = "Pending"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    REQUESTED = "Requested"
    ON_HOLD = "OnHold"
    KICKED = "Kicked"
    ERROR = "Error"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, raw: Any) -> InvitationState:
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


class ConversationKind(str, Enum):
    """Conversation types that can produce chat notifications."""

    CHAT = "chat"
    CLUB = "club"


# ── Helpers ──────────────────────────────────────────────────────


def _require_dict(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise MalformedPayload(f"{what}: expected object, got {type(data).__name__}")
    return data


def _require_str(data: dict, key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedPayload(f"{what}: missing or empty {key!r}")
    return value


def _require_int(data: dict, key: str, what: str) -> int:
    value = data.get(key)
    # bool is an int subclass; a flag is never a valid id or counter
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedPayload(f"{what}: {key!r} must be an integer, got {value!r}")
    return value


def _coerce_sender(value: Any) -> int | str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value) if value.lstrip("-").isdigit() else value
    return None


# ── Records ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Invitation:
    """One entry of the received-invitations snapshot."""

    invitation_id: str
    acceptable: bool
    state: InvitationState
    from_name: str
    queue_id: int | None = None
    from_id: int | None = None

    @property
    def is_actionable(self) -> bool:
        """True when the invite can still be accepted by the user."""
        return self.acceptable and self.state is InvitationState.PENDING

    @classmethod
    def from_payload(cls, data: Any) -> Invitation:
        data = _require_dict(data, "invitation")
        game_config = data.get("gameConfig") or {}
        queue_id = game_config.get("queueId") if isinstance(game_config, dict) else None
        from_id = data.get("fromSummonerId")
        return cls(
            invitation_id=_require_str(data, "invitationId", "invitation"),
            acceptable=data.get("canAcceptInvitation") is True,
            state=InvitationState.parse(data.get("state")),
            from_name=str(data.get("fromSummonerName") or ""),
            queue_id=queue_id if isinstance(queue_id, int) else None,
            from_id=from_id if isinstance(from_id, int) else None,
        )


def parse_invitation_list(payload: Any) -> list[Invitation]:
    """Parse a full invitations snapshot.

    A missing or non-list payload is an empty snapshot. Individual
    malformed entries are dropped with a warning so one bad invite
    does not hide the others.
    """
    if not isinstance(payload, list):
        return []

    invitations: list[Invitation] = []
    for entry in payload:
        try:
            invitations.append(Invitation.from_payload(entry))
        except MalformedPayload as e:
            logger.warning("Skipping malformed invitation: %s", e)
    return invitations


@dataclass(frozen=True)
class LastMessage:
    """The most recent message of a conversation."""

    body: str
    from_id: int | str | None

    @classmethod
    def from_payload(cls, data: Any) -> LastMessage:
        data = _require_dict(data, "lastMessage")
        return cls(
            body=str(data.get("body") or ""),
            from_id=_coerce_sender(data.get("fromId")),
        )


@dataclass(frozen=True)
class Conversation:
    """A per-conversation chat update."""

    conversation_id: str
    kind: str
    name: str
    unread_count: int
    last_message: LastMessage

    @property
    def notifiable(self) -> bool:
        """Only direct messages and club chats produce notifications."""
        return self.kind in (ConversationKind.CHAT.value, ConversationKind.CLUB.value)

    @classmethod
    def from_payload(cls, conversation_id: str, data: Any) -> Conversation:
        data = _require_dict(data, "conversation")
        if data.get("lastMessage") is None:
            raise MalformedPayload("conversation: no lastMessage")

        unread = data.get("unreadMessageCount")
        if isinstance(unread, bool) or not isinstance(unread, int) or unread < 0:
            raise MalformedPayload(
                f"conversation: invalid unreadMessageCount {unread!r}"
            )

        return cls(
            conversation_id=conversation_id,
            kind=str(data.get("type") or ""),
            name=str(data.get("name") or ""),
            unread_count=unread,
            last_message=LastMessage.from_payload(data["lastMessage"]),
        )


@dataclass(frozen=True)
class QueueInfo:
    """Game queue metadata used to label invitations."""

    queue_id: int
    map_id: int
    short_name: str

    @classmethod
    def from_payload(cls, data: Any) -> QueueInfo:
        data = _require_dict(data, "queue")
        return cls(
            queue_id=data.get("id") if isinstance(data.get("id"), int) else -1,
            map_id=_require_int(data, "mapId", "queue"),
            short_name=str(data.get("shortName") or ""),
        )


@dataclass(frozen=True)
class MapInfo:
    """Map metadata used to label invitations."""

    map_id: int
    name: str

    @classmethod
    def from_payload(cls, data: Any) -> MapInfo:
        data = _require_dict(data, "map")
        return cls(
            map_id=data.get("id") if isinstance(data.get("id"), int) else -1,
            name=_require_str(data, "name", "map"),
        )


@dataclass(frozen=True)
class Summoner:
    """A player profile; used for the local user id and for icons."""

    summoner_id: int
    profile_icon_id: int
    display_name: str = ""

    @classmethod
    def from_payload(cls, data: Any) -> Summoner:
        data = _require_dict(data, "summoner")
        return cls(
            summoner_id=_require_int(data, "summonerId", "summoner"),
            profile_icon_id=_require_int(data, "profileIconId", "summoner"),
            display_name=str(data.get("displayName") or data.get("gameName") or ""),
        )


@dataclass(frozen=True)
class FeedEvent:
    """A raw path-tagged update from the event stream."""

    path: str
    event_type: str  # "Create" | "Update" | "Delete"
    data: Any = None

    @classmethod
    def from_payload(cls, data: Any) -> FeedEvent:
        data = _require_dict(data, "event")
        event_type = str(data.get("eventType") or "Update")
        return cls(
            path=_require_str(data, "uri", "event"),
            event_type=event_type,
            data=None if event_type == "Delete" else data.get("data"),
        )


def conversation_id_from_path(path: str) -> str | None:
    """Extract <id> from /lol-chat/v1/conversations/<id>.

    Returns None for any other path shape, nested resources such as
    .../<id>/messages, and the reserved pseudo-conversations.
    """
    if not path.startswith(CONVERSATIONS_PREFIX):
        return None
    conversation_id = path[len(CONVERSATIONS_PREFIX):]
    if not conversation_id or "/" in conversation_id:
        return None
    if conversation_id in RESERVED_CONVERSATION_IDS:
        return None
    return conversation_id
