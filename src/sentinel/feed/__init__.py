"""
Feed Package — the boundary to the League client.

- contracts: typed records parsed from raw feed payloads
- client: FeedClient interface and handler dispatch
- lcu: concrete client over httpx + websockets
"""

from sentinel.feed.client import FeedClient
from sentinel.feed.contracts import (
    Conversation,
    FeedEvent,
    Invitation,
    InvitationState,
    LastMessage,
    MapInfo,
    QueueInfo,
    Summoner,
)
from sentinel.feed.lcu import LcuFeedClient

__all__ = [
    "FeedClient",
    "LcuFeedClient",
    "FeedEvent",
    "Invitation",
    "InvitationState",
    "Conversation",
    "LastMessage",
    "QueueInfo",
    "MapInfo",
    "Summoner",
]
