"""Tests for ConversationWatcher — unread-watermark based new-message detection."""

from __future__ import annotations

import pytest

from conftest import summoner_payload
from sentinel.engine.assets import AssetCache
from sentinel.engine.conversations import ConversationWatcher
from sentinel.engine.session import SessionState
from sentinel.errors import LookupFailure
from sentinel.feed.contracts import FeedEvent

LOCAL_USER = 1001


def _event(conversation_id: str, unread: int, *, kind: str = "chat", name: str = "Faker",
           body: str = "gg", from_id=2002, event_type: str = "Update") -> FeedEvent:
    return FeedEvent(
        path=f"/lol-chat/v1/conversations/{conversation_id}",
        event_type=event_type,
        data={
            "type": kind,
            "name": name,
            "unreadMessageCount": unread,
            "lastMessage": {"body": body, "fromId": from_id},
        },
    )


@pytest.fixture
def session():
    return SessionState(local_user_id=LOCAL_USER)


@pytest.fixture
def watcher(feed, notifier, icon_dir, session):
    feed.responses["/lol-summoner/v1/summoners?name=Faker"] = summoner_payload(icon=4)
    feed.assets["/lol-game-data/assets/v1/profile-icons/4.jpg"] = b"icon"
    return ConversationWatcher(feed, session, AssetCache(feed, icon_dir), notifier)


class TestBackgroundConversation:
    @pytest.mark.asyncio
    async def test_new_message_is_shown(self, watcher, notifier, icon_dir):
        await watcher.handle_event(_event("c1", 1, body="hello"))

        assert notifier.calls == [
            ("show_chat", "c1", str(icon_dir / "4.png"), "Faker", "hello")
        ]

    @pytest.mark.asyncio
    async def test_same_count_again_is_not_shown(self, watcher, notifier):
        await watcher.handle_event(_event("c1", 1))
        await watcher.handle_event(_event("c1", 1))

        assert len(notifier.named("show_chat")) == 1

    @pytest.mark.asyncio
    async def test_decreased_count_is_not_shown(self, watcher, notifier):
        await watcher.handle_event(_event("c1", 3))
        notifier.calls.clear()

        await watcher.handle_event(_event("c1", 0))
        await watcher.handle_event(_event("c1", 2))

        # 0 -> 2 is forward progress from the latest cursor
        assert len(notifier.named("show_chat")) == 1

    @pytest.mark.asyncio
    async def test_zero_unread_is_not_shown(self, watcher, notifier):
        await watcher.handle_event(_event("c1", 0))

        assert notifier.calls == []

    @pytest.mark.asyncio
    async def test_each_increase_is_shown(self, watcher, notifier):
        for unread in (1, 2, 3):
            await watcher.handle_event(_event("c1", unread, body=f"m{unread}"))

        assert [c[4] for c in notifier.named("show_chat")] == ["m1", "m2", "m3"]

    @pytest.mark.asyncio
    async def test_club_chats_are_shown(self, watcher, notifier):
        await watcher.handle_event(_event("club1", 1, kind="club"))

        assert len(notifier.named("show_chat")) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ["customGame", "championSelect", ""])
    async def test_other_kinds_are_ignored(self, watcher, notifier, kind):
        await watcher.handle_event(_event("x", 5, kind=kind))

        assert notifier.calls == []
        assert watcher.watermark("x") == 0


class TestWatermark:
    @pytest.mark.asyncio
    async def test_watermark_follows_every_update(self, watcher, session):
        session.active_conversation_id = "c1"

        for unread in (4, 2, 7):
            await watcher.handle_event(_event("c1", unread))
            assert watcher.watermark("c1") == unread

    @pytest.mark.asyncio
    async def test_watermark_advances_when_enrichment_fails(self, watcher, feed, notifier):
        await watcher.handle_event(_event("c1", 1))
        feed.assets.clear()

        with pytest.raises(LookupFailure):
            await watcher.handle_event(_event("c1", 2, name="Unknown"))

        assert watcher.watermark("c1") == 2

    @pytest.mark.asyncio
    async def test_watermarks_are_per_conversation(self, watcher, notifier):
        await watcher.handle_event(_event("c1", 5))
        await watcher.handle_event(_event("c2", 1))

        assert watcher.watermark("c1") == 5
        assert watcher.watermark("c2") == 1
        assert [c[1] for c in notifier.named("show_chat")] == ["c1", "c2"]


class TestActiveConversation:
    @pytest.mark.asyncio
    async def test_active_conversation_is_suppressed_when_focused(
        self, watcher, notifier, session
    ):
        session.active_conversation_id = "c1"

        await watcher.handle_event(_event("c1", 3))

        assert notifier.calls == []

    @pytest.mark.asyncio
    async def test_active_unfocused_message_from_other_is_shown(
        self, watcher, feed, notifier, session
    ):
        session.active_conversation_id = "c1"
        feed.focused = False

        await watcher.handle_event(_event("c1", 0, from_id=2002))

        assert len(notifier.named("show_chat")) == 1

    @pytest.mark.asyncio
    async def test_active_unfocused_own_message_is_not_shown(
        self, watcher, feed, notifier, session
    ):
        session.active_conversation_id = "c1"
        feed.focused = False

        await watcher.handle_event(_event("c1", 0, from_id=LOCAL_USER))
        await watcher.handle_event(_event("c1", 0, from_id=str(LOCAL_USER)))

        assert notifier.calls == []

    @pytest.mark.asyncio
    async def test_background_conversation_ignores_focus(self, watcher, feed, notifier, session):
        session.active_conversation_id = "other"
        feed.focused = False

        await watcher.handle_event(_event("c1", 0, from_id=2002))

        assert notifier.calls == []


class TestPathFiltering:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        [
            "/lol-chat/v1/conversations/notify",
            "/lol-chat/v1/conversations/active",
            "/lol-chat/v1/conversations/c1/messages",
            "/lol-chat/v1/conversations/",
            "/lol-lobby/v2/received-invitations",
        ],
    )
    async def test_other_paths_are_ignored(self, watcher, notifier, path):
        event = _event("c1", 1)
        await watcher.handle_event(FeedEvent(path=path, event_type="Update", data=event.data))

        assert notifier.calls == []

    @pytest.mark.asyncio
    async def test_missing_payload_is_ignored(self, watcher, notifier):
        await watcher.handle_event(
            FeedEvent(path="/lol-chat/v1/conversations/c1", event_type="Delete", data=None)
        )

        assert notifier.calls == []

    @pytest.mark.asyncio
    async def test_missing_last_message_is_ignored(self, watcher, notifier):
        data = _event("c1", 1).data
        data["lastMessage"] = None

        await watcher.handle_event(
            FeedEvent(path="/lol-chat/v1/conversations/c1", event_type="Update", data=data)
        )

        assert notifier.calls == []
        assert watcher.watermark("c1") == 0

    @pytest.mark.asyncio
    async def test_malformed_unread_count_is_ignored(self, watcher, notifier):
        data = _event("c1", 1).data
        data["unreadMessageCount"] = "lots"

        await watcher.handle_event(
            FeedEvent(path="/lol-chat/v1/conversations/c1", event_type="Update", data=data)
        )

        assert notifier.calls == []

    @pytest.mark.asyncio
    async def test_missing_unread_count_keeps_watermark(self, watcher, notifier):
        await watcher.handle_event(_event("c1", 3))
        notifier.calls.clear()
        data = _event("c1", 3).data
        del data["unreadMessageCount"]

        await watcher.handle_event(
            FeedEvent(path="/lol-chat/v1/conversations/c1", event_type="Update", data=data)
        )
        await watcher.handle_event(_event("c1", 3))

        assert watcher.watermark("c1") == 3
        assert notifier.calls == []
