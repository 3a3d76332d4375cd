"""Shared fixtures: an in-memory feed client and a recording notifier."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from sentinel.core.metrics import metrics
from sentinel.errors import TransportFailure
from sentinel.feed.client import FeedClient
from sentinel.feed.contracts import FeedEvent
from sentinel.notify.base import Notifier


class FakeFeedClient(FeedClient):
    """FeedClient backed by dicts.

    responses maps path -> JSON value, or an Exception instance to raise.
    A path missing from responses fails with HTTP 404.
    """

    def __init__(self) -> None:
        super().__init__()
        self.responses: dict[str, Any] = {}
        self.assets: dict[str, Any] = {}
        self.requests: list[tuple[str, str, Any]] = []
        self.focused = True
        self.focus_calls = 0
        # Optional gate: get() waits on it before answering
        self.gate: asyncio.Event | None = None

    async def get(self, path: str) -> Any:
        self.requests.append(("GET", path, None))
        if self.gate is not None:
            await self.gate.wait()
        if path not in self.responses:
            raise TransportFailure(f"GET {path} returned HTTP 404", path=path, status_code=404)
        value = self.responses[path]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_binary_asset(self, path: str) -> bytes:
        self.requests.append(("ASSET", path, None))
        if path not in self.assets:
            raise TransportFailure(f"GET {path} returned HTTP 404", path=path, status_code=404)
        value = self.assets[path]
        if isinstance(value, Exception):
            raise value
        return value

    async def post(self, path: str, body: Any = None) -> Any:
        self.requests.append(("POST", path, body))
        return None

    async def put(self, path: str, body: Any = None) -> Any:
        self.requests.append(("PUT", path, body))
        return None

    @property
    def is_focused(self) -> bool:
        return self.focused

    async def focus_main_window(self) -> None:
        self.focus_calls += 1

    def requested(self, method: str) -> list[str]:
        return [path for m, path, _ in self.requests if m == method]

    async def emit(self, path: str, data: Any, event_type: str = "Update") -> None:
        """Deliver one event and wait for every handler it triggered."""
        self.dispatch(FeedEvent(path=path, event_type=event_type, data=data))
        await self.drain()


class RecordingNotifier(Notifier):
    """Notifier that records every call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def show_invitation(self, invitation_id, icon_path, from_name, label) -> None:
        self.calls.append(("show_invitation", invitation_id, icon_path, from_name, label))

    async def hide_invitation(self, invitation_id) -> None:
        self.calls.append(("hide_invitation", invitation_id))

    async def show_chat(self, conversation_id, icon_path, name, body) -> None:
        self.calls.append(("show_chat", conversation_id, icon_path, name, body))

    async def hide_chat(self, conversation_id) -> None:
        self.calls.append(("hide_chat", conversation_id))

    async def clear_all(self) -> None:
        self.calls.append(("clear_all",))

    def named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


def summoner_payload(summoner_id: int = 1, icon: int = 29, name: str = "") -> dict:
    return {"summonerId": summoner_id, "profileIconId": icon, "displayName": name}


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def feed() -> FakeFeedClient:
    return FakeFeedClient()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def icon_dir(tmp_path):
    path = tmp_path / "icons"
    path.mkdir()
    return path
