"""Tests for FeedClient handler registration and dispatch."""

from __future__ import annotations

import asyncio

import pytest

from sentinel.core.metrics import metrics
from sentinel.feed.contracts import FeedEvent


@pytest.mark.asyncio
async def test_observers_receive_values_for_their_path(feed):
    seen = []

    async def handler(value):
        seen.append(value)

    feed.observe("/a", handler)
    await feed.emit("/a", {"x": 1})
    await feed.emit("/b", {"x": 2})
    await feed.emit("/a", None, event_type="Delete")

    assert seen == [{"x": 1}, None]


@pytest.mark.asyncio
async def test_raw_handlers_receive_every_event(feed):
    seen = []

    async def handler(event):
        seen.append(event.path)

    feed.on_event(handler)
    await feed.emit("/a", 1)
    await feed.emit("/b", 2)

    assert seen == ["/a", "/b"]
    assert metrics.counter("feed.events") == 2


@pytest.mark.asyncio
async def test_handlers_run_concurrently(feed):
    release = asyncio.Event()
    order = []

    async def slow(event):
        if event.data == "first":
            await release.wait()
        order.append(event.data)

    feed.on_event(slow)
    feed.dispatch(FeedEvent("/a", "Update", "first"))
    feed.dispatch(FeedEvent("/a", "Update", "second"))
    for _ in range(3):
        await asyncio.sleep(0)
    assert order == ["second"]
    assert feed.in_flight() == 1

    release.set()
    await feed.drain()
    assert order == ["second", "first"]


@pytest.mark.asyncio
async def test_handler_crash_is_contained(feed):
    seen = []

    async def broken(event):
        raise RuntimeError("boom")

    async def fine(event):
        seen.append(event.path)

    feed.on_event(broken)
    feed.on_event(fine)
    await feed.emit("/a", 1)

    assert seen == ["/a"]
    assert metrics.counter("feed.handler_errors") == 1


@pytest.mark.asyncio
async def test_lifecycle_handlers(feed):
    calls = []

    async def up():
        calls.append("up")

    async def down():
        calls.append("down")

    feed.on_connected(up)
    feed.on_disconnected(down)
    await feed.fire_connected()
    await feed.fire_disconnected()

    assert calls == ["up", "down"]
    assert metrics.snapshot()["gauges"]["feed.connected"] == 0
