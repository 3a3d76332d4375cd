"""
Feed Client — abstract interface to the push-based League client feed.

The engine never talks to the network directly. It registers handlers
here and issues requests through the same object:

- on_connected / on_disconnected: connection lifecycle callbacks
- observe(path, handler): latest full value at a path (None on delete)
- on_event(handler): every raw path-tagged update
- get / get_binary_asset / post / put: request/response primitives
- is_focused / focus_main_window: client window state

Dispatch model: every handler invocation runs in its own short-lived
task. Handlers for one event start in delivery order, but may suspend
and complete in any order.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Awaitable, Callable

from sentinel.core.metrics import metrics
from sentinel.feed.contracts import FeedEvent

logger = logging.getLogger(__name__)

ValueHandler = Callable[[Any], Awaitable[None]]
EventHandler = Callable[[FeedEvent], Awaitable[None]]
LifecycleHandler = Callable[[], Awaitable[None]]


class FeedClient(ABC):
    """Handler registry plus the request surface a concrete feed must provide."""

    def __init__(self) -> None:
        self._connected_handlers: list[LifecycleHandler] = []
        self._disconnected_handlers: list[LifecycleHandler] = []
        self._observers: dict[str, list[ValueHandler]] = defaultdict(list)
        self._event_handlers: list[EventHandler] = []
        self._tasks: set[asyncio.Task] = set()

    # ── Registration ─────────────────────────────────────────────

    def on_connected(self, handler: LifecycleHandler) -> None:
        self._connected_handlers.append(handler)

    def on_disconnected(self, handler: LifecycleHandler) -> None:
        self._disconnected_handlers.append(handler)

    def observe(self, path: str, handler: ValueHandler) -> None:
        """Call handler with the full value at path whenever it changes."""
        self._observers[path].append(handler)

    def on_event(self, handler: EventHandler) -> None:
        """Call handler for every update the feed delivers."""
        self._event_handlers.append(handler)

    def observed_paths(self) -> list[str]:
        return [path for path, handlers in self._observers.items() if handlers]

    # ── Requests ─────────────────────────────────────────────────

    @abstractmethod
    async def get(self, path: str) -> Any:
        """GET a JSON resource. Raises TransportFailure."""

    @abstractmethod
    async def get_binary_asset(self, path: str) -> bytes:
        """GET a raw binary asset. Raises TransportFailure."""

    @abstractmethod
    async def post(self, path: str, body: Any = None) -> Any:
        """POST to a resource. Raises TransportFailure."""

    @abstractmethod
    async def put(self, path: str, body: Any = None) -> Any:
        """PUT to a resource. Raises TransportFailure."""

    @property
    @abstractmethod
    def is_focused(self) -> bool:
        """Whether the client window currently has focus."""

    @abstractmethod
    async def focus_main_window(self) -> None:
        """Bring the client window to the foreground."""

    # ── Dispatch ─────────────────────────────────────────────────

    def spawn(self, coro: Awaitable[None], name: str = "") -> asyncio.Task:
        """Run a handler invocation as a tracked background task."""
        task = asyncio.ensure_future(self._guarded(coro, name))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def dispatch(self, event: FeedEvent) -> None:
        """Fan one feed event out to path observers and raw-event handlers."""
        metrics.inc("feed.events")
        self.dispatch_value(event.path, event.data)
        for handler in list(self._event_handlers):
            self.spawn(handler(event), name=event.path)

    def dispatch_value(self, path: str, value: Any) -> None:
        """Deliver a full value to the observers of one path."""
        for handler in list(self._observers.get(path, ())):
            self.spawn(handler(value), name=path)

    async def fire_connected(self) -> None:
        metrics.gauge_set("feed.connected", 1)
        for handler in list(self._connected_handlers):
            await self._guarded(handler(), "connected")

    async def fire_disconnected(self) -> None:
        metrics.gauge_set("feed.connected", 0)
        for handler in list(self._disconnected_handlers):
            await self._guarded(handler(), "disconnected")

    async def drain(self) -> None:
        """Wait until every in-flight handler task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def in_flight(self) -> int:
        return len(self._tasks)

    async def _guarded(self, coro: Awaitable[None], name: str) -> None:
        # Handlers own their expected failures; anything reaching here is a bug
        try:
            await coro
        except Exception:
            metrics.inc("feed.handler_errors")
            logger.exception("Feed handler failed (%s)", name, extra={"path": name})
