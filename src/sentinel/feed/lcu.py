"""
LcuFeedClient — FeedClient over the League client's local API.

REST goes through one shared httpx.AsyncClient (basic auth, self-signed
TLS). Push updates arrive over a WAMP 1.0 websocket:

    -> [5, "OnJsonApiEvent"]                        subscribe to everything
    <- [8, "OnJsonApiEvent", {"uri", "eventType", "data"}]

On every (re)connect each observed path is primed with a GET so
observers start from the current value rather than waiting for the
next change.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import ssl
from typing import Any

import httpx
import websockets
from websockets.exceptions import WebSocketException

from sentinel.core.config import FeedConfig, config
from sentinel.errors import MalformedPayload, TransportFailure
from sentinel.feed.client import FeedClient
from sentinel.feed.contracts import UX_SHOW_PATH, UX_STATE_PATH, FeedEvent

logger = logging.getLogger(__name__)

WAMP_SUBSCRIBE = 5
WAMP_EVENT = 8
JSON_API_EVENT = "OnJsonApiEvent"

_FOCUSED_STATES = {"ShowMain", "Focus"}
_UNFOCUSED_STATES = {"MinimizeAll", "HideAll", "Hide"}


class LcuFeedClient(FeedClient):
    """Feed client for the League client (LCU)."""

    def __init__(
        self,
        feed_config: FeedConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__()
        self._config = feed_config or config.feed
        self._http = http or httpx.AsyncClient(
            base_url=self._config.base_url,
            auth=(self._config.username, self._config.password),
            verify=self._config.verify_tls,
            timeout=self._config.timeout,
        )
        self._focused: bool | None = None
        self._closing = asyncio.Event()
        self._ws: Any = None

    # ── Requests ─────────────────────────────────────────────────

    async def _request(self, method: str, path: str, body: Any = None) -> httpx.Response:
        try:
            resp = await self._http.request(method, path, json=body)
        except httpx.HTTPError as e:
            raise TransportFailure(f"{method} {path} failed: {e}", path=path) from e

        if resp.status_code >= 400:
            raise TransportFailure(
                f"{method} {path} returned HTTP {resp.status_code}",
                path=path,
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def _json(resp: httpx.Response, path: str) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise TransportFailure(f"{path} returned invalid JSON", path=path) from e

    async def get(self, path: str) -> Any:
        return self._json(await self._request("GET", path), path)

    async def get_binary_asset(self, path: str) -> bytes:
        resp = await self._request("GET", path)
        return resp.content

    async def post(self, path: str, body: Any = None) -> Any:
        return self._json(await self._request("POST", path, body), path)

    async def put(self, path: str, body: Any = None) -> Any:
        return self._json(await self._request("PUT", path, body), path)

    @property
    def is_focused(self) -> bool:
        # Unknown until the client reports its window state; assume focused
        return self._focused is not False

    async def focus_main_window(self) -> None:
        await self.post(UX_SHOW_PATH)

    # ── Websocket ────────────────────────────────────────────────

    def _auth_header(self) -> str:
        token = f"{self._config.username}:{self._config.password}".encode()
        return "Basic " + base64.b64encode(token).decode("ascii")

    def _ssl_context(self) -> ssl.SSLContext:
        ctx = ssl.create_default_context()
        if not self._config.verify_tls:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        return ctx

    async def run(self) -> None:
        """Connect, stream events, and reconnect until close() is called."""
        while not self._closing.is_set():
            connected = False
            try:
                async with websockets.connect(
                    self._config.websocket_url,
                    additional_headers={"Authorization": self._auth_header()},
                    ssl=self._ssl_context(),
                ) as ws:
                    self._ws = ws
                    await ws.send(json.dumps([WAMP_SUBSCRIBE, JSON_API_EVENT]))
                    connected = True
                    logger.info("Connected to League client at %s", self._config.websocket_url)
                    await self.fire_connected()
                    await self._prime_observers()

                    async for raw in ws:
                        self.handle_message(raw)
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                logger.debug("Feed connection attempt ended: %s", e)
            finally:
                self._ws = None
                if connected:
                    logger.info("Disconnected from League client")
                    self._focused = None
                    await self.fire_disconnected()

            if self._closing.is_set():
                break
            try:
                await asyncio.wait_for(
                    self._closing.wait(), timeout=self._config.reconnect_delay
                )
            except asyncio.TimeoutError:
                pass

    async def _prime_observers(self) -> None:
        for path in self.observed_paths():
            try:
                value = await self.get(path)
            except TransportFailure as e:
                if e.status_code != 404:
                    logger.warning("Could not prime %s: %s", path, e, extra={"path": path})
                    continue
                value = None
            self.dispatch_value(path, value)

    def handle_message(self, raw: str | bytes) -> None:
        """Decode one websocket frame and dispatch it if it is a JSON API event."""
        try:
            message = json.loads(raw)
        except ValueError:
            logger.debug("Ignoring non-JSON websocket frame")
            return

        if (
            not isinstance(message, list)
            or len(message) < 3
            or message[0] != WAMP_EVENT
            or message[1] != JSON_API_EVENT
        ):
            return

        try:
            event = FeedEvent.from_payload(message[2])
        except MalformedPayload as e:
            logger.debug("Ignoring malformed feed event: %s", e)
            return

        if event.path == UX_STATE_PATH:
            self._track_focus(event.data)
        self.dispatch(event)

    def _track_focus(self, data: Any) -> None:
        state = data.get("state") if isinstance(data, dict) else None
        if state in _FOCUSED_STATES:
            self._focused = True
        elif state in _UNFOCUSED_STATES:
            self._focused = False

    async def close(self) -> None:
        """Stop reconnecting, close the socket and HTTP client, drain handlers."""
        self._closing.set()
        if self._ws is not None:
            await self._ws.close()
        await self.drain()
        await self._http.aclose()
