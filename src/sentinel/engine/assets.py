"""
AssetCache — profile icons for notifications.

Two tiers:

  subject name -> icon id   soft. Every read starts a background refresh;
                            a cached id is returned immediately and the
                            refresh only benefits the next read. A cold
                            read waits for the refresh. Last write wins.
  icon id -> file path      hard. Each icon is downloaded at most once per
                            process and never invalidated.

Concurrent cold reads of one subject share a single in-flight refresh,
and concurrent resolutions of one icon id share a single download.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

from sentinel.core.metrics import metrics
from sentinel.errors import LookupFailure, TransportFailure
from sentinel.feed.client import FeedClient
from sentinel.feed.contracts import PROFILE_ICON_PATH, SUMMONER_BY_NAME_PATH, Summoner
from sentinel.engine.lookup import fetch_record

logger = logging.getLogger(__name__)

ICON_SUFFIX = ".png"


class AssetCache:
    """Subject-to-icon and icon-to-file cache backed by the feed."""

    def __init__(self, feed: FeedClient, icon_dir: str | os.PathLike) -> None:
        self._feed = feed
        self._icon_dir = Path(icon_dir)
        self._icons: dict[str, int] = {}
        self._refreshes: dict[str, asyncio.Task[int]] = {}
        self._downloads: dict[int, asyncio.Task[Path]] = {}

    @property
    def icon_dir(self) -> Path:
        return self._icon_dir

    def cached_icon(self, subject: str) -> int | None:
        return self._icons.get(subject)

    def icon_file(self, icon_id: int) -> Path:
        return self._icon_dir / f"{icon_id}{ICON_SUFFIX}"

    # ── Subject -> icon id ───────────────────────────────────────

    async def resolve_icon(self, subject: str) -> int:
        """Return the icon id for a subject, refreshing it in the background."""
        refresh = self._refresh(subject)

        cached = self._icons.get(subject)
        if cached is not None:
            metrics.inc("assets.icon_cache_hits")
            return cached

        return await refresh

    def _refresh(self, subject: str) -> asyncio.Task[int]:
        in_flight = self._refreshes.get(subject)
        if in_flight is not None and not in_flight.done():
            return in_flight

        task = asyncio.ensure_future(self._fetch_icon(subject))
        self._refreshes[subject] = task
        task.add_done_callback(lambda t: self._on_refreshed(subject, t))
        return task

    def _on_refreshed(self, subject: str, task: asyncio.Task[int]) -> None:
        if self._refreshes.get(subject) is task:
            del self._refreshes[subject]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            # Cold readers see this through their await; warm ones never do
            logger.debug("Icon refresh for %r failed: %s", subject, error)

    async def _fetch_icon(self, subject: str) -> int:
        path = f"{SUMMONER_BY_NAME_PATH}?name={quote(subject, safe='')}"
        summoner = await fetch_record(self._feed, path, Summoner.from_payload, "summoner")
        self._icons[subject] = summoner.profile_icon_id
        return summoner.profile_icon_id

    # ── Icon id -> file ──────────────────────────────────────────

    async def resolve_icon_path(self, subject: str) -> str:
        """Return a local file path holding the subject's current icon."""
        icon_id = await self.resolve_icon(subject)
        return str(await self.materialize(icon_id))

    async def materialize(self, icon_id: int) -> Path:
        """Make sure the icon file exists locally, downloading it at most once."""
        download = self._downloads.get(icon_id)
        if download is None:
            download = asyncio.ensure_future(self._download(icon_id))
            self._downloads[icon_id] = download
        try:
            return await asyncio.shield(download)
        except LookupFailure:
            # Let the next request retry a failed download
            if self._downloads.get(icon_id) is download:
                del self._downloads[icon_id]
            raise

    async def _download(self, icon_id: int) -> Path:
        target = self.icon_file(icon_id)
        if target.exists():
            return target

        asset_path = PROFILE_ICON_PATH.format(icon_id=icon_id)
        try:
            data = await self._feed.get_binary_asset(asset_path)
        except TransportFailure as e:
            raise LookupFailure(f"icon {icon_id} download failed: {e}", subject=asset_path) from e

        try:
            await asyncio.to_thread(_write_atomic, target, data)
        except OSError as e:
            raise LookupFailure(f"icon {icon_id} could not be stored: {e}", subject=str(target)) from e

        metrics.inc("assets.downloads")
        logger.debug("Stored icon %s at %s", icon_id, target, extra={"icon_id": icon_id})
        return target


def _write_atomic(target: Path, data: bytes) -> None:
    # Concurrent writers of one icon id carry identical bytes
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
