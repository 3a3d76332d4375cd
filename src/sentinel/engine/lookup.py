"""
Enrichment lookups — secondary requests that resolve display data.

Every lookup goes through fetch_record(): a feed GET plus a parse into a
typed record. Transport errors and malformed responses both surface as
LookupFailure so callers only need to handle one failure kind.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar

from sentinel.core.metrics import metrics
from sentinel.errors import LookupFailure, MalformedPayload, TransportFailure
from sentinel.feed.client import FeedClient
from sentinel.feed.contracts import MAP_PATH, QUEUE_PATH, MapInfo, QueueInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def fetch_record(
    feed: FeedClient,
    path: str,
    parse: Callable[[Any], T],
    kind: str,
) -> T:
    started = time.monotonic()
    try:
        payload = await feed.get(path)
        return parse(payload)
    except TransportFailure as e:
        raise LookupFailure(f"{kind} lookup failed: {e}", subject=path) from e
    except MalformedPayload as e:
        raise LookupFailure(f"{kind} lookup returned bad data: {e}", subject=path) from e
    finally:
        metrics.observe(
            "enrichment.lookup_ms",
            round((time.monotonic() - started) * 1000, 1),
            labels={"kind": kind},
        )


async def fetch_queue(feed: FeedClient, queue_id: int) -> QueueInfo:
    return await fetch_record(
        feed, QUEUE_PATH.format(queue_id=queue_id), QueueInfo.from_payload, "queue"
    )


async def fetch_map(feed: FeedClient, map_id: int) -> MapInfo:
    return await fetch_record(
        feed, MAP_PATH.format(map_id=map_id), MapInfo.from_payload, "map"
    )
