"""
Sentinel entrypoint.

Run: python -m sentinel   (or the `sentinel` console script)

Needs SENTINEL_LCU_PORT and SENTINEL_LCU_PASSWORD (see sentinel.core.config).
"""

from __future__ import annotations

import asyncio
import logging
import signal

from sentinel.activation import ActivationHandler
from sentinel.core.config import NotifierConfig, SentinelConfig, config
from sentinel.core.logging import setup_logging
from sentinel.core.metrics import metrics
from sentinel.engine import Sentinel
from sentinel.feed.lcu import LcuFeedClient
from sentinel.notify import LogNotifier, Notifier, NotifySendNotifier

logger = logging.getLogger("sentinel")


def build_notifier(cfg: NotifierConfig, activation: ActivationHandler) -> Notifier:
    if cfg.backend == "notify-send":
        return NotifySendNotifier(app_name=cfg.app_name, on_activate=activation.handle)
    if cfg.backend != "log":
        logger.warning("Unknown notifier %r, falling back to log", cfg.backend)
    return LogNotifier()


async def serve(cfg: SentinelConfig) -> None:
    feed = LcuFeedClient(cfg.feed)
    activation = ActivationHandler(feed)
    notifier = build_notifier(cfg.notifier, activation)
    Sentinel(feed, notifier, cfg.notifier.icon_dir)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass

    runner = asyncio.create_task(feed.run())
    logger.info("Sentinel watching %s", cfg.feed.base_url)

    stop_wait = asyncio.create_task(stop.wait())
    await asyncio.wait({runner, stop_wait}, return_when=asyncio.FIRST_COMPLETED)
    stop_wait.cancel()

    logger.info("Shutting down")
    await feed.close()
    await runner
    logger.info("Metrics: %s", metrics.snapshot())


def run() -> None:
    setup_logging()
    if not config.feed.port:
        logger.error("SENTINEL_LCU_PORT is not set")
        raise SystemExit(2)
    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        pass
