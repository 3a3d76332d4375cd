"""
Sentinel Configuration — single source of truth for all settings.

Reads from environment variables with sensible defaults.
A local .env file is honoured for development.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _default_icon_dir() -> str:
    return os.path.join(os.path.expanduser("~"), ".local", "share", "sentinel", "icons")


@dataclass(frozen=True)
class FeedConfig:
    """League client connection settings."""

    host: str = "127.0.0.1"
    port: int = 0
    username: str = "riot"
    password: str = ""
    verify_tls: bool = False  # the client serves a self-signed certificate
    timeout: float = 10.0
    reconnect_delay: float = 5.0  # seconds between websocket reconnect attempts

    @property
    def base_url(self) -> str:
        return f"https://{self.host}:{self.port}"

    @property
    def websocket_url(self) -> str:
        return f"wss://{self.host}:{self.port}/"

    @classmethod
    def from_env(cls) -> FeedConfig:
        return cls(
            host=os.getenv("SENTINEL_LCU_HOST", "127.0.0.1"),
            port=int(os.getenv("SENTINEL_LCU_PORT", "0")),
            username=os.getenv("SENTINEL_LCU_USERNAME", "riot"),
            password=os.getenv("SENTINEL_LCU_PASSWORD", ""),
            verify_tls=_env_bool("SENTINEL_LCU_VERIFY_TLS", "false"),
            timeout=float(os.getenv("SENTINEL_LCU_TIMEOUT", "10.0")),
            reconnect_delay=float(os.getenv("SENTINEL_RECONNECT_DELAY", "5.0")),
        )


@dataclass(frozen=True)
class NotifierConfig:
    """Notification sink settings."""

    backend: str = "log"  # "log" | "notify-send"
    app_name: str = "Sentinel"
    icon_dir: str = field(default_factory=_default_icon_dir)

    @classmethod
    def from_env(cls) -> NotifierConfig:
        return cls(
            backend=os.getenv("SENTINEL_NOTIFIER", "log").lower(),
            app_name=os.getenv("SENTINEL_APP_NAME", "Sentinel"),
            icon_dir=os.path.expanduser(
                os.getenv("SENTINEL_ICON_DIR", _default_icon_dir())
            ),
        )


@dataclass(frozen=True)
class SentinelConfig:
    """Root configuration."""

    feed: FeedConfig = field(default_factory=FeedConfig)
    notifier: NotifierConfig = field(default_factory=NotifierConfig)

    @classmethod
    def from_env(cls) -> SentinelConfig:
        return cls(
            feed=FeedConfig.from_env(),
            notifier=NotifierConfig.from_env(),
        )


# Singleton — import this wherever you need config
config = SentinelConfig.from_env()


def reload_config() -> SentinelConfig:
    """Re-read the environment and replace the module-level singleton."""
    global config
    config = SentinelConfig.from_env()
    return config
