"""
Notify Package — where show/hide decisions end up.

- Notifier: the sink interface
- TrackingNotifier: idempotent hide bookkeeping shared by backends
- LogNotifier: headless, logs decisions
- NotifySendNotifier: freedesktop desktop notifications
"""

from sentinel.notify.base import Notifier, TrackingNotifier
from sentinel.notify.desktop import NotifySendNotifier
from sentinel.notify.log import LogNotifier

__all__ = [
    "Notifier",
    "TrackingNotifier",
    "LogNotifier",
    "NotifySendNotifier",
]
