"""
Engine Package — state reconciliation between the feed and the notifier.

    feed events -> {InvitationReconciler, ConversationWatcher, SessionTracker}
                -> AssetCache (on demand) -> Notifier
"""

from sentinel.engine.assets import AssetCache
from sentinel.engine.conversations import ConversationWatcher
from sentinel.engine.core import Sentinel
from sentinel.engine.invitations import InvitationReconciler
from sentinel.engine.session import SessionState, SessionTracker

__all__ = [
    "Sentinel",
    "AssetCache",
    "ConversationWatcher",
    "InvitationReconciler",
    "SessionState",
    "SessionTracker",
]
