"""
Sentinel — desktop notifications for League client chats and invites.

Watches the League client's event feed and keeps the desktop's
notifications in sync with it: new messages in background conversations,
pending lobby invitations, and their removal once they no longer apply.
"""

__version__ = "0.1.0"
