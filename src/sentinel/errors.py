"""
Sentinel errors.

Two failure kinds cross component boundaries:
- TransportFailure: the feed is unreachable or a request failed
- LookupFailure: an enrichment step (icon, queue, map) could not complete

Both are local to the event-processing task that raised them. The engine
catches them at the task boundary, logs, and moves on.
"""

from __future__ import annotations


class SentinelError(Exception):
    """Base class for all Sentinel errors."""


class TransportFailure(SentinelError):
    """A request against the feed failed or the feed is unreachable."""

    def __init__(self, message: str, path: str = "", status_code: int | None = None):
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class LookupFailure(SentinelError):
    """An enrichment lookup could not produce a usable value."""

    def __init__(self, message: str, subject: str = ""):
        super().__init__(message)
        self.subject = subject


class MalformedPayload(SentinelError):
    """A feed payload did not have the expected shape."""


class InvalidActivation(SentinelError):
    """A notification activation string could not be dispatched."""
