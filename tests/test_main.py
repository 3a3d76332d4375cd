"""Tests for entrypoint wiring."""

from sentinel.activation import ActivationHandler
from sentinel.core.config import NotifierConfig
from sentinel.main import build_notifier
from sentinel.notify import LogNotifier, NotifySendNotifier


def test_build_log_notifier(feed):
    notifier = build_notifier(NotifierConfig(backend="log"), ActivationHandler(feed))
    assert isinstance(notifier, LogNotifier)


def test_build_notify_send_notifier(feed):
    activation = ActivationHandler(feed)
    notifier = build_notifier(
        NotifierConfig(backend="notify-send", app_name="Test"), activation
    )
    assert isinstance(notifier, NotifySendNotifier)
    assert notifier._on_activate == activation.handle


def test_unknown_backend_falls_back_to_log(feed):
    notifier = build_notifier(NotifierConfig(backend="carrier-pigeon"), ActivationHandler(feed))
    assert isinstance(notifier, LogNotifier)
