"""
NotifySendNotifier — freedesktop notifications through notify-send.

Each notification is one long-lived `notify-send --print-id --wait`
process: the first stdout line is the notification id (used for
--replace-id and CloseNotification), the second, if any, is the name of
the action the user clicked. Action names use the activation format
understood by sentinel.activation ("focus_chat|<id>", "invite|<id>|accept").
Shows and hides of one notification are serialized, and replacing or
closing a notification terminates the process that was waiting on it.

Missing binaries or a missing notification daemon are logged, never raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from sentinel.errors import SentinelError
from sentinel.notify.base import TrackingNotifier

logger = logging.getLogger(__name__)

ActivationCallback = Callable[[str, dict[str, str]], Awaitable[None]]

_DBUS_CLOSE = [
    "gdbus",
    "call",
    "--session",
    "--dest",
    "org.freedesktop.Notifications",
    "--object-path",
    "/org/freedesktop/Notifications",
    "--method",
    "org.freedesktop.Notifications.CloseNotification",
]


class NotifySendNotifier(TrackingNotifier):
    """Desktop notifier for Linux sessions with a notification daemon."""

    def __init__(
        self,
        app_name: str = "Sentinel",
        on_activate: ActivationCallback | None = None,
    ) -> None:
        super().__init__()
        self._app_name = app_name
        self._on_activate = on_activate
        # (kind, key) -> freedesktop notification id
        self._ids: dict[tuple[str, str], int] = {}
        # One live notify-send process and action waiter per key
        self._procs: dict[tuple[str, str], asyncio.subprocess.Process] = {}
        self._waiters: dict[tuple[str, str], asyncio.Task] = {}
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._activations: set[asyncio.Task] = set()

    def _lock(self, key: tuple[str, str]) -> asyncio.Lock:
        return self._locks.setdefault(key, asyncio.Lock())

    async def _present_invitation(
        self, invitation_id, icon_path, from_name, label, replacing
    ) -> None:
        await self._send(
            ("invitation", invitation_id),
            summary=f"{from_name} invited you",
            body=label,
            icon_path=icon_path,
            actions={
                "default": "focus",
                f"invite|{invitation_id}|accept": "Accept",
                f"invite|{invitation_id}|decline": "Decline",
            },
        )

    async def _dismiss_invitation(self, invitation_id) -> None:
        await self._close(("invitation", invitation_id))

    async def _present_chat(
        self, conversation_id, icon_path, name, body, replacing
    ) -> None:
        await self._send(
            ("chat", conversation_id),
            summary=name,
            body=body,
            icon_path=icon_path,
            actions={"default": f"focus_chat|{conversation_id}"},
        )

    async def _dismiss_chat(self, conversation_id) -> None:
        await self._close(("chat", conversation_id))

    async def _send(
        self,
        key: tuple[str, str],
        summary: str,
        body: str,
        icon_path: str,
        actions: dict[str, str],
    ) -> None:
        async with self._lock(key):
            args = [
                "notify-send",
                "--print-id",
                "--wait",
                f"--app-name={self._app_name}",
                f"--icon={icon_path}",
            ]
            existing = self._ids.get(key)
            if existing is not None:
                args.append(f"--replace-id={existing}")

            # The "default" entry maps the click-on-body action onto an activation
            action_names: dict[str, str] = {}
            for name, label in actions.items():
                if name == "default":
                    action_names["default"] = label
                    args.append("--action=default=Open")
                else:
                    action_names[name] = name
                    args.append(f"--action={name}={label}")
            args.extend([summary, body])

            # The daemon broadcasts a click to every process watching the id
            self._retire(key)

            try:
                proc = await asyncio.create_subprocess_exec(
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.DEVNULL,
                )
            except OSError as e:
                logger.warning("notify-send unavailable: %s", e)
                return

            first = await proc.stdout.readline()
            try:
                self._ids[key] = int(first.decode().strip())
            except ValueError:
                logger.warning("notify-send did not report a notification id for %s", key)

            self._procs[key] = proc
            self._waiters[key] = asyncio.create_task(
                self._await_action(key, proc, action_names)
            )

    def _retire(self, key: tuple[str, str]) -> None:
        """Stop listening for clicks on the current notification of `key`."""
        waiter = self._waiters.pop(key, None)
        if waiter is not None:
            waiter.cancel()
        proc = self._procs.pop(key, None)
        if proc is not None and proc.returncode is None:
            try:
                proc.terminate()
            except ProcessLookupError:
                pass

    async def _await_action(
        self,
        key: tuple[str, str],
        proc: asyncio.subprocess.Process,
        action_names: dict[str, str],
    ) -> None:
        try:
            line = await proc.stdout.readline()
            await proc.wait()
        finally:
            if self._waiters.get(key) is asyncio.current_task():
                del self._waiters[key]
                self._procs.pop(key, None)

        chosen = line.decode().strip()
        if not chosen or self._on_activate is None:
            return

        activation = action_names.get(chosen)
        if activation is None:
            logger.debug("Ignoring unknown notification action %r", chosen)
            return

        # Runs outside the waiter so a later hide cannot cancel it
        task = asyncio.create_task(self._activate(activation))
        self._activations.add(task)
        task.add_done_callback(self._activations.discard)

    async def _activate(self, activation: str) -> None:
        try:
            await self._on_activate(activation, {})
        except SentinelError as e:
            logger.warning("Activation %r failed: %s", activation, e)
        except Exception:
            logger.exception("Activation %r failed", activation)

    async def _close(self, key: tuple[str, str]) -> None:
        async with self._lock(key):
            self._retire(key)
            notification_id = self._ids.pop(key, None)
            if notification_id is None:
                return
            try:
                proc = await asyncio.create_subprocess_exec(
                    *_DBUS_CLOSE,
                    str(notification_id),
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.DEVNULL,
                )
                await proc.wait()
            except OSError as e:
                logger.warning("Could not close notification %s: %s", notification_id, e)
