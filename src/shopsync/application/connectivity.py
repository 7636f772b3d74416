"""Connectivity monitor: a two-state online/offline machine.

Listeners fire once per edge.  Calling ``set_online(True)`` while already
online does nothing, so a flapping platform signal cannot produce a burst
of duplicate "online" events.

The monitor is constructed explicitly and passed to whoever needs it.
With no platform signal wired in it simply stays online, and tests drive
it with ``set_online``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], Any]


class ConnectivityState(Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class ConnectivityMonitor:

    def __init__(self, online: bool = True) -> None:
        self._state = ConnectivityState.ONLINE if online else ConnectivityState.OFFLINE
        self._listeners: dict[ConnectivityState, list[Listener]] = {
            ConnectivityState.ONLINE: [],
            ConnectivityState.OFFLINE: [],
        }
        self._tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> ConnectivityState:
        return self._state

    def is_online(self) -> bool:
        return self._state is ConnectivityState.ONLINE

    def on_online(self, listener: Listener) -> Callable[[], None]:
        """Register for ``offline -> online`` edges.  Returns an unsubscribe callable."""
        return self._subscribe(ConnectivityState.ONLINE, listener)

    def on_offline(self, listener: Listener) -> Callable[[], None]:
        """Register for ``online -> offline`` edges.  Returns an unsubscribe callable."""
        return self._subscribe(ConnectivityState.OFFLINE, listener)

    def set_online(self, online: bool) -> None:
        """Report the current platform state (or override it manually)."""
        new_state = ConnectivityState.ONLINE if online else ConnectivityState.OFFLINE
        if new_state is self._state:
            return
        logger.info("Connectivity changed: %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        for listener in list(self._listeners[new_state]):
            self._notify(listener)

    # --- Internal helpers -----------------------------------------------------

    def _subscribe(self, state: ConnectivityState, listener: Listener) -> Callable[[], None]:
        self._listeners[state].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[state]:
                self._listeners[state].remove(listener)

        return unsubscribe

    def _notify(self, listener: Listener) -> None:
        # A broken listener must not stop the others or the caller.
        try:
            result = listener()
        except Exception:
            logger.exception("Connectivity listener %r failed", listener)
            return
        if not inspect.iscoroutine(result):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; async listener %r skipped", listener)
            result.close()
            return
        task = loop.create_task(result)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
