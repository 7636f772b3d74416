"""Platform connectivity signal for the ConnectivityMonitor.

A plain HTTP reachability check run on an interval.  Each result is fed
to ``monitor.set_online``; the monitor itself turns that into edge events,
so a steady state produces no notifications.
"""

from __future__ import annotations

import asyncio
import logging

import requests

from shopsync.application.connectivity import ConnectivityMonitor

logger = logging.getLogger(__name__)


class ConnectivityProbe:

    def __init__(
        self,
        monitor: ConnectivityMonitor,
        url: str,
        interval: float = 15,
        timeout: float = 3,
        session: requests.Session | None = None,
    ) -> None:
        self._monitor = monitor
        self._url = url
        self._interval = interval
        self._timeout = timeout
        self._session = session or requests.Session()

    def check(self) -> bool:
        """True if the probe URL answers at all (any HTTP status counts)."""
        try:
            self._session.head(self._url, timeout=self._timeout, allow_redirects=True)
        except requests.exceptions.RequestException as exc:
            logger.debug("Connectivity probe to %s failed: %s", self._url, exc)
            return False
        return True

    async def poll_once(self) -> bool:
        online = await asyncio.to_thread(self.check)
        self._monitor.set_online(online)
        return online

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Probe until *stop* is set (or forever)."""
        stop = stop or asyncio.Event()
        while not stop.is_set():
            await self.poll_once()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                continue
