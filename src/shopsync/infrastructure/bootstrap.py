"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  The store is opened
once per session and handed to everything that needs it.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator

from shopsync.application.connectivity import ConnectivityMonitor
from shopsync.application.local_cache import LocalCache
from shopsync.application.pending_queue import PendingOperationQueue
from shopsync.application.replay import OperationReplayer
from shopsync.application.sync_coordinator import SyncCoordinator
from shopsync.domain.repository.local_store import LocalStore
from shopsync.domain.repository.remote_adapter import RemoteAdapter
from shopsync.infrastructure import settings
from shopsync.infrastructure.connectivity_probe import ConnectivityProbe
from shopsync.infrastructure.persistence.json_local_store import JsonLocalStore
from shopsync.infrastructure.remote.sheets_adapter import SheetsRemoteAdapter


def local_store(data_dir: Path | None = None) -> JsonLocalStore:
    return JsonLocalStore(data_dir or settings.DATA_DIR)


def remote_adapter() -> SheetsRemoteAdapter:
    return SheetsRemoteAdapter(
        spreadsheet_id=settings.SPREADSHEET_ID,
        access_token=settings.ACCESS_TOKEN,
        timeout=settings.REQUEST_TIMEOUT,
    )


def connectivity_monitor() -> ConnectivityMonitor:
    return ConnectivityMonitor(online=not settings.FORCE_OFFLINE)


def connectivity_probe(monitor: ConnectivityMonitor) -> ConnectivityProbe | None:
    if not settings.PROBE_URL or settings.FORCE_OFFLINE:
        return None
    return ConnectivityProbe(monitor, settings.PROBE_URL, interval=settings.PROBE_INTERVAL)


@dataclass
class Services:
    store: LocalStore
    remote: RemoteAdapter
    monitor: ConnectivityMonitor
    queue: PendingOperationQueue
    cache: LocalCache
    coordinator: SyncCoordinator


@asynccontextmanager
async def open_services(
    store: LocalStore | None = None,
    remote: RemoteAdapter | None = None,
    monitor: ConnectivityMonitor | None = None,
) -> AsyncIterator[Services]:
    """Open the store, build every component around it, and close it on exit."""
    store = store or local_store()
    remote = remote or remote_adapter()
    monitor = monitor or connectivity_monitor()

    async with store:
        queue = PendingOperationQueue(store)
        coordinator = SyncCoordinator(queue, monitor, OperationReplayer(remote))
        coordinator.attach()

        probe = connectivity_probe(monitor)
        if probe is not None:
            await probe.poll_once()

        try:
            yield Services(
                store=store,
                remote=remote,
                monitor=monitor,
                queue=queue,
                cache=LocalCache(store),
                coordinator=coordinator,
            )
            # Let a drain triggered by a reconnect finish before closing.
            await coordinator.wait_idle()
        finally:
            coordinator.detach()
