"""CLI commands for the offline queue."""

from __future__ import annotations

import asyncio

import click

from shopsync.application.dto import SyncReport
from shopsync.application.show_pending import ShowPendingHandler
from shopsync.domain.exceptions import DomainException
from shopsync.infrastructure import bootstrap
from shopsync.infrastructure.bootstrap import open_services


def _echo_report(report: SyncReport) -> None:
    if not report.started:
        click.echo("Offline or already syncing; nothing was sent.")
        return
    click.echo(f"Synced {report.success_count} operation(s), {report.failure_count} failed.")
    if report.interrupted:
        click.echo("Connection lost during sync; remaining operations stay queued.")


@click.command("run")
def sync_run() -> None:
    """Send every queued operation to the remote sheet now."""

    async def run() -> SyncReport:
        async with open_services() as services:
            return await services.coordinator.drain()

    try:
        report = asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_report(report)


@click.command("status")
def sync_status() -> None:
    """Show connectivity, pending count and last inventory sync."""

    async def run():
        async with open_services() as services:
            return (
                services.monitor.is_online(),
                await services.queue.count(),
                await services.cache.last_inventory_sync(),
            )

    try:
        online, pending, last_sync = asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Connection: {'online' if online else 'offline'}")
    click.echo(f"Pending:    {pending}")
    click.echo(f"Last sync:  {last_sync.isoformat(timespec='seconds') if last_sync else 'never'}")


@click.command("list")
def sync_list() -> None:
    """List queued operations, oldest first."""

    async def run():
        async with open_services() as services:
            return await ShowPendingHandler(services.queue).handle()

    try:
        lines = asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("Nothing queued.")
        return

    click.echo(f"{'#':>4}  {'Type':<17} {'Queued at':<26} Details")
    click.echo("-" * 72)
    for line in lines:
        click.echo(f"{line.id:>4}  {line.type:<17} {line.timestamp:<26} {line.summary}")


@click.command("clear")
@click.confirmation_option(prompt="Drop every queued operation without sending it?")
def sync_clear() -> None:
    """Discard all queued operations (use for permanently failing work)."""

    async def run() -> int:
        async with open_services() as services:
            count = await services.queue.count()
            await services.queue.clear()
            return count

    try:
        count = asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Removed {count} queued operation(s).")


@click.command("watch")
def sync_watch() -> None:
    """Probe connectivity and drain the queue whenever the connection returns."""

    async def run() -> None:
        async with open_services() as services:
            probe = bootstrap.connectivity_probe(services.monitor)
            if probe is None:
                raise click.ClickException("Set SHOPSYNC_PROBE_URL to watch connectivity.")
            services.monitor.on_offline(lambda: click.echo("Offline."))
            services.monitor.on_online(lambda: click.echo("Online, syncing..."))
            _echo_report(await services.coordinator.drain())
            await probe.run()

    try:
        asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))
    except KeyboardInterrupt:
        click.echo("Stopped.")
