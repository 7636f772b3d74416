"""CLI commands for the cached inventory."""

from __future__ import annotations

import asyncio

import click

from shopsync.application.show_inventory import ShowInventoryHandler
from shopsync.domain.exceptions import DomainException
from shopsync.infrastructure.bootstrap import open_services


@click.command("refresh")
def inventory_refresh() -> None:
    """Fetch the inventory sheet and replace the local cache."""

    async def run() -> int:
        async with open_services() as services:
            items = await services.cache.refresh_inventory(services.remote)
            return len(items)

    try:
        count = asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Inventory refreshed: {count} item(s) cached.")


@click.command("show")
def inventory_show() -> None:
    """Show the cached inventory in display units."""

    async def run():
        async with open_services() as services:
            lines = await ShowInventoryHandler(services.cache).handle()
            last_sync = await services.cache.last_inventory_sync()
            return lines, last_sync

    try:
        lines, last_sync = asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No inventory cached. Run 'shopsync inventory refresh'.")
        return

    click.echo(f"{'Item':<20} {'SKU':<10} {'Stock':>16} {'Price':>10}")
    click.echo("-" * 60)
    for line in lines:
        flag = "  LOW" if line.low else ""
        click.echo(f"{line.name:<20} {line.sku:<10} {line.stock:>16} {line.price:>10}{flag}")
    if last_sync is not None:
        click.echo()
        click.echo(f"Last synced: {last_sync.isoformat(timespec='seconds')}")
