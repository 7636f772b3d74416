import click

from shopsync.infrastructure.cli.inventory_commands import inventory_refresh, inventory_show
from shopsync.infrastructure.cli.ledger_commands import ledger_add
from shopsync.infrastructure.cli.sale_commands import sale_record
from shopsync.infrastructure.cli.sync_commands import (
    sync_clear,
    sync_list,
    sync_run,
    sync_status,
    sync_watch,
)
from shopsync.infrastructure.logger import setup_logger


@click.group()
def cli() -> None:
    """shopsync: offline-first shop inventory & billing"""
    setup_logger()


@cli.group()
def inventory() -> None:
    """Manage the cached inventory."""


@cli.group()
def sale() -> None:
    """Record sales."""


@cli.group()
def ledger() -> None:
    """Manage customer credit (khata)."""


@cli.group()
def sync() -> None:
    """Inspect and drain the offline queue."""


# Register subcommands
inventory.add_command(inventory_refresh)
inventory.add_command(inventory_show)
sale.add_command(sale_record)
ledger.add_command(ledger_add)
sync.add_command(sync_clear)
sync.add_command(sync_list)
sync.add_command(sync_run)
sync.add_command(sync_status)
sync.add_command(sync_watch)
