"""CLI commands for the customer ledger (khata)."""

from __future__ import annotations

import asyncio

import click

from shopsync.application.add_ledger_entry import AddLedgerEntryHandler
from shopsync.domain.exceptions import DomainException
from shopsync.infrastructure.bootstrap import open_services


@click.command("add")
@click.option("--customer", required=True, help="Customer name.")
@click.option(
    "--type",
    "entry_type",
    type=click.Choice(["CREDIT", "PAYMENT"], case_sensitive=False),
    default="CREDIT",
    show_default=True,
    help="CREDIT (udhar) or PAYMENT (vasooli).",
)
@click.option("--amount", required=True, help="Amount, e.g. 250.50.")
@click.option("--description", default="", help="Optional note.")
def ledger_add(customer: str, entry_type: str, amount: str, description: str) -> None:
    """Record a credit or payment for a customer."""

    async def run() -> bool:
        async with open_services() as services:
            handler = AddLedgerEntryHandler(
                queue=services.queue,
                monitor=services.monitor,
                remote=services.remote,
            )
            return await handler.handle(customer, entry_type, amount, description)

    try:
        queued = asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if queued:
        click.echo(f"{entry_type.upper()} for {customer} saved offline; will sync when online.")
    else:
        click.echo(f"{entry_type.upper()} for {customer} recorded.")
