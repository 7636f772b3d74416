"""CLI commands for recording sales."""

from __future__ import annotations

import asyncio

import click

from shopsync.application.dto import SaleLineSpec, SaleReceipt
from shopsync.application.record_sale import RecordSaleHandler
from shopsync.domain.exceptions import DomainException
from shopsync.infrastructure.bootstrap import open_services


def _parse_items(raw: str) -> list[SaleLineSpec]:
    """Parse 'Rice:2,Oil:1.5' into SaleLineSpec list."""
    specs: list[SaleLineSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ItemName:Quantity'."
            )
        name, qty_str = pair.rsplit(":", 1)
        try:
            qty = float(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for item '{name}'."
            )
        specs.append(SaleLineSpec(item_name=name.strip(), quantity=qty))
    return specs


@click.command("record")
@click.option("--items", required=True, help="Items as 'Item:Qty,Item:Qty' in display units.")
def sale_record(items: str) -> None:
    """Sell items (queued automatically when offline)."""
    specs = _parse_items(items)

    async def run() -> SaleReceipt:
        async with open_services() as services:
            handler = RecordSaleHandler(
                cache=services.cache,
                queue=services.queue,
                monitor=services.monitor,
                remote=services.remote,
            )
            return await handler.handle(specs)

    try:
        receipt = asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Invoice {receipt.invoice_id}: {receipt.item_count} item(s), total {receipt.amount}")
    if receipt.queued:
        click.echo("You are offline. Sale saved and will sync when online.")
    else:
        click.echo("Stock updated.")
