# pricewatch/cli/runner.py

"""Headless CLI adapter: calls one service operation and renders it."""

import argparse
import logging
from typing import assert_never

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.table import Table

from pricewatch.models.product import PriceChange
from pricewatch.models.results import (
    AddResult,
    AddSuccess,
    DuplicateAccount,
    HistoryResult,
    HistorySuccess,
    ListResult,
    ListSuccess,
    NameMissing,
    NameNotFound,
    NotRegistered,
    ProductExists,
    ProductNotFound,
    RegisterResult,
    RegisterSuccess,
    RemoveResult,
    RemoveSuccess,
    ScrapeFailed,
    StoreFailure,
    UpdateResult,
    UpdateSuccess,
    UrlMissing,
)
from pricewatch.pricing.history_compressor import (
    ChangeRow,
    CurrentPriceRow,
    HeaderRow,
    HistoryRow,
    SeparatorRow,
)
from pricewatch.services.context import TrackerContext

logger = logging.getLogger("pricewatch.cli")

_out = Console()
# Stderr console for failures so stdout only carries results
_err = Console(stderr=True)

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


def _failure(message: str) -> str:
    return f"[red]{escape(message)}[/red]"


def _store_failure(result: StoreFailure) -> str:
    return _failure(f"Something went wrong: {result.error}")


# ── Renderers ────────────────────────────────────────────


def render_register(result: RegisterResult, display_name: str) -> str:
    """Render the outcome of ``register``."""
    match result:
        case RegisterSuccess():
            return f"[green]Created new user, hi {escape(display_name)}![/green]"
        case DuplicateAccount():
            return f"You are already registered, {escape(display_name)}."
        case StoreFailure():
            return _store_failure(result)
        case _:
            assert_never(result)


def render_add(result: AddResult) -> str:
    """Render the outcome of ``add``."""
    match result:
        case AddSuccess():
            return (
                f"[green]Tracking {escape(result.product.name)}"
                f" at {escape(result.price)}![/green]"
            )
        case NotRegistered():
            return _failure("You need to register to add products.")
        case ProductExists():
            return _failure("You are already tracking this product.")
        case NameMissing():
            return _failure(
                "You need to provide a name for the product: add NAME URL"
            )
        case UrlMissing():
            return _failure(
                "You need to provide a url for the product: add NAME URL"
            )
        case ScrapeFailed():
            return _failure(
                "Product not tracked, because I am unable to scrape the price."
            )
        case StoreFailure():
            return _store_failure(result)
        case _:
            assert_never(result)


def render_remove(result: RemoveResult, name: str) -> str:
    """Render the outcome of ``remove``."""
    match result:
        case RemoveSuccess():
            return f"No longer tracking {escape(name)}."
        case NotRegistered():
            return _failure(
                "You need to register and track something to remove products."
            )
        case NameMissing():
            return _failure(
                "You need to provide a name for the product: remove NAME"
            )
        case ProductNotFound():
            return _failure("This product is not being tracked.")
        case StoreFailure():
            return _store_failure(result)
        case _:
            assert_never(result)


def product_updates_string(changes: list[PriceChange]) -> str:
    """One ``name: old -> new`` line per changed product."""
    return "\n".join(
        f"{c.product}: {c.old_price} -> {c.new_price}" for c in changes
    )


def render_update(result: UpdateResult) -> str:
    """Render the outcome of ``update``."""
    match result:
        case UpdateSuccess():
            if result.attempted == 0:
                return "You aren't tracking any products."
            if not result.changed:
                return "Product prices checked, no updates."
            return (
                "[bold]Some of your tracked products' prices changed:[/bold]\n"
                + escape(product_updates_string(result.changed))
            )
        case NotRegistered():
            return _failure(
                "You need to register and track something "
                "to update product prices."
            )
        case StoreFailure():
            return _store_failure(result)
        case _:
            assert_never(result)


def render_list(result: ListResult) -> RenderableType:
    """Render the outcome of ``list`` as a table of tracked products."""
    match result:
        case ListSuccess():
            if not result.products:
                return "You aren't tracking any products!"
            table = Table(
                title="Your tracked products",
                show_lines=True,
                title_style="bold cyan",
            )
            table.add_column("Name", style="bold")
            table.add_column("Price", justify="right", style="green")
            table.add_column("URL", overflow="fold", style="dim")
            for p in result.products:
                table.add_row(escape(p.name), escape(p.price), escape(p.url))
            return table
        case NotRegistered():
            return _failure(
                "You need to register and track something to list products."
            )
        case StoreFailure():
            return _store_failure(result)
        case _:
            assert_never(result)


def history_lines(rows: list[HistoryRow]) -> list[str]:
    """Plain-text lines for a compressed history timeline."""
    lines: list[str] = []
    for row in rows:
        match row:
            case HeaderRow():
                lines.append(
                    f"{row.name} has the following price history"
                    f" ({row.count} datapoints):"
                )
            case CurrentPriceRow():
                lines.append(f"(Current price): {row.price}")
            case SeparatorRow():
                lines.append("...")
            case ChangeRow():
                stamp = row.created_at.strftime(_TIMESTAMP_FORMAT)
                lines.append(f"({stamp}): {row.price}")
            case _:
                assert_never(row)
    return lines


def render_history(result: HistoryResult) -> str:
    """Render the outcome of ``history``."""
    match result:
        case HistorySuccess():
            return escape("\n".join(history_lines(result.timeline)))
        case NotRegistered():
            return _failure(
                "You need to register and track products to view history."
            )
        case NameMissing():
            return _failure(
                "You need to provide a name for the product: history NAME"
            )
        case NameNotFound():
            return _failure(
                f"You are not tracking a product with the name: {result.name}"
            )
        case StoreFailure():
            return _store_failure(result)
        case _:
            assert_never(result)


# ── Command dispatch ─────────────────────────────────────


async def run_command(
    ctx: TrackerContext,
    args: argparse.Namespace,
    identity: str,
    display_name: str,
) -> int:
    """Run the parsed sub-command; returns 0 on success, 1 otherwise."""
    rendered: RenderableType
    status: str
    command: str = args.command

    if command == "register":
        reg = await ctx.tracking.register(identity, display_name)
        rendered, status = render_register(reg, display_name), reg.status
    elif command == "add":
        add = await ctx.tracking.add_product(identity, args.name, args.url)
        rendered, status = render_add(add), add.status
    elif command == "remove":
        rem = await ctx.tracking.remove_product(identity, args.name)
        rendered, status = render_remove(rem, args.name or ""), rem.status
    elif command == "update":
        _err.print("[dim]Checking prices...[/dim]")
        upd = await ctx.updates.update_prices(identity)
        rendered, status = render_update(upd), upd.status
    elif command == "list":
        lst = await ctx.queries.list_products(identity)
        rendered, status = render_list(lst), lst.status
    elif command == "history":
        hist = await ctx.queries.get_history(identity, args.name)
        rendered, status = render_history(hist), hist.status
    else:
        logger.error("Command not found %s", command)
        _err.print(_failure(f"Unknown command: {command}"))
        return 1

    logger.info("%s for %s -> %s", command, identity, status)
    if status == "success":
        _out.print(rendered)
        return 0
    _err.print(rendered)
    return 1
