#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from decimal import Decimal, InvalidOperation
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from furnisync.adapters.sqlalchemy.stores import SqlAlchemyCatalog
from furnisync.app import build_local_storefront, ensure_local_database
from furnisync.config import configure_logging
from furnisync.domain.derivations import cart_subtotal, format_currency
from furnisync.domain.model import CategoryRef, ItemRef

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence
    from types import FrameType

    from furnisync.app import Storefront
    from furnisync.domain.results import MutationResult

    Command = Callable[[Storefront, argparse.Namespace], Awaitable[None]]


class CommandError(RuntimeError):
    """A command could not be carried out; the message is shown to the user."""


def _parse_price(value: str) -> Decimal:
    try:
        price = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"Invalid price: {value}") from exc
    if not price.is_finite() or price < 0:
        raise argparse.ArgumentTypeError(f"Invalid price: {value}")
    return price


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="furnisync",
        description="Manage a storefront cart and wishlist against the local database",
    )
    parser.add_argument("--user", help="Act as this signed-in user id (default: anonymous)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: %(default)s)",
    )
    groups = parser.add_subparsers(dest="group", required=True)

    catalog = groups.add_parser("catalog", help="Seed and inspect products")
    catalog_actions = catalog.add_subparsers(dest="action", required=True)
    add_product = catalog_actions.add_parser("add", help="Add or update a product")
    add_product.add_argument("item_id")
    add_product.add_argument("title")
    add_product.add_argument("--price", type=_parse_price)
    add_product.add_argument("--category")
    add_product.add_argument("--slug")
    add_product.add_argument("--image-url")
    catalog_actions.add_parser("list", help="List products")

    cart = groups.add_parser("cart", help="Inspect and change the cart")
    cart_actions = cart.add_subparsers(dest="action", required=True)
    cart_actions.add_parser("list", help="Show cart lines and totals")
    cart_add = cart_actions.add_parser("add", help="Add one unit of a product")
    cart_add.add_argument("item_id")
    cart_remove = cart_actions.add_parser("remove", help="Remove a product line")
    cart_remove.add_argument("item_id")
    cart_set = cart_actions.add_parser("set", help="Set the quantity of a line (0 removes)")
    cart_set.add_argument("item_id")
    cart_set.add_argument("quantity", type=int)
    cart_actions.add_parser("clear", help="Remove every line")
    cart_actions.add_parser("inquiry", help="Print the WhatsApp inquiry link for the cart")

    wishlist = groups.add_parser("wishlist", help="Inspect and change the wishlist")
    wishlist_actions = wishlist.add_subparsers(dest="action", required=True)
    wishlist_actions.add_parser("list", help="Show wishlist entries, newest first")
    wishlist_add = wishlist_actions.add_parser("add", help="Save a product")
    wishlist_add.add_argument("item_id")
    wishlist_remove = wishlist_actions.add_parser("remove", help="Forget a product")
    wishlist_remove.add_argument("item_id")
    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    return _build_parser().parse_args(list(argv))


def _report(result: MutationResult) -> None:
    if not result.ok:
        raise CommandError(result.message or f"Operation {result.status}")
    if result.message:
        print(result.message)


def _lookup(storefront: Storefront, item_id: str) -> ItemRef:
    item = storefront.catalog.get_item(item_id) if storefront.catalog is not None else None
    if item is None:
        raise CommandError(f"Unknown product: {item_id}")
    return item


def _catalog_add(args: argparse.Namespace) -> None:
    category = CategoryRef(name=args.category) if args.category else None
    item = ItemRef(
        id=args.item_id,
        title=args.title,
        price=args.price,
        slug=args.slug,
        image_url=args.image_url,
        category=category,
    )
    SqlAlchemyCatalog().add_item(item)
    print(f"Saved {item.id}: {item.title}")


def _catalog_list(_args: argparse.Namespace) -> None:
    for item in SqlAlchemyCatalog().list_items():
        print(f"{item.id}\t{item.title}\t{item.category_name}\t{format_currency(item.price)}")


async def _cart_list(storefront: Storefront, _args: argparse.Namespace) -> None:
    cart = storefront.cart.state
    if cart.is_empty:
        print("Cart is empty")
        return
    for line in cart:
        print(
            f"{line.item_id}\t{line.quantity} x {line.item.title} "
            f"({line.item.category_name})\t{format_currency(line.item.price)}"
        )
    print(f"Items: {storefront.cart.total_item_count}")
    print(f"Subtotal: {format_currency(cart_subtotal(cart))}")


async def _cart_add(storefront: Storefront, args: argparse.Namespace) -> None:
    _report(await storefront.cart.add_item(_lookup(storefront, args.item_id)))


async def _cart_remove(storefront: Storefront, args: argparse.Namespace) -> None:
    _report(await storefront.cart.remove_item(args.item_id))


async def _cart_set(storefront: Storefront, args: argparse.Namespace) -> None:
    _report(await storefront.cart.update_quantity(args.item_id, args.quantity))


async def _cart_clear(storefront: Storefront, _args: argparse.Namespace) -> None:
    _report(await storefront.cart.clear())


async def _cart_inquiry(storefront: Storefront, _args: argparse.Namespace) -> None:
    url = storefront.cart_inquiry_url()
    if url is None:
        raise CommandError("Cart is empty")
    print(url)


async def _wishlist_list(storefront: Storefront, _args: argparse.Namespace) -> None:
    wishlist = storefront.wishlist.state
    if wishlist.is_empty:
        print("Wishlist is empty")
        return
    for entry in wishlist:
        print(f"{entry.item.id}\t{entry.item.title}\t{format_currency(entry.item.price)}")


async def _wishlist_add(storefront: Storefront, args: argparse.Namespace) -> None:
    _report(await storefront.wishlist.add_item(_lookup(storefront, args.item_id)))


async def _wishlist_remove(storefront: Storefront, args: argparse.Namespace) -> None:
    _report(await storefront.wishlist.remove_item(args.item_id))


_STOREFRONT_COMMANDS: dict[tuple[str, str], Command] = {
    ("cart", "list"): _cart_list,
    ("cart", "add"): _cart_add,
    ("cart", "remove"): _cart_remove,
    ("cart", "set"): _cart_set,
    ("cart", "clear"): _cart_clear,
    ("cart", "inquiry"): _cart_inquiry,
    ("wishlist", "list"): _wishlist_list,
    ("wishlist", "add"): _wishlist_add,
    ("wishlist", "remove"): _wishlist_remove,
}


async def _run_storefront_command(args: argparse.Namespace) -> None:
    command = _STOREFRONT_COMMANDS[(args.group, args.action)]
    storefront = build_local_storefront(args.user)
    try:
        await storefront.start()
        await command(storefront, args)
    finally:
        await storefront.aclose()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=getattr(logging, args.log_level))

    try:
        if args.group == "catalog":
            ensure_local_database()
            if args.action == "add":
                _catalog_add(args)
            else:
                _catalog_list(args)
        else:
            asyncio.run(_run_storefront_command(args))
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
