"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import locale
import logging
import sys
from datetime import date

from dotenv import find_dotenv, load_dotenv

from .config import load_config
from .errors import DataQualityError, StoreError
from .service import delivery_window, order_list_for, save_counts
from .store import open_store

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}")


def _parse_pair(value: str) -> tuple[str, str]:
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    return key, val


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="restock",
        description="Restaurant inventory counts and reorder list for the next truck",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="path to a TOML config file",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # window
    window_parser = sub.add_parser("window", help="show the next delivery")
    window_parser.add_argument("--date", type=_parse_date, default=None)
    window_parser.add_argument("--json", action="store_true", help="JSON output")

    # orders
    orders_parser = sub.add_parser("orders", help="show what to order")
    orders_parser.add_argument("--date", type=_parse_date, default=None)
    orders_parser.add_argument(
        "--category", type=str, default=None, help="only this category id"
    )
    orders_parser.add_argument(
        "--by-category", action="store_true", help="group lines by category"
    )
    orders_parser.add_argument("--json", action="store_true", help="JSON output")

    # items
    items_parser = sub.add_parser("items", help="list tracked items")
    items_parser.add_argument("--json", action="store_true", help="JSON output")

    # count
    count_parser = sub.add_parser("count", help="record inventory counts")
    count_parser.add_argument(
        "counts", type=_parse_pair, nargs="+", metavar="ITEM_ID=QTY"
    )
    count_parser.add_argument(
        "--author", type=str, default=None, help="who counted"
    )

    # set-item
    set_item_parser = sub.add_parser(
        "set-item", help="add or update an item (id=... name=... week_par=...)"
    )
    set_item_parser.add_argument(
        "fields", type=_parse_pair, nargs="+", metavar="FIELD=VALUE"
    )

    # delete-item
    delete_item_parser = sub.add_parser(
        "delete-item", help="delete an item that has never been counted"
    )
    delete_item_parser.add_argument("item_id", type=str)

    # history
    history_parser = sub.add_parser("history", help="recent counts")
    history_parser.add_argument("--limit", type=int, default=100)
    history_parser.add_argument("--json", action="store_true", help="JSON output")

    # seed
    sub.add_parser("seed", help="create default categories and suppliers")

    # schedule
    sub.add_parser("schedule", help="run scheduled order checks")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv(find_dotenv(usecwd=True))
    try:
        config = load_config(args.config)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else config.logging.level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    # Item names sort by the user's collation rules.
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.debug("Keeping the C collation: %s", e)

    try:
        match args.command:
            case "window":
                _cmd_window(config, args)
            case "orders":
                _cmd_orders(config, args)
            case "items":
                _cmd_items(config, args)
            case "count":
                _cmd_count(config, args)
            case "set-item":
                _cmd_set_item(config, args)
            case "delete-item":
                _cmd_delete_item(config, args)
            case "history":
                _cmd_history(config, args)
            case "seed":
                _cmd_seed(config)
            case "schedule":
                asyncio.run(_cmd_schedule(config))
    except (StoreError, DataQualityError, ImportError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


def _cmd_window(config, args) -> None:
    window = delivery_window(config, args.date)
    if args.json:
        print(json.dumps(window.to_dict(), indent=2))
        return
    when = "today" if window.is_today else f"in {window.days_until} days"
    print(f"Next truck: {window.day_name} {window.date.isoformat()} ({when})")
    print(f"Par profile: {window.par_profile}")


def _cmd_orders(config, args) -> None:
    with open_store(config) as store:
        orders = order_list_for(store, config, args.date, category=args.category)
        categories = store.list_categories() if args.by_category else None

    if args.json:
        data = orders.to_dict()
        if categories is not None:
            data["categories"] = [
                {
                    "id": cat.id,
                    "name": cat.name,
                    "item_ids": [line.item.id for line in lines],
                }
                for cat, lines in orders.by_category(categories)
            ]
        print(json.dumps(data, indent=2))
    else:
        print(orders.display(categories))


def _cmd_items(config, args) -> None:
    with open_store(config) as store:
        items = store.list_items()
        latest = store.latest_count_per_item()

    if args.json:
        data = [
            {
                "id": i.id,
                "name": i.name,
                "category": i.category,
                "unit": i.unit,
                "location": i.location,
                "week_par": i.weekday_par,
                "weekend_par": i.weekend_par,
                "threshold": i.threshold,
                "daily_usage": i.daily_usage,
                "cost": i.cost,
                "current_count": latest[i.id].count if i.id in latest else None,
            }
            for i in items
        ]
        print(json.dumps(data, indent=2))
        return

    if not items:
        print("No items tracked yet.")
        return
    print(f"{'ID':<20} {'Name':<24} {'Category':<18} {'On hand':>8}  Unit")
    for i in items:
        on_hand = f"{latest[i.id].count:g}" if i.id in latest else "-"
        print(f"{i.id:<20} {i.name:<24} {i.category:<18} {on_hand:>8}  {i.unit}")


def _cmd_count(config, args) -> None:
    counts = dict(args.counts)
    with open_store(config) as store:
        saved = save_counts(store, counts, counted_by=args.author)
    if saved == 0:
        print("No counts to save")
    else:
        print(f"Saved {saved} inventory count(s)")


def _cmd_set_item(config, args) -> None:
    record = dict(args.fields)
    with open_store(config) as store:
        item = store.catalog.save_item(record)
    print(f"Saved item {item.id} ({item.name})")


def _cmd_delete_item(config, args) -> None:
    with open_store(config) as store:
        store.catalog.delete_item(args.item_id)
    print(f"Deleted item {args.item_id}")


def _cmd_history(config, args) -> None:
    with open_store(config) as store:
        rows = store.count_history(limit=args.limit)

    if args.json:
        print(json.dumps(rows, indent=2))
        return
    if not rows:
        print("No counts recorded yet.")
        return
    for r in rows:
        name = r["item_name"] or "Unknown"
        print(
            f"{r['counted_at']}  {name:<24} {r['count']:>8g} {r['unit'] or ''}"
            f"  by {r['counted_by']}"
        )


def _cmd_seed(config) -> None:
    with open_store(config) as store:
        categories, suppliers = store.catalog.seed_defaults()
    print(f"Added {categories} categories and {suppliers} suppliers")


async def _cmd_schedule(config) -> None:
    from .scheduler import ReorderScheduler

    scheduler = ReorderScheduler(config)
    scheduler.start()
    for job in scheduler.get_jobs():
        print(f"  {job['name']}: next run {job['next_run']}")
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
