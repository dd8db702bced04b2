from __future__ import annotations

import argparse
import logging
import threading
from datetime import date, datetime
from typing import Optional

from sticker_habits import configreader
from sticker_habits.controllers.ticket_timer import DailyTicketTimer
from sticker_habits.domain.catalog import default_catalog, load_catalog
from sticker_habits.domain.models import str_to_date
from sticker_habits.errors import HabitStoreError, NoAvailableItems
from sticker_habits.storage import EncryptedJsonStorage
from sticker_habits.store import AppStateStore


def open_store(settings: configreader.Settings) -> AppStateStore:
    catalog = load_catalog(settings.catalog_path) if settings.catalog_path else default_catalog()
    storage = EncryptedJsonStorage(settings.storage_path, settings.key, backups=settings.backups)
    return AppStateStore.open(storage, catalog=catalog)


def _parse_day(text: Optional[str]) -> date:
    if not text:
        return date.today()
    try:
        return str_to_date(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{text}', expected YYYY-MM-DD")


def _parse_month(text: str) -> tuple[int, int]:
    try:
        moment = datetime.strptime(text, "%Y-%m")
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid month '{text}', expected YYYY-MM")
    return moment.year, moment.month


def cmd_status(store: AppStateStore, args) -> int:
    stats = store.collection_stats()
    print(f"Tickets: {store.ticket_count}")
    print(f"Stickers: {stats.total} ({stats.unused} unused, {stats.used} used)")
    print(f"Collection: {stats.unique}/{stats.catalog_size} ({stats.progress}%)")
    return 0


def cmd_draw(store: AppStateStore, args) -> int:
    owned = store.draw_reward()
    item = store.catalog.by_id(owned.item_id)
    print(f"You got {item.emoji} {item.name} [{item.rarity.value}] ({owned.id})")
    return 0


def cmd_habits(store: AppStateStore, args) -> int:
    habits = store.habits
    if not habits:
        print("No habits yet.")
        return 0
    today = date.today()
    for habit in habits:
        mark = "x" if store.has_completion_on(habit.id, today) else "-"
        print(f"[{mark}] {habit.id}  {habit.icon} {habit.name}  "
              f"streak {habit.streak}, total {habit.total_completions}")
    return 0


def cmd_add_habit(store: AppStateStore, args) -> int:
    habit = store.add_habit(args.name, icon=args.icon, color=args.color)
    print(f"Added {habit.id} {habit.name}")
    return 0


def cmd_remove_habit(store: AppStateStore, args) -> int:
    store.remove_habit(args.habit_id)
    print(f"Removed {args.habit_id}")
    return 0


def cmd_complete(store: AppStateStore, args) -> int:
    sticker_id = args.sticker
    if sticker_id is None:
        available = store.available_items()
        if not available:
            raise NoAvailableItems("No unused stickers. Draw one first.")
        sticker_id = available[0].id
    record = store.complete_habit(args.habit_id, sticker_id, _parse_day(args.date))
    habit = next(h for h in store.habits if h.id == args.habit_id)
    print(f"Done for {record.date.isoformat()} with {record.item_id}. Streak {habit.streak}")
    return 0


def cmd_stickers(store: AppStateStore, args) -> int:
    items = store.owned_items
    if args.filter == "unused":
        items = [i for i in items if not i.is_consumed]
    elif args.filter == "used":
        items = [i for i in items if i.is_consumed]
    if not items:
        print("No stickers.")
        return 0
    for owned in items:
        item = store.catalog.by_id(owned.item_id)
        name = f"{item.emoji} {item.name}" if item else owned.item_id
        state = "used" if owned.is_consumed else "unused"
        print(f"{owned.id}  {name}  {state}")
    return 0


def cmd_calendar(store: AppStateStore, args) -> int:
    year, month = _parse_month(args.month) if args.month else (date.today().year, date.today().month)
    summary = store.month_summary(args.habit_id, year, month)
    print(f"{year}-{month:02d}: {summary.achieved}/{summary.days_in_month} days")
    for record in store.records_for(args.habit_id):
        if record.date.year == year and record.date.month == month:
            print(f"  {record.date.isoformat()}  {record.item_id}")
    return 0


def cmd_watch(store: AppStateStore, args, settings: configreader.Settings) -> int:
    stop = threading.Event()
    timer = DailyTicketTimer(store, interval_seconds=settings.tick_seconds,
                             on_granted=lambda: print("A new ticket arrived!"))
    try:
        timer.run_blocking(stop)
    except KeyboardInterrupt:
        stop.set()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sticker-habits")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("status", help="Show tickets and collection progress")
    sub.add_parser("draw", help="Spend a ticket on a sticker draw")
    sub.add_parser("habits", help="List habits")

    p_add = sub.add_parser("add-habit", help="Create a habit")
    p_add.add_argument("name")
    p_add.add_argument("--icon", default="")
    p_add.add_argument("--color", default="")

    p_remove = sub.add_parser("remove-habit", help="Delete a habit and its records")
    p_remove.add_argument("habit_id")

    p_complete = sub.add_parser("complete", help="Mark a habit done with a sticker")
    p_complete.add_argument("habit_id")
    p_complete.add_argument("--sticker", default=None, help="Owned sticker id (default: first unused)")
    p_complete.add_argument("--date", default=None, help="YYYY-MM-DD (default: today)")

    p_stickers = sub.add_parser("stickers", help="List owned stickers")
    p_stickers.add_argument("--filter", choices=("all", "unused", "used"), default="all")

    p_calendar = sub.add_parser("calendar", help="Monthly record of a habit")
    p_calendar.add_argument("habit_id")
    p_calendar.add_argument("--month", default=None, help="YYYY-MM (default: this month)")

    sub.add_parser("watch", help="Keep running and grant the daily ticket when due")
    return parser


COMMANDS = {
    "status": cmd_status,
    "draw": cmd_draw,
    "habits": cmd_habits,
    "add-habit": cmd_add_habit,
    "remove-habit": cmd_remove_habit,
    "complete": cmd_complete,
    "stickers": cmd_stickers,
    "calendar": cmd_calendar,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = configreader.load_settings(args.config)
        logging.basicConfig(level=settings.log_level,
                            format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        store = open_store(settings)
        try:
            if args.cmd == "watch":
                return cmd_watch(store, args, settings)
            store.tick()
            return COMMANDS[args.cmd](store, args)
        finally:
            store.close()
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except HabitStoreError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
