from __future__ import annotations
import copy
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional, TypeVar

from sticker_habits.domain.catalog import Catalog, default_catalog
from sticker_habits.domain.habits import HabitTracker, MonthSummary, new_id
from sticker_habits.domain.models import CompletionRecord, Habit, OwnedItem
from sticker_habits.domain.rewards import RewardEngine
from sticker_habits.domain.rules import calendar_day
from sticker_habits.domain.state import AppState
from sticker_habits.errors import Exhausted, NoAvailableItems, NoTickets, NotFound, PersistenceError
from sticker_habits.storage import EncryptedJsonStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

@dataclass
class CollectionStats:
    total: int
    unused: int
    used: int
    unique: int
    catalog_size: int

    @property
    def progress(self) -> int:
        if self.catalog_size <= 0:
            return 0
        return round(self.unique * 100 / self.catalog_size)


class AppStateStore:
    """
    Single owner of the application state.

    Each mutating operation works on a deep copy of the current snapshot,
    saves the copy, and only then swaps it in. A validation failure or a
    PersistenceError leaves the current snapshot untouched.
    """

    def __init__(self, storage: EncryptedJsonStorage, catalog: Optional[Catalog] = None,
                 engine: Optional[RewardEngine] = None, state: Optional[AppState] = None):
        self.storage = storage
        self.catalog = catalog if catalog is not None else default_catalog()
        self.engine = engine if engine is not None else RewardEngine(self.catalog)
        self._state = state if state is not None else AppState()
        self._closed = False

    @classmethod
    def open(cls, storage: EncryptedJsonStorage, catalog: Optional[Catalog] = None,
             engine: Optional[RewardEngine] = None) -> "AppStateStore":
        data = storage.load(default=None)
        if not isinstance(data, dict):
            raise PersistenceError(f"Snapshot in {storage.path} is not a mapping.")
        try:
            state = AppState.from_dict(data) if data else AppState()
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"Snapshot in {storage.path} is malformed: {e}") from e
        logger.info("Loaded %d habit(s), %d sticker(s), %d ticket(s)",
                    len(state.habits), len(state.owned_items), state.tickets.count)
        return cls(storage, catalog=catalog, engine=engine, state=state)

    def close(self) -> None:
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("AppStateStore is closed.")

    def _commit(self, mutate: Callable[[AppState], T]) -> T:
        self._check_open()
        working = copy.deepcopy(self._state)
        result = mutate(working)
        self.storage.save(working.to_dict())
        self._state = working
        return result

    # ---------- operations ----------

    def draw_reward(self, now: Optional[datetime] = None) -> OwnedItem:
        now = now or datetime.now()

        def mutate(state: AppState) -> OwnedItem:
            if not state.tickets.can_draw():
                raise NoTickets("No tickets left. A new one arrives tomorrow.")
            item = self.engine.draw(state.owned_item_ids())
            if item is None:
                raise Exhausted("Every sticker has already been collected.")

            state.tickets.consume_for_draw(now)
            owned = OwnedItem(id=new_id("us"), item_id=item.id, acquired_at=now)
            state.owned_items.append(owned)
            state.unique_owned = len(state.owned_item_ids())
            logger.info("Drew %s (%s, %s)", item.id, item.name, item.rarity.value)
            return owned

        return self._commit(mutate)

    def complete_habit(self, habit_id: str, owned_item_id: str, day: date,
                       now: Optional[datetime] = None) -> CompletionRecord:
        now = now or datetime.now()

        def mutate(state: AppState) -> CompletionRecord:
            if not any(not item.is_consumed for item in state.owned_items):
                raise NoAvailableItems("No unused stickers. Draw one first.")
            tracker = HabitTracker(state.habits, state.records)
            tracker.require(habit_id)

            owned = _find_owned(state, owned_item_id)
            if owned.is_consumed:
                raise NoAvailableItems(f"Sticker '{owned_item_id}' has already been used.")

            record = tracker.record_completion(habit_id, owned.id, owned.item_id, day, calendar_day(now))
            owned.is_consumed = True
            return record

        return self._commit(mutate)

    def add_habit(self, name: str, icon: str = "", color: str = "",
                  now: Optional[datetime] = None) -> Habit:
        now = now or datetime.now()
        return self._commit(lambda state: HabitTracker(state.habits, state.records).add_habit(name, icon, color, now))

    def remove_habit(self, habit_id: str) -> None:
        self._commit(lambda state: HabitTracker(state.habits, state.records).remove_habit(habit_id))

    def tick(self, now: Optional[datetime] = None) -> bool:
        """Daily ticket check. Only saves when a ticket was actually granted."""
        self._check_open()
        now = now or datetime.now()
        ledger = copy.deepcopy(self._state.tickets)
        if not ledger.grant_daily_if_due(now):
            return False
        return self._commit(lambda state: state.tickets.grant_daily_if_due(now))

    # ---------- read views ----------

    def snapshot(self) -> AppState:
        return copy.deepcopy(self._state)

    @property
    def habits(self) -> List[Habit]:
        return copy.deepcopy(self._state.habits)

    @property
    def owned_items(self) -> List[OwnedItem]:
        return copy.deepcopy(self._state.owned_items)

    def available_items(self) -> List[OwnedItem]:
        return [item for item in self.owned_items if not item.is_consumed]

    @property
    def ticket_count(self) -> int:
        return self._state.tickets.count

    def can_draw(self) -> bool:
        return self._state.tickets.can_draw()

    def collection_stats(self) -> CollectionStats:
        items = self._state.owned_items
        unused = sum(1 for item in items if not item.is_consumed)
        return CollectionStats(
            total=len(items),
            unused=unused,
            used=len(items) - unused,
            unique=self._state.unique_owned,
            catalog_size=len(self.catalog),
        )

    def _tracker(self) -> HabitTracker:
        state = self.snapshot()
        return HabitTracker(state.habits, state.records)

    def records_for(self, habit_id: str) -> List[CompletionRecord]:
        return self._tracker().records_for(habit_id)

    def record_on(self, habit_id: str, day: date) -> Optional[CompletionRecord]:
        return self._tracker().record_on(habit_id, day)

    def has_completion_on(self, habit_id: str, day: date) -> bool:
        return self._tracker().has_completion_on(habit_id, day)

    def month_summary(self, habit_id: str, year: int, month: int) -> MonthSummary:
        return self._tracker().month_summary(habit_id, year, month)


def _find_owned(state: AppState, owned_item_id: str) -> OwnedItem:
    for item in state.owned_items:
        if item.id == owned_item_id:
            return item
    raise NotFound(f"No sticker with id '{owned_item_id}'.")
