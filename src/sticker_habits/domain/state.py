# domain/state.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sticker_habits.domain.models import CompletionRecord, Habit, OwnedItem
from sticker_habits.domain.tickets import TicketLedger
from sticker_habits.libuniversal import StorageKey

@dataclass
class AppState:
    owned_items: List[OwnedItem] = field(default_factory=list)
    habits: List[Habit] = field(default_factory=list)
    records: List[CompletionRecord] = field(default_factory=list)
    tickets: TicketLedger = field(default_factory=TicketLedger)

    # distinct catalog ids owned, refreshed on every draw
    unique_owned: int = 0

    def owned_item_ids(self) -> set:
        return {item.item_id for item in self.owned_items}

    def to_dict(self) -> Dict[str, Any]:
        return {
            StorageKey.OWNED_ITEMS.value: [item.to_dict() for item in self.owned_items],
            StorageKey.HABITS.value: [habit.to_dict() for habit in self.habits],
            StorageKey.RECORDS.value: [record.to_dict() for record in self.records],
            StorageKey.TICKETS.value: self.tickets.to_dict(),
            StorageKey.UNIQUE_OWNED.value: self.unique_owned,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppState":
        state = cls(
            owned_items=[OwnedItem.from_dict(d) for d in data.get(StorageKey.OWNED_ITEMS.value, [])],
            habits=[Habit.from_dict(d) for d in data.get(StorageKey.HABITS.value, [])],
            records=[CompletionRecord.from_dict(d) for d in data.get(StorageKey.RECORDS.value, [])],
        )
        if StorageKey.TICKETS.value in data:
            state.tickets = TicketLedger.from_dict(data[StorageKey.TICKETS.value])
        state.unique_owned = int(data.get(StorageKey.UNIQUE_OWNED.value, len(state.owned_item_ids())))
        return state
