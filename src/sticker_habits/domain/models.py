# domain/models.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict

from sticker_habits.libuniversal import DATE_FORMAT

class Rarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    SUPER_RARE = "super_rare"

@dataclass(frozen=True)
class CatalogItem:
    id: str
    name: str
    rarity: Rarity
    color: str
    emoji: str = ""

@dataclass
class OwnedItem:
    id: str
    item_id: str
    acquired_at: datetime
    is_consumed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "acquired_at": datetime_to_str(self.acquired_at),
            "is_consumed": self.is_consumed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OwnedItem":
        return cls(
            id=data["id"],
            item_id=data["item_id"],
            acquired_at=str_to_datetime(data["acquired_at"]),
            is_consumed=bool(data.get("is_consumed", False)),
        )

@dataclass
class Habit:
    id: str
    name: str
    icon: str
    color: str
    created_at: datetime
    streak: int = 0
    total_completions: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "created_at": datetime_to_str(self.created_at),
            "streak": self.streak,
            "total_completions": self.total_completions,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        return cls(
            id=data["id"],
            name=data["name"],
            icon=data.get("icon", ""),
            color=data.get("color", ""),
            created_at=str_to_datetime(data["created_at"]),
            streak=int(data.get("streak", 0)),
            total_completions=int(data.get("total_completions", 0)),
        )

@dataclass
class CompletionRecord:
    id: str
    habit_id: str
    date: date
    owned_item_id: str
    item_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "date": date_to_str(self.date),
            "owned_item_id": self.owned_item_id,
            "item_id": self.item_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompletionRecord":
        return cls(
            id=data["id"],
            habit_id=data["habit_id"],
            date=str_to_date(data["date"]),
            owned_item_id=data["owned_item_id"],
            item_id=data["item_id"],
        )

def datetime_to_str(moment: datetime) -> str:
    return moment.isoformat()

def str_to_datetime(text: str) -> datetime:
    return datetime.fromisoformat(text)

def date_to_str(day: date) -> str:
    return day.strftime(DATE_FORMAT)

def str_to_date(text: str) -> date:
    return datetime.strptime(text, DATE_FORMAT).date()
