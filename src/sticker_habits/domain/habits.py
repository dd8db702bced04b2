# domain/habits.py
from __future__ import annotations
import calendar
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from sticker_habits.domain.models import CompletionRecord, Habit
from sticker_habits.domain.rules import compute_streak, normalize_habit_name
from sticker_habits.errors import AlreadyCompleted, NotFound

logger = logging.getLogger(__name__)

def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"

@dataclass
class MonthSummary:
    year: int
    month: int
    achieved: int
    days_in_month: int

class HabitTracker:
    """
    Works directly on the habit and record lists it is given, so the store
    can point it at a working copy of the state.
    """

    def __init__(self, habits: List[Habit], records: List[CompletionRecord]):
        self.habits = habits
        self.records = records

    def get(self, habit_id: str) -> Optional[Habit]:
        for habit in self.habits:
            if habit.id == habit_id:
                return habit
        return None

    def require(self, habit_id: str) -> Habit:
        habit = self.get(habit_id)
        if habit is None:
            raise NotFound(f"No habit with id '{habit_id}'.")
        return habit

    def add_habit(self, name: str, icon: str, color: str, now: datetime) -> Habit:
        habit = Habit(
            id=new_id("h"),
            name=normalize_habit_name(name),
            icon=icon,
            color=color,
            created_at=now,
        )
        self.habits.append(habit)
        logger.info("Added habit %s (%s)", habit.id, habit.name)
        return habit

    def remove_habit(self, habit_id: str) -> None:
        self.require(habit_id)
        self.habits[:] = [h for h in self.habits if h.id != habit_id]
        before = len(self.records)
        self.records[:] = [r for r in self.records if r.habit_id != habit_id]
        logger.info("Removed habit %s and %d record(s)", habit_id, before - len(self.records))

    def records_for(self, habit_id: str) -> List[CompletionRecord]:
        return sorted((r for r in self.records if r.habit_id == habit_id), key=lambda r: r.date)

    def record_on(self, habit_id: str, day: date) -> Optional[CompletionRecord]:
        for record in self.records:
            if record.habit_id == habit_id and record.date == day:
                return record
        return None

    def has_completion_on(self, habit_id: str, day: date) -> bool:
        return self.record_on(habit_id, day) is not None

    def record_completion(self, habit_id: str, owned_item_id: str, item_id: str,
                          day: date, today: date) -> CompletionRecord:
        habit = self.require(habit_id)
        if self.has_completion_on(habit_id, day):
            raise AlreadyCompleted(f"'{habit.name}' is already done for {day.isoformat()}.")

        record = CompletionRecord(
            id=new_id("hr"),
            habit_id=habit_id,
            date=day,
            owned_item_id=owned_item_id,
            item_id=item_id,
        )
        self.records.append(record)

        days = [r.date for r in self.records if r.habit_id == habit_id]
        habit.streak = compute_streak(days, today)
        habit.total_completions = len(days)
        logger.info("Completed %s on %s (streak %d, total %d)",
                    habit_id, day.isoformat(), habit.streak, habit.total_completions)
        return record

    def month_summary(self, habit_id: str, year: int, month: int) -> MonthSummary:
        self.require(habit_id)
        achieved = sum(
            1 for r in self.records
            if r.habit_id == habit_id and r.date.year == year and r.date.month == month
        )
        return MonthSummary(
            year=year,
            month=month,
            achieved=achieved,
            days_in_month=calendar.monthrange(year, month)[1],
        )
