# domain/rules.py
from datetime import date, datetime, timedelta
from typing import Iterable

from sticker_habits.errors import InvalidName

MAX_HABIT_NAME = 30

def calendar_day(moment: datetime) -> date:
    """Local calendar day of ``moment``. Naive datetimes are already local."""
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()

def same_day(a: datetime, b: datetime) -> bool:
    return calendar_day(a) == calendar_day(b)

def compute_streak(days: Iterable[date], today: date) -> int:
    streak = 0
    cursor = today
    for day in sorted(days, reverse=True):
        if day != cursor:
            break
        streak += 1
        cursor = cursor - timedelta(days=1)
    return streak

def normalize_habit_name(name: str) -> str:
    trimmed = (name or "").strip()
    if not trimmed:
        raise InvalidName("Habit name cannot be empty.")
    if len(trimmed) > MAX_HABIT_NAME:
        raise InvalidName(f"Habit name must be at most {MAX_HABIT_NAME} characters.")
    return trimmed
