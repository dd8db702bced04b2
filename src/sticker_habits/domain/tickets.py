# domain/tickets.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from sticker_habits.domain.models import datetime_to_str, str_to_datetime
from sticker_habits.domain.rules import same_day
from sticker_habits.errors import NoTickets
from sticker_habits.libuniversal import StorageKey

logger = logging.getLogger(__name__)

@dataclass
class TicketLedger:
    count: int = 1
    # set by a successful draw; a daily grant leaves it alone
    last_granted_at: Optional[datetime] = None

    def can_draw(self) -> bool:
        return self.count > 0

    def grant_daily_if_due(self, now: datetime) -> bool:
        """Refill an empty ledger to one ticket on a new day. Returns True on grant."""
        if self.count > 0:
            return False
        if self.last_granted_at is not None and same_day(self.last_granted_at, now):
            return False

        self.count = 1
        logger.info("Granted daily ticket")
        return True

    def consume_for_draw(self, now: datetime) -> None:
        if self.count <= 0:
            raise NoTickets("No tickets left. A new one arrives tomorrow.")
        self.count -= 1
        self.last_granted_at = now

    def to_dict(self) -> Dict[str, Any]:
        return {
            StorageKey.TICKET_COUNT.value: self.count,
            StorageKey.LAST_GRANTED_AT.value: (
                datetime_to_str(self.last_granted_at) if self.last_granted_at is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TicketLedger":
        last = data.get(StorageKey.LAST_GRANTED_AT.value)
        return cls(
            count=max(0, int(data.get(StorageKey.TICKET_COUNT.value, 0))),
            last_granted_at=str_to_datetime(last) if last else None,
        )
