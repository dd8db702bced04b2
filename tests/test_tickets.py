"""Ticket ledger tests: daily grant rule and draw consumption."""

from datetime import datetime, timedelta

import pytest

from sticker_habits.domain.tickets import TicketLedger
from sticker_habits.errors import NoTickets


class TestGrantDaily:
    def test_fresh_ledger_holds_one_ticket(self):
        ledger = TicketLedger()
        assert ledger.count == 1
        assert ledger.last_granted_at is None
        assert ledger.can_draw()

    def test_empty_ledger_without_timestamp_is_granted(self, now):
        ledger = TicketLedger(count=0)
        assert ledger.grant_daily_if_due(now) is True
        assert ledger.count == 1

    def test_no_grant_on_same_day_as_last_draw(self, now):
        ledger = TicketLedger(count=0, last_granted_at=now.replace(hour=0, minute=1))
        assert ledger.grant_daily_if_due(now.replace(hour=23, minute=59)) is False
        assert ledger.count == 0

    def test_grant_on_next_day(self, now):
        ledger = TicketLedger(count=0, last_granted_at=now)
        assert ledger.grant_daily_if_due(now + timedelta(days=1)) is True
        assert ledger.count == 1

    def test_midnight_boundary(self):
        ledger = TicketLedger(count=0, last_granted_at=datetime(2024, 5, 10, 23, 59, 59))
        assert ledger.grant_daily_if_due(datetime(2024, 5, 11, 0, 0, 0)) is True

    def test_grant_is_idempotent_within_a_day(self, now):
        """Repeated checks on the same day grant exactly once."""
        ledger = TicketLedger(count=0, last_granted_at=now - timedelta(days=1))
        for minute in range(0, 60, 5):
            ledger.grant_daily_if_due(now.replace(minute=minute))
        assert ledger.count == 1

    def test_grant_keeps_timestamp(self, now):
        last = now - timedelta(days=3)
        ledger = TicketLedger(count=0, last_granted_at=last)
        ledger.grant_daily_if_due(now)
        assert ledger.last_granted_at == last

    def test_no_accumulation_while_tickets_remain(self, now):
        ledger = TicketLedger(count=1, last_granted_at=now - timedelta(days=5))
        assert ledger.grant_daily_if_due(now) is False
        assert ledger.count == 1


class TestConsume:
    def test_consume_decrements_and_stamps(self, now):
        ledger = TicketLedger()
        ledger.consume_for_draw(now)
        assert ledger.count == 0
        assert ledger.last_granted_at == now
        assert not ledger.can_draw()

    def test_consume_without_tickets(self, now):
        ledger = TicketLedger(count=0)
        with pytest.raises(NoTickets):
            ledger.consume_for_draw(now)
        assert ledger.count == 0
        assert ledger.last_granted_at is None

    def test_draw_then_same_day_grant_then_next_day_grant(self, now):
        ledger = TicketLedger()
        ledger.consume_for_draw(now)
        ledger.grant_daily_if_due(now + timedelta(hours=1))
        assert ledger.count == 0
        ledger.grant_daily_if_due(now + timedelta(days=1))
        assert ledger.count == 1


class TestSerialization:
    def test_round_trip(self, now):
        ledger = TicketLedger(count=0, last_granted_at=now)
        assert TicketLedger.from_dict(ledger.to_dict()) == ledger

    def test_round_trip_without_timestamp(self):
        ledger = TicketLedger()
        assert ledger.to_dict() == {"count": 1, "last_granted_at": None}
        assert TicketLedger.from_dict(ledger.to_dict()) == ledger

    def test_negative_count_is_clamped(self):
        assert TicketLedger.from_dict({"count": -3}).count == 0
