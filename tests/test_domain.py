"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ticketing.domain import (
    Capacity,
    Event,
    EventId,
    EventStatus,
    Money,
    TicketStatus,
    TicketTier,
)
from ticketing.domain.errors import (
    DomainError,
    ErrorCategory,
    EventError,
    EventErrorCode,
    EventNotFoundError,
    PaymentErrorCode,
    TicketError,
    TicketErrorCode,
)
from ticketing.domain.state import EventStateMachine, TicketStateMachine


def _tier(tier_id=0, capacity=5, sold=0):
    return TicketTier(
        tier_id=tier_id,
        name=f"Tier {tier_id}",
        price=Money(Decimal("10")),
        capacity=Capacity(capacity),
        sold=sold,
    )


class TestMoney:
    """Tests for Money value object."""

    def test_money_accepts_positive_amount(self):
        """Money can be created with positive amount."""
        assert Money(Decimal("12.50")).amount == Decimal("12.50")

    def test_money_accepts_zero(self):
        """Money can be created with zero."""
        assert Money(Decimal("0")).amount == 0

    def test_money_rejects_negative_amount(self):
        """Money raises ValueError for negative amount."""
        with pytest.raises(ValueError):
            Money(Decimal("-1"))

    def test_money_str_format(self):
        """Money string representation is formatted to 2 decimal places."""
        assert str(Money(Decimal("5"))) == "5.00"

    def test_of_parses_ints_and_strings(self):
        assert Money.of(100) == Money(Decimal("100"))
        assert Money.of("1.25") == Money(Decimal("1.25"))

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", "-3", "0.005", "1.001"])
    def test_of_rejects_invalid_values(self, value):
        with pytest.raises(ValueError):
            Money.of(value)

    def test_money_rejects_sub_cent_amount(self):
        """Money holds whole cents only."""
        with pytest.raises(ValueError):
            Money(Decimal("0.005"))
        assert Money(Decimal("2.500")).amount == Decimal("2.5")

    def test_addition(self):
        assert Money(Decimal("1.5")) + Money(Decimal("2")) == Money(Decimal("3.5"))


class TestCapacity:
    """Tests for Capacity value object."""

    def test_capacity_accepts_positive_value(self):
        """Capacity can be created with positive value."""
        assert Capacity(10).value == 10

    def test_capacity_accepts_zero(self):
        """Capacity can be created with zero."""
        assert Capacity(0).value == 0

    def test_capacity_rejects_negative_value(self):
        """Capacity raises ValueError for negative value."""
        with pytest.raises(ValueError):
            Capacity(-1)


class TestEventId:
    """Tests for EventId value object."""

    def test_from_string_valid_symbol(self):
        """EventId.from_string accepts short alphanumeric identifiers."""
        assert EventId.from_string("concert_2030").value == "concert_2030"

    @pytest.mark.parametrize("value", ["", "has space", "dash-ed", "x" * 33])
    def test_from_string_invalid_symbol(self, value):
        """EventId.from_string raises ValueError for malformed identifiers."""
        with pytest.raises(ValueError):
            EventId.from_string(value)


class TestTicketTier:
    def test_sold_out_when_sold_reaches_capacity(self):
        assert not _tier(capacity=2, sold=1).is_sold_out
        assert _tier(capacity=2, sold=2).is_sold_out
        assert _tier(capacity=2, sold=1).remaining == 1


class TestEvent:
    def _event(self, tiers):
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)
        return Event(
            id=EventId("gala"),
            organizer="organizer",
            name="Gala",
            description="",
            venue="Hall",
            event_date=now,
            created_at=now,
            status=EventStatus.UPCOMING,
            tiers=tuple(tiers),
        )

    def test_with_tier_replaces_matching_tier(self):
        event = self._event([_tier(0), _tier(1)])
        updated = event.with_tier(_tier(1, sold=3))
        assert updated.tier(1).sold == 3
        assert event.tier(1).sold == 0
        assert [tier.tier_id for tier in updated.tiers] == [0, 1]

    def test_with_tier_appends_new_tier(self):
        event = self._event([_tier(0)])
        assert event.next_tier_id == 1
        assert [tier.tier_id for tier in event.with_tier(_tier(1)).tiers] == [0, 1]

    def test_tier_lookup_missing(self):
        assert self._event([_tier(0)]).tier(7) is None


class TestEventStateMachine:
    def test_forward_transitions_allowed(self):
        assert EventStateMachine.can_transition(EventStatus.UPCOMING, EventStatus.ACTIVE)
        assert EventStateMachine.can_transition(EventStatus.ACTIVE, EventStatus.COMPLETED)

    @pytest.mark.parametrize(
        "current,new",
        [
            (EventStatus.UPCOMING, EventStatus.COMPLETED),
            (EventStatus.UPCOMING, EventStatus.UPCOMING),
            (EventStatus.ACTIVE, EventStatus.UPCOMING),
            (EventStatus.COMPLETED, EventStatus.ACTIVE),
            (EventStatus.CANCELLED, EventStatus.UPCOMING),
            (EventStatus.UPCOMING, EventStatus.CANCELLED),
        ],
    )
    def test_other_transitions_blocked(self, current, new):
        assert not EventStateMachine.can_transition(current, new)

    def test_cancel_only_from_open_states(self):
        assert EventStateMachine.can_cancel(EventStatus.UPCOMING)
        assert EventStateMachine.can_cancel(EventStatus.ACTIVE)
        assert not EventStateMachine.can_cancel(EventStatus.COMPLETED)
        assert not EventStateMachine.can_cancel(EventStatus.CANCELLED)


class TestTicketStateMachine:
    def test_valid_exits_are_terminal(self):
        assert TicketStateMachine.can_transition(TicketStatus.VALID, TicketStatus.USED)
        assert TicketStateMachine.can_transition(TicketStatus.VALID, TicketStatus.CANCELLED)
        assert not TicketStateMachine.can_transition(TicketStatus.USED, TicketStatus.VALID)
        assert not TicketStateMachine.can_transition(
            TicketStatus.CANCELLED, TicketStatus.USED
        )


class TestDomainErrors:
    def test_str_includes_code(self):
        error = EventError(EventErrorCode.TIER_SOLD_OUT, "Tier is sold out")
        assert str(error) == "TIER_SOLD_OUT: Tier is sold out"

    def test_categories(self):
        assert EventNotFoundError("gala").category is ErrorCategory.NOT_FOUND
        assert (
            TicketError(TicketErrorCode.TRANSFER_TO_SELF, "").category
            is ErrorCategory.INVALID_INPUT
        )
        assert (
            EventError(EventErrorCode.ALREADY_REGISTERED, "").category
            is ErrorCategory.CAPACITY
        )

    def test_every_code_has_a_category(self):
        for enum_cls in (EventErrorCode, PaymentErrorCode, TicketErrorCode):
            for code in enum_cls:
                assert isinstance(DomainError(code, "").category, ErrorCategory)
