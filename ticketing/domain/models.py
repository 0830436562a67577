"""Domain models representing persisted state.

These are pure, immutable domain objects. Services derive new versions with
dataclasses.replace() and hand them to a store; nothing mutates in place.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from ticketing.domain.state import EventStatus, PaymentStatus, TicketStatus
from ticketing.domain.value_objects import Capacity, EventId, Money


@dataclass(frozen=True)
class TicketTier:
    """A priced capacity bucket within an event."""

    tier_id: int
    name: str
    price: Money
    capacity: Capacity
    sold: int = 0

    @property
    def remaining(self) -> int:
        return self.capacity.value - self.sold

    @property
    def is_sold_out(self) -> bool:
        return self.sold >= self.capacity.value


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    organizer: str
    name: str
    description: str
    venue: str
    event_date: datetime
    created_at: datetime
    status: EventStatus
    tiers: tuple[TicketTier, ...] = ()

    def tier(self, tier_id: int) -> TicketTier | None:
        for tier in self.tiers:
            if tier.tier_id == tier_id:
                return tier
        return None

    def with_tier(self, tier: TicketTier) -> "Event":
        """Return a copy with the tier of the same id replaced, or appended if new."""
        tiers = list(self.tiers)
        for index, existing in enumerate(tiers):
            if existing.tier_id == tier.tier_id:
                tiers[index] = tier
                break
        else:
            tiers.append(tier)
        return replace(self, tiers=tuple(tiers))

    @property
    def next_tier_id(self) -> int:
        return max((tier.tier_id for tier in self.tiers), default=-1) + 1


@dataclass(frozen=True)
class Registration:
    """Fact that an attendee holds a slot in one of an event's tiers."""

    event_id: EventId
    attendee: str
    tier_id: int
    registered_at: datetime


@dataclass(frozen=True)
class EscrowConfig:
    """One-time configuration of the payment escrow."""

    admin: str
    accepted_currency: str


@dataclass(frozen=True)
class PaymentRecord:
    """A payment held in escrow for an event."""

    payment_id: int
    event_id: EventId
    payer: str
    amount: Money
    currency: str
    status: PaymentStatus
    paid_at: datetime


@dataclass(frozen=True)
class Ticket:
    """A transferable token of admission."""

    ticket_id: int
    event_id: EventId
    organizer: str
    owner: str
    issued_at: datetime
    status: TicketStatus


@dataclass(frozen=True)
class TierSpec:
    """Unvalidated input describing a tier to create."""

    name: str
    price: Decimal | int | str
    capacity: int


@dataclass(frozen=True)
class EventChanges:
    """Partial update of event details. None leaves a field unchanged."""

    name: str | None = None
    description: str | None = None
    venue: str | None = None
    event_date: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.name, self.description, self.venue, self.event_date)
        )


@dataclass(frozen=True)
class TierChanges:
    """Partial update of a tier. None leaves a field unchanged."""

    name: str | None = None
    price: Decimal | int | str | None = None
    capacity: int | None = None

    @property
    def is_empty(self) -> bool:
        return self.name is None and self.price is None and self.capacity is None
