from ticketing.domain.models import (
    EscrowConfig,
    Event,
    EventChanges,
    PaymentRecord,
    Registration,
    Ticket,
    TicketTier,
    TierChanges,
    TierSpec,
)
from ticketing.domain.state import EventStatus, PaymentStatus, TicketStatus
from ticketing.domain.value_objects import Capacity, EventId, Money

__all__ = [
    "Event",
    "TicketTier",
    "Registration",
    "EscrowConfig",
    "PaymentRecord",
    "Ticket",
    "TierSpec",
    "EventChanges",
    "TierChanges",
    "EventStatus",
    "PaymentStatus",
    "TicketStatus",
    "EventId",
    "Money",
    "Capacity",
]
