"""Status enums and the lifecycle rules that govern them."""

from enum import Enum


class EventStatus(str, Enum):
    """Lifecycle states of an event."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Escrow states of a payment. Only HELD is reachable today."""

    HELD = "held"
    RELEASED = "released"
    REFUNDED = "refunded"


class TicketStatus(str, Enum):
    """Lifecycle states of a ticket."""

    VALID = "valid"
    USED = "used"
    CANCELLED = "cancelled"


class EventStateMachine:
    """Validate event lifecycle transitions.

    Organizer-driven progress only moves forward one step at a time.
    Cancellation is a separate edge reachable from any non-terminal state.
    """

    _TRANSITIONS: dict[EventStatus, set[EventStatus]] = {
        EventStatus.UPCOMING: {EventStatus.ACTIVE},
        EventStatus.ACTIVE: {EventStatus.COMPLETED},
        EventStatus.COMPLETED: set(),
        EventStatus.CANCELLED: set(),
    }

    _TERMINAL = frozenset({EventStatus.COMPLETED, EventStatus.CANCELLED})

    @classmethod
    def initial_state(cls) -> EventStatus:
        return EventStatus.UPCOMING

    @classmethod
    def can_transition(cls, current: EventStatus, new: EventStatus) -> bool:
        return new in cls._TRANSITIONS.get(current, set())

    @classmethod
    def can_cancel(cls, current: EventStatus) -> bool:
        return current not in cls._TERMINAL

    @classmethod
    def is_updatable(cls, current: EventStatus) -> bool:
        return current == EventStatus.UPCOMING


class TicketStateMachine:
    """Validate ticket lifecycle transitions. Both exits from VALID are terminal."""

    _TRANSITIONS: dict[TicketStatus, set[TicketStatus]] = {
        TicketStatus.VALID: {TicketStatus.USED, TicketStatus.CANCELLED},
        TicketStatus.USED: set(),
        TicketStatus.CANCELLED: set(),
    }

    @classmethod
    def initial_state(cls) -> TicketStatus:
        return TicketStatus.VALID

    @classmethod
    def can_transition(cls, current: TicketStatus, new: TicketStatus) -> bool:
        return new in cls._TRANSITIONS.get(current, set())

    @classmethod
    def is_transferable(cls, current: TicketStatus) -> bool:
        return current == TicketStatus.VALID
