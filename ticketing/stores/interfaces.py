"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.

Every mutating service operation runs inside ``atomic()``: all writes made in
the block commit together or not at all, and blocks touching the same records
never interleave. Reads made with ``for_update=True`` inside a block lock the
record until the block exits.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal

from ticketing.domain import (
    EscrowConfig,
    Event,
    EventId,
    PaymentRecord,
    Registration,
    Ticket,
)


class UnitOfWork(ABC):
    """A store that can group writes into one atomic commit."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a context manager that commits on exit and rolls back on error."""
        ...


class EventStore(UnitOfWork):
    """Interface for event persistence operations."""

    @abstractmethod
    def list_events(self, organizer: str | None = None) -> list[Event]:
        """Return events ordered by created_at descending, optionally for one organizer."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId, *, for_update: bool = False) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def event_exists(self, event_id: EventId) -> bool:
        """Check if an event exists."""
        ...

    @abstractmethod
    def add_event(self, event: Event) -> None:
        """Persist a new event with its tiers."""
        ...

    @abstractmethod
    def save_event(self, event: Event) -> None:
        """Overwrite an existing event and its tiers."""
        ...


class RegistrationStore(UnitOfWork):
    """Interface for registration facts and attendee lists."""

    @abstractmethod
    def is_registered(self, event_id: EventId, attendee: str) -> bool:
        ...

    @abstractmethod
    def add_registration(self, registration: Registration) -> None:
        """Persist the registration and append the attendee to the event's list."""
        ...

    @abstractmethod
    def list_attendees(self, event_id: EventId) -> list[str]:
        """Return attendees in registration order."""
        ...


class PaymentStore(UnitOfWork):
    """Interface for escrow configuration, payment records and revenue."""

    @abstractmethod
    def get_escrow_config(self) -> EscrowConfig | None:
        ...

    @abstractmethod
    def set_escrow_config(self, config: EscrowConfig) -> None:
        ...

    @abstractmethod
    def next_payment_id(self) -> int:
        """Increment and return the payment counter. Starts at 1."""
        ...

    @abstractmethod
    def add_payment(self, payment: PaymentRecord) -> None:
        """Persist the record and append its id to the event's payment list."""
        ...

    @abstractmethod
    def get_payment(self, payment_id: int) -> PaymentRecord | None:
        ...

    @abstractmethod
    def list_event_payments(self, event_id: EventId) -> list[int]:
        """Return payment ids for an event in creation order."""
        ...

    @abstractmethod
    def get_event_revenue(self, event_id: EventId) -> Decimal:
        """Return the running revenue for an event, 0 when nothing was paid."""
        ...

    @abstractmethod
    def add_event_revenue(self, event_id: EventId, amount: Decimal) -> Decimal:
        """Add to the event's revenue and return the new total."""
        ...


class TicketStore(UnitOfWork):
    """Interface for tickets and their owner/event indexes."""

    @abstractmethod
    def next_ticket_id(self) -> int:
        """Increment and return the ticket counter. Starts at 1."""
        ...

    @abstractmethod
    def add_ticket(self, ticket: Ticket) -> None:
        """Persist a new ticket and append it to its owner's and event's lists."""
        ...

    @abstractmethod
    def get_ticket(self, ticket_id: int, *, for_update: bool = False) -> Ticket | None:
        ...

    @abstractmethod
    def save_ticket(self, ticket: Ticket) -> None:
        """Overwrite an existing ticket's fields. Does not touch owner lists."""
        ...

    @abstractmethod
    def move_ticket(self, ticket_id: int, from_owner: str, to_owner: str) -> None:
        """Remove the first occurrence of ticket_id from from_owner's list and
        append it to to_owner's list."""
        ...

    @abstractmethod
    def list_owner_tickets(self, owner: str) -> list[int]:
        ...

    @abstractmethod
    def list_event_tickets(self, event_id: EventId) -> list[int]:
        ...
