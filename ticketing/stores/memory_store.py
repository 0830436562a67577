"""In-process implementation of every store interface.

Units of work are serialized with a re-entrant lock. Writes made inside an
``atomic()`` block record how to undo themselves in a journal; if the block
raises, the journal is replayed backwards to the block's starting point, so a
failed operation leaves no trace. Rolling back costs only what the block wrote.
"""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal

from ticketing.domain import (
    EscrowConfig,
    Event,
    EventId,
    PaymentRecord,
    Registration,
    Ticket,
)
from ticketing.stores.interfaces import (
    EventStore,
    PaymentStore,
    RegistrationStore,
    TicketStore,
)

PAYMENT_COUNTER = "payment"
TICKET_COUNTER = "ticket"

_MISSING = object()


@dataclass
class _Tables:
    events: dict[EventId, Event] = field(default_factory=dict)
    registrations: dict[tuple[EventId, str], Registration] = field(default_factory=dict)
    attendees: dict[EventId, list[str]] = field(default_factory=dict)
    escrow: EscrowConfig | None = None
    payments: dict[int, PaymentRecord] = field(default_factory=dict)
    event_payments: dict[EventId, list[int]] = field(default_factory=dict)
    revenue: dict[EventId, Decimal] = field(default_factory=dict)
    tickets: dict[int, Ticket] = field(default_factory=dict)
    owner_tickets: dict[str, list[int]] = field(default_factory=dict)
    event_tickets: dict[EventId, list[int]] = field(default_factory=dict)
    counters: dict[str, int] = field(default_factory=dict)


class InMemoryStore(EventStore, RegistrationStore, PaymentStore, TicketStore):
    """Thread-safe, non-durable store for tests and single-process hosts."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables = _Tables()
        self._journal: list[Callable[[], None]] = []
        self._depth = 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            mark = len(self._journal)
            self._depth += 1
            try:
                yield
            except BaseException:
                while len(self._journal) > mark:
                    self._journal.pop()()
                raise
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self._journal.clear()

    def _on_rollback(self, undo: Callable[[], None]) -> None:
        if self._depth:
            self._journal.append(undo)

    def _put(self, table: dict, key, value) -> None:
        previous = table.get(key, _MISSING)
        table[key] = value

        def undo():
            if previous is _MISSING:
                del table[key]
            else:
                table[key] = previous

        self._on_rollback(undo)

    def _append(self, table: dict, key, value) -> None:
        table.setdefault(key, []).append(value)
        self._on_rollback(lambda: table[key].pop())

    def _next(self, counter: str) -> int:
        with self._lock:
            value = self._tables.counters.get(counter, 0) + 1
            self._put(self._tables.counters, counter, value)
            return value

    # Events

    def list_events(self, organizer: str | None = None) -> list[Event]:
        with self._lock:
            events = list(self._tables.events.values())
        if organizer is not None:
            events = [event for event in events if event.organizer == organizer]
        return sorted(events, key=lambda event: event.created_at, reverse=True)

    def get_event(self, event_id: EventId, *, for_update: bool = False) -> Event | None:
        with self._lock:
            return self._tables.events.get(event_id)

    def event_exists(self, event_id: EventId) -> bool:
        with self._lock:
            return event_id in self._tables.events

    def add_event(self, event: Event) -> None:
        with self._lock:
            if event.id in self._tables.events:
                raise KeyError(f"Event {event.id} already stored")
            self._put(self._tables.events, event.id, event)

    def save_event(self, event: Event) -> None:
        with self._lock:
            if event.id not in self._tables.events:
                raise KeyError(f"Event {event.id} is not stored")
            self._put(self._tables.events, event.id, event)

    # Registrations

    def is_registered(self, event_id: EventId, attendee: str) -> bool:
        with self._lock:
            return (event_id, attendee) in self._tables.registrations

    def add_registration(self, registration: Registration) -> None:
        key = (registration.event_id, registration.attendee)
        with self._lock:
            if key in self._tables.registrations:
                raise KeyError(f"{registration.attendee} already registered")
            self._put(self._tables.registrations, key, registration)
            self._append(self._tables.attendees, registration.event_id, registration.attendee)

    def list_attendees(self, event_id: EventId) -> list[str]:
        with self._lock:
            return list(self._tables.attendees.get(event_id, []))

    # Payments

    def get_escrow_config(self) -> EscrowConfig | None:
        with self._lock:
            return self._tables.escrow

    def set_escrow_config(self, config: EscrowConfig) -> None:
        with self._lock:
            previous = self._tables.escrow
            self._tables.escrow = config
            self._on_rollback(lambda: setattr(self._tables, "escrow", previous))

    def next_payment_id(self) -> int:
        return self._next(PAYMENT_COUNTER)

    def add_payment(self, payment: PaymentRecord) -> None:
        with self._lock:
            self._put(self._tables.payments, payment.payment_id, payment)
            self._append(self._tables.event_payments, payment.event_id, payment.payment_id)

    def get_payment(self, payment_id: int) -> PaymentRecord | None:
        with self._lock:
            return self._tables.payments.get(payment_id)

    def list_event_payments(self, event_id: EventId) -> list[int]:
        with self._lock:
            return list(self._tables.event_payments.get(event_id, []))

    def get_event_revenue(self, event_id: EventId) -> Decimal:
        with self._lock:
            return self._tables.revenue.get(event_id, Decimal("0"))

    def add_event_revenue(self, event_id: EventId, amount: Decimal) -> Decimal:
        with self._lock:
            total = self._tables.revenue.get(event_id, Decimal("0")) + amount
            self._put(self._tables.revenue, event_id, total)
            return total

    # Tickets

    def next_ticket_id(self) -> int:
        return self._next(TICKET_COUNTER)

    def add_ticket(self, ticket: Ticket) -> None:
        with self._lock:
            self._put(self._tables.tickets, ticket.ticket_id, ticket)
            self._append(self._tables.owner_tickets, ticket.owner, ticket.ticket_id)
            self._append(self._tables.event_tickets, ticket.event_id, ticket.ticket_id)

    def get_ticket(self, ticket_id: int, *, for_update: bool = False) -> Ticket | None:
        with self._lock:
            return self._tables.tickets.get(ticket_id)

    def save_ticket(self, ticket: Ticket) -> None:
        with self._lock:
            if ticket.ticket_id not in self._tables.tickets:
                raise KeyError(f"Ticket {ticket.ticket_id} is not stored")
            self._put(self._tables.tickets, ticket.ticket_id, ticket)

    def move_ticket(self, ticket_id: int, from_owner: str, to_owner: str) -> None:
        with self._lock:
            owned = self._tables.owner_tickets.get(from_owner, [])
            if ticket_id in owned:
                position = owned.index(ticket_id)
                del owned[position]
                self._on_rollback(lambda: owned.insert(position, ticket_id))
            self._append(self._tables.owner_tickets, to_owner, ticket_id)

    def list_owner_tickets(self, owner: str) -> list[int]:
        with self._lock:
            return list(self._tables.owner_tickets.get(owner, []))

    def list_event_tickets(self, event_id: EventId) -> list[int]:
        with self._lock:
            return list(self._tables.event_tickets.get(event_id, []))
