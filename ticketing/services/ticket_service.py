"""Ticket ledger service - issues, transfers, redeems and cancels tickets."""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from django.utils import timezone

from ticketing import signals
from ticketing.domain import EventId, EventStatus, Ticket, TicketStatus
from ticketing.domain.errors import TicketError, TicketErrorCode, TicketNotFoundError
from ticketing.domain.state import TicketStateMachine
from ticketing.services.auth import IdentityVerifier, TrustedHostVerifier
from ticketing.stores.interfaces import EventStore, TicketStore

logger = logging.getLogger(__name__)

_MINTABLE_EVENT_STATUSES = frozenset({EventStatus.UPCOMING, EventStatus.ACTIVE})


class TicketService:
    """Service for ticket ownership and usage.

    When built with an ``events`` store, minting is checked against the
    referenced event inside the same unit of work, with the event row locked:
    it must exist, belong to the caller and not be over.
    Without one, the event id is recorded as given.
    """

    def __init__(
        self,
        store: TicketStore,
        *,
        events: EventStore | None = None,
        verifier: IdentityVerifier | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._events = events
        self._verifier = verifier or TrustedHostVerifier()
        self._clock = clock

    def mint_ticket(self, organizer: str, event_id: str, owner: str) -> Ticket:
        """Issue a VALID ticket for ``event_id`` to ``owner``."""
        self._authenticate(organizer)
        eid = _parse_event_id(event_id)
        if not owner:
            raise TicketError(TicketErrorCode.INVALID_INPUT, "Owner is required")

        with self._store.atomic():
            if self._events is not None:
                self._check_event(organizer, eid)
            ticket = Ticket(
                ticket_id=self._store.next_ticket_id(),
                event_id=eid,
                organizer=organizer,
                owner=owner,
                issued_at=self._clock(),
                status=TicketStateMachine.initial_state(),
            )
            self._store.add_ticket(ticket)

        logger.info("Ticket %d for event %s minted to %s", ticket.ticket_id, eid, owner)
        signals.ticket_minted.send(
            sender=self.__class__, ticket_id=ticket.ticket_id, event_id=eid, owner=owner
        )
        return ticket

    def transfer_ticket(self, from_owner: str, to_owner: str, ticket_id: int) -> Ticket:
        """Hand a VALID ticket from its current owner to someone else.

        Raises:
            TicketError: UNAUTHORIZED, TRANSFER_TO_SELF or TICKET_NOT_TRANSFERABLE.
            TicketNotFoundError: If the ticket does not exist.
        """
        self._authenticate(from_owner)
        if from_owner == to_owner:
            raise TicketError(TicketErrorCode.TRANSFER_TO_SELF, "Cannot transfer to self")
        if not to_owner:
            raise TicketError(TicketErrorCode.INVALID_INPUT, "Recipient is required")

        with self._store.atomic():
            ticket = self._load(ticket_id)
            if ticket.owner != from_owner:
                raise TicketError(TicketErrorCode.UNAUTHORIZED, "Caller does not own ticket")
            if not TicketStateMachine.is_transferable(ticket.status):
                raise TicketError(
                    TicketErrorCode.TICKET_NOT_TRANSFERABLE,
                    f"A {ticket.status.value} ticket cannot be transferred",
                )
            updated = replace(ticket, owner=to_owner)
            self._store.save_ticket(updated)
            self._store.move_ticket(ticket_id, from_owner, to_owner)

        logger.info("Ticket %d transferred from %s to %s", ticket_id, from_owner, to_owner)
        signals.ticket_transferred.send(
            sender=self.__class__,
            ticket_id=ticket_id,
            from_owner=from_owner,
            to_owner=to_owner,
        )
        return updated

    def use_ticket(self, organizer: str, ticket_id: int) -> Ticket:
        """Check a ticket in. Only the organizer of record may do this, once."""
        self._authenticate(organizer)
        with self._store.atomic():
            ticket = self._load(ticket_id)
            if ticket.organizer != organizer:
                raise TicketError(TicketErrorCode.UNAUTHORIZED, "Only the issuer may check in")
            if ticket.status == TicketStatus.USED:
                raise TicketError(TicketErrorCode.TICKET_ALREADY_USED, "Ticket already used")
            if ticket.status == TicketStatus.CANCELLED:
                raise TicketError(TicketErrorCode.EVENT_NOT_ACTIVE, "Ticket was cancelled")
            updated = replace(ticket, status=TicketStatus.USED)
            self._store.save_ticket(updated)

        logger.info("Ticket %d used", ticket_id)
        signals.ticket_used.send(sender=self.__class__, ticket_id=ticket_id, organizer=organizer)
        return updated

    def cancel_ticket(self, caller: str, ticket_id: int) -> Ticket:
        """Cancel a VALID ticket. Only its current owner may cancel it."""
        self._authenticate(caller)
        with self._store.atomic():
            ticket = self._load(ticket_id)
            if ticket.owner != caller:
                raise TicketError(TicketErrorCode.UNAUTHORIZED, "Caller does not own ticket")
            if not TicketStateMachine.can_transition(ticket.status, TicketStatus.CANCELLED):
                raise TicketError(
                    TicketErrorCode.INVALID_STATUS_TRANSITION,
                    f"A {ticket.status.value} ticket cannot be cancelled",
                )
            updated = replace(ticket, status=TicketStatus.CANCELLED)
            self._store.save_ticket(updated)

        logger.info("Ticket %d cancelled by %s", ticket_id, caller)
        signals.ticket_cancelled.send(
            sender=self.__class__, ticket_id=ticket_id, cancelled_by=caller
        )
        return updated

    def get_ticket(self, ticket_id: int) -> Ticket:
        ticket = self._store.get_ticket(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    def get_owner_tickets(self, owner: str) -> list[int]:
        return self._store.list_owner_tickets(owner)

    def get_event_tickets(self, event_id: str) -> list[int]:
        return self._store.list_event_tickets(_parse_event_id(event_id))

    def _authenticate(self, identity: str) -> None:
        if not self._verifier.verify(identity):
            raise TicketError(TicketErrorCode.UNAUTHORIZED, "Caller not authenticated")

    def _load(self, ticket_id: int) -> Ticket:
        ticket = self._store.get_ticket(ticket_id, for_update=True)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    def _check_event(self, organizer: str, eid: EventId) -> None:
        event = self._events.get_event(eid, for_update=True)
        if event is None:
            raise TicketError(TicketErrorCode.EVENT_NOT_FOUND, "Event not found")
        if event.organizer != organizer:
            raise TicketError(TicketErrorCode.UNAUTHORIZED, "Only the organizer may issue")
        if event.status not in _MINTABLE_EVENT_STATUSES:
            raise TicketError(TicketErrorCode.EVENT_NOT_ACTIVE, "Event is over")


def _parse_event_id(event_id: str | EventId) -> EventId:
    if isinstance(event_id, EventId):
        return event_id
    try:
        return EventId.from_string(event_id)
    except ValueError as exc:
        raise TicketError(TicketErrorCode.INVALID_INPUT, str(exc)) from exc
