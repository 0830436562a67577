"""Registration service - allocates tier inventory to attendees.

The capacity check, the duplicate check and the ``sold`` increment all run
against one locked snapshot of the event inside a single unit of work.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from django.utils import timezone

from ticketing import signals
from ticketing.domain import Event, EventId, EventStatus, Registration
from ticketing.domain.errors import EventError, EventErrorCode, EventNotFoundError
from ticketing.services.auth import IdentityVerifier, TrustedHostVerifier
from ticketing.services.event_service import parse_event_id
from ticketing.stores.interfaces import EventStore, RegistrationStore


logger = logging.getLogger(__name__)


class RegistrationBackend(EventStore, RegistrationStore):
    """A store that serves both events and registrations."""


class RegistrationService:
    """Service for event registration and attendee lookups."""

    def __init__(
        self,
        store: RegistrationBackend,
        *,
        verifier: IdentityVerifier | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._verifier = verifier or TrustedHostVerifier()
        self._clock = clock

    def register_for_event(self, attendee: str, event_id: str, tier_id: int) -> Registration:
        """Take one slot in a tier of an ACTIVE event.

        Raises:
            EventError: UNAUTHORIZED, EVENT_NOT_ACTIVE, TIER_NOT_FOUND,
                ALREADY_REGISTERED or TIER_SOLD_OUT.
            EventNotFoundError: If the event does not exist.
        """
        if not self._verifier.verify(attendee):
            raise EventError(EventErrorCode.UNAUTHORIZED, "Caller not authenticated")
        eid = parse_event_id(event_id)

        with self._store.atomic():
            event = self._store.get_event(eid, for_update=True)
            if event is None:
                raise EventNotFoundError(eid.value)
            if event.status != EventStatus.ACTIVE:
                raise EventError(EventErrorCode.EVENT_NOT_ACTIVE, "Event is not active")
            tier = event.tier(tier_id)
            if tier is None:
                raise EventError(EventErrorCode.TIER_NOT_FOUND, "Tier not found")
            if self._store.is_registered(eid, attendee):
                raise EventError(
                    EventErrorCode.ALREADY_REGISTERED, "Attendee already registered"
                )
            if tier.is_sold_out:
                logger.warning("Tier %d of event %s is sold out", tier_id, eid)
                raise EventError(EventErrorCode.TIER_SOLD_OUT, "Tier is sold out")

            registration = Registration(
                event_id=eid,
                attendee=attendee,
                tier_id=tier_id,
                registered_at=self._clock(),
            )
            sold_tier = replace(tier, sold=tier.sold + 1)
            self._store.add_registration(registration)
            self._store.save_event(event.with_tier(sold_tier))

        logger.info(
            "%s registered for event %s tier %d (%d/%d)",
            attendee,
            eid,
            tier_id,
            sold_tier.sold,
            sold_tier.capacity.value,
        )
        signals.attendee_registered.send(
            sender=self.__class__,
            event_id=eid,
            attendee=attendee,
            tier_id=tier_id,
            sold=sold_tier.sold,
        )
        return registration

    def is_registered(self, event_id: str, attendee: str) -> bool:
        eid = self._existing(event_id).id
        return self._store.is_registered(eid, attendee)

    def get_attendees(self, event_id: str) -> list[str]:
        """Return attendees of an event in registration order."""
        eid = self._existing(event_id).id
        return self._store.list_attendees(eid)

    def _existing(self, event_id: str | EventId) -> Event:
        eid = parse_event_id(event_id)
        event = self._store.get_event(eid)
        if event is None:
            raise EventNotFoundError(eid.value)
        return event
