"""Event service - all event registry business logic lives here.

Services:
- Depend only on interfaces (stores, verifiers, clocks)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or raise domain errors
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from django.utils import timezone

from ticketing import signals
from ticketing.conf import ticketing_setting
from ticketing.domain import (
    Capacity,
    Event,
    EventChanges,
    EventId,
    EventStatus,
    Money,
    TicketTier,
    TierChanges,
    TierSpec,
)
from ticketing.domain.errors import EventError, EventErrorCode, EventNotFoundError
from ticketing.domain.state import EventStateMachine
from ticketing.services.auth import IdentityVerifier, TrustedHostVerifier
from ticketing.stores.interfaces import EventStore

logger = logging.getLogger(__name__)


def parse_event_id(event_id: str | EventId) -> EventId:
    """Return a validated EventId.

    Raises:
        EventError: INVALID_INPUT if the id is malformed.
    """
    if isinstance(event_id, EventId):
        return event_id
    try:
        return EventId.from_string(event_id)
    except ValueError as exc:
        raise EventError(EventErrorCode.INVALID_INPUT, str(exc)) from exc


class EventService:
    """Service for event registry operations."""

    def __init__(
        self,
        store: EventStore,
        *,
        verifier: IdentityVerifier | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._verifier = verifier or TrustedHostVerifier()
        self._clock = clock

    def create_event(
        self,
        organizer: str,
        event_id: str,
        name: str,
        description: str,
        venue: str,
        event_date: datetime,
        tiers: Sequence[TierSpec],
    ) -> Event:
        """Create an event in UPCOMING status with tiers numbered from 0.

        Raises:
            EventError: UNAUTHORIZED, INVALID_INPUT, INVALID_EVENT_DATE,
                INVALID_TICKET_COUNT, INVALID_PRICE or EVENT_ALREADY_EXISTS.
        """
        self._authenticate(organizer)
        eid = parse_event_id(event_id)
        _require_text(name, "name")
        _require_text(venue, "venue")
        if not tiers:
            raise EventError(EventErrorCode.INVALID_INPUT, "At least one tier is required")
        for spec in tiers:
            _require_text(spec.name, "tier name")
        now = self._clock()
        self._validate_event_date(event_date, now)
        capacities = [self._build_capacity(spec.capacity) for spec in tiers]
        prices = [_build_price(spec.price) for spec in tiers]
        built = tuple(
            TicketTier(tier_id=index, name=spec.name, price=price, capacity=capacity)
            for index, (spec, capacity, price) in enumerate(zip(tiers, capacities, prices))
        )

        event = Event(
            id=eid,
            organizer=organizer,
            name=name,
            description=description or "",
            venue=venue,
            event_date=event_date,
            created_at=now,
            status=EventStateMachine.initial_state(),
            tiers=built,
        )
        with self._store.atomic():
            if self._store.event_exists(eid):
                raise EventError(EventErrorCode.EVENT_ALREADY_EXISTS, "Event already exists")
            self._store.add_event(event)

        logger.info("Event %s created by %s with %d tiers", eid, organizer, len(built))
        signals.event_created.send(
            sender=self.__class__,
            event_id=eid,
            organizer=organizer,
            name=name,
            venue=venue,
            event_date=event_date,
            tiers=built,
        )
        return event

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            EventError: INVALID_INPUT if the event_id is malformed.
            EventNotFoundError: If the event does not exist.
        """
        eid = parse_event_id(event_id)
        event = self._store.get_event(eid)
        if event is None:
            raise EventNotFoundError(eid.value)
        return event

    def get_event_status(self, event_id: str) -> EventStatus:
        return self.get_event(event_id).status

    def list_events(self, organizer: str | None = None) -> list[Event]:
        """Return all events, newest first, optionally for one organizer."""
        return self._store.list_events(organizer)

    def update_event_details(
        self, organizer: str, event_id: str, changes: EventChanges
    ) -> Event:
        """Apply the supplied fields to an UPCOMING event.

        With every field unset the stored event is returned as-is and nothing
        is written or emitted.
        """
        self._authenticate(organizer)
        eid = parse_event_id(event_id)
        with self._store.atomic():
            event = self._load_for_edit(organizer, eid)
            if changes.is_empty:
                return event
            updates: dict[str, object] = {}
            if changes.name is not None:
                _require_text(changes.name, "name")
                updates["name"] = changes.name
            if changes.description is not None:
                updates["description"] = changes.description
            if changes.venue is not None:
                _require_text(changes.venue, "venue")
                updates["venue"] = changes.venue
            if changes.event_date is not None:
                self._validate_event_date(changes.event_date, self._clock())
                updates["event_date"] = changes.event_date
            updated = replace(event, **updates)
            self._store.save_event(updated)

        logger.info("Event %s details updated: %s", eid, sorted(updates))
        signals.event_updated.send(sender=self.__class__, event_id=eid, event=updated)
        return updated

    def add_ticket_tier(self, organizer: str, event_id: str, tier: TierSpec) -> TicketTier:
        """Append a tier to an UPCOMING event and return it with its assigned id."""
        self._authenticate(organizer)
        eid = parse_event_id(event_id)
        with self._store.atomic():
            event = self._load_for_edit(organizer, eid)
            new_tier = self._build_tier(event.next_tier_id, tier)
            updated = event.with_tier(new_tier)
            self._store.save_event(updated)

        logger.info("Tier %d added to event %s", new_tier.tier_id, eid)
        signals.event_updated.send(sender=self.__class__, event_id=eid, event=updated)
        return new_tier

    def update_tier(
        self, organizer: str, event_id: str, tier_id: int, changes: TierChanges
    ) -> TicketTier:
        """Change a tier's name, price or capacity while the event is UPCOMING.

        Raises:
            EventError: TIER_NOT_FOUND, or any creation validation code.
        """
        self._authenticate(organizer)
        eid = parse_event_id(event_id)
        with self._store.atomic():
            event = self._load_for_edit(organizer, eid)
            tier = event.tier(tier_id)
            if tier is None:
                raise EventError(EventErrorCode.TIER_NOT_FOUND, "Tier not found")
            if changes.is_empty:
                return tier
            updated_tier = tier
            if changes.name is not None:
                _require_text(changes.name, "tier name")
                updated_tier = replace(updated_tier, name=changes.name)
            if changes.price is not None:
                updated_tier = replace(updated_tier, price=_build_price(changes.price))
            if changes.capacity is not None:
                capacity = self._build_capacity(changes.capacity)
                if capacity.value < tier.sold:
                    raise EventError(
                        EventErrorCode.INVALID_TICKET_COUNT,
                        "Capacity cannot drop below tickets already sold",
                    )
                updated_tier = replace(updated_tier, capacity=capacity)
            updated = event.with_tier(updated_tier)
            self._store.save_event(updated)

        logger.info("Tier %d of event %s updated", tier_id, eid)
        signals.event_updated.send(sender=self.__class__, event_id=eid, event=updated)
        return updated_tier

    def update_event_status(
        self, organizer: str, event_id: str, new_status: EventStatus
    ) -> Event:
        """Move an event one step along UPCOMING -> ACTIVE -> COMPLETED.

        Raises:
            EventError: UNAUTHORIZED, INVALID_INPUT or INVALID_STATUS_TRANSITION.
            EventNotFoundError: If the event does not exist.
        """
        self._authenticate(organizer)
        eid = parse_event_id(event_id)
        try:
            new_status = EventStatus(new_status)
        except ValueError as exc:
            raise EventError(
                EventErrorCode.INVALID_INPUT, f"Unknown status {new_status!r}"
            ) from exc
        with self._store.atomic():
            event = self._load_owned(organizer, eid)
            old_status = event.status
            if not EventStateMachine.can_transition(old_status, new_status):
                logger.warning(
                    "Rejected status change of %s: %s -> %s", eid, old_status, new_status
                )
                raise EventError(
                    EventErrorCode.INVALID_STATUS_TRANSITION,
                    f"Cannot transition {old_status.value} -> {new_status.value}",
                )
            updated = replace(event, status=new_status)
            self._store.save_event(updated)

        logger.info("Event %s status %s -> %s", eid, old_status.value, new_status.value)
        signals.event_status_changed.send(
            sender=self.__class__, event_id=eid, old_status=old_status, new_status=new_status
        )
        return updated

    def cancel_event(self, organizer: str, event_id: str) -> Event:
        """Cancel an UPCOMING or ACTIVE event."""
        self._authenticate(organizer)
        eid = parse_event_id(event_id)
        with self._store.atomic():
            event = self._load_owned(organizer, eid)
            old_status = event.status
            if not EventStateMachine.can_cancel(old_status):
                raise EventError(
                    EventErrorCode.INVALID_STATUS_TRANSITION,
                    f"Cannot cancel a {old_status.value} event",
                )
            updated = replace(event, status=EventStatus.CANCELLED)
            self._store.save_event(updated)

        logger.info("Event %s cancelled (was %s)", eid, old_status.value)
        signals.event_status_changed.send(
            sender=self.__class__,
            event_id=eid,
            old_status=old_status,
            new_status=EventStatus.CANCELLED,
        )
        signals.event_cancelled.send(sender=self.__class__, event_id=eid)
        return updated

    def _authenticate(self, identity: str) -> None:
        if not self._verifier.verify(identity):
            raise EventError(EventErrorCode.UNAUTHORIZED, "Caller not authenticated")

    def _load_owned(self, organizer: str, eid: EventId) -> Event:
        event = self._store.get_event(eid, for_update=True)
        if event is None:
            raise EventNotFoundError(eid.value)
        if event.organizer != organizer:
            raise EventError(EventErrorCode.UNAUTHORIZED, "Only the organizer may do this")
        return event

    def _load_for_edit(self, organizer: str, eid: EventId) -> Event:
        event = self._load_owned(organizer, eid)
        if not EventStateMachine.is_updatable(event.status):
            raise EventError(
                EventErrorCode.EVENT_NOT_UPDATABLE, "Only upcoming events can be edited"
            )
        return event

    def _validate_event_date(self, event_date: datetime, now: datetime) -> None:
        if timezone.is_naive(event_date):
            raise EventError(EventErrorCode.INVALID_EVENT_DATE, "Event date needs a timezone")
        if event_date <= now + ticketing_setting("MIN_EVENT_LEAD_TIME"):
            raise EventError(
                EventErrorCode.INVALID_EVENT_DATE, "Event date is too close or in the past"
            )

    def _build_capacity(self, capacity: int) -> Capacity:
        if (
            isinstance(capacity, bool)
            or not isinstance(capacity, int)
            or capacity <= 0
            or capacity >= ticketing_setting("MAX_TIER_CAPACITY")
        ):
            raise EventError(EventErrorCode.INVALID_TICKET_COUNT, "Invalid tier capacity")
        return Capacity(capacity)

    def _build_tier(self, tier_id: int, spec: TierSpec) -> TicketTier:
        _require_text(spec.name, "tier name")
        capacity = self._build_capacity(spec.capacity)
        return TicketTier(
            tier_id=tier_id,
            name=spec.name,
            price=_build_price(spec.price),
            capacity=capacity,
        )


def _require_text(value: str, field: str) -> None:
    if not isinstance(value, str) or not value:
        raise EventError(EventErrorCode.INVALID_INPUT, f"The {field} must not be empty")


def _build_price(price: Decimal | int | str) -> Money:
    try:
        return Money.of(price)
    except ValueError as exc:
        raise EventError(EventErrorCode.INVALID_PRICE, str(exc)) from exc
