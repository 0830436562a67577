"""Django ORM implementation of the store interfaces.

Rows read with ``for_update=True`` are locked with SELECT ... FOR UPDATE, so
concurrent units of work on the same event or ticket are serialized by the
database. Counters and revenue totals are always locked before incrementing.
"""

from decimal import Decimal

from django.db import transaction
from django.db.models import F

from ticketing import models as orm
from ticketing.domain import (
    Capacity,
    EscrowConfig,
    Event,
    EventId,
    EventStatus,
    Money,
    PaymentRecord,
    PaymentStatus,
    Registration,
    Ticket,
    TicketStatus,
    TicketTier,
)
from ticketing.stores.interfaces import (
    EventStore,
    PaymentStore,
    RegistrationStore,
    TicketStore,
)

PAYMENT_COUNTER = "payment"
TICKET_COUNTER = "ticket"


class DjangoStore(EventStore, RegistrationStore, PaymentStore, TicketStore):
    """Database-backed store using Django ORM."""

    def __init__(self, using: str | None = None) -> None:
        self._using = using

    def atomic(self):
        return transaction.atomic(using=self._using)

    def _manager(self, model):
        return model.objects.using(self._using)

    def _next(self, counter: str) -> int:
        with self.atomic():
            self._manager(orm.Counter).get_or_create(name=counter)
            row = self._manager(orm.Counter).select_for_update().get(name=counter)
            row.value = F("value") + 1
            row.save(update_fields=["value"])
            row.refresh_from_db(fields=["value"])
            return row.value

    # Events

    def list_events(self, organizer: str | None = None) -> list[Event]:
        rows = self._manager(orm.Event).prefetch_related("tiers").order_by("-created_at")
        if organizer is not None:
            rows = rows.filter(organizer=organizer)
        return [_event_to_domain(row, list(row.tiers.all())) for row in rows]

    def get_event(self, event_id: EventId, *, for_update: bool = False) -> Event | None:
        rows = self._manager(orm.Event)
        if for_update:
            rows = rows.select_for_update()
        row = rows.filter(pk=event_id.value).first()
        if row is None:
            return None
        tiers = self._manager(orm.TicketTier).filter(event_id=row.pk).order_by("tier_id")
        return _event_to_domain(row, list(tiers))

    def event_exists(self, event_id: EventId) -> bool:
        return self._manager(orm.Event).filter(pk=event_id.value).exists()

    def add_event(self, event: Event) -> None:
        with self.atomic():
            row = orm.Event(id=event.id.value)
            _apply_event(row, event)
            row.save(force_insert=True, using=self._using)
            self._save_tiers(event)

    def save_event(self, event: Event) -> None:
        with self.atomic():
            row = self._manager(orm.Event).select_for_update().get(pk=event.id.value)
            _apply_event(row, event)
            row.save(using=self._using)
            self._save_tiers(event)

    def _save_tiers(self, event: Event) -> None:
        for tier in event.tiers:
            self._manager(orm.TicketTier).update_or_create(
                event_id=event.id.value,
                tier_id=tier.tier_id,
                defaults={
                    "name": tier.name,
                    "price": tier.price.amount,
                    "capacity": tier.capacity.value,
                    "sold": tier.sold,
                },
            )

    # Registrations

    def is_registered(self, event_id: EventId, attendee: str) -> bool:
        return (
            self._manager(orm.Registration)
            .filter(event_id=event_id.value, attendee=attendee)
            .exists()
        )

    def add_registration(self, registration: Registration) -> None:
        orm.Registration(
            event_id=registration.event_id.value,
            attendee=registration.attendee,
            tier_id=registration.tier_id,
            registered_at=registration.registered_at,
        ).save(force_insert=True, using=self._using)

    def list_attendees(self, event_id: EventId) -> list[str]:
        return list(
            self._manager(orm.Registration)
            .filter(event_id=event_id.value)
            .order_by("id")
            .values_list("attendee", flat=True)
        )

    # Payments

    def get_escrow_config(self) -> EscrowConfig | None:
        row = self._manager(orm.EscrowAccount).filter(pk=orm.EscrowAccount.SINGLETON_ID).first()
        if row is None:
            return None
        return EscrowConfig(admin=row.admin, accepted_currency=row.accepted_currency)

    def set_escrow_config(self, config: EscrowConfig) -> None:
        self._manager(orm.EscrowAccount).update_or_create(
            pk=orm.EscrowAccount.SINGLETON_ID,
            defaults={"admin": config.admin, "accepted_currency": config.accepted_currency},
        )

    def next_payment_id(self) -> int:
        return self._next(PAYMENT_COUNTER)

    def add_payment(self, payment: PaymentRecord) -> None:
        orm.Payment(
            id=payment.payment_id,
            event_id=payment.event_id.value,
            payer=payment.payer,
            amount=payment.amount.amount,
            currency=payment.currency,
            status=payment.status.value,
            paid_at=payment.paid_at,
        ).save(force_insert=True, using=self._using)

    def get_payment(self, payment_id: int) -> PaymentRecord | None:
        row = self._manager(orm.Payment).filter(pk=payment_id).first()
        if row is None:
            return None
        return PaymentRecord(
            payment_id=row.id,
            event_id=EventId(row.event_id),
            payer=row.payer,
            amount=Money(amount=row.amount),
            currency=row.currency,
            status=PaymentStatus(row.status),
            paid_at=row.paid_at,
        )

    def list_event_payments(self, event_id: EventId) -> list[int]:
        return list(
            self._manager(orm.Payment)
            .filter(event_id=event_id.value)
            .order_by("id")
            .values_list("id", flat=True)
        )

    def get_event_revenue(self, event_id: EventId) -> Decimal:
        row = self._manager(orm.EventRevenue).filter(pk=event_id.value).first()
        return row.total if row is not None else Decimal("0")

    def add_event_revenue(self, event_id: EventId, amount: Decimal) -> Decimal:
        with self.atomic():
            self._manager(orm.EventRevenue).get_or_create(event_id=event_id.value)
            row = self._manager(orm.EventRevenue).select_for_update().get(pk=event_id.value)
            row.total = F("total") + amount
            row.save(update_fields=["total"])
            row.refresh_from_db(fields=["total"])
            return row.total

    # Tickets

    def next_ticket_id(self) -> int:
        return self._next(TICKET_COUNTER)

    def add_ticket(self, ticket: Ticket) -> None:
        with self.atomic():
            row = orm.Ticket(id=ticket.ticket_id)
            _apply_ticket(row, ticket)
            row.save(force_insert=True, using=self._using)
            orm.TicketHolding(owner=ticket.owner, ticket=row).save(using=self._using)

    def get_ticket(self, ticket_id: int, *, for_update: bool = False) -> Ticket | None:
        rows = self._manager(orm.Ticket)
        if for_update:
            rows = rows.select_for_update()
        row = rows.filter(pk=ticket_id).first()
        return _ticket_to_domain(row) if row is not None else None

    def save_ticket(self, ticket: Ticket) -> None:
        row = self._manager(orm.Ticket).get(pk=ticket.ticket_id)
        _apply_ticket(row, ticket)
        row.save(using=self._using)

    def move_ticket(self, ticket_id: int, from_owner: str, to_owner: str) -> None:
        with self.atomic():
            holding = (
                self._manager(orm.TicketHolding)
                .filter(owner=from_owner, ticket_id=ticket_id)
                .order_by("id")
                .first()
            )
            if holding is not None:
                holding.delete()
            orm.TicketHolding(owner=to_owner, ticket_id=ticket_id).save(using=self._using)

    def list_owner_tickets(self, owner: str) -> list[int]:
        return list(
            self._manager(orm.TicketHolding)
            .filter(owner=owner)
            .order_by("id")
            .values_list("ticket_id", flat=True)
        )

    def list_event_tickets(self, event_id: EventId) -> list[int]:
        return list(
            self._manager(orm.Ticket)
            .filter(event_id=event_id.value)
            .order_by("id")
            .values_list("id", flat=True)
        )


def _apply_event(row: orm.Event, event: Event) -> None:
    row.organizer = event.organizer
    row.name = event.name
    row.description = event.description
    row.venue = event.venue
    row.event_date = event.event_date
    row.status = event.status.value
    row.created_at = event.created_at


def _event_to_domain(row: orm.Event, tiers: list[orm.TicketTier]) -> Event:
    return Event(
        id=EventId(row.id),
        organizer=row.organizer,
        name=row.name,
        description=row.description,
        venue=row.venue,
        event_date=row.event_date,
        created_at=row.created_at,
        status=EventStatus(row.status),
        tiers=tuple(
            TicketTier(
                tier_id=tier.tier_id,
                name=tier.name,
                price=Money(amount=tier.price),
                capacity=Capacity(tier.capacity),
                sold=tier.sold,
            )
            for tier in sorted(tiers, key=lambda tier: tier.tier_id)
        ),
    )


def _apply_ticket(row: orm.Ticket, ticket: Ticket) -> None:
    row.event_id = ticket.event_id.value
    row.organizer = ticket.organizer
    row.owner = ticket.owner
    row.issued_at = ticket.issued_at
    row.status = ticket.status.value


def _ticket_to_domain(row: orm.Ticket) -> Ticket:
    return Ticket(
        ticket_id=row.id,
        event_id=EventId(row.event_id),
        organizer=row.organizer,
        owner=row.owner,
        issued_at=row.issued_at,
        status=TicketStatus(row.status),
    )
