"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

from django.db import models

from ticketing.domain.state import EventStatus, PaymentStatus, TicketStatus


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.name.title()) for member in enum_cls]


class Event(models.Model):
    """Persistence model for events."""

    id = models.CharField(primary_key=True, max_length=32)
    organizer = models.CharField(max_length=255, db_index=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    venue = models.CharField(max_length=255)
    event_date = models.DateTimeField()
    status = models.CharField(max_length=16, choices=_choices(EventStatus))
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="event_created_at_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class TicketTier(models.Model):
    """Persistence model for an event's ticket tiers."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tiers")
    tier_id = models.PositiveIntegerField()
    name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=18, decimal_places=2)
    capacity = models.PositiveIntegerField()
    sold = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["tier_id"]
        constraints = [
            models.UniqueConstraint(fields=["event", "tier_id"], name="unique_tier_per_event"),
            models.CheckConstraint(
                condition=models.Q(sold__lte=models.F("capacity")),
                name="tier_sold_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Registration(models.Model):
    """One attendee's slot in an event. Row order is registration order."""

    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="registrations"
    )
    attendee = models.CharField(max_length=255)
    tier_id = models.PositiveIntegerField()
    registered_at = models.DateTimeField()

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "attendee"], name="unique_registration_per_attendee"
            ),
        ]


class EscrowAccount(models.Model):
    """Singleton row holding the escrow configuration."""

    SINGLETON_ID = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_ID)
    admin = models.CharField(max_length=255)
    accepted_currency = models.CharField(max_length=64)


class Payment(models.Model):
    """A payment held in escrow. The event is referenced by id only."""

    id = models.BigIntegerField(primary_key=True)
    event_id = models.CharField(max_length=32, db_index=True)
    payer = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    currency = models.CharField(max_length=64)
    status = models.CharField(max_length=16, choices=_choices(PaymentStatus))
    paid_at = models.DateTimeField()

    class Meta:
        ordering = ["id"]


class EventRevenue(models.Model):
    """Running revenue total per event."""

    event_id = models.CharField(primary_key=True, max_length=32)
    total = models.DecimalField(max_digits=24, decimal_places=2, default=0)


class Ticket(models.Model):
    """Persistence model for tickets. Row order is mint order."""

    id = models.BigIntegerField(primary_key=True)
    event_id = models.CharField(max_length=32, db_index=True)
    organizer = models.CharField(max_length=255)
    owner = models.CharField(max_length=255)
    issued_at = models.DateTimeField()
    status = models.CharField(max_length=16, choices=_choices(TicketStatus))

    class Meta:
        ordering = ["id"]


class TicketHolding(models.Model):
    """Entry in an owner's ordered ticket list."""

    owner = models.CharField(max_length=255)
    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name="holdings")

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["owner", "id"], name="holding_owner_order_idx"),
        ]


class Counter(models.Model):
    """Named monotonically increasing sequence."""

    name = models.CharField(primary_key=True, max_length=32)
    value = models.BigIntegerField(default=0)
