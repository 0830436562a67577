import django.db.models.deletion
from django.db import migrations, models

EVENT_STATUS_CHOICES = [
    ("upcoming", "Upcoming"),
    ("active", "Active"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]
PAYMENT_STATUS_CHOICES = [
    ("held", "Held"),
    ("released", "Released"),
    ("refunded", "Refunded"),
]
TICKET_STATUS_CHOICES = [
    ("valid", "Valid"),
    ("used", "Used"),
    ("cancelled", "Cancelled"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Counter",
            fields=[
                ("name", models.CharField(max_length=32, primary_key=True, serialize=False)),
                ("value", models.BigIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name="EscrowAccount",
            fields=[
                (
                    "id",
                    models.PositiveSmallIntegerField(
                        default=1, primary_key=True, serialize=False
                    ),
                ),
                ("admin", models.CharField(max_length=255)),
                ("accepted_currency", models.CharField(max_length=64)),
            ],
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.CharField(max_length=32, primary_key=True, serialize=False)),
                ("organizer", models.CharField(db_index=True, max_length=255)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("venue", models.CharField(max_length=255)),
                ("event_date", models.DateTimeField()),
                ("status", models.CharField(choices=EVENT_STATUS_CHOICES, max_length=16)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["-created_at"], name="event_created_at_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="EventRevenue",
            fields=[
                (
                    "event_id",
                    models.CharField(max_length=32, primary_key=True, serialize=False),
                ),
                ("total", models.DecimalField(decimal_places=2, default=0, max_digits=24)),
            ],
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigIntegerField(primary_key=True, serialize=False)),
                ("event_id", models.CharField(db_index=True, max_length=32)),
                ("payer", models.CharField(max_length=255)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("currency", models.CharField(max_length=64)),
                ("status", models.CharField(choices=PAYMENT_STATUS_CHOICES, max_length=16)),
                ("paid_at", models.DateTimeField()),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.BigIntegerField(primary_key=True, serialize=False)),
                ("event_id", models.CharField(db_index=True, max_length=32)),
                ("organizer", models.CharField(max_length=255)),
                ("owner", models.CharField(max_length=255)),
                ("issued_at", models.DateTimeField()),
                ("status", models.CharField(choices=TICKET_STATUS_CHOICES, max_length=16)),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("attendee", models.CharField(max_length=255)),
                ("tier_id", models.PositiveIntegerField()),
                ("registered_at", models.DateTimeField()),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="ticketing.event",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "attendee"), name="unique_registration_per_attendee"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketHolding",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("owner", models.CharField(max_length=255)),
                (
                    "ticket",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="holdings",
                        to="ticketing.ticket",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["owner", "id"], name="holding_owner_order_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketTier",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("tier_id", models.PositiveIntegerField()),
                ("name", models.CharField(max_length=100)),
                ("price", models.DecimalField(decimal_places=2, max_digits=18)),
                ("capacity", models.PositiveIntegerField()),
                ("sold", models.PositiveIntegerField(default=0)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tiers",
                        to="ticketing.event",
                    ),
                ),
            ],
            options={
                "ordering": ["tier_id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("event", "tier_id"), name="unique_tier_per_event"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("sold__lte", models.F("capacity"))),
                        name="tier_sold_within_capacity",
                    ),
                ],
            },
        ),
    ]
