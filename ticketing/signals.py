"""Notifications emitted after a state change commits.

Each signal is sent with the service class as sender and the fields of the
change as keyword arguments. Receivers are external observers; the only one
defined here writes every notification to the log.
"""

import logging

from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)

# event_id, organizer, name, venue, event_date, tiers
event_created = Signal()
# event_id, event
event_updated = Signal()
# event_id, old_status, new_status
event_status_changed = Signal()
# event_id
event_cancelled = Signal()
# event_id, attendee, tier_id, sold
attendee_registered = Signal()
# payment_id, event_id, payer, amount
payment_received = Signal()
# ticket_id, event_id, owner
ticket_minted = Signal()
# ticket_id, from_owner, to_owner
ticket_transferred = Signal()
# ticket_id, organizer
ticket_used = Signal()
# ticket_id, cancelled_by
ticket_cancelled = Signal()

NOTIFICATIONS: dict[str, Signal] = {
    "event_created": event_created,
    "event_updated": event_updated,
    "event_status_changed": event_status_changed,
    "event_cancelled": event_cancelled,
    "attendee_registered": attendee_registered,
    "payment_received": payment_received,
    "ticket_minted": ticket_minted,
    "ticket_transferred": ticket_transferred,
    "ticket_used": ticket_used,
    "ticket_cancelled": ticket_cancelled,
}

_NAMES = {signal: name for name, signal in NOTIFICATIONS.items()}


def notification_name(signal: Signal) -> str:
    return _NAMES[signal]


@receiver(list(NOTIFICATIONS.values()))
def log_notification(sender, signal, **kwargs):
    """Record every notification in the log."""
    logger.debug(
        "%s from %s: %s",
        notification_name(signal),
        getattr(sender, "__name__", sender),
        kwargs,
    )
