"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from ticketing.domain import EventStatus, TierSpec
from ticketing.services import build_services
from ticketing.services.auth import ApprovedIdentities
from ticketing.services.funds import InMemoryFunds
from ticketing.signals import NOTIFICATIONS, notification_name
from ticketing.stores.memory_store import InMemoryStore

KNOWN_IDENTITIES = ("organizer", "rival", "admin", "alice", "bob", "carol")


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def event_date(clock: FrozenClock) -> datetime:
    return clock.now + timedelta(days=30)


@pytest.fixture
def verifier() -> ApprovedIdentities:
    return ApprovedIdentities(KNOWN_IDENTITIES)


@pytest.fixture
def funds() -> InMemoryFunds:
    return InMemoryFunds()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def services(store, verifier, funds, clock):
    return build_services(store, verifier=verifier, funds=funds, clock=clock)


@pytest.fixture
def make_event(services, event_date):
    """Create an event owned by "organizer", optionally already ACTIVE."""

    def _make(event_id="concert", tiers=None, active=False, organizer="organizer"):
        event = services.events.create_event(
            organizer,
            event_id,
            "Summer Concert",
            "Open air",
            "Main Stage",
            event_date,
            tiers or [TierSpec(name="General", price=100, capacity=10)],
        )
        if active:
            event = services.events.update_event_status(
                organizer, event_id, EventStatus.ACTIVE
            )
        return event

    return _make


@pytest.fixture
def notifications():
    """Record (name, payload) for every notification sent during the test."""
    received: list[tuple[str, dict]] = []

    def record(sender, signal, **kwargs):
        received.append((notification_name(signal), kwargs))

    for signal in NOTIFICATIONS.values():
        signal.connect(record, weak=False, dispatch_uid="test-recorder")
    yield received
    for signal in NOTIFICATIONS.values():
        signal.disconnect(dispatch_uid="test-recorder")
