"""Unit tests for RegistrationService.

These test inventory allocation against tier capacity.
Run with: pytest tests/test_registration_service.py -v
"""

import threading

import pytest

from ticketing.domain import TierSpec
from ticketing.domain.errors import EventError, EventErrorCode, EventNotFoundError


def _code(excinfo):
    return excinfo.value.code


class TestRegisterForEvent:
    """Tests for RegistrationService.register_for_event."""

    def test_register_increments_sold(self, make_event, services, notifications, clock):
        make_event(active=True)
        notifications.clear()

        registration = services.registrations.register_for_event("alice", "concert", 0)

        assert registration.attendee == "alice"
        assert registration.tier_id == 0
        assert registration.registered_at == clock.now
        assert services.events.get_event("concert").tier(0).sold == 1
        assert services.registrations.is_registered("concert", "alice")
        assert notifications == [
            (
                "attendee_registered",
                {
                    "event_id": registration.event_id,
                    "attendee": "alice",
                    "tier_id": 0,
                    "sold": 1,
                },
            )
        ]

    def test_register_requires_active_event(self, make_event, services):
        make_event()
        with pytest.raises(EventError) as excinfo:
            services.registrations.register_for_event("alice", "concert", 0)
        assert _code(excinfo) == EventErrorCode.EVENT_NOT_ACTIVE

    def test_register_on_cancelled_event(self, make_event, services):
        make_event(active=True)
        services.events.cancel_event("organizer", "concert")
        with pytest.raises(EventError) as excinfo:
            services.registrations.register_for_event("alice", "concert", 0)
        assert _code(excinfo) == EventErrorCode.EVENT_NOT_ACTIVE

    def test_register_unknown_event(self, services):
        with pytest.raises(EventNotFoundError):
            services.registrations.register_for_event("alice", "ghost", 0)

    def test_register_unknown_tier(self, make_event, services):
        make_event(active=True)
        with pytest.raises(EventError) as excinfo:
            services.registrations.register_for_event("alice", "concert", 1)
        assert _code(excinfo) == EventErrorCode.TIER_NOT_FOUND

    def test_register_requires_authentication(self, make_event, services):
        make_event(active=True)
        with pytest.raises(EventError) as excinfo:
            services.registrations.register_for_event("mallory", "concert", 0)
        assert _code(excinfo) == EventErrorCode.UNAUTHORIZED

    def test_register_twice_fails(self, make_event, services):
        make_event(
            tiers=[TierSpec("General", 10, 5), TierSpec("VIP", 50, 5)], active=True
        )
        services.registrations.register_for_event("alice", "concert", 0)
        with pytest.raises(EventError) as excinfo:
            services.registrations.register_for_event("alice", "concert", 1)
        assert _code(excinfo) == EventErrorCode.ALREADY_REGISTERED

        event = services.events.get_event("concert")
        assert [tier.sold for tier in event.tiers] == [1, 0]

    def test_repeat_registration_on_full_tier(self, make_event, services):
        make_event(tiers=[TierSpec("Solo", 10, 1)], active=True)
        services.registrations.register_for_event("alice", "concert", 0)

        with pytest.raises(EventError) as excinfo:
            services.registrations.register_for_event("alice", "concert", 0)

        assert _code(excinfo) == EventErrorCode.ALREADY_REGISTERED
        assert services.events.get_event("concert").tier(0).sold == 1

    def test_tier_sells_out_at_capacity(self, make_event, services):
        make_event(tiers=[TierSpec("Small", 10, 2)], active=True)
        services.registrations.register_for_event("alice", "concert", 0)
        services.registrations.register_for_event("bob", "concert", 0)

        with pytest.raises(EventError) as excinfo:
            services.registrations.register_for_event("carol", "concert", 0)

        assert _code(excinfo) == EventErrorCode.TIER_SOLD_OUT
        assert services.events.get_event("concert").tier(0).sold == 2
        assert not services.registrations.is_registered("concert", "carol")

    def test_sold_out_tier_does_not_block_other_tiers(self, make_event, services):
        make_event(tiers=[TierSpec("Small", 10, 1), TierSpec("Big", 5, 10)], active=True)
        services.registrations.register_for_event("alice", "concert", 0)
        services.registrations.register_for_event("bob", "concert", 1)
        assert services.registrations.get_attendees("concert") == ["alice", "bob"]

    def test_failed_save_rolls_back_registration(
        self, make_event, services, store, monkeypatch
    ):
        make_event(active=True)

        def broken_save(event):
            raise RuntimeError("disk full")

        monkeypatch.setattr(store, "save_event", broken_save)
        with pytest.raises(RuntimeError):
            services.registrations.register_for_event("alice", "concert", 0)
        monkeypatch.undo()

        assert not services.registrations.is_registered("concert", "alice")
        assert services.registrations.get_attendees("concert") == []
        assert services.events.get_event("concert").tier(0).sold == 0


class TestConcurrentRegistration:
    def test_parallel_registrations_never_oversell(self, make_event, services, verifier):
        capacity = 5
        attendees = [f"attendee_{index}" for index in range(20)]
        for attendee in attendees:
            verifier.approve(attendee)
        make_event(tiers=[TierSpec("General", 10, capacity)], active=True)

        barrier = threading.Barrier(len(attendees))
        outcomes: dict[str, str] = {}

        def register(attendee):
            barrier.wait()
            try:
                services.registrations.register_for_event(attendee, "concert", 0)
                outcomes[attendee] = "ok"
            except EventError as exc:
                outcomes[attendee] = exc.code.value

        threads = [threading.Thread(target=register, args=(a,)) for a in attendees]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert list(outcomes.values()).count("ok") == capacity
        assert list(outcomes.values()).count("TIER_SOLD_OUT") == len(attendees) - capacity
        assert services.events.get_event("concert").tier(0).sold == capacity
        assert len(services.registrations.get_attendees("concert")) == capacity


class TestAttendeeQueries:
    def test_get_attendees_in_registration_order(self, make_event, services):
        make_event(active=True)
        for attendee in ("carol", "alice", "bob"):
            services.registrations.register_for_event(attendee, "concert", 0)
        assert services.registrations.get_attendees("concert") == ["carol", "alice", "bob"]

    def test_queries_require_existing_event(self, services):
        with pytest.raises(EventNotFoundError):
            services.registrations.get_attendees("ghost")
        with pytest.raises(EventNotFoundError):
            services.registrations.is_registered("ghost", "alice")

    def test_not_registered(self, make_event, services):
        make_event(active=True)
        assert services.registrations.is_registered("concert", "alice") is False
