"""Tests for the in-process store."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ticketing.domain import (
    Capacity,
    EscrowConfig,
    Event,
    EventId,
    EventStatus,
    Money,
    Ticket,
    TicketStatus,
    TicketTier,
)
from ticketing.stores.memory_store import InMemoryStore

NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


def _event(event_id="gala", sold=0):
    return Event(
        id=EventId(event_id),
        organizer="organizer",
        name="Gala",
        description="",
        venue="Hall",
        event_date=NOW,
        created_at=NOW,
        status=EventStatus.ACTIVE,
        tiers=(TicketTier(0, "General", Money(Decimal("5")), Capacity(3), sold),),
    )


def _ticket(ticket_id, owner="alice"):
    return Ticket(
        ticket_id=ticket_id,
        event_id=EventId("gala"),
        organizer="organizer",
        owner=owner,
        issued_at=NOW,
        status=TicketStatus.VALID,
    )


class TestAtomic:
    def test_failure_restores_every_table(self):
        store = InMemoryStore()
        store.add_event(_event())

        with pytest.raises(RuntimeError):
            with store.atomic():
                store.save_event(_event(sold=2))
                store.add_ticket(_ticket(store.next_ticket_id()))
                store.add_event_revenue(EventId("gala"), Decimal("10"))
                raise RuntimeError("abort")

        assert store.get_event(EventId("gala")).tiers[0].sold == 0
        assert store.get_ticket(1) is None
        assert store.list_owner_tickets("alice") == []
        assert store.get_event_revenue(EventId("gala")) == Decimal("0")
        assert store.next_ticket_id() == 1

    def test_success_keeps_changes(self):
        store = InMemoryStore()
        with store.atomic():
            store.add_event(_event())
        assert store.event_exists(EventId("gala"))

    def test_nested_failure_only_undoes_inner_block(self):
        store = InMemoryStore()
        with store.atomic():
            store.add_event(_event("first"))
            with pytest.raises(ValueError):
                with store.atomic():
                    store.add_event(_event("second"))
                    raise ValueError("inner")
        assert store.event_exists(EventId("first"))
        assert not store.event_exists(EventId("second"))

    def test_failed_move_restores_owner_order(self):
        store = InMemoryStore()
        for ticket_id in (1, 2, 3):
            store.add_ticket(_ticket(ticket_id))

        with pytest.raises(RuntimeError):
            with store.atomic():
                store.move_ticket(2, "alice", "bob")
                raise RuntimeError("abort")

        assert store.list_owner_tickets("alice") == [1, 2, 3]
        assert store.list_owner_tickets("bob") == []

    def test_failure_restores_escrow_config(self):
        store = InMemoryStore()
        with pytest.raises(RuntimeError):
            with store.atomic():
                store.set_escrow_config(EscrowConfig("admin", "USD"))
                raise RuntimeError("abort")
        assert store.get_escrow_config() is None

    def test_rollback_spares_earlier_committed_blocks(self):
        store = InMemoryStore()
        with store.atomic():
            store.add_event(_event("first"))
        with pytest.raises(RuntimeError):
            with store.atomic():
                store.save_event(_event("first", sold=1))
                raise RuntimeError("abort")
        assert store.get_event(EventId("first")) == _event("first")


class TestEvents:
    def test_add_existing_event_is_an_error(self):
        store = InMemoryStore()
        store.add_event(_event())
        with pytest.raises(KeyError):
            store.add_event(_event())

    def test_save_unknown_event_is_an_error(self):
        with pytest.raises(KeyError):
            InMemoryStore().save_event(_event())


class TestTickets:
    def test_move_ticket_between_owner_lists(self):
        store = InMemoryStore()
        store.add_ticket(_ticket(1))
        store.add_ticket(_ticket(2))
        store.move_ticket(1, "alice", "bob")
        assert store.list_owner_tickets("alice") == [2]
        assert store.list_owner_tickets("bob") == [1]
        assert store.list_event_tickets(EventId("gala")) == [1, 2]

    def test_counters_are_independent(self):
        store = InMemoryStore()
        assert [store.next_ticket_id(), store.next_ticket_id()] == [1, 2]
        assert store.next_payment_id() == 1
