"""Service wiring.

``build_services()`` assembles the four components around one shared store,
using the collaborators named in ``settings.TICKETING`` unless given.
"""

from dataclasses import dataclass

from ticketing.conf import build_from_setting
from ticketing.services.auth import IdentityVerifier
from ticketing.services.event_service import EventService
from ticketing.services.funds import FundsTransfer
from ticketing.services.payment_service import PaymentService
from ticketing.services.registration_service import RegistrationService
from ticketing.services.ticket_service import TicketService


@dataclass(frozen=True)
class TicketingServices:
    events: EventService
    registrations: RegistrationService
    payments: PaymentService
    tickets: TicketService


def build_services(
    store=None,
    *,
    verifier: IdentityVerifier | None = None,
    funds: FundsTransfer | None = None,
    **options,
) -> TicketingServices:
    """Build every service over one store. Extra options (e.g. ``clock``) are
    passed to each service."""
    store = store if store is not None else build_from_setting("STORE")
    verifier = verifier or build_from_setting("IDENTITY_VERIFIER")
    funds = funds or build_from_setting("FUNDS_TRANSFER")
    return TicketingServices(
        events=EventService(store, verifier=verifier, **options),
        registrations=RegistrationService(store, verifier=verifier, **options),
        payments=PaymentService(store, funds, verifier=verifier, **options),
        tickets=TicketService(store, events=store, verifier=verifier, **options),
    )


__all__ = [
    "EventService",
    "RegistrationService",
    "PaymentService",
    "TicketService",
    "TicketingServices",
    "build_services",
]
