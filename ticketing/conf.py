"""App settings with defaults, read from ``settings.TICKETING``."""

from datetime import timedelta
from typing import Any

from django.conf import settings
from django.utils.module_loading import import_string

DEFAULTS: dict[str, Any] = {
    "MIN_EVENT_LEAD_TIME": timedelta(hours=24),
    "MAX_TIER_CAPACITY": 100_000,
    "ESCROW_ACCOUNT": "ticketing-escrow",
    "STORE": "ticketing.stores.django_store.DjangoStore",
    "IDENTITY_VERIFIER": "ticketing.services.auth.TrustedHostVerifier",
    "FUNDS_TRANSFER": "ticketing.services.funds.InMemoryFunds",
}


def ticketing_setting(name: str) -> Any:
    """Return a TICKETING setting, falling back to the app default."""
    overrides = getattr(settings, "TICKETING", {})
    return overrides.get(name, DEFAULTS[name])


def build_from_setting(name: str) -> Any:
    """Instantiate the class named by a dotted-path setting."""
    return import_string(ticketing_setting(name))()
