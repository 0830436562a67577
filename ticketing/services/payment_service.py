"""Payment escrow service - takes payments into custody and tracks revenue."""

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from django.utils import timezone

from ticketing import signals
from ticketing.conf import ticketing_setting
from ticketing.domain import EscrowConfig, EventId, Money, PaymentRecord, PaymentStatus
from ticketing.domain.errors import PaymentError, PaymentErrorCode, PaymentNotFoundError
from ticketing.services.auth import IdentityVerifier, TrustedHostVerifier
from ticketing.services.funds import FundsTransfer
from ticketing.stores.interfaces import PaymentStore

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for escrowed payments."""

    def __init__(
        self,
        store: PaymentStore,
        funds: FundsTransfer,
        *,
        verifier: IdentityVerifier | None = None,
        clock: Callable[[], datetime] = timezone.now,
        escrow_account: str | None = None,
    ) -> None:
        self._store = store
        self._funds = funds
        self._verifier = verifier or TrustedHostVerifier()
        self._clock = clock
        self._escrow_account = escrow_account or ticketing_setting("ESCROW_ACCOUNT")

    def initialize(self, admin: str, accepted_currency: str) -> EscrowConfig:
        """Set the escrow admin and currency once.

        Later calls are no-ops that return the configuration already stored.
        """
        with self._store.atomic():
            existing = self._store.get_escrow_config()
            if existing is not None:
                return existing
            if not self._verifier.verify(admin):
                raise PaymentError(PaymentErrorCode.UNAUTHORIZED, "Caller not authenticated")
            if not accepted_currency:
                raise PaymentError(PaymentErrorCode.INVALID_INPUT, "Currency is required")
            config = EscrowConfig(admin=admin, accepted_currency=accepted_currency)
            self._store.set_escrow_config(config)

        logger.info("Escrow initialized by %s accepting %s", admin, accepted_currency)
        return config

    def get_config(self) -> EscrowConfig:
        config = self._store.get_escrow_config()
        if config is None:
            raise PaymentError(PaymentErrorCode.NOT_INITIALIZED, "Escrow not initialized")
        return config

    def pay_for_ticket(self, payer: str, event_id: str, amount: Decimal | int | str) -> int:
        """Move ``amount`` from the payer into escrow and record it as HELD.

        The payment id is allocated only after the funds moved, so a refused
        transfer consumes no id and writes nothing. If the unit of work fails
        after the funds moved, they are sent back to the payer before the
        error propagates.

        Raises:
            PaymentError: UNAUTHORIZED, INVALID_INPUT, INVALID_AMOUNT,
                NOT_INITIALIZED or INSUFFICIENT_FUNDS.
        """
        if not self._verifier.verify(payer):
            raise PaymentError(PaymentErrorCode.UNAUTHORIZED, "Caller not authenticated")
        eid = _parse_event_id(event_id)
        money = _positive_amount(amount)
        config = self.get_config()
        currency = config.accepted_currency

        moved = False
        try:
            with self._store.atomic():
                if not self._funds.transfer(
                    currency, payer, self._escrow_account, money.amount
                ):
                    logger.warning(
                        "Payment by %s for event %s refused by funds transfer", payer, eid
                    )
                    raise PaymentError(
                        PaymentErrorCode.INSUFFICIENT_FUNDS, "Funds transfer failed"
                    )
                moved = True
                payment_id = self._store.next_payment_id()
                record = PaymentRecord(
                    payment_id=payment_id,
                    event_id=eid,
                    payer=payer,
                    amount=money,
                    currency=currency,
                    status=PaymentStatus.HELD,
                    paid_at=self._clock(),
                )
                self._store.add_payment(record)
                revenue = self._store.add_event_revenue(eid, money.amount)
        except BaseException:
            if moved:
                self._return_funds(currency, payer, money)
            raise

        logger.info(
            "Payment %d of %s %s held for event %s (revenue %s)",
            payment_id,
            money,
            config.accepted_currency,
            eid,
            revenue,
        )
        signals.payment_received.send(
            sender=self.__class__,
            payment_id=payment_id,
            event_id=eid,
            payer=payer,
            amount=money.amount,
        )
        return payment_id

    def get_payment(self, payment_id: int) -> PaymentRecord:
        payment = self._store.get_payment(payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return payment

    def get_event_revenue(self, event_id: str) -> Decimal:
        """Return the total paid for an event; 0 when nothing was paid."""
        return self._store.get_event_revenue(_parse_event_id(event_id))

    def get_event_payments(self, event_id: str) -> list[int]:
        return self._store.list_event_payments(_parse_event_id(event_id))

    def _return_funds(self, currency: str, payer: str, money: Money) -> None:
        if self._funds.transfer(currency, self._escrow_account, payer, money.amount):
            logger.warning("Payment by %s not recorded; returned %s %s", payer, money, currency)
        else:
            logger.error(
                "Payment by %s not recorded and %s %s could not be returned",
                payer,
                money,
                currency,
            )


def _parse_event_id(event_id: str | EventId) -> EventId:
    if isinstance(event_id, EventId):
        return event_id
    try:
        return EventId.from_string(event_id)
    except ValueError as exc:
        raise PaymentError(PaymentErrorCode.INVALID_INPUT, str(exc)) from exc


def _positive_amount(amount: Decimal | int | str) -> Money:
    try:
        money = Money.of(amount)
    except ValueError as exc:
        raise PaymentError(PaymentErrorCode.INVALID_AMOUNT, str(exc)) from exc
    if money.amount <= 0:
        raise PaymentError(PaymentErrorCode.INVALID_AMOUNT, "Amount must be positive")
    return money
