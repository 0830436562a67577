"""Funds-transfer collaborators used by the payment escrow."""

import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from decimal import Decimal

logger = logging.getLogger(__name__)


class FundsTransfer(ABC):
    """Interface for moving money between accounts."""

    @abstractmethod
    def transfer(
        self, currency: str, source: str, destination: str, amount: Decimal
    ) -> bool:
        """Move ``amount`` of ``currency`` and report whether it happened."""
        ...


class InMemoryFunds(FundsTransfer):
    """Balance book kept in process memory.

    A transfer succeeds only when the source holds at least ``amount``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._balances: dict[tuple[str, str], Decimal] = defaultdict(Decimal)

    def deposit(self, currency: str, account: str, amount: Decimal) -> None:
        with self._lock:
            self._balances[(currency, account)] += Decimal(amount)

    def balance(self, currency: str, account: str) -> Decimal:
        with self._lock:
            return self._balances.get((currency, account), Decimal("0"))

    def transfer(
        self, currency: str, source: str, destination: str, amount: Decimal
    ) -> bool:
        with self._lock:
            available = self._balances.get((currency, source), Decimal("0"))
            if amount <= 0 or available < amount:
                logger.info(
                    "Transfer of %s %s from %s refused: balance %s",
                    amount,
                    currency,
                    source,
                    available,
                )
                return False
            self._balances[(currency, source)] = available - amount
            self._balances[(currency, destination)] += amount
            return True
