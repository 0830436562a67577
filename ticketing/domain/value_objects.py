"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Self

_EVENT_ID_RE = re.compile(r"^[A-Za-z0-9_]{1,32}$")
# Smallest unit the ledger stores; amounts are persisted with 2 decimal places.
CENT = Decimal("0.01")


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event, chosen by its organizer."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _EVENT_ID_RE.match(self.value):
            raise ValueError("Event ID must be 1-32 characters of [A-Za-z0-9_]")

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")
        try:
            cents = self.amount.quantize(CENT)
        except InvalidOperation as exc:
            raise ValueError("Money amount is out of range") from exc
        if self.amount != cents:
            raise ValueError("Money amount cannot be finer than a cent")

    @classmethod
    def of(cls, value: Decimal | int | str) -> Self:
        """Build Money from an int, string or Decimal.

        Raises:
            ValueError: If the value is not a finite number, is negative or
                has more than two decimal places.
        """
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Not a valid amount: {value!r}") from exc
        if not amount.is_finite():
            raise ValueError(f"Not a valid amount: {value!r}")
        return cls(amount=amount)

    def __add__(self, other: "Money") -> "Money":
        return Money(amount=self.amount + other.amount)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")
