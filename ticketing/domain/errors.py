"""Domain error codes for the ticketing module.

Each component reports failures from its own closed set of codes. Every code
belongs to exactly one ErrorCategory.
"""

from enum import Enum


class ErrorCategory(Enum):
    """Broad classes of failure shared by all components."""

    NOT_FOUND = "not_found"
    AUTHORIZATION = "authorization"
    INVALID_INPUT = "invalid_input"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    CAPACITY = "capacity"


class EventErrorCode(Enum):
    """Event registry and inventory error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_ALREADY_EXISTS = "EVENT_ALREADY_EXISTS"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_INPUT = "INVALID_INPUT"
    EVENT_NOT_ACTIVE = "EVENT_NOT_ACTIVE"
    INVALID_EVENT_DATE = "INVALID_EVENT_DATE"
    INVALID_TICKET_COUNT = "INVALID_TICKET_COUNT"
    INVALID_PRICE = "INVALID_PRICE"
    EVENT_NOT_UPDATABLE = "EVENT_NOT_UPDATABLE"
    TIER_NOT_FOUND = "TIER_NOT_FOUND"
    TIER_SOLD_OUT = "TIER_SOLD_OUT"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"


class PaymentErrorCode(Enum):
    """Payment escrow error codes."""

    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_INITIALIZED = "NOT_INITIALIZED"


class TicketErrorCode(Enum):
    """Ticket ledger error codes."""

    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_INPUT = "INVALID_INPUT"
    TICKET_NOT_TRANSFERABLE = "TICKET_NOT_TRANSFERABLE"
    TRANSFER_TO_SELF = "TRANSFER_TO_SELF"
    TICKET_ALREADY_USED = "TICKET_ALREADY_USED"
    EVENT_NOT_ACTIVE = "EVENT_NOT_ACTIVE"


_CATEGORIES: dict[str, ErrorCategory] = {
    "EVENT_NOT_FOUND": ErrorCategory.NOT_FOUND,
    "TIER_NOT_FOUND": ErrorCategory.NOT_FOUND,
    "PAYMENT_NOT_FOUND": ErrorCategory.NOT_FOUND,
    "TICKET_NOT_FOUND": ErrorCategory.NOT_FOUND,
    "UNAUTHORIZED": ErrorCategory.AUTHORIZATION,
    "INVALID_INPUT": ErrorCategory.INVALID_INPUT,
    "INVALID_EVENT_DATE": ErrorCategory.INVALID_INPUT,
    "INVALID_TICKET_COUNT": ErrorCategory.INVALID_INPUT,
    "INVALID_PRICE": ErrorCategory.INVALID_INPUT,
    "INVALID_AMOUNT": ErrorCategory.INVALID_INPUT,
    "INVALID_STATUS_TRANSITION": ErrorCategory.INVALID_STATE_TRANSITION,
    "EVENT_NOT_ACTIVE": ErrorCategory.INVALID_STATE_TRANSITION,
    "EVENT_NOT_UPDATABLE": ErrorCategory.INVALID_STATE_TRANSITION,
    "TICKET_NOT_TRANSFERABLE": ErrorCategory.INVALID_STATE_TRANSITION,
    "TICKET_ALREADY_USED": ErrorCategory.INVALID_STATE_TRANSITION,
    "TRANSFER_TO_SELF": ErrorCategory.INVALID_INPUT,
    "NOT_INITIALIZED": ErrorCategory.INVALID_STATE_TRANSITION,
    "INSUFFICIENT_FUNDS": ErrorCategory.CAPACITY,
    "TIER_SOLD_OUT": ErrorCategory.CAPACITY,
    "ALREADY_REGISTERED": ErrorCategory.CAPACITY,
    "EVENT_ALREADY_EXISTS": ErrorCategory.CAPACITY,
}


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    def __init__(self, code: Enum, message: str) -> None:
        super().__init__(code, message)
        self.code = code
        self.message = message

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self.code.value]

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventError(DomainError):
    """Raised by the event registry and the inventory allocator."""

    code: EventErrorCode


class PaymentError(DomainError):
    """Raised by the payment escrow ledger."""

    code: PaymentErrorCode


class TicketError(DomainError):
    """Raised by the ticket ledger."""

    code: TicketErrorCode


class EventNotFoundError(EventError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(EventErrorCode.EVENT_NOT_FOUND, "Event not found")
        self.event_id = event_id


class PaymentNotFoundError(PaymentError):
    """Raised when a payment record is not found."""

    def __init__(self, payment_id: int) -> None:
        super().__init__(PaymentErrorCode.PAYMENT_NOT_FOUND, "Payment not found")
        self.payment_id = payment_id


class TicketNotFoundError(TicketError):
    """Raised when a ticket is not found."""

    def __init__(self, ticket_id: int) -> None:
        super().__init__(TicketErrorCode.TICKET_NOT_FOUND, "Ticket not found")
        self.ticket_id = ticket_id
