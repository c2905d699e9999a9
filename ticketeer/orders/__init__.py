from ticketeer.orders.statuses import (
    REVIEWABLE_STATUSES,
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentMethod,
    ReviewPriority,
    can_transition,
)

__all__ = [
    "OrderStatus",
    "PaymentMethod",
    "ReviewPriority",
    "REVIEWABLE_STATUSES",
    "TERMINAL_STATUSES",
    "can_transition",
]
