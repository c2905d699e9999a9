"""Domain errors raised by the order, verification and fulfillment layers.

Each carries the HTTP status the error handlers answer with, so services never
import Flask response helpers.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload


class ValidationError(DomainError):
    pass


class NotFoundError(DomainError):
    status_code = 404


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id):
        super().__init__("Event not found", payload={"event_id": event_id})
        self.event_id = event_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id):
        super().__init__("Order not found", payload={"order_id": order_id})
        self.order_id = order_id


class UnknownTicketTypeError(ValidationError):
    def __init__(self, ticket_type_id):
        super().__init__(f"Ticket type {ticket_type_id} not found")
        self.ticket_type_id = ticket_type_id


class InsufficientInventoryError(ValidationError):
    def __init__(self, name, available, requested):
        super().__init__(
            f"Not enough tickets available for {name}. "
            f"Available: {available}, Requested: {requested}"
        )


class InvalidStateTransition(DomainError):
    """Requested status change is not permitted from the order's current status."""

    status_code = 409

    def __init__(self, current, target):
        super().__init__(
            f"Cannot move order from {current} to {target}",
            payload={"current_status": str(current), "requested_status": str(target)},
        )
        self.current = current
        self.target = target


class ExtractionFailure(Exception):
    """The OCR engine could not read the receipt image."""


class FulfillmentError(DomainError):
    status_code = 502
    stage = "fulfillment"


class TicketGenerationError(FulfillmentError):
    stage = "generation"


class TicketDeliveryError(FulfillmentError):
    stage = "delivery"


class FulfillmentInProgressError(DomainError):
    """Tickets for the order are being issued by another writer."""

    status_code = 409

    def __init__(self, order_id):
        super().__init__(
            f"Tickets for order {order_id} are already being issued",
            payload={"order_id": order_id},
        )
