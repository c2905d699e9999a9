"""Per-ticket-type inventory counters.

Each adjustment is one UPDATE against one ticket_types row, so concurrent
orders for the same event never lose an update. Callers own the transaction.
"""

from ticketeer.errors import InsufficientInventoryError, UnknownTicketTypeError
from ticketeer.extensions import db
from ticketeer.models import TicketType


def reserve(event_id, ticket_type_id, quantity):
    matched = (
        db.session.query(TicketType)
        .filter(
            TicketType.id == ticket_type_id,
            TicketType.event_id == event_id,
            TicketType.quantity >= quantity,
        )
        .update(
            {
                TicketType.quantity: TicketType.quantity - quantity,
                TicketType.sold: TicketType.sold + quantity,
            },
            synchronize_session=False,
        )
    )
    if matched:
        return

    ticket_type = db.session.get(TicketType, ticket_type_id)
    if ticket_type is None or ticket_type.event_id != event_id:
        raise UnknownTicketTypeError(ticket_type_id)
    raise InsufficientInventoryError(ticket_type.name, ticket_type.quantity, quantity)


def release(event_id, ticket_type_id, quantity):
    db.session.query(TicketType).filter(
        TicketType.id == ticket_type_id,
        TicketType.event_id == event_id,
    ).update(
        {
            TicketType.quantity: TicketType.quantity + quantity,
            TicketType.sold: TicketType.sold - quantity,
        },
        synchronize_session=False,
    )


def release_order(order):
    for line in order.tickets:
        release(order.event_id, line.ticket_type_id, line.quantity)
