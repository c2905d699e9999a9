from decimal import Decimal

import pytest

from ticketeer.errors import (
    EventNotFoundError,
    FulfillmentInProgressError,
    InsufficientInventoryError,
    InvalidStateTransition,
    TicketDeliveryError,
    TicketGenerationError,
    UnknownTicketTypeError,
    ValidationError,
)
from ticketeer.extensions import db
from ticketeer.models import Order, TicketType
from ticketeer.orders import OrderStatus
from ticketeer.orders.service import WHATSAPP_PENDING_NOTE

pytestmark = pytest.mark.db


def ticket_type_counts(ticket_type_id):
    db.session.expire_all()
    ticket_type = db.session.get(TicketType, ticket_type_id)
    return ticket_type.quantity, ticket_type.sold


@pytest.fixture()
def orders(pipeline):
    return pipeline.orders


def create(orders, event, customer_info, lines, method="card", **kwargs):
    return orders.create_order(
        event_id=event.id,
        customer_info=customer_info,
        tickets=lines,
        payment_method=method,
        **kwargs,
    )


def test_total_is_computed_from_ticket_prices(orders, event, customer_info):
    general, vip = event.ticket_types
    order = create(
        orders, event, customer_info,
        [{"ticketTypeId": general.id, "quantity": 2}, {"ticketTypeId": vip.id, "quantity": 1}],
    )

    assert order.total_amount == Decimal("300.00")
    assert [(t.name, t.quantity) for t in order.tickets] == [("General Admission", 2), ("VIP", 1)]
    assert order.order_number.startswith("TKT-")


def test_creation_reserves_inventory(orders, event, customer_info):
    general = event.ticket_types[0]

    create(orders, event, customer_info, [{"ticketTypeId": general.id, "quantity": 3}])

    assert ticket_type_counts(general.id) == (97, 3)


def test_duplicate_lines_are_merged(orders, event, customer_info):
    general = event.ticket_types[0]

    order = create(
        orders, event, customer_info,
        [{"ticketTypeId": general.id, "quantity": 1}, {"ticketTypeId": general.id, "quantity": 2}],
    )

    assert len(order.tickets) == 1
    assert order.tickets[0].quantity == 3


def test_insufficient_inventory_rolls_back_every_line(orders, event, customer_info):
    general, vip = event.ticket_types

    with pytest.raises(InsufficientInventoryError) as exc:
        create(
            orders, event, customer_info,
            [{"ticketTypeId": general.id, "quantity": 2}, {"ticketTypeId": vip.id, "quantity": 6}],
        )

    assert "Available: 5, Requested: 6" in exc.value.message
    assert ticket_type_counts(general.id) == (100, 0)
    assert Order.query.count() == 0


def test_unknown_ticket_type(orders, event, customer_info):
    with pytest.raises(UnknownTicketTypeError):
        create(orders, event, customer_info, [{"ticketTypeId": 424242, "quantity": 1}])


def test_unknown_event(orders, customer_info):
    with pytest.raises(EventNotFoundError):
        orders.create_order(
            event_id=424242,
            customer_info=customer_info,
            tickets=[{"ticketTypeId": 1, "quantity": 1}],
            payment_method="card",
        )


@pytest.mark.parametrize(
    "customer, lines, method, message",
    [
        ({"firstName": "A", "lastName": "B"}, [{"ticketTypeId": 1, "quantity": 1}], "card", "Missing customer fields"),
        ({"firstName": "A", "lastName": "B", "email": "nope"}, [{"ticketTypeId": 1, "quantity": 1}], "card", "Invalid customer email"),
        ({"firstName": "A", "lastName": "B", "email": "a@b.mu"}, [], "card", "At least one ticket"),
        ({"firstName": "A", "lastName": "B", "email": "a@b.mu"}, [{"ticketTypeId": 1, "quantity": 0}], "card", "positive integer"),
        ({"firstName": "A", "lastName": "B", "email": "a@b.mu"}, [{"ticketTypeId": 1, "quantity": 1}], "paypal", "Invalid payment method"),
        ({"firstName": "A", "lastName": "B", "email": "a@b.mu"}, [{"ticketTypeId": 1, "quantity": 1}], "mcb-juice", "screenshot is required"),
    ],
)
def test_input_validation(orders, event, customer, lines, method, message):
    with pytest.raises(ValidationError) as exc:
        create(orders, event, customer, lines, method=method, payment_reference="TCK1")

    assert message in exc.value.message


def test_card_order_is_completed_and_fulfilled(orders, event, customer_info, fulfillment, dispatcher):
    order = create(orders, event, customer_info, [{"ticketTypeId": event.ticket_types[0].id, "quantity": 1}])

    assert order.status is OrderStatus.COMPLETED
    assert order.verified_at is not None
    assert fulfillment.fulfilled == [order.id]
    assert dispatcher.verifications == []


def test_card_fulfillment_failure_rolls_back_creation(orders, event, customer_info, fulfillment):
    fulfillment.error = TicketGenerationError("disk full")
    general = event.ticket_types[0]

    with pytest.raises(TicketGenerationError):
        create(orders, event, customer_info, [{"ticketTypeId": general.id, "quantity": 2}])

    assert Order.query.count() == 0
    assert ticket_type_counts(general.id) == (100, 0)


def test_whatsapp_order_awaits_organizer(orders, event, customer_info, dispatcher):
    order = create(
        orders, event, customer_info,
        [{"ticketTypeId": event.ticket_types[0].id, "quantity": 1}],
        method="mcb-juice-whatsapp",
        payment_reference="TCK777",
    )

    assert order.status is OrderStatus.PENDING_WHATSAPP_VERIFICATION
    assert order.verification_notes == WHATSAPP_PENDING_NOTE
    assert order.organizer_whatsapp == event.organizer_whatsapp
    assert dispatcher.verifications == []


def test_dispatch_failure_does_not_fail_creation(make_screenshot_order, dispatcher):
    def broken(order_id):
        raise ConnectionError("broker unreachable")

    dispatcher.dispatch_verification = broken

    order = make_screenshot_order()

    assert order.status is OrderStatus.PENDING_VERIFICATION


# Admin review

def test_approve_fulfills_then_completes(orders, fulfillment, make_screenshot_order):
    order = make_screenshot_order()

    order = orders.verify(order.id, "approve", admin_id="admin-1", notes="Checked bank statement")

    assert order.status is OrderStatus.COMPLETED
    assert order.verified_by == "admin-1"
    assert order.note_lines[-1] == "Checked bank statement"
    assert fulfillment.fulfilled == [order.id]


def test_approve_with_failed_delivery_leaves_order_pending(orders, pipeline, fulfillment, make_screenshot_order):
    fulfillment.error = TicketDeliveryError("SMTP down")
    order = make_screenshot_order()

    with pytest.raises(TicketDeliveryError):
        orders.verify(order.id, "approve", admin_id="admin-1")

    assert pipeline.state_machine.current_status(order.id) is OrderStatus.PENDING_VERIFICATION


def test_overlapping_admin_approvals_issue_tickets_once(orders, pipeline, fulfillment, make_screenshot_order):
    order = make_screenshot_order()

    def second_approval(order):
        with pytest.raises(FulfillmentInProgressError):
            orders.verify(order.id, "approve", admin_id="admin-2")

    fulfillment.during = second_approval

    order = orders.verify(order.id, "approve", admin_id="admin-1")

    assert order.status is OrderStatus.COMPLETED
    assert order.verified_by == "admin-1"
    assert fulfillment.fulfilled == [order.id]


def test_reject_restores_reserved_inventory(orders, event, make_screenshot_order):
    vip = event.ticket_types[1]
    order = make_screenshot_order(quantity=4, ticket_type=vip)
    assert ticket_type_counts(vip.id) == (1, 4)

    order = orders.verify(order.id, "reject", admin_id="admin-1")

    assert order.status is OrderStatus.FAILED
    assert order.note_lines[-1] == "Rejected by admin"
    assert ticket_type_counts(vip.id) == (5, 0)


def test_decided_order_cannot_be_reviewed_again(orders, event, fulfillment, make_screenshot_order):
    order = make_screenshot_order()
    orders.verify(order.id, "reject", admin_id="admin-1")

    with pytest.raises(InvalidStateTransition):
        orders.verify(order.id, "approve", admin_id="admin-2")
    with pytest.raises(InvalidStateTransition):
        orders.verify(order.id, "reject", admin_id="admin-2")

    assert fulfillment.fulfilled == []
    assert ticket_type_counts(event.ticket_types[0].id) == (100, 0)


def test_invalid_action(orders, make_screenshot_order):
    order = make_screenshot_order()

    with pytest.raises(ValidationError):
        orders.verify(order.id, "refund", admin_id="admin-1")


def test_pending_orders_lists_high_priority_first(orders, pipeline, extractor, make_screenshot_order):
    standard = make_screenshot_order()
    extractor.text = "unreadable"
    flagged = make_screenshot_order()
    pipeline.verification.process_submission(flagged.id)
    newest = make_screenshot_order()

    pending = orders.pending_orders()

    assert [o.id for o in pending] == [flagged.id, newest.id, standard.id]


def test_pending_orders_filters_by_event(orders, make_screenshot_order):
    make_screenshot_order()

    assert orders.pending_orders(event_id=424242) == []


def test_stats_groups_by_status(orders, make_screenshot_order):
    first = make_screenshot_order()
    make_screenshot_order()
    orders.verify(first.id, "reject", admin_id="admin-1")

    stats = orders.stats()

    assert stats["total_orders"] == 2
    assert stats["by_status"]["failed"] == {"count": 1, "total_amount": 150.0}
    assert stats["by_status"]["pending_verification"]["count"] == 1
    assert len(stats["recent_orders"]) == 2
