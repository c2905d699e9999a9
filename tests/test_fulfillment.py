import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from ticketeer.errors import TicketDeliveryError, TicketGenerationError
from ticketeer.extensions import mail
from ticketeer.fulfillment import FulfillmentOrchestrator, TicketArtifact, TicketDelivery, TicketGenerator
from ticketeer.fulfillment.tickets import build_qr_payload
from ticketeer.notifications.notification_service import EmailChannel, WhatsAppNotifier


@pytest.fixture()
def card_order(pipeline, event, customer_info):
    return pipeline.orders.create_order(
        event_id=event.id,
        customer_info=customer_info,
        tickets=[{"ticketTypeId": event.ticket_types[0].id, "quantity": 2}],
        payment_method="card",
    )


@pytest.fixture()
def generator(tmp_path):
    return TicketGenerator(tmp_path / "tickets", "https://tickets.example.com/")


def test_generator_writes_one_pdf_per_order(generator, card_order):
    artifacts = generator.generate_for_order(card_order, card_order.event)

    assert len(artifacts) == 1
    artifact = artifacts[0]
    assert artifact.ticket_id.startswith(f"{card_order.order_number}-")
    assert artifact.filename == f"ticket-{artifact.ticket_id}.pdf"
    assert Path(artifact.filepath).read_bytes().startswith(b"%PDF")


def test_qr_payload_identifies_the_ticket(card_order):
    payload = json.loads(
        build_qr_payload(card_order, card_order.event, "TKT-1-ABC-99", "https://tickets.example.com/")
    )

    assert payload == {
        "orderId": card_order.id,
        "orderNumber": card_order.order_number,
        "eventId": card_order.event_id,
        "customerEmail": card_order.customer_email,
        "ticketId": "TKT-1-ABC-99",
        "verificationUrl": "https://tickets.example.com/verify-ticket/TKT-1-ABC-99",
    }


def test_email_channel_attaches_tickets(app, generator, card_order):
    artifacts = generator.generate_for_order(card_order, card_order.event)

    with mail.record_messages() as outbox:
        EmailChannel().send(card_order.customer_email, "Your tickets", "<p>hi</p>", attachments=artifacts)

    assert len(outbox) == 1
    message = outbox[0]
    assert message.recipients == [card_order.customer_email]
    assert [a.filename for a in message.attachments] == [artifacts[0].filename]


def test_delivery_sends_email_and_whatsapp(card_order):
    email = Mock()
    whatsapp = Mock()
    delivery = TicketDelivery(email, whatsapp)
    artifacts = [TicketArtifact("t.pdf", "/tmp/t.pdf", "id-1")]

    delivery.send_tickets(card_order, card_order.event, artifacts)
    delivery.confirm_out_of_band(card_order, card_order.event)

    recipient, subject, _html = email.send.call_args.args
    assert recipient == card_order.customer_email
    assert subject == f"Your Tickets for {card_order.event.name} - Order #{card_order.order_number}"
    assert email.send.call_args.kwargs["attachments"] == artifacts
    phones = [c.args[0] for c in whatsapp.send.call_args_list]
    assert phones == [card_order.customer_phone, card_order.event.organizer_whatsapp]


def test_whatsapp_failure_does_not_block_fulfillment(card_order):
    generator = Mock()
    generator.generate_for_order.return_value = [TicketArtifact("t.pdf", "/tmp/t.pdf", "id-1")]
    email = Mock()
    whatsapp = Mock()
    whatsapp.send.side_effect = [ConnectionError("gateway down"), True]
    delivery = TicketDelivery(email, whatsapp)

    artifacts = FulfillmentOrchestrator(generator, delivery).fulfill(card_order, card_order.event)

    assert artifacts == generator.generate_for_order.return_value
    email.send.assert_called_once()
    assert whatsapp.send.call_count == 2


def test_confirm_out_of_band_reports_failed_messages(card_order):
    whatsapp = Mock()
    whatsapp.send.side_effect = [True, ConnectionError("gateway down")]

    sent = TicketDelivery(Mock(), whatsapp).confirm_out_of_band(card_order, card_order.event)

    assert sent == [True, False]


def test_whatsapp_notifier_skips_missing_phone():
    assert WhatsAppNotifier().send(None, "hello") is False
    assert WhatsAppNotifier().send("+230 5888 1234", "hello") is True


def test_orchestrator_generates_then_delivers(card_order):
    generator = Mock()
    generator.generate_for_order.return_value = [TicketArtifact("t.pdf", "/tmp/t.pdf", "id-1")]
    delivery = Mock()

    artifacts = FulfillmentOrchestrator(generator, delivery).fulfill(card_order, card_order.event)

    assert artifacts == generator.generate_for_order.return_value
    delivery.send_tickets.assert_called_once_with(card_order, card_order.event, artifacts)
    delivery.confirm_out_of_band.assert_called_once_with(card_order, card_order.event)


def test_generation_failure_aborts_before_delivery(card_order):
    generator = Mock()
    generator.generate_for_order.side_effect = OSError("disk full")
    delivery = Mock()

    with pytest.raises(TicketGenerationError) as exc:
        FulfillmentOrchestrator(generator, delivery).fulfill(card_order, card_order.event)

    assert exc.value.stage == "generation"
    delivery.send_tickets.assert_not_called()


def test_delivery_failure_is_reported(card_order):
    generator = Mock()
    generator.generate_for_order.return_value = []
    delivery = Mock()
    delivery.send_tickets.side_effect = ConnectionRefusedError("smtp")

    with pytest.raises(TicketDeliveryError) as exc:
        FulfillmentOrchestrator(generator, delivery).fulfill(card_order, card_order.event)

    assert exc.value.status_code == 502
    delivery.confirm_out_of_band.assert_not_called()


def test_full_fulfillment_sends_real_email(app, generator, card_order):
    orchestrator = FulfillmentOrchestrator(
        generator,
        TicketDelivery(EmailChannel(), WhatsAppNotifier()),
    )

    with mail.record_messages() as outbox:
        artifacts = orchestrator.fulfill(card_order, card_order.event)

    assert len(outbox) == 1
    assert outbox[0].attachments[0].filename == artifacts[0].filename
    assert card_order.order_number in outbox[0].subject
