"""
Assembles the verification pipeline's collaborators for one process.

Everything with external state (OCR engine, mail, Redis, Celery) is built
here once and reached through ``app.extensions["pipeline"]``; any piece can
be replaced by passing it as a keyword override.
"""

from dataclasses import dataclass

from flask import current_app

from ticketeer.extensions import get_redis
from ticketeer.fulfillment import FulfillmentOrchestrator, TicketDelivery, TicketGenerator
from ticketeer.notifications.notification_service import EmailChannel, WhatsAppNotifier
from ticketeer.notifications.publisher import NullPublisher, RedisPublisher
from ticketeer.orders.service import OrderService
from ticketeer.orders.state_machine import OrderStateMachine
from ticketeer.receipts import TesseractReceiptExtractor
from ticketeer.storage import ScreenshotStorage
from ticketeer.verification import VerificationService
from ticketeer.workers.dispatch import CeleryDispatcher


@dataclass
class Pipeline:
    extractor: object
    publisher: object
    state_machine: OrderStateMachine
    fulfillment: object
    dispatcher: object
    verification: VerificationService
    orders: OrderService
    storage: ScreenshotStorage

    def close(self):
        self.extractor.close()


def build_pipeline(app, **overrides):
    config = app.config
    support_email = config["SUPPORT_EMAIL"]

    extractor = overrides.get("extractor") or TesseractReceiptExtractor(
        tesseract_cmd=config.get("TESSERACT_CMD"),
        language=config.get("OCR_LANGUAGE", "eng"),
    )

    publisher = overrides.get("publisher")
    if publisher is None:
        publisher = RedisPublisher(get_redis) if config.get("PUBLISH_ENABLED") else NullPublisher()

    fulfillment = overrides.get("fulfillment")
    if fulfillment is None:
        generator = overrides.get("ticket_generator") or TicketGenerator(
            config["TICKETS_FOLDER"], config["FRONTEND_URL"], support_email
        )
        delivery = TicketDelivery(
            overrides.get("email_channel") or EmailChannel(),
            overrides.get("whatsapp") or WhatsAppNotifier(),
            support_email,
        )
        fulfillment = FulfillmentOrchestrator(generator, delivery)

    dispatcher = overrides.get("dispatcher") or CeleryDispatcher()
    scheduler = overrides.get("scheduler") or dispatcher

    state_machine = OrderStateMachine(publisher)
    verification = VerificationService(
        extractor,
        state_machine,
        fulfillment,
        scheduler,
        auto_threshold=config["AUTO_APPROVE_THRESHOLD"],
        grace_threshold=config["GRACE_PERIOD_THRESHOLD"],
        grace_period_seconds=config["GRACE_PERIOD_SECONDS"],
        default_recipient=config.get("MCB_JUICE_NUMBER"),
    )

    pipeline = Pipeline(
        extractor=extractor,
        publisher=publisher,
        state_machine=state_machine,
        fulfillment=fulfillment,
        dispatcher=dispatcher,
        verification=verification,
        orders=OrderService(state_machine, fulfillment, dispatcher),
        storage=overrides.get("storage") or ScreenshotStorage(config["UPLOAD_FOLDER"]),
    )
    app.extensions["pipeline"] = pipeline
    return pipeline


def get_pipeline():
    return current_app.extensions["pipeline"]
