import io
from datetime import timedelta
from decimal import Decimal

import pytest
from faker import Faker
from flask_jwt_extended import create_access_token
from PIL import Image

from ticketeer import create_app
from ticketeer.extensions import db
from ticketeer.fulfillment import TicketArtifact
from ticketeer.models import Event, TicketType
from ticketeer.pipeline import build_pipeline
from ticketeer.storage import ScreenshotStorage
from ticketeer.utils.time import utcnow

# Initialize Faker for generating test data
fake = Faker()

MERCHANT_NUMBER = "+230 5123 4567"
REFERENCE = "TCK123ABC"


# Custom pytest marks for organizing tests
def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (full HTTP round trip)"
    )
    config.addinivalue_line(
        "markers",
        "db: mark test as database-intensive"
    )
    config.addinivalue_line(
        "markers",
        "payment: mark test as payment-verification related"
    )


# In-memory collaborators

class FakeExtractor:
    """Returns canned receipt text, or raises the configured error."""

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []
        self.closed = False

    def start(self):
        return self

    def extract(self, image_ref):
        self.calls.append(image_ref)
        if self.error is not None:
            raise self.error
        return self.text

    def close(self):
        self.closed = True


class RecordingDispatcher:
    """Stands in for Celery: remembers what would have been enqueued."""

    def __init__(self):
        self.verifications = []
        self.scheduled = []

    def dispatch_verification(self, order_id):
        self.verifications.append(order_id)

    def schedule_grace_approval(self, order_id, delay_seconds):
        self.scheduled.append((order_id, delay_seconds))


class FakeFulfillment:

    def __init__(self):
        self.fulfilled = []
        self.error = None
        # Called mid-delivery, before this fulfillment is recorded.
        self.during = None

    def fulfill(self, order, event):
        if self.error is not None:
            raise self.error
        if self.during is not None:
            hook, self.during = self.during, None
            hook(order)
        self.fulfilled.append(order.id)
        ticket_id = f"{order.order_number}-1"
        return [TicketArtifact(f"ticket-{ticket_id}.pdf", f"/tmp/ticket-{ticket_id}.pdf", ticket_id)]


class RecordingPublisher:

    def __init__(self):
        self.messages = []

    def publish(self, topic, payload):
        self.messages.append((topic, payload))
        return True

    def topics(self):
        return [topic for topic, _ in self.messages]


def receipt_text(
    amount="150.00",
    reference=REFERENCE,
    recipient=MERCHANT_NUMBER,
    transaction="TXN98765432",
):
    """Text as Tesseract reads it off an MCB Juice transfer confirmation."""
    lines = ["MCB Juice", "Transfer successful"]
    if amount:
        lines.append(f"Amount: Rs {amount}")
    if recipient:
        lines.append(f"Sent to {recipient}")
    if reference:
        lines.append(f"Reference: {reference}")
    if transaction:
        lines.append(f"Transaction ID: {transaction}")
    lines.append("Date: 12/03/2024 14:32")
    return "\n".join(lines)


def png_bytes(size=(60, 40)):
    buffer = io.BytesIO()
    Image.new("RGB", size, "white").save(buffer, "PNG")
    buffer.seek(0)
    return buffer


# Application fixtures

@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create application for testing"""
    app = create_app("testing")

    storage_root = tmp_path_factory.mktemp("storage")
    app.config.update(
        UPLOAD_FOLDER=str(storage_root / "transfer-screenshots"),
        TICKETS_FOLDER=str(storage_root / "tickets"),
        FRONTEND_URL="https://tickets.example.com",
    )

    with app.app_context():
        db.create_all()

        yield app

        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def clean_tables(app):
    yield
    db.session.rollback()
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def extractor():
    return FakeExtractor(text=receipt_text())


@pytest.fixture()
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture()
def fulfillment():
    return FakeFulfillment()


@pytest.fixture()
def publisher():
    return RecordingPublisher()


@pytest.fixture(autouse=True)
def pipeline(app, extractor, dispatcher, fulfillment, publisher):
    """Fresh pipeline per test with every external collaborator faked."""
    return build_pipeline(
        app,
        extractor=extractor,
        dispatcher=dispatcher,
        fulfillment=fulfillment,
        publisher=publisher,
        storage=ScreenshotStorage(app.config["UPLOAD_FOLDER"]),
    )


# Data fixtures

@pytest.fixture()
def event(app):
    event = Event(
        name=f"{fake.word().title()} Festival",
        description=fake.sentence(),
        start_date=utcnow() + timedelta(days=14),
        location=fake.city(),
        venue_name=fake.company(),
        juice_number=MERCHANT_NUMBER,
        organizer_whatsapp="+230 5765 4321",
    )
    event.ticket_types = [
        TicketType(name="General Admission", price=Decimal("75.00"), quantity=100),
        TicketType(name="VIP", price=Decimal("150.00"), quantity=5),
    ]
    db.session.add(event)
    db.session.commit()
    return event


@pytest.fixture()
def customer_info():
    return {
        "firstName": fake.first_name(),
        "lastName": fake.last_name(),
        "email": fake.email(),
        "phone": "+230 5888 1234",
    }


@pytest.fixture()
def make_screenshot_order(pipeline, event, customer_info):
    """Create an order awaiting screenshot verification (2 x General = Rs 150.00)."""

    def _create(quantity=2, reference=REFERENCE, ticket_type=None, payment_method="mcb-juice"):
        ticket_type = ticket_type or event.ticket_types[0]
        return pipeline.orders.create_order(
            event_id=event.id,
            customer_info=customer_info,
            tickets=[{"ticketTypeId": ticket_type.id, "quantity": quantity}],
            payment_method=payment_method,
            payment_reference=reference,
            screenshot_path="/tmp/transfer-receipt.png",
            screenshot_original_name="receipt.png",
        )

    return _create


@pytest.fixture()
def admin_headers(app):
    token = create_access_token(identity="admin-1", additional_claims={"role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def customer_headers(app):
    token = create_access_token(identity="user-7", additional_claims={"role": "customer"})
    return {"Authorization": f"Bearer {token}"}
