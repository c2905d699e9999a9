"""
E-ticket rendering.

One PDF per order: event details, line items, customer and order details and
a QR code carrying the ticket id plus a verification link. Drawn with Pillow
and saved straight to PDF; the QR code comes from ``qrcode``.
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path

import qrcode
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

# A4 at 150 dpi
PAGE_SIZE = (1240, 1754)
RESOLUTION = 150.0
MARGIN = 100

BRAND_COLOR = "#FF6B35"
TEXT_COLOR = "#333333"
MUTED_COLOR = "#666666"
FOOTER_COLOR = "#999999"


@dataclass(frozen=True)
class TicketArtifact:
    filename: str
    filepath: str
    ticket_id: str


def _font(size):
    return ImageFont.load_default(size=size)


def build_qr_payload(order, event, ticket_id, frontend_url):
    return json.dumps({
        "orderId": order.id,
        "orderNumber": order.order_number,
        "eventId": event.id,
        "customerEmail": order.customer_email,
        "ticketId": ticket_id,
        "verificationUrl": f"{frontend_url.rstrip('/')}/verify-ticket/{ticket_id}",
    })


def render_qr_code(data, box_size=8):
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=1,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").convert("RGB")


class TicketGenerator:

    def __init__(self, tickets_dir, frontend_url, support_email="support@ticketeer.com"):
        self.tickets_dir = Path(tickets_dir)
        self.frontend_url = frontend_url
        self.support_email = support_email

    def ensure_tickets_directory(self):
        self.tickets_dir.mkdir(parents=True, exist_ok=True)

    def ticket_path(self, filename):
        return self.tickets_dir / filename

    def generate_for_order(self, order, event):
        return [self.generate_ticket_pdf(order, event)]

    def generate_ticket_pdf(self, order, event):
        self.ensure_tickets_directory()

        ticket_id = f"{order.order_number}-{int(time.time() * 1000)}"
        filename = f"ticket-{ticket_id}.pdf"
        filepath = self.ticket_path(filename)

        page = Image.new("RGB", PAGE_SIZE, "white")
        draw = ImageDraw.Draw(page)
        x = MARGIN

        # Header
        draw.text((x, 90), "TICKETEER", fill=BRAND_COLOR, font=_font(48))
        draw.text((x, 150), "E-TICKET", fill=TEXT_COLOR, font=_font(32))

        # Event
        draw.text((x, 240), event.name, fill="black", font=_font(40))
        body = _font(24)
        if event.start_date:
            draw.text((x, 310), f"Date: {event.start_date:%A, %B %d, %Y}", fill=MUTED_COLOR, font=body)
            draw.text((x, 345), f"Time: {event.start_date:%I:%M %p}", fill=MUTED_COLOR, font=body)
        draw.text((x, 380), f"Venue: {event.venue}", fill=MUTED_COLOR, font=body)
        if event.description:
            description = event.description[:200] + ("..." if len(event.description) > 200 else "")
            draw.text((x, 415), f"Description: {description}", fill=MUTED_COLOR, font=body)

        # Line items
        heading = _font(28)
        y = 500
        draw.text((x, y), "TICKET DETAILS", fill="black", font=heading)
        y += 50
        for line in order.tickets:
            draw.text((x, y), f"{line.name} x {line.quantity}", fill=TEXT_COLOR, font=body)
            draw.text((PAGE_SIZE[0] - MARGIN, y), f"Rs{line.subtotal:.2f}", fill=TEXT_COLOR, font=body, anchor="ra")
            y += 40
        draw.text(
            (PAGE_SIZE[0] - MARGIN, y + 20),
            f"Total: Rs{order.total_amount:.2f}",
            fill="black",
            font=heading,
            anchor="ra",
        )

        # Customer / order
        y += 100
        draw.text((x, y), "CUSTOMER INFORMATION", fill="black", font=heading)
        draw.text((x, y + 45), f"Name: {order.customer_name}", fill=TEXT_COLOR, font=body)
        draw.text((x, y + 80), f"Email: {order.customer_email}", fill=TEXT_COLOR, font=body)
        if order.customer_phone:
            draw.text((x, y + 115), f"Phone: {order.customer_phone}", fill=TEXT_COLOR, font=body)

        y += 190
        draw.text((x, y), "ORDER INFORMATION", fill="black", font=heading)
        draw.text((x, y + 45), f"Order Number: {order.order_number}", fill=TEXT_COLOR, font=body)
        draw.text((x, y + 80), f"Ticket ID: {ticket_id}", fill=TEXT_COLOR, font=body)
        if order.created_at:
            draw.text((x, y + 115), f"Purchase Date: {order.created_at:%d/%m/%Y}", fill=TEXT_COLOR, font=body)

        # QR code
        qr_x = PAGE_SIZE[0] - MARGIN - 300
        draw.text((qr_x, y), "SCAN FOR VERIFICATION", fill="black", font=heading)
        qr_image = render_qr_code(build_qr_payload(order, event, ticket_id, self.frontend_url))
        page.paste(qr_image.resize((300, 300), Image.NEAREST), (qr_x, y + 50))

        # Footer
        small = _font(20)
        center = PAGE_SIZE[0] // 2
        draw.text(
            (center, PAGE_SIZE[1] - 150),
            "Present this ticket at the venue entrance. Keep this ticket safe and do not share the QR code.",
            fill=FOOTER_COLOR,
            font=small,
            anchor="ma",
        )
        draw.text(
            (center, PAGE_SIZE[1] - 115),
            f"For support, contact: {self.support_email}",
            fill=FOOTER_COLOR,
            font=small,
            anchor="ma",
        )

        page.save(filepath, "PDF", resolution=RESOLUTION)
        logger.info("Ticket generated", extra={"order_number": order.order_number, "ticket_id": ticket_id})

        return TicketArtifact(filename=filename, filepath=str(filepath), ticket_id=ticket_id)
