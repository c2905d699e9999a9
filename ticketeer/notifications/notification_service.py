# ticketeer/notifications/notification_service.py
import logging
import mimetypes
from pathlib import Path

from flask import current_app
from flask_mail import Message

from ticketeer.extensions import mail

logger = logging.getLogger(__name__)


class EmailChannel:
    """Outbound email over Flask-Mail. Raises on any transport failure."""

    def send(self, recipient, subject, html, attachments=()):
        msg = Message(
            subject=subject,
            recipients=[recipient],
            html=html,
            sender=current_app.config.get("MAIL_DEFAULT_SENDER"),
        )

        for attachment in attachments:
            path = Path(attachment.filepath)
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            msg.attach(attachment.filename, content_type, path.read_bytes())

        mail.send(msg)
        logger.info(
            "Email sent",
            extra={"recipient": recipient, "subject": subject, "attachments": len(msg.attachments)},
        )


class WhatsAppNotifier:
    """
    Out-of-band confirmation channel.

    No messaging provider is wired in; messages are written to the log so
    organizers can relay them manually.
    """

    def send(self, phone, message):
        if not phone:
            return False
        logger.info("WhatsApp message queued", extra={"to": phone, "body": message})
        return True
