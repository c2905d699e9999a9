import logging

from ticketeer.notifications.email_templates import EmailTemplates

logger = logging.getLogger(__name__)


class TicketDelivery:
    """Sends generated tickets to the customer and confirms out of band."""

    def __init__(self, email_channel, whatsapp, support_email="support@ticketeer.com"):
        self.email_channel = email_channel
        self.whatsapp = whatsapp
        self.support_email = support_email

    def send_tickets(self, order, event, artifacts):
        subject, html = EmailTemplates.tickets_ready(order, event, self.support_email)
        self.email_channel.send(order.customer_email, subject, html, attachments=artifacts)

    def confirm_out_of_band(self, order, event):
        """
        Best-effort WhatsApp confirmation; tickets were already emailed.

        A failed message is logged and reported as False, never raised.
        """
        sent = []
        if order.customer_phone:
            sent.append(
                self._notify(
                    order,
                    order.customer_phone,
                    EmailTemplates.customer_confirmation_message(order, event),
                )
            )

        organizer_phone = order.organizer_whatsapp or event.organizer_whatsapp
        if organizer_phone:
            sent.append(
                self._notify(
                    order,
                    organizer_phone,
                    EmailTemplates.organizer_confirmation_message(order, event),
                )
            )
        return sent

    def _notify(self, order, phone, message):
        try:
            return self.whatsapp.send(phone, message)
        except Exception:
            logger.exception(
                "WhatsApp confirmation failed",
                extra={"order_id": order.id, "to": phone},
            )
            return False
