"""
Ticket fulfillment: generate the artifacts, email them, confirm out of band.

Generation failure aborts before anything is sent. Delivery failure leaves
the generated files on disk; a later attempt simply generates fresh ones.
"""

import logging

from ticketeer.errors import TicketDeliveryError, TicketGenerationError
from ticketeer.observability import metrics

logger = logging.getLogger(__name__)


class FulfillmentOrchestrator:

    def __init__(self, generator, delivery):
        self.generator = generator
        self.delivery = delivery

    def fulfill(self, order, event):
        try:
            artifacts = self.generator.generate_for_order(order, event)
        except Exception as e:
            metrics.record_fulfillment_failure(TicketGenerationError.stage)
            logger.exception("Ticket generation failed", extra={"order_id": order.id})
            raise TicketGenerationError(
                f"Failed to generate tickets: {e}", payload={"order_id": order.id}
            ) from e

        try:
            self.delivery.send_tickets(order, event, artifacts)
            self.delivery.confirm_out_of_band(order, event)
        except Exception as e:
            metrics.record_fulfillment_failure(TicketDeliveryError.stage)
            logger.exception("Ticket delivery failed", extra={"order_id": order.id})
            raise TicketDeliveryError(
                f"Failed to deliver tickets: {e}", payload={"order_id": order.id}
            ) from e

        logger.info(
            "Order fulfilled",
            extra={"order_id": order.id, "order_number": order.order_number, "tickets": len(artifacts)},
        )
        return artifacts
