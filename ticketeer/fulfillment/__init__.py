from ticketeer.fulfillment.delivery import TicketDelivery
from ticketeer.fulfillment.orchestrator import FulfillmentOrchestrator
from ticketeer.fulfillment.tickets import TicketArtifact, TicketGenerator

__all__ = ["FulfillmentOrchestrator", "TicketArtifact", "TicketDelivery", "TicketGenerator"]
