from ticketeer.models.event import Event, TicketType
from ticketeer.models.order import Order, OrderTicket, generate_order_number

__all__ = ["Event", "TicketType", "Order", "OrderTicket", "generate_order_number"]
