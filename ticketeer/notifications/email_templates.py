# ticketeer/notifications/email_templates.py
from datetime import datetime


def _money(amount):
    return f"Rs{float(amount):.2f}"


class EmailTemplates:
    """Email and message template definitions"""

    @staticmethod
    def tickets_ready(order, event, support_email="support@ticketeer.com"):
        """Tickets delivered after payment verification"""
        subject = f"Your Tickets for {event.name} - Order #{order.order_number}"

        event_date = event.start_date.strftime("%A, %B %d, %Y") if event.start_date else "TBA"
        event_time = event.start_date.strftime("%I:%M %p").lstrip("0") if event.start_date else "TBA"

        rows = "".join(
            f"""
                    <tr style="border-bottom: 1px solid #e5e7eb;">
                        <td style="padding: 12px;">{line.name}</td>
                        <td style="padding: 12px; text-align: center;">{line.quantity}</td>
                        <td style="padding: 12px; text-align: right;">{_money(line.subtotal)}</td>
                    </tr>"""
            for line in order.tickets
        )

        html = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <style>
                body {{ font-family: Arial, sans-serif; line-height: 1.6; }}
                .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
                .header {{ background: #FF6B35; color: white; padding: 20px; text-align: center; }}
                .content {{ padding: 30px; background: #f8f9fa; }}
                .panel {{ background: white; padding: 20px; border-radius: 8px; margin: 20px 0; }}
                .notice {{ background: #fff3cd; padding: 15px; border-radius: 8px; border-left: 4px solid #ffc107; color: #856404; }}
                .footer {{ margin-top: 30px; padding-top: 20px; border-top: 1px solid #dee2e6; color: #6c757d; }}
            </style>
        </head>
        <body>
            <div class="container">
                <div class="header">
                    <h1>Your Tickets Are Ready!</h1>
                </div>
                <div class="content">
                    <p>Hi {order.customer_first_name},</p>

                    <p>Great news! Your payment has been verified and your tickets for
                    <strong>{event.name}</strong> are now ready.</p>

                    <div class="panel">
                        <h3>Event Details</h3>
                        <p><strong>Event:</strong> {event.name}</p>
                        <p><strong>Date:</strong> {event_date}</p>
                        <p><strong>Time:</strong> {event_time}</p>
                        <p><strong>Venue:</strong> {event.venue}</p>
                    </div>

                    <div class="panel">
                        <h3>Order Summary</h3>
                        <table style="width: 100%; border-collapse: collapse;">{rows}
                        </table>
                        <p><strong>Order Number:</strong> {order.order_number}</p>
                        <p><strong>Payment Reference:</strong> {order.payment_reference or 'N/A'}</p>
                        <p><strong>Total Amount:</strong> {_money(order.total_amount)}</p>
                    </div>

                    <p>Your e-tickets are attached to this email as PDF files. Each ticket contains a
                    unique QR code for entry verification.</p>

                    <div class="notice">
                        <h4>Important Instructions:</h4>
                        <ul>
                            <li>Present your ticket (digital or printed) at the venue entrance</li>
                            <li>Arrive 15-30 minutes before the event starts</li>
                            <li>Keep your QR code safe and do not share it</li>
                            <li>Bring a valid ID for verification</li>
                        </ul>
                    </div>

                    <p>Questions? Contact us at <a href="mailto:{support_email}">{support_email}</a>.</p>
                </div>
                <div class="footer">
                    <p>© {datetime.now().year} Ticketeer. All rights reserved.</p>
                    <p>This is an automated message, please do not reply to this email.</p>
                </div>
            </div>
        </body>
        </html>
        """

        return subject, html

    @staticmethod
    def customer_confirmation_message(order, event):
        """Out-of-band (WhatsApp) confirmation sent to the customer"""
        event_date = event.start_date.strftime("%d/%m/%Y") if event.start_date else "TBA"
        return (
            "*Ticket Confirmation*\n\n"
            f"Hi {order.customer_first_name}!\n\n"
            f"Your payment has been verified and your tickets for *{event.name}* are ready!\n\n"
            f"Check your email: {order.customer_email}\n"
            f"Order: {order.order_number}\n"
            f"Amount: {_money(order.total_amount)}\n"
            f"Event Date: {event_date}\n\n"
            "See you at the event!"
        )

    @staticmethod
    def organizer_confirmation_message(order, event):
        """Out-of-band (WhatsApp) notice sent to the organizer"""
        return (
            "*Payment Verified*\n\n"
            f"Order {order.order_number} has been verified and tickets sent to:\n\n"
            f"Customer: {order.customer_name}\n"
            f"Email: {order.customer_email}\n"
            f"Phone: {order.customer_phone or 'N/A'}\n"
            f"Amount: {_money(order.total_amount)}\n"
            f"Event: {event.name}"
        )
