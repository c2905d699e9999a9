from ticketeer.extensions import db
from ticketeer.utils.time import utcnow


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=True)
    location = db.Column(db.String(255), nullable=False)
    venue_name = db.Column(db.String(255), nullable=True)
    organizer_id = db.Column(db.String(64), nullable=True, index=True)

    # Payment settings
    juice_number = db.Column(db.String(32), nullable=True)
    organizer_whatsapp = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    ticket_types = db.relationship(
        "TicketType",
        backref="event",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="TicketType.id",
    )

    @property
    def venue(self):
        return self.venue_name or self.location

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "location": self.location,
            "venue_name": self.venue_name,
            "ticket_types": [t.to_dict() for t in self.ticket_types],
        }

    def __repr__(self):
        return f"<Event {self.id} {self.name!r}>"


class TicketType(db.Model):
    __tablename__ = "ticket_types"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(
        db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    sold = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_ticket_types_quantity_non_negative"),
        db.CheckConstraint("sold >= 0", name="ck_ticket_types_sold_non_negative"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.price),
            "quantity": self.quantity,
            "sold": self.sold,
        }

    def __repr__(self):
        return f"<TicketType {self.id} {self.name!r} quantity={self.quantity}>"
