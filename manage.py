"""Management script for database setup and other tasks"""

from datetime import timedelta
from decimal import Decimal

import click
from dotenv import load_dotenv
from flask.cli import FlaskGroup
from flask_migrate import upgrade

load_dotenv()

from ticketeer import create_app  # noqa: E402
from ticketeer.extensions import db  # noqa: E402
from ticketeer.models import Event, TicketType  # noqa: E402
from ticketeer.utils.time import utcnow  # noqa: E402

cli = FlaskGroup(create_app=create_app)


@cli.command("init-db")
def init_db():
    """Initialize the database"""
    db.create_all()
    click.echo("Database initialized successfully!")


@cli.command("drop-db")
@click.confirmation_option(prompt="Are you sure you want to drop all tables?")
def drop_db():
    """Drop all database tables"""
    db.drop_all()
    click.echo("Database dropped successfully!")


@cli.command("seed-db")
def seed_db():
    """Seed the database with a sample event"""
    if Event.query.filter_by(name="Sunset Sessions").first():
        click.echo("Sample event already exists. Skipping.")
        return

    event = Event(
        name="Sunset Sessions",
        description="Open-air concert on the beach",
        start_date=utcnow() + timedelta(days=30),
        location="Flic en Flac",
        venue_name="Flic en Flac Public Beach",
        juice_number="+230 5123 4567",
        organizer_whatsapp="+230 5765 4321",
    )
    event.ticket_types = [
        TicketType(name="General Admission", price=Decimal("500.00"), quantity=300),
        TicketType(name="VIP", price=Decimal("1500.00"), quantity=50),
    ]
    db.session.add(event)
    db.session.commit()
    click.echo(f"Sample event created with id {event.id}")


@cli.command("migrate-db")
def migrate_db():
    """Apply any pending database migrations"""
    click.echo("Applying database migrations...")
    upgrade()
    click.echo("Database migrations applied successfully!")


if __name__ == "__main__":
    cli()
