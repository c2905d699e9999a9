"""
Ticketeer application factory.

Wires configuration, logging, extensions, error handlers, observability,
HTTP routes, the verification pipeline and the Celery app onto one Flask app.
"""

import click
from flask import Flask

from ticketeer.config import get_config
from ticketeer.error_handlers import register_error_handlers
from ticketeer.extensions import init_extensions
from ticketeer.health import health_bp
from ticketeer.logging_config import setup_logging
from ticketeer.middleware.request_id import init_request_id_middleware
from ticketeer.observability import init_observability
from ticketeer.pipeline import build_pipeline, get_pipeline
from ticketeer.routes import register_blueprints
from ticketeer.workers.celery_app import make_celery


def create_app(config_name=None):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    setup_logging(app)
    init_request_id_middleware(app)
    init_extensions(app)
    register_error_handlers(app)
    init_observability(app)

    app.register_blueprint(health_bp)
    register_blueprints(app)

    build_pipeline(app)
    make_celery(app)
    register_commands(app)

    app.logger.info(
        "Application created",
        extra={"environment": app.config.get("ENVIRONMENT")},
    )
    return app


def register_commands(app):

    @app.cli.command("sweep-auto-approvals")
    def sweep_auto_approvals():
        """Approve orders whose grace period ran out without a decision."""
        approved = get_pipeline().verification.sweep_overdue_auto_approvals()
        click.echo(f"Approved {approved} overdue order(s)")
