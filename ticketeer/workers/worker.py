"""Celery entry point: ``celery -A ticketeer.workers.worker worker -Q default,verification``."""

from dotenv import load_dotenv

load_dotenv()

from ticketeer import create_app  # noqa: E402
from ticketeer.workers.signals import connect_worker_signals  # noqa: E402

flask_app = create_app()
celery = flask_app.extensions["celery"]
connect_worker_signals(flask_app)
