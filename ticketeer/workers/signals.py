# ticketeer/workers/signals.py
from celery.signals import worker_process_init, worker_process_shutdown

from ticketeer.logging_config import configure_logging_for_worker


def connect_worker_signals(app):
    """Start the OCR engine when a worker process boots and release it at shutdown."""

    @worker_process_init.connect(weak=False)
    def start_extractor(**kwargs):
        configure_logging_for_worker()
        with app.app_context():
            app.extensions["pipeline"].extractor.start()

    @worker_process_shutdown.connect(weak=False)
    def close_extractor(**kwargs):
        app.extensions["pipeline"].close()
