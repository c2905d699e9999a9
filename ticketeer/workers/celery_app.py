# ticketeer/workers/celery_app.py
from celery import Celery, Task
from celery.exceptions import Retry
from celery.utils.log import get_task_logger
from kombu import Queue

from ticketeer.observability import metrics
from ticketeer.workers.celerybeat import CELERY_BEAT_SCHEDULE

logger = get_task_logger(__name__)

celery_app = Celery(
    "ticketeer",
    include=["ticketeer.workers.verification_tasks"],
)

celery_app.conf.update(
    # Serialization
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Reliability settings
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_reject_on_worker_lost=True,

    # Routing
    task_default_queue="default",
    task_queues=(
        Queue("default"),
        Queue("verification"),
    ),

    # Time limits
    task_time_limit=300,
    task_soft_time_limit=240,

    beat_schedule=CELERY_BEAT_SCHEDULE,
)


class ObservedTask(Task):
    abstract = True

    def __call__(self, *args, **kwargs):
        task_name = self.name
        try:
            result = super().__call__(*args, **kwargs)
            metrics.record_task(task_name, "success")
            return result
        except Retry:
            metrics.record_task(task_name, "retry")
            raise
        except Exception:
            metrics.record_task(task_name, "failure")
            logger.exception("Task failed", extra={"task": task_name})
            raise


def make_celery(app):
    """Bind the Celery app to a Flask app: broker settings and app context per task."""
    celery_app.conf.update(
        broker_url=app.config["CELERY_BROKER_URL"],
        result_backend=app.config["CELERY_RESULT_BACKEND"],
    )

    class FlaskTask(ObservedTask):
        abstract = True

        def __call__(self, *args, **kwargs):
            with app.app_context():
                return super().__call__(*args, **kwargs)

    celery_app.Task = FlaskTask
    app.extensions["celery"] = celery_app
    return celery_app
