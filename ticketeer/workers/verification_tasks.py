from celery.utils.log import get_task_logger
from flask import current_app

from ticketeer.errors import FulfillmentError
from ticketeer.workers.celery_app import celery_app

logger = get_task_logger(__name__)


def _verification():
    return current_app.extensions["pipeline"].verification


@celery_app.task(name="ticketeer.workers.verification_tasks.verify_order_payment")
def verify_order_payment(order_id):
    tier = _verification().process_submission(order_id)
    logger.info("Payment verification finished", extra={"order_id": order_id, "tier": str(tier)})
    return tier.value if tier else None


@celery_app.task(
    name="ticketeer.workers.verification_tasks.apply_grace_period_approval",
    autoretry_for=(FulfillmentError,),
    retry_kwargs={"max_retries": 3},
    retry_backoff=True,
    retry_backoff_max=300,
    retry_jitter=True,
)
def apply_grace_period_approval(order_id):
    return _verification().apply_grace_period_approval(order_id)


@celery_app.task(name="ticketeer.workers.verification_tasks.sweep_overdue_auto_approvals")
def sweep_overdue_auto_approvals():
    return _verification().sweep_overdue_auto_approvals()
