"""Hands verification work to Celery. Tests swap this for an in-memory recorder."""

from ticketeer.workers.verification_tasks import apply_grace_period_approval, verify_order_payment

VERIFICATION_QUEUE = "verification"


class CeleryDispatcher:

    def dispatch_verification(self, order_id):
        verify_order_payment.apply_async(args=[order_id], queue=VERIFICATION_QUEUE)

    def schedule_grace_approval(self, order_id, delay_seconds):
        apply_grace_period_approval.apply_async(
            args=[order_id],
            countdown=delay_seconds,
            queue=VERIFICATION_QUEUE,
        )
