from celery.schedules import crontab

CELERY_BEAT_SCHEDULE = {
    "sweep-overdue-auto-approvals-every-minute": {
        "task": "ticketeer.workers.verification_tasks.sweep_overdue_auto_approvals",
        "schedule": crontab(minute="*"),
        "options": {"queue": "default"},
    },
}
