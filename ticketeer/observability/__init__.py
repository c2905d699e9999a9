from ticketeer.observability.metrics import metrics, register_metrics


def init_observability(app):
    register_metrics(app)
    app.logger.info(
        "Observability initialized",
        extra={"metrics_enabled": metrics.enabled},
    )


__all__ = ["init_observability", "metrics", "register_metrics"]
