"""
Observability metrics module.

This module provides a metrics interface that can operate in two modes:
1. No-op mode: All functions exist for API compatibility but do nothing
2. Active mode: Counters are kept in a Prometheus registry and served on /metrics

Call sites never check which mode is active.
"""

import typing as t

from flask import Flask, Response


class MetricsManager:
    """Central manager for metrics operations."""

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self.registry = None
        self._initialize_metrics()

    def configure(self, enabled: bool) -> None:
        if enabled != self.enabled:
            self.enabled = enabled
            self._initialize_metrics()

    def _initialize_metrics(self) -> None:
        """Initialize metric objects based on enabled state."""
        if self.enabled:
            from prometheus_client import CollectorRegistry, Counter

            self.registry = CollectorRegistry()

            self.verification_outcomes_total = Counter(
                "verification_outcomes_total",
                "Receipt verification outcomes by routing tier",
                ["tier"],
                registry=self.registry,
            )
            self.order_transitions_total = Counter(
                "order_transitions_total",
                "Applied order payment-status transitions",
                ["from_status", "to_status"],
                registry=self.registry,
            )
            self.fulfillment_failures_total = Counter(
                "fulfillment_failures_total",
                "Ticket fulfillment failures by stage",
                ["stage"],
                registry=self.registry,
            )
            self.task_executions_total = Counter(
                "task_executions_total",
                "Total background task executions",
                ["task_name", "status"],
                registry=self.registry,
            )
        else:
            self.registry = None
            self.verification_outcomes_total = _DummyMetric()
            self.order_transitions_total = _DummyMetric()
            self.fulfillment_failures_total = _DummyMetric()
            self.task_executions_total = _DummyMetric()

    def record_verification(self, tier: str) -> None:
        self.verification_outcomes_total.labels(tier=tier).inc()

    def record_transition(self, from_status: str, to_status: str) -> None:
        self.order_transitions_total.labels(from_status=from_status, to_status=to_status).inc()

    def record_fulfillment_failure(self, stage: str) -> None:
        self.fulfillment_failures_total.labels(stage=stage).inc()

    def record_task(self, task_name: str, status: str) -> None:
        self.task_executions_total.labels(task_name=task_name, status=status).inc()

    def render(self) -> bytes:
        if not self.enabled:
            return b""
        from prometheus_client import generate_latest

        return generate_latest(self.registry)


class _DummyMetric:
    """Dummy metric object that mimics Prometheus metric interface."""

    def labels(self, **labels: str) -> "_DummyMetric":
        return self

    def inc(self, amount: float = 1) -> None:
        pass


metrics = MetricsManager(enabled=False)


def register_metrics(app: Flask) -> None:
    """
    Register the metrics endpoint with the Flask application.

    Returns an empty body in no-op mode.
    """
    metrics.configure(bool(app.config.get("METRICS_ENABLED", False)))

    @app.route("/metrics")
    def metrics_endpoint() -> Response:
        return Response(
            metrics.render(),
            mimetype="text/plain",
            headers={"Cache-Control": "no-cache"},
        )


__all__: t.List[str] = ["MetricsManager", "metrics", "register_metrics"]
