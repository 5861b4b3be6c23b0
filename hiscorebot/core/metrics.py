"""
Prometheus metrics.

Metric definitions live here so instrumentation is not scattered across
modules. Everything registers on a private registry exposed by /metrics.
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

hiscore_fetch_total = Counter(
    "hiscore_fetch_total",
    "Hiscore endpoint requests by game mode and outcome",
    labelnames=("mode", "outcome"),
    registry=_registry,
)

hiscore_fetch_seconds = Histogram(
    "hiscore_fetch_seconds",
    "Hiscore endpoint latency in seconds",
    labelnames=("mode",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=_registry,
)

hiscore_resolutions_total = Counter(
    "hiscore_resolutions_total",
    "Completed game mode resolutions by resolved mode",
    labelnames=("mode",),
    registry=_registry,
)

chat_commands_total = Counter(
    "chat_commands_total",
    "Chat commands handled by command and status",
    labelnames=("command", "status"),
    registry=_registry,
)


def mark_fetch(mode: str, outcome: str, duration_seconds: float | None = None) -> None:
    """Record one hiscore request.

    Args:
        mode: Game mode slug
        outcome: ``ok``, ``mode_mismatch``, ``malformed`` or ``transport_error``
        duration_seconds: Request latency when the request completed
    """
    hiscore_fetch_total.labels(mode=mode, outcome=outcome).inc()
    if duration_seconds is not None:
        hiscore_fetch_seconds.labels(mode=mode).observe(duration_seconds)


def mark_resolution(mode: str) -> None:
    hiscore_resolutions_total.labels(mode=mode).inc()


def mark_chat_command(command: str, status: str) -> None:
    chat_commands_total.labels(command=command, status=status).inc()


def render_latest() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST
