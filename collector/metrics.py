"""
Prometheus metrics for the deploy-events collector.

Exposes collection and polling metrics via HTTP /metrics for scraping.

Environment Variables:
    METRICS_ENABLED: Enable metrics server (true/false) - default: false
    METRICS_PORT: HTTP port for /metrics endpoint - default: 8080

Usage:
    from collector.metrics import start_metrics_server, track_put

    start_metrics_server(enabled=True, port=8080)
    track_put(duplicate=False)
"""

import logging
import threading

from prometheus_client import Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

# Metrics registry (module-level, created once by init_metrics)
EVENTS_STORED: "Counter" = None  # type: ignore
EVENTS_DUPLICATE: "Counter" = None  # type: ignore
MALFORMED_LINES: "Counter" = None  # type: ignore
POLLS_TOTAL: "Counter" = None  # type: ignore
TRACKED_SEQUENCES: "Gauge" = None  # type: ignore

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics() -> None:
    """
    Initialize Prometheus metrics (safe to call more than once).

    Thread-safe via module-level lock.
    """
    global EVENTS_STORED, EVENTS_DUPLICATE, MALFORMED_LINES, POLLS_TOTAL, TRACKED_SEQUENCES
    global _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        EVENTS_STORED = Counter(
            "deploy_events_stored_total",
            "Total number of events written to an event sequence",
        )

        # Re-tailed logs deliver the same line more than once
        EVENTS_DUPLICATE = Counter(
            "deploy_events_duplicate_total",
            "Total number of puts ignored because the index was already filled",
        )

        MALFORMED_LINES = Counter(
            "deploy_events_malformed_lines_total",
            "Total number of event log lines that could not be translated",
        )

        POLLS_TOTAL = Counter(
            "deploy_events_polls_total",
            "Total number of range polls by outcome",
            labelnames=["outcome"],
        )

        TRACKED_SEQUENCES = Gauge(
            "deploy_events_tracked_sequences",
            "Number of deployments with an event sequence in memory",
        )

        _metrics_initialized = True
        logger.info("Prometheus metrics initialized")


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start Prometheus metrics HTTP server in background thread.

    Args:
        enabled: Whether to start metrics server (from METRICS_ENABLED env var)
        port: HTTP port for /metrics endpoint (from METRICS_PORT env var)
    """
    if not enabled:
        logger.info("Metrics server disabled (METRICS_ENABLED=false)")
        return

    init_metrics()

    try:
        start_http_server(port, addr="0.0.0.0")
        logger.info(f"Metrics server started on http://0.0.0.0:{port}/metrics")
    except OSError as e:
        logger.error(f"Failed to start metrics server: {e}")


def track_put(duplicate: bool) -> None:
    if duplicate:
        if EVENTS_DUPLICATE is not None:
            EVENTS_DUPLICATE.inc()
    elif EVENTS_STORED is not None:
        EVENTS_STORED.inc()


def track_malformed_line() -> None:
    if MALFORMED_LINES is not None:
        MALFORMED_LINES.inc()


def track_poll(complete: bool) -> None:
    """
    Track a range poll outcome.

    Usage:
        track_poll(result.complete)
    """
    if POLLS_TOTAL is not None:
        POLLS_TOTAL.labels(outcome="complete" if complete else "incomplete").inc()


def set_tracked_sequences(count: int) -> None:
    if TRACKED_SEQUENCES is not None:
        TRACKED_SEQUENCES.set(count)
