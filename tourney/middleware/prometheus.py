"""Prometheus metrics: HTTP instrumentation plus registration, payment
and bracket counters.
"""

from fastapi import FastAPI
from prometheus_client import Counter, Histogram, Info
from prometheus_fastapi_instrumentator import Instrumentator, metrics

APP_INFO = Info("tourney_app", "Application information")

REGISTRATIONS_TOTAL = Counter(
    "tourney_registrations_total",
    "Registration attempts by outcome",
    ["outcome"],  # registered, full, already_registered, invalid_state, not_found
)

RECONCILIATIONS_TOTAL = Counter(
    "tourney_payment_reconciliations_total",
    "Payment webhook reconciliations by outcome",
    ["outcome"],  # paid, replayed, ignored, rejected, not_found, failed
)

BRACKET_SIZE = Histogram(
    "tourney_bracket_participants",
    "Participants seeded per generated bracket",
    buckets=(2, 4, 8, 16, 32, 64, 128, 256),
)

MATCHES_COMPLETED = Counter(
    "tourney_matches_completed_total",
    "Match results recorded",
    ["kind"],  # played, bye
)

# Request latency buckets in seconds; registration is a single UPDATE + INSERT
HTTP_LATENCY_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)

UNINSTRUMENTED = ["/health", "/health/live", "/health/ready", "/metrics"]


def setup_prometheus(app: FastAPI, app_version: str) -> Instrumentator:
    """Instrument all API routes and expose ``/metrics``."""
    APP_INFO.info({"version": app_version, "app_name": "tourney"})

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=UNINSTRUMENTED,
        inprogress_name="tourney_http_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.add(
        metrics.requests(metric_namespace="tourney", metric_subsystem="http")
    )
    instrumentator.add(
        metrics.latency(
            metric_namespace="tourney",
            metric_subsystem="http",
            should_include_status=False,
            buckets=HTTP_LATENCY_BUCKETS,
        )
    )

    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint="/metrics", include_in_schema=True, tags=["Monitoring"])
    return instrumentator


def record_registration(outcome: str) -> None:
    REGISTRATIONS_TOTAL.labels(outcome=outcome).inc()


def record_reconciliation(outcome: str) -> None:
    RECONCILIATIONS_TOTAL.labels(outcome=outcome).inc()


def record_bracket_generated(participants: int) -> None:
    BRACKET_SIZE.observe(participants)


def record_match_completed(bye: bool = False) -> None:
    MATCHES_COMPLETED.labels(kind="bye" if bye else "played").inc()
