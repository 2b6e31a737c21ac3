"""Prometheus metrics for badgeflow.

All metrics are declared here so there is one inventory of what the
service measures.  Modules import the metric they need and increment it
at the point of action; ``/metrics`` exposes the lot.

HTTP traffic is recorded by ``MetricsMiddleware``.  The LearnCard side
gets its own counters, labelled by outcome, because the interesting
failure mode of this service is "the network said no", which never shows
up as a 5xx on our side when the handler turns it into JSON.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Issuance round-trips to the network dominate; they sit at 0.25-2.5s.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

INBOX_ISSUANCES = Counter(
    "inbox_issuance_total",
    "Universal Inbox issuance attempts by outcome",
    ["outcome"],  # "issued", "claim_url", "rejected", "not_configured"
)

NETWORK_CALLS = Counter(
    "network_calls_total",
    "LearnCard network calls by operation and outcome",
    ["operation", "outcome"],  # outcome: "ok" or "error"
)

SESSION_INITIALIZATIONS = Counter(
    "issuer_session_initializations_total",
    "Issuer session setups actually performed (not cache hits)",
)
