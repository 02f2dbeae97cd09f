from __future__ import annotations

from prometheus_client import Counter

SUBMISSION_COUNTER = Counter(
    "prospect_submissions_total",
    "Prospect submissions grouped by lead source and outcome",
    labelnames=("lead_source", "outcome"),
)
REJECTION_COUNTER = Counter(
    "prospect_rejections_total",
    "Prospects rejected locally before any request was sent",
    labelnames=("lead_source",),
)
IDENTITY_STORE_ERRORS_COUNTER = Counter(
    "prospect_identity_store_errors_total",
    "Identifier store failures grouped by operation",
    labelnames=("operation",),
)

__all__ = [
    "SUBMISSION_COUNTER",
    "REJECTION_COUNTER",
    "IDENTITY_STORE_ERRORS_COUNTER",
]
