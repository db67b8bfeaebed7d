"""Prometheus metrics for renewals, rejected input and broken invariants"""

from prometheus_client import Counter, Histogram

# Renewal metrics
renewal_counter = Counter(
    "rto_renewals_total",
    "Total renewals recorded",
    ["part"],  # part_a | part_b | driving_licence
)

renewal_fees_counter = Counter(
    "rto_renewal_fees_rupees_total",
    "Renewal fees recorded, in rupees",
    ["part"],
)

issuance_counter = Counter(
    "rto_issuances_total",
    "Permits issued",
)

renewal_duration_histogram = Histogram(
    "rto_renewal_duration_seconds",
    "Time spent processing a renewal, collaborators included",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# Rejected input
normalization_failure_counter = Counter(
    "rto_date_normalization_failures_total",
    "Date strings that did not parse",
)

validation_failure_counter = Counter(
    "rto_validation_failures_total",
    "Rejected issuance or renewal input",
    ["field"],
)

# Should stay at zero
invariant_violation_counter = Counter(
    "rto_invariant_violations_total",
    "Internal invariant violations",
)

bill_failure_counter = Counter(
    "rto_bill_generation_failures_total",
    "Bill generator calls that failed after a renewal",
)


def record_renewal(part: str, fees: int) -> None:
    """Record renewal metrics for monitoring volume and revenue per part"""
    renewal_counter.labels(part=part).inc()
    renewal_fees_counter.labels(part=part).inc(fees)


def record_validation_failure(field: str | None) -> None:
    validation_failure_counter.labels(field=field or "unknown").inc()
