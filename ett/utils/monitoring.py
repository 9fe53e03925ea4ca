"""Monitoring utilities leveraging Prometheus client."""

from __future__ import annotations

from prometheus_client import Counter

vacancy_verdicts_total = Counter(
    "ett_vacancy_verdicts_total",
    "Vacancy time-limit verdicts issued",
    ["role", "verdict"],
)

consent_status_total = Counter(
    "ett_consent_status_total",
    "Consent statuses classified",
    ["status"],
)

stale_vacancy_outcomes_total = Counter(
    "ett_stale_vacancy_outcomes_total",
    "Outcomes of stale entity vacancy handling",
    ["outcome"],
)


def observe_vacancy_verdict(role: str, exceeded: bool) -> None:
    vacancy_verdicts_total.labels(role=role, verdict="exceeded" if exceeded else "within").inc()


def observe_consent_status(status: str) -> None:
    consent_status_total.labels(status=status).inc()


def observe_stale_vacancy_outcome(outcome: str) -> None:
    stale_vacancy_outcomes_total.labels(outcome=outcome).inc()
