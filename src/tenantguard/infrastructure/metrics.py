"""Prometheus metrics."""

from prometheus_client import Counter

authorization_decisions_total = Counter(
    "tenantguard_authorization_decisions_total",
    "Authorization decisions by outcome and source",
    ["allowed", "source"],
)

authorization_errors_total = Counter(
    "tenantguard_authorization_errors_total",
    "Authorizations that failed closed",
    ["kind"],
)

audit_entries_written_total = Counter(
    "tenantguard_audit_entries_written_total",
    "Audit entries persisted",
)

audit_entries_dropped_total = Counter(
    "tenantguard_audit_entries_dropped_total",
    "Audit entries dropped (queue full or retries exhausted)",
    ["reason"],
)
