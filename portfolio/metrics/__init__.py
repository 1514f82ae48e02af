# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Prometheus metrics for the portfolio service."""
from prometheus_client import Counter, Gauge, Histogram

PROJECTS_CREATED = Counter(
    "projects_created_total", "Total projects created", ["risk"]
)
PROJECTS_TOTAL = Gauge(
    "projects_total", "Current projects by status", ["status"]
)
STATUS_TRANSITIONS = Counter(
    "project_status_transitions_total", "Project status transitions", ["from_status", "to_status"]
)
RULE_VIOLATIONS = Counter(
    "project_rule_violations_total", "Rejected mutations by violated rule", ["rule"]
)
MEMBERS_CREATED = Counter(
    "members_created_total", "Total members created", ["role"]
)
REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "http_errors_total", "Total HTTP errors", ["method", "endpoint", "status"]
)
