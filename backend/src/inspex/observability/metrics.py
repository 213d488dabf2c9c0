"""Prometheus metrics for Inspex.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# Lifecycle metrics
lifecycle_transitions_total = Counter(
    "inspex_lifecycle_transitions_total",
    "Total door lifecycle transitions applied",
    ["event"]  # event: start_inspection|complete_inspection|certify|reject|...
)

doors_created_total = Counter(
    "inspex_doors_created_total",
    "Total doors created",
    ["size", "pressure"]
)

# Certificate metrics
certificates_rendered_total = Counter(
    "inspex_certificates_rendered_total",
    "Certificate PDF render attempts",
    ["status"]  # status: success|error
)

certificate_render_seconds = Histogram(
    "inspex_certificate_render_seconds",
    "Time spent rendering and storing a certificate PDF",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Notification metrics
notifications_total = Counter(
    "inspex_notifications_total",
    "Lifecycle notifications by outcome",
    ["kind", "status"]  # status: enqueued|dispatch_error|sent|failed|skipped
)
