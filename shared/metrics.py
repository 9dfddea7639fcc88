"""
Shared metrics configuration for the S3 exporter.

These are the exporter's own metrics, served from the default registry on
the metrics path. Probe output never touches this registry.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, REGISTRY
from typing import Dict, Any, Optional
import threading

NAMESPACE = "s3_exporter"

_collectors: Dict[str, "MetricsCollector"] = {}
_collectors_lock = threading.Lock()


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, version: str, registry: CollectorRegistry = REGISTRY):
        self.service_name = service_name
        self.version = version
        self.registry = registry
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Build info
        self._metrics["build"] = Info(
            "build",
            "Exporter build information",
            namespace=NAMESPACE,
            registry=self.registry
        )
        self._metrics["build"].info({
            "service": self.service_name,
            "version": self.version
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            namespace=NAMESPACE,
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            namespace=NAMESPACE,
            registry=self.registry
        )

        # Health check metrics
        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            namespace=NAMESPACE,
            registry=self.registry
        )

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type"],
            namespace=NAMESPACE,
            registry=self.registry
        )

        self._setup_probe_metrics()

    def _setup_probe_metrics(self):
        """Set up probe-specific metrics."""
        self._metrics["probes_total"] = Counter(
            "probes_total",
            "Total bucket/prefix probes by outcome",
            ["outcome"],
            namespace=NAMESPACE,
            registry=self.registry
        )

        self._metrics["listing_pages_total"] = Counter(
            "listing_pages_total",
            "Total listing pages fetched from the storage API",
            ["mode"],
            namespace=NAMESPACE,
            registry=self.registry
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str):
        """Record error metrics."""
        self._metrics["errors_total"].labels(error_type=error_type).inc()

    def record_probe(self, success: bool):
        """Record the outcome of one bucket/prefix probe."""
        outcome = "success" if success else "failure"
        self._metrics["probes_total"].labels(outcome=outcome).inc()

    def record_listing_page(self, mode: str):
        """Record one page fetched from the listing API."""
        self._metrics["listing_pages_total"].labels(mode=mode).inc()


def get_metrics_collector(service_name: str, version: str = "1.0.0",
                          registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get the metrics collector for a service.

    Collectors on the default registry are created once per process and
    shared by every app instance; registering the same names twice would
    raise. An explicit registry always gets a fresh collector.
    """
    if registry is not None:
        return MetricsCollector(service_name, version, registry)

    with _collectors_lock:
        collector = _collectors.get(service_name)
        if collector is None:
            collector = MetricsCollector(service_name, version)
            _collectors[service_name] = collector
        return collector
