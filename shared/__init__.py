"""
Shared utilities for the S3 exporter.

This package aggregates the common building blocks the service is built on:

- config: Service configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: The exporter's own Prometheus metrics
- tracing: OpenTelemetry tracing config
- errors: Canonical error types and responses
- base_service: FastAPI service shell with health and metrics routes

Do not import from service packages into shared/.
"""
