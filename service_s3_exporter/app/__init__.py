"""
S3 exporter service package.

Answers probe requests by listing a bucket/prefix through the object
storage API, aggregating what it finds, and rendering the result in the
Prometheus exposition format. Also serves bucket discovery for Prometheus
HTTP service discovery and the exporter's own metrics.
"""

__version__ = "1.0.0"
