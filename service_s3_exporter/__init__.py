"""S3 exporter service."""
