"""
Probe execution: one fresh aggregate and lister per bucket/prefix.
"""

import time
from typing import List, Optional, Mapping
from dataclasses import dataclass, field

from shared.config import ServiceConfig
from shared.errors import StorageListingError, ValidationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .listing import Aggregate, Lister, create_lister, fold_page

logger = get_logger("s3_exporter.probe")


@dataclass
class ProbeQuery:
    """What one probe request asks for."""
    bucket: str
    prefixes: List[str] = field(default_factory=lambda: [""])
    delimiter: str = ""
    storage_class: str = ""

    @classmethod
    def from_params(cls, params: Mapping[str, str], config: ServiceConfig) -> "ProbeQuery":
        """Resolve query parameters, falling back to static configuration.

        Raises:
            ValidationError: when neither the request nor the config names a bucket.
        """
        bucket = params.get("bucket") or config.s3_bucket
        if not bucket:
            raise ValidationError("bucket parameter is missing")

        if params.get("prefixes"):
            prefixes = params["prefixes"].split(",")
        elif params.get("prefix"):
            prefixes = [params["prefix"]]
        elif config.static_prefixes():
            prefixes = config.static_prefixes()
        else:
            prefixes = [""]

        return cls(
            bucket=bucket,
            prefixes=prefixes,
            delimiter=params.get("delimiter") or config.s3_delimiter,
            storage_class=params.get("storageclass") or config.s3_storage_class,
        )


@dataclass
class ProbeResult:
    """Outcome of listing one bucket/prefix.

    ``aggregate`` is ``None`` whenever the listing failed.
    """
    bucket: str
    prefix: str
    delimiter: str
    storage_class: str
    success: bool
    duration_seconds: float
    aggregate: Optional[Aggregate] = None


def run_probe(lister: Lister, storage_class: str = "") -> ProbeResult:
    """Exhaust ``lister`` into a fresh aggregate."""
    aggregate = Aggregate()
    success = True

    start = time.monotonic()
    try:
        for page in lister.pages():
            fold_page(aggregate, page, storage_class or None)
    except StorageListingError as exc:
        logger.error(
            "Listing failed",
            bucket=lister.bucket,
            prefix=lister.prefix,
            error=exc.message
        )
        success = False
    duration = time.monotonic() - start

    return ProbeResult(
        bucket=lister.bucket,
        prefix=lister.prefix,
        delimiter=lister.delimiter,
        storage_class=storage_class,
        success=success,
        duration_seconds=duration,
        aggregate=aggregate if success else None,
    )


class ProbeRunner:
    """Runs every prefix of a probe query against the storage client."""

    def __init__(self, client, config: ServiceConfig, metrics: Optional[MetricsCollector] = None):
        self.client = client
        self.config = config
        self.metrics = metrics

    def run(self, query: ProbeQuery) -> List[ProbeResult]:
        """Probe each prefix in turn; a failed prefix does not stop the others."""
        results = []
        for prefix in query.prefixes:
            logger.info(
                "Probing",
                bucket=query.bucket,
                prefix=prefix,
                delimiter=query.delimiter,
                storage_class=query.storage_class,
                versions=self.config.s3_list_object_versions
            )
            lister = create_lister(
                self.client,
                query.bucket,
                prefix=prefix,
                delimiter=query.delimiter,
                versions=self.config.s3_list_object_versions,
                max_keys=self.config.s3_max_keys,
                on_page=self.metrics.record_listing_page if self.metrics else None
            )
            result = run_probe(lister, query.storage_class)
            if self.metrics:
                self.metrics.record_probe(result.success)
            if result.success:
                logger.info(
                    "Probe complete",
                    bucket=query.bucket,
                    prefix=prefix,
                    objects=result.aggregate.object_count,
                    common_prefixes=result.aggregate.common_prefix_count,
                    duration_seconds=round(result.duration_seconds, 3)
                )
            results.append(result)
        return results
