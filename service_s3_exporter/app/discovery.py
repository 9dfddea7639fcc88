"""
Bucket discovery for Prometheus HTTP service discovery.
"""

from typing import Dict, Any, List

from botocore.exceptions import BotoCoreError, ClientError

from shared.errors import ServiceError
from shared.logging import get_logger

logger = get_logger("s3_exporter.discovery")


def discover_targets(client, host: str) -> List[Dict[str, Any]]:
    """One target per visible bucket, each probing this exporter at ``host``.

    Raises:
        ServiceError: when the buckets cannot be listed.
    """
    try:
        response = client.list_buckets()
    except (BotoCoreError, ClientError) as exc:
        logger.error("Error listing buckets", error=str(exc))
        raise ServiceError("error listing buckets") from exc

    targets = []
    for bucket in response.get("Buckets") or []:
        name = bucket.get("Name")
        if not name:
            continue
        targets.append({
            "targets": [host],
            "labels": {"__param_bucket": name}
        })
    return targets
