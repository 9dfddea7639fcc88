"""
Single-pass aggregation of listing pages.
"""

from typing import Optional
from dataclasses import dataclass
from datetime import datetime, timezone

from shared.logging import get_logger
from .models import Page

# No stored object predates the epoch, so it doubles as "nothing seen yet"
ZERO_TIME = datetime(1970, 1, 1, tzinfo=timezone.utc)

logger = get_logger("s3_exporter.aggregator")


@dataclass
class Aggregate:
    """Running statistics for one probe."""
    object_count: int = 0
    total_size_bytes: int = 0
    biggest_size_bytes: int = 0
    last_modified: datetime = ZERO_TIME
    last_modified_size_bytes: int = 0
    common_prefix_count: int = 0

    @property
    def last_modified_timestamp(self) -> int:
        """Last modified date as whole Unix seconds."""
        return int(self.last_modified.timestamp())


def fold_page(aggregate: Aggregate, page: Page, storage_class: Optional[str] = None) -> Aggregate:
    """Fold one page into ``aggregate`` in place and return it.

    Items whose storage class differs from ``storage_class`` are ignored.
    Common prefixes are always counted. On equal timestamps the item seen
    first keeps the last-modified slot.
    """
    skipped = 0
    for item in page.items:
        if storage_class and item.storage_class != storage_class:
            skipped += 1
            continue

        aggregate.object_count += 1
        aggregate.total_size_bytes += item.size
        if item.size > aggregate.biggest_size_bytes:
            aggregate.biggest_size_bytes = item.size
        if item.last_modified > aggregate.last_modified:
            aggregate.last_modified = item.last_modified
            aggregate.last_modified_size_bytes = item.size

    if skipped:
        logger.debug("Filtered out items", skipped=skipped, wanted=storage_class)

    aggregate.common_prefix_count += len(page.common_prefixes)
    return aggregate
