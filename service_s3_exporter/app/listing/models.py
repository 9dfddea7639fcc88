"""
Listing records as returned page by page by the object storage API.
"""

from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from datetime import datetime, timezone


def _as_utc(value: datetime) -> datetime:
    # botocore returns aware datetimes; some S3-compatible stores do not
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class Item:
    """One object, or one version of an object."""
    key: str
    last_modified: datetime
    size: int
    storage_class: Optional[str] = None
    is_latest: Optional[bool] = None

    @classmethod
    def from_object(cls, entry: Dict[str, Any]) -> "Item":
        """Build from a ``Contents`` entry of ``list_objects_v2``."""
        return cls(
            key=entry["Key"],
            last_modified=_as_utc(entry["LastModified"]),
            size=int(entry.get("Size", 0)),
            storage_class=entry.get("StorageClass"),
        )

    @classmethod
    def from_version(cls, entry: Dict[str, Any]) -> "Item":
        """Build from a ``Versions`` entry of ``list_object_versions``."""
        return cls(
            key=entry["Key"],
            last_modified=_as_utc(entry["LastModified"]),
            size=int(entry.get("Size", 0)),
            storage_class=entry.get("StorageClass"),
            is_latest=bool(entry.get("IsLatest", False)),
        )


@dataclass
class Page:
    """One page of a listing.

    ``next_cursor`` is set iff more pages remain. Its shape depends on the
    lister that produced the page.
    """
    items: List[Item] = field(default_factory=list)
    common_prefixes: List[str] = field(default_factory=list)
    next_cursor: Optional[Any] = None
