"""
Pagination strategies over the object storage listing API.

A lister turns one (bucket, prefix, delimiter) into a finite sequence of
pages. The flat variant follows ``list_objects_v2`` continuation tokens;
the version variant follows the key/version-id marker pair of
``list_object_versions``. Any API or transport error, malformed response,
or truncated page that cannot be resumed ends the listing.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Iterator, Tuple, Callable

from botocore.exceptions import BotoCoreError, ClientError

from shared.errors import StorageListingError
from shared.logging import get_logger
from shared.tracing import trace_operation
from .models import Item, Page

DEFAULT_MAX_KEYS = 1000


class Lister(ABC):
    """Drives pagination for one bucket/prefix listing."""

    mode = ""
    operation = ""

    def __init__(
        self,
        client,
        bucket: str,
        prefix: str = "",
        delimiter: str = "",
        max_keys: int = DEFAULT_MAX_KEYS,
        on_page: Optional[Callable[[str], None]] = None
    ):
        self.client = client
        self.bucket = bucket
        self.prefix = prefix
        self.delimiter = delimiter
        self.max_keys = max_keys
        self.on_page = on_page
        self.logger = get_logger(f"s3_exporter.lister.{self.mode}")

    def pages(self) -> Iterator[Page]:
        """Yield pages until the API reports no more results.

        Raises:
            StorageListingError: on the first failed listing call.
        """
        cursor = None
        page_number = 0
        while True:
            page_number += 1
            with trace_operation(
                f"s3.{self.operation}",
                bucket=self.bucket,
                prefix=self.prefix,
                page=page_number
            ):
                page = self.fetch_page(cursor)
            if self.on_page:
                self.on_page(self.mode)
            yield page
            if page.next_cursor is None:
                return
            cursor = page.next_cursor

    def fetch_page(self, cursor: Optional[Any]) -> Page:
        """Request the page at ``cursor``; ``None`` is the first page."""
        params = self._base_params()
        params.update(self._cursor_params(cursor))
        try:
            response = self._call(params)
        except (BotoCoreError, ClientError) as exc:
            raise self._listing_error(str(exc)) from exc
        try:
            return self._to_page(response)
        except (KeyError, TypeError, ValueError) as exc:
            raise self._listing_error(f"malformed response: {exc!r}") from exc

    def _listing_error(self, message: str) -> StorageListingError:
        self.logger.error(
            "Listing call failed",
            operation=self.operation,
            bucket=self.bucket,
            prefix=self.prefix,
            error=message
        )
        return StorageListingError(
            self.operation,
            message,
            details={"bucket": self.bucket, "prefix": self.prefix}
        )

    def _base_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "Bucket": self.bucket,
            "MaxKeys": self.max_keys,
        }
        if self.prefix:
            params["Prefix"] = self.prefix
        if self.delimiter:
            params["Delimiter"] = self.delimiter
        return params

    @staticmethod
    def _common_prefixes(response: Dict[str, Any]) -> list:
        return [
            entry.get("Prefix", "")
            for entry in response.get("CommonPrefixes") or []
        ]

    @abstractmethod
    def _call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Issue the listing call."""

    @abstractmethod
    def _cursor_params(self, cursor: Optional[Any]) -> Dict[str, Any]:
        """Request parameters that resume the listing at ``cursor``."""

    @abstractmethod
    def _to_page(self, response: Dict[str, Any]) -> Page:
        """Convert a listing response into a page."""


class ObjectLister(Lister):
    """Lists the current state of every object."""

    mode = "objects"
    operation = "list_objects_v2"

    def _call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.list_objects_v2(**params)

    def _cursor_params(self, cursor: Optional[str]) -> Dict[str, Any]:
        if cursor is None:
            return {}
        return {"ContinuationToken": cursor}

    def _to_page(self, response: Dict[str, Any]) -> Page:
        return Page(
            items=[Item.from_object(entry) for entry in response.get("Contents") or []],
            common_prefixes=self._common_prefixes(response),
            next_cursor=response.get("NextContinuationToken") or None,
        )


class VersionLister(Lister):
    """Lists every historical version of every object.

    Delete markers carry no size and are not counted.
    """

    mode = "versions"
    operation = "list_object_versions"

    def _call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.list_object_versions(**params)

    def _cursor_params(self, cursor: Optional[Tuple[str, str]]) -> Dict[str, Any]:
        if cursor is None:
            return {}
        key_marker, version_id_marker = cursor
        params = {"KeyMarker": key_marker}
        if version_id_marker:
            params["VersionIdMarker"] = version_id_marker
        return params

    def _to_page(self, response: Dict[str, Any]) -> Page:
        next_cursor = None
        if response.get("IsTruncated"):
            if not response.get("NextKeyMarker"):
                raise self._listing_error("truncated response without NextKeyMarker")
            next_cursor = (
                response["NextKeyMarker"],
                response.get("NextVersionIdMarker", ""),
            )
        return Page(
            items=[Item.from_version(entry) for entry in response.get("Versions") or []],
            common_prefixes=self._common_prefixes(response),
            next_cursor=next_cursor,
        )


def create_lister(
    client,
    bucket: str,
    prefix: str = "",
    delimiter: str = "",
    versions: bool = False,
    max_keys: int = DEFAULT_MAX_KEYS,
    on_page: Optional[Callable[[str], None]] = None
) -> Lister:
    """Pick the lister for the configured listing mode."""
    lister_class = VersionLister if versions else ObjectLister
    return lister_class(
        client,
        bucket,
        prefix=prefix,
        delimiter=delimiter,
        max_keys=max_keys,
        on_page=on_page
    )
