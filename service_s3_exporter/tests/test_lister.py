"""
Unit tests for the listing pagination strategies.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from botocore.exceptions import EndpointConnectionError

from service_s3_exporter.app.listing import ObjectLister, VersionLister, create_lister
from shared.errors import StorageListingError
from shared.test_helpers import (
    FakeS3Client,
    client_error,
    make_object,
    make_version,
    objects_response,
    utc,
    versions_response,
)


class TestObjectLister:
    """Test cases for ObjectLister."""

    def test_single_page(self):
        """Test a non-truncated response yields exactly one page."""
        client = FakeS3Client(object_pages={"mock": [
            objects_response([make_object("one", 1234, utc(2019, 6, 13, 21))])
        ]})

        pages = list(ObjectLister(client, "mock", prefix="one").pages())

        assert len(pages) == 1
        assert pages[0].items[0].key == "one"
        assert pages[0].items[0].size == 1234
        assert pages[0].next_cursor is None
        assert client.list_objects_calls == [
            {"Bucket": "mock", "MaxKeys": 1000, "Prefix": "one"}
        ]

    def test_follows_continuation_tokens(self):
        """Test each returned token is echoed back until none is returned."""
        client = FakeS3Client(object_pages={"mock": [
            objects_response([make_object("a", 1, utc(2020, 1, 1))], next_token="token-1"),
            objects_response([make_object("b", 2, utc(2020, 1, 2))], next_token="token-2"),
            objects_response([make_object("c", 3, utc(2020, 1, 3))]),
        ]})

        pages = list(ObjectLister(client, "mock").pages())

        assert [page.items[0].key for page in pages] == ["a", "b", "c"]
        assert [call.get("ContinuationToken") for call in client.list_objects_calls] == [
            None, "token-1", "token-2"
        ]

    def test_delimiter_and_common_prefixes(self):
        """Test the delimiter is sent and common prefixes are collected."""
        client = FakeS3Client(object_pages={"mock": [
            objects_response(common_prefixes=["one/", "two/", "three/"])
        ]})

        pages = list(ObjectLister(client, "mock", prefix="mock-prefix", delimiter="/").pages())

        assert pages[0].common_prefixes == ["one/", "two/", "three/"]
        assert client.list_objects_calls[0]["Delimiter"] == "/"

    def test_empty_prefix_and_delimiter_are_not_sent(self):
        """Test empty optional parameters stay out of the request."""
        client = FakeS3Client(object_pages={"mock": [objects_response()]})

        list(ObjectLister(client, "mock", max_keys=50).pages())

        assert client.list_objects_calls == [{"Bucket": "mock", "MaxKeys": 50}]

    def test_missing_contents_key(self):
        """Test responses without Contents yield an empty page."""
        client = MagicMock()
        client.list_objects_v2.return_value = {"IsTruncated": False, "KeyCount": 0}

        pages = list(ObjectLister(client, "mock").pages())

        assert pages[0].items == []
        assert pages[0].common_prefixes == []

    def test_naive_timestamps_are_utc(self):
        """Test naive timestamps from S3-compatible stores are read as UTC."""
        client = FakeS3Client(object_pages={"mock": [
            objects_response([make_object("one", 1, datetime(2019, 6, 13, 21))])
        ]})

        page = next(ObjectLister(client, "mock").pages())

        assert page.items[0].last_modified == datetime(2019, 6, 13, 21, tzinfo=timezone.utc)

    def test_error_is_wrapped(self):
        """Test a client error surfaces as StorageListingError."""
        client = FakeS3Client(object_pages={"mock": [client_error("AccessDenied")]})

        with pytest.raises(StorageListingError) as exc_info:
            list(ObjectLister(client, "mock").pages())

        assert exc_info.value.operation == "list_objects_v2"
        assert "AccessDenied" in exc_info.value.message
        assert exc_info.value.details == {"bucket": "mock", "prefix": ""}

    def test_malformed_entry_is_wrapped(self):
        """Test an entry missing required fields surfaces as StorageListingError."""
        client = FakeS3Client(object_pages={"mock": [
            objects_response([{"Key": "x", "Size": 1}])
        ]})

        with pytest.raises(StorageListingError) as exc_info:
            list(ObjectLister(client, "mock").pages())

        assert exc_info.value.operation == "list_objects_v2"
        assert "malformed response" in exc_info.value.message
        assert "LastModified" in exc_info.value.message

    def test_error_mid_pagination_stops_without_retry(self):
        """Test the first failure ends the listing after the pages already yielded."""
        client = FakeS3Client(object_pages={"mock": [
            objects_response([make_object("a", 1, utc(2020, 1, 1))], next_token="token-1"),
            EndpointConnectionError(endpoint_url="http://localhost:9000"),
            objects_response([make_object("c", 3, utc(2020, 1, 3))]),
        ]})
        seen = []

        with pytest.raises(StorageListingError):
            for page in ObjectLister(client, "mock").pages():
                seen.append(page)

        assert len(seen) == 1
        assert len(client.list_objects_calls) == 2

    def test_on_page_callback(self):
        """Test the page callback fires once per fetched page."""
        client = FakeS3Client(object_pages={"mock": [
            objects_response(next_token="t"),
            objects_response(),
        ]})
        on_page = MagicMock()

        list(ObjectLister(client, "mock", on_page=on_page).pages())

        assert on_page.call_count == 2
        on_page.assert_called_with("objects")


class TestVersionLister:
    """Test cases for VersionLister."""

    def test_single_page(self):
        """Test every version becomes an item with its latest flag."""
        client = FakeS3Client(version_pages={"mock-versioned": [
            versions_response([
                make_version("one", 2345, utc(2019, 6, 13, 20), is_latest=False, version_id="v1"),
                make_version("one", 1234, utc(2019, 6, 13, 21), is_latest=True, version_id="v2"),
            ])
        ]})

        pages = list(VersionLister(client, "mock-versioned", prefix="two-versions").pages())

        assert len(pages) == 1
        assert [(i.size, i.is_latest) for i in pages[0].items] == [(2345, False), (1234, True)]
        assert client.list_versions_calls[0]["Prefix"] == "two-versions"

    def test_follows_marker_pairs(self):
        """Test the key and version-id markers are echoed back together."""
        client = FakeS3Client(version_pages={"mock-versioned": [
            versions_response(
                [make_version("a", 1, utc(2020, 1, 1), True)],
                next_markers=("a", "v-a")
            ),
            versions_response(
                [make_version("b", 2, utc(2020, 1, 2), True)],
                next_markers=("b", "v-b")
            ),
            versions_response([make_version("c", 3, utc(2020, 1, 3), True)]),
        ]})

        pages = list(VersionLister(client, "mock-versioned").pages())

        assert len(pages) == 3
        calls = client.list_versions_calls
        assert "KeyMarker" not in calls[0]
        assert (calls[1]["KeyMarker"], calls[1]["VersionIdMarker"]) == ("a", "v-a")
        assert (calls[2]["KeyMarker"], calls[2]["VersionIdMarker"]) == ("b", "v-b")

    def test_delete_markers_are_not_items(self):
        """Test delete markers are ignored."""
        client = FakeS3Client(version_pages={"mock-versioned": [
            versions_response(
                [make_version("a", 10, utc(2020, 1, 1), False)],
                delete_markers=[{"Key": "a", "IsLatest": True, "LastModified": utc(2020, 2, 1)}]
            )
        ]})

        page = next(VersionLister(client, "mock-versioned").pages())

        assert [i.key for i in page.items] == ["a"]

    def test_truncated_without_marker_fails(self):
        """Test a truncated page that cannot be resumed is a listing error."""
        client = MagicMock()
        client.list_object_versions.return_value = {
            "IsTruncated": True,
            "Versions": [make_version("a", 1, utc(2020, 1, 1), True)],
        }

        with pytest.raises(StorageListingError) as exc_info:
            list(VersionLister(client, "mock-versioned").pages())

        assert "NextKeyMarker" in exc_info.value.message
        assert client.list_object_versions.call_count == 1

    def test_error_is_wrapped(self):
        """Test a client error surfaces as StorageListingError."""
        client = FakeS3Client(version_pages={"mock-versioned": [
            client_error("NoSuchBucket", "ListObjectVersions")
        ]})

        with pytest.raises(StorageListingError) as exc_info:
            list(VersionLister(client, "mock-versioned").pages())

        assert exc_info.value.operation == "list_object_versions"


class TestCreateLister:
    """Test cases for create_lister."""

    def test_selects_object_lister(self):
        """Test the flat variant is the default."""
        lister = create_lister(MagicMock(), "mock", prefix="p", delimiter="/")

        assert isinstance(lister, ObjectLister)
        assert (lister.bucket, lister.prefix, lister.delimiter) == ("mock", "p", "/")

    def test_selects_version_lister(self):
        """Test the version flag selects the version variant."""
        lister = create_lister(MagicMock(), "mock", versions=True, max_keys=10)

        assert isinstance(lister, VersionLister)
        assert lister.max_keys == 10
