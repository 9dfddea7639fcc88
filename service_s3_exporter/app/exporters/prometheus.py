"""
Prometheus exposition of probe results.
"""

from typing import List, Iterator

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from ..probe import ProbeQuery, ProbeResult

NAMESPACE = "s3"


def _name(name: str) -> str:
    return f"{NAMESPACE}_{name}"


class ProbeCollector(Collector):
    """Turns the results of one probe request into gauge families.

    Listing success and duration are always present. Without a delimiter
    the object size/count family follows; with one, only the common prefix
    count does. A failed listing contributes nothing beyond success and
    duration.
    """

    def __init__(self, query: ProbeQuery, results: List[ProbeResult]):
        self.query = query
        self.results = results

    def _label_names(self, delimiter: bool) -> List[str]:
        names = ["bucket", "prefix"]
        if delimiter:
            names.append("delimiter")
        if self.query.storage_class:
            names.append("storage_class")
        return names

    def _label_values(self, result: ProbeResult, delimiter: bool) -> List[str]:
        values = [result.bucket, result.prefix]
        if delimiter:
            values.append(result.delimiter)
        if self.query.storage_class:
            values.append(result.storage_class)
        return values

    def collect(self) -> Iterator[Metric]:
        status_labels = self._label_names(delimiter=True)
        list_success = GaugeMetricFamily(
            _name("list_success"),
            "If the listing operation was a success",
            labels=status_labels
        )
        list_duration = GaugeMetricFamily(
            _name("list_duration_seconds"),
            "The total duration of the list operation",
            labels=status_labels
        )
        for result in self.results:
            values = self._label_values(result, delimiter=True)
            list_success.add_metric(values, 1 if result.success else 0)
            list_duration.add_metric(values, result.duration_seconds)
        yield list_success
        yield list_duration

        succeeded = [result for result in self.results if result.success]

        if self.query.delimiter:
            common_prefixes = GaugeMetricFamily(
                _name("common_prefixes"),
                "A count of all the keys between the prefix and the next occurrence of the delimiter",
                labels=["bucket", "prefix", "delimiter"]
            )
            for result in succeeded:
                common_prefixes.add_metric(
                    [result.bucket, result.prefix, result.delimiter],
                    result.aggregate.common_prefix_count
                )
            if common_prefixes.samples:
                yield common_prefixes
            return

        object_labels = self._label_names(delimiter=False)
        families = {
            "last_modified_object_date": GaugeMetricFamily(
                _name("last_modified_object_date"),
                "The last modified date of the object that was modified most recently",
                labels=object_labels
            ),
            "last_modified_object_size_bytes": GaugeMetricFamily(
                _name("last_modified_object_size_bytes"),
                "The size of the object that was modified most recently",
                labels=object_labels
            ),
            "objects": GaugeMetricFamily(
                _name("objects"),
                "The total number of objects for the bucket/prefix combination",
                labels=object_labels
            ),
            "objects_size_sum_bytes": GaugeMetricFamily(
                _name("objects_size_sum_bytes"),
                "The total size of all objects summed",
                labels=object_labels
            ),
            "biggest_object_size_bytes": GaugeMetricFamily(
                _name("biggest_object_size_bytes"),
                "The size of the biggest object",
                labels=object_labels
            ),
        }
        for result in succeeded:
            values = self._label_values(result, delimiter=False)
            aggregate = result.aggregate
            families["last_modified_object_date"].add_metric(values, aggregate.last_modified_timestamp)
            families["last_modified_object_size_bytes"].add_metric(values, aggregate.last_modified_size_bytes)
            families["objects"].add_metric(values, aggregate.object_count)
            families["objects_size_sum_bytes"].add_metric(values, aggregate.total_size_bytes)
            families["biggest_object_size_bytes"].add_metric(values, aggregate.biggest_size_bytes)

        for family in families.values():
            if family.samples:
                yield family


def render_probe(query: ProbeQuery, results: List[ProbeResult]) -> bytes:
    """Render probe results in the Prometheus text format.

    Each call uses its own registry so concurrent probes never share state.
    """
    registry = CollectorRegistry()
    registry.register(ProbeCollector(query, results))
    return generate_latest(registry)
