"""
MappingTable resolving metric names to collection descriptors.
"""

from types import MappingProxyType
from typing import Mapping

from .exceptions import ConfigError, UnknownMetricError
from .models import CollectionDescriptor


class MappingTable:
    """
    Read-only lookup from metric name to CollectionDescriptor.

    Built once at startup and passed into the query engine. Nothing
    mutates it afterwards, so concurrent reads need no locking.

    Example:
        table = MappingTable.from_config({
            "collections": {"http": {"name": "metrics_http", ...}},
            "mappings": {"http_requests_total": "http"},
        })
        descriptor = table.resolve("http_requests_total")
    """

    def __init__(
        self,
        collections: Mapping[str, CollectionDescriptor],
        mappings: Mapping[str, str]
    ):
        """
        Initialize the table.

        Args:
            collections: Collection key -> descriptor.
            mappings: Metric name -> collection key.

        Raises:
            ConfigError: If a mapping references an undefined collection.
        """
        resolved = {}
        for metric, key in mappings.items():
            if key not in collections:
                raise ConfigError(
                    f"metric {metric!r} maps to undefined collection {key!r}"
                )
            resolved[metric] = collections[key]

        self._collections = MappingProxyType(dict(collections))
        self._metrics = MappingProxyType(resolved)

    @classmethod
    def from_config(cls, data: dict) -> "MappingTable":
        """
        Build the table from the 'collections' and 'mappings' config sections.

        Args:
            data: Parsed configuration dictionary.

        Returns:
            MappingTable instance.

        Raises:
            ConfigError: If a collection entry is malformed.
        """
        collections = {}
        for key, entry in (data.get("collections") or {}).items():
            if not isinstance(entry, dict) or not entry.get("name"):
                raise ConfigError(f"collection {key!r} must define a name")
            collections[key] = CollectionDescriptor.from_dict(entry)

        return cls(collections, data.get("mappings") or {})

    def resolve(self, metric: str) -> CollectionDescriptor:
        """
        Get the descriptor for a metric name.

        Args:
            metric: Metric name from the query.

        Returns:
            The CollectionDescriptor registered for this metric.

        Raises:
            UnknownMetricError: If the metric is not mapped.
        """
        try:
            return self._metrics[metric]
        except KeyError:
            raise UnknownMetricError(metric) from None

    def metrics(self) -> list[str]:
        """Registered metric names, sorted."""
        return sorted(self._metrics)

    @property
    def collections(self) -> Mapping[str, CollectionDescriptor]:
        return self._collections

    def __contains__(self, metric: str) -> bool:
        return metric in self._metrics

    def __len__(self) -> int:
        return len(self._metrics)
