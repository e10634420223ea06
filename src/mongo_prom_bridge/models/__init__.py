"""
Data models for mongo-prom-bridge.
"""

from .collection_descriptor import CollectionDescriptor
from .metric_sample import MetricSample
from .metric_series import MetricSeries
from .query_request import QueryRequest
from .query_result import QueryResult

__all__ = [
    "CollectionDescriptor",
    "MetricSample",
    "MetricSeries",
    "QueryRequest",
    "QueryResult",
]
