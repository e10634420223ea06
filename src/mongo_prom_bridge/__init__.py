"""
Prometheus query API over metric documents stored in MongoDB
"""

from .aggregator import SeriesAggregator, aggregate, label_signature
from .client import PromQueryClient
from .decoder import decode_document
from .engine import QueryEngine
from .exceptions import (
    BadDataError,
    BridgeConnectionError,
    BridgeError,
    BridgeQueryError,
    ConfigError,
    StoreError,
    StoreTimeoutError,
    UnknownMetricError,
    UnsupportedQueryError,
)
from .filters import build_filter
from .mapping import MappingTable
from .models import CollectionDescriptor, MetricSample, MetricSeries, QueryRequest, QueryResult
from .selector import ParsedSelector, parse_selector
from .store import MongoStore

__version__ = "0.1.0"

__all__ = [
    "QueryEngine",
    "MappingTable",
    "MongoStore",
    "PromQueryClient",
    "SeriesAggregator",
    "aggregate",
    "label_signature",
    "build_filter",
    "decode_document",
    "parse_selector",
    "ParsedSelector",
    "CollectionDescriptor",
    "MetricSample",
    "MetricSeries",
    "QueryRequest",
    "QueryResult",
    "BridgeError",
    "ConfigError",
    "BadDataError",
    "UnknownMetricError",
    "UnsupportedQueryError",
    "StoreError",
    "StoreTimeoutError",
    "BridgeConnectionError",
    "BridgeQueryError",
]
