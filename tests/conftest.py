"""Shared fixtures for mongo-prom-bridge tests."""

from typing import Any, Iterable, Optional

import bson
import pytest
from bson.raw_bson import RawBSONDocument

from mongo_prom_bridge import CollectionDescriptor, MappingTable


HTTP_COLLECTION = {
    "name": "metrics_http",
    "timeField": "timestamp",
    "metricField": "metric_name",
    "valueField": "value",
    "labelFields": {
        "code": "status_code",
        "method": "http_method",
        "path": "endpoint",
        "instance": "server_id",
    },
    "defaultLabels": {"environment": "production"},
}

CONFIG = {
    "collections": {"http_requests": HTTP_COLLECTION},
    "mappings": {
        "http_requests_total": "http_requests",
        "http_request_duration_seconds": "http_requests",
    },
}


class FakeStore:
    """In-memory stand-in for MongoStore that records every find call."""

    def __init__(self, documents: Optional[list[Any]] = None, error: Optional[Exception] = None):
        self.documents = documents or []
        self.error = error
        self.calls: list[tuple[str, dict, Optional[float]]] = []

    def find(self, collection: str, query_filter: dict, timeout: Optional[float] = None) -> Iterable[Any]:
        self.calls.append((collection, query_filter, timeout))
        return self._iterate()

    def _iterate(self) -> Iterable[Any]:
        yield from self.documents
        if self.error is not None:
            raise self.error

    def ping(self) -> bool:
        if self.error is not None:
            raise self.error
        return True


def invalid_utf8_document() -> RawBSONDocument:
    """Raw BSON document whose metric_name string is not valid UTF-8."""
    raw = bson.encode({"metric_name": "x"})
    return RawBSONDocument(raw.replace(b"x\x00", b"\xff\x00", 1))


@pytest.fixture
def descriptor() -> CollectionDescriptor:
    return CollectionDescriptor.from_dict(HTTP_COLLECTION)


@pytest.fixture
def mapping() -> MappingTable:
    return MappingTable.from_config(CONFIG)
