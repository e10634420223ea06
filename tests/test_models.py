"""Tests for data models."""

from dataclasses import FrozenInstanceError

import pytest

from mongo_prom_bridge.exceptions import BadDataError
from mongo_prom_bridge.models import (
    CollectionDescriptor,
    MetricSample,
    MetricSeries,
    QueryRequest,
    QueryResult,
)

from conftest import HTTP_COLLECTION


class TestCollectionDescriptor:
    """Test CollectionDescriptor model."""

    def test_from_dict(self) -> None:
        descriptor = CollectionDescriptor.from_dict(HTTP_COLLECTION)
        assert descriptor.name == "metrics_http"
        assert descriptor.time_field == "timestamp"
        assert descriptor.metric_field == "metric_name"
        assert descriptor.value_field == "value"
        assert descriptor.label_fields["code"] == "status_code"
        assert descriptor.default_labels == {"environment": "production"}

    def test_from_dict_minimal(self) -> None:
        descriptor = CollectionDescriptor.from_dict({"name": "metrics"})
        assert descriptor.time_field == ""
        assert dict(descriptor.label_fields) == {}
        assert dict(descriptor.default_labels) == {}

    def test_to_dict(self) -> None:
        descriptor = CollectionDescriptor.from_dict(HTTP_COLLECTION)
        assert descriptor.to_dict() == HTTP_COLLECTION

    def test_attributes_frozen(self) -> None:
        descriptor = CollectionDescriptor(name="metrics")
        with pytest.raises(FrozenInstanceError):
            descriptor.name = "other"

    def test_label_fields_read_only(self) -> None:
        source = {"code": "status_code"}
        descriptor = CollectionDescriptor(name="metrics", label_fields=source)
        with pytest.raises(TypeError):
            descriptor.label_fields["method"] = "http_method"

        source["method"] = "http_method"
        assert "method" not in descriptor.label_fields

    def test_default_labels_stringified(self) -> None:
        descriptor = CollectionDescriptor(name="metrics", default_labels={"shard": 3})
        assert descriptor.default_labels["shard"] == "3"


class TestQueryRequest:
    """Test QueryRequest validation."""

    def test_instant_request(self) -> None:
        request = QueryRequest(metric="up", matchers={"job": "api"})
        assert request.has_window is False
        assert request.result_type == "vector"

    def test_range_request(self) -> None:
        request = QueryRequest(metric="up", start=10.0, end=20.0, step=5.0, is_range=True)
        assert request.has_window is True
        assert request.result_type == "matrix"

    def test_missing_metric(self) -> None:
        with pytest.raises(BadDataError):
            QueryRequest(metric="")

    def test_end_before_start(self) -> None:
        with pytest.raises(BadDataError) as exc_info:
            QueryRequest(metric="up", start=20.0, end=10.0, is_range=True)
        assert "before start" in str(exc_info.value)

    def test_equal_start_and_end(self) -> None:
        request = QueryRequest(metric="up", start=10.0, end=10.0, is_range=True)
        assert request.start == request.end

    def test_half_window(self) -> None:
        with pytest.raises(BadDataError):
            QueryRequest(metric="up", start=10.0)

    def test_range_requires_window(self) -> None:
        with pytest.raises(BadDataError):
            QueryRequest(metric="up", is_range=True)

    def test_non_positive_step(self) -> None:
        with pytest.raises(BadDataError):
            QueryRequest(metric="up", start=10.0, end=20.0, step=0, is_range=True)

    def test_matchers_copied(self) -> None:
        matchers = {"job": "api"}
        request = QueryRequest(metric="up", matchers=matchers)
        matchers["job"] = "web"
        assert request.matchers["job"] == "api"

    def test_to_dict(self) -> None:
        request = QueryRequest(metric="up", matchers={"job": "api"})
        assert request.to_dict() == {
            "metric": "up",
            "matchers": {"job": "api"},
            "start": None,
            "end": None,
            "step": None,
            "is_range": False
        }


class TestMetricSample:
    """Test MetricSample model."""

    def test_to_prom_value(self) -> None:
        sample = MetricSample(timestamp=1704067200.5, value="42")
        assert sample.to_prom_value() == [1704067200.5, "42"]

    def test_from_prom_value(self) -> None:
        sample = MetricSample.from_prom_value([1704067200, "3.5"], {"job": "api"})
        assert sample.timestamp == 1704067200.0
        assert sample.value == "3.5"
        assert sample.labels == {"job": "api"}

    def test_from_dict(self) -> None:
        sample = MetricSample.from_dict({"timestamp": "10", "value": 1})
        assert sample.timestamp == 10.0
        assert sample.value == "1"
        assert sample.labels == {}


class TestMetricSeries:
    """Test MetricSeries model."""

    def test_to_vector_dict(self) -> None:
        series = MetricSeries(
            labels={"job": "api"},
            samples=[MetricSample(timestamp=20.0, value="7")]
        )
        assert series.to_vector_dict() == {"metric": {"job": "api"}, "value": [20.0, "7"]}

    def test_to_matrix_dict(self) -> None:
        series = MetricSeries(
            labels={"job": "api"},
            samples=[
                MetricSample(timestamp=1.0, value="a"),
                MetricSample(timestamp=2.0, value="b"),
            ]
        )
        assert series.to_matrix_dict() == {
            "metric": {"job": "api"},
            "values": [[1.0, "a"], [2.0, "b"]]
        }

    def test_from_prom_matrix(self) -> None:
        data = {
            "metric": {"__name__": "up"},
            "values": [[1704067200, "1"], [1704067260, "0"]]
        }
        series = MetricSeries.from_prom_matrix(data)
        assert series.labels == {"__name__": "up"}
        assert len(series.samples) == 2
        assert series.samples[1].value == "0"

    def test_from_prom_vector(self) -> None:
        series = MetricSeries.from_prom_vector({"metric": {}, "value": [1704067200, "5"]})
        assert len(series.samples) == 1
        assert series.samples[0].timestamp == 1704067200.0

    def test_from_prom_vector_empty(self) -> None:
        series = MetricSeries.from_prom_vector({"metric": {}})
        assert series.samples == []


class TestQueryResult:
    """Test QueryResult envelope."""

    def test_success_vector(self) -> None:
        series = [MetricSeries(labels={"job": "api"}, samples=[MetricSample(10.0, "1")])]
        result = QueryResult.success("vector", series)

        assert result.to_prom_response() == {
            "status": "success",
            "data": {
                "resultType": "vector",
                "result": [{"metric": {"job": "api"}, "value": [10.0, "1"]}]
            }
        }

    def test_success_matrix(self) -> None:
        series = [MetricSeries(labels={}, samples=[MetricSample(1.0, "a"), MetricSample(2.0, "b")])]
        body = QueryResult.success("matrix", series).to_prom_response()

        assert body["data"]["resultType"] == "matrix"
        assert body["data"]["result"][0]["values"] == [[1.0, "a"], [2.0, "b"]]

    def test_success_empty(self) -> None:
        body = QueryResult.success("vector", []).to_prom_response()
        assert body == {"status": "success", "data": {"resultType": "vector", "result": []}}

    def test_success_rejects_unknown_result_type(self) -> None:
        with pytest.raises(ValueError):
            QueryResult.success("streams", [])

    def test_failure(self) -> None:
        result = QueryResult.failure("bad_data", "unknown metric")
        assert result.is_success is False
        assert result.to_prom_response() == {
            "status": "error",
            "errorType": "bad_data",
            "error": "unknown metric"
        }

    def test_total_samples(self) -> None:
        series = [
            MetricSeries(labels={"a": "1"}, samples=[MetricSample(1.0, "1"), MetricSample(2.0, "2")]),
            MetricSeries(labels={"a": "2"}, samples=[MetricSample(1.0, "3")]),
        ]
        assert QueryResult.success("matrix", series).total_samples == 3

    def test_from_prom_response_matrix(self) -> None:
        response = {
            "status": "success",
            "data": {
                "resultType": "matrix",
                "result": [{"metric": {"code": "200"}, "values": [[1, "1"], [2, "2"]]}]
            }
        }
        result = QueryResult.from_prom_response(response)
        assert result.is_success
        assert result.result_type == "matrix"
        assert result.series[0].labels == {"code": "200"}
        assert result.total_samples == 2

    def test_from_prom_response_error(self) -> None:
        result = QueryResult.from_prom_response(
            {"status": "error", "errorType": "internal", "error": "store down"}
        )
        assert result.error_type == "internal"
        assert result.error == "store down"

    def test_dict_roundtrip(self) -> None:
        original = QueryResult.success(
            "vector", [MetricSeries(labels={"a": "1"}, samples=[MetricSample(1.0, "1", {"a": "1"})])]
        )
        restored = QueryResult.from_dict(original.to_dict())
        assert restored.to_prom_response() == original.to_prom_response()
