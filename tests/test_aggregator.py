"""Tests for series aggregation."""

from datetime import datetime

from mongo_prom_bridge import (
    CollectionDescriptor,
    MetricSample,
    SeriesAggregator,
    aggregate,
    label_signature,
)

SERIES_X = {"__name__": "http_requests_total", "code": "200"}
SERIES_Y = {"__name__": "http_requests_total", "code": "500"}


class TestLabelSignature:
    """Test label_signature grouping key."""

    def test_construction_order_irrelevant(self) -> None:
        first = {"a": "1", "b": "2"}
        second = {}
        second["b"] = "2"
        second["a"] = "1"
        assert label_signature(first) == label_signature(second)

    def test_different_content_differs(self) -> None:
        assert label_signature({"a": "1"}) != label_signature({"a": "2"})
        assert label_signature({"a": "1"}) != label_signature({"a": "1", "b": ""})

    def test_no_delimiter_collisions(self) -> None:
        assert label_signature({"a": "1,b=2"}) != label_signature({"a": "1", "b": "2"})


class TestInstantAggregation:
    """Test vector mode: latest sample per series."""

    def test_same_labels_collide(self) -> None:
        series = aggregate([
            MetricSample(10.0, "5", {"a": "1", "b": "2"}),
            MetricSample(20.0, "7", {"b": "2", "a": "1"}),
        ])
        assert len(series) == 1

    def test_latest_wins(self) -> None:
        series = aggregate([
            MetricSample(10.0, "5", SERIES_X),
            MetricSample(20.0, "7", SERIES_X),
        ])
        assert [s.to_prom_value() for s in series[0].samples] == [[20.0, "7"]]

    def test_latest_wins_reverse_order(self) -> None:
        series = aggregate([
            MetricSample(20.0, "7", SERIES_X),
            MetricSample(10.0, "5", SERIES_X),
        ])
        assert [s.to_prom_value() for s in series[0].samples] == [[20.0, "7"]]

    def test_equal_timestamp_first_seen_wins(self) -> None:
        series = aggregate([
            MetricSample(10.0, "first", SERIES_X),
            MetricSample(10.0, "second", SERIES_X),
        ])
        assert series[0].samples[0].value == "first"

    def test_series_kept_apart(self) -> None:
        series = aggregate([
            MetricSample(10.0, "1", SERIES_X),
            MetricSample(10.0, "2", SERIES_Y),
            MetricSample(30.0, "3", SERIES_X),
        ])
        assert [s.labels["code"] for s in series] == ["200", "500"]
        assert series[0].samples[0].value == "3"
        assert series[1].samples[0].value == "2"


class TestRangeAggregation:
    """Test matrix mode: every sample in arrival order."""

    def test_arrival_order_preserved(self) -> None:
        series = aggregate([
            MetricSample(1.0, "a", SERIES_X),
            MetricSample(2.0, "b", SERIES_X),
            MetricSample(3.0, "c", SERIES_X),
        ], ranged=True)
        assert series[0].to_matrix_dict()["values"] == [[1.0, "a"], [2.0, "b"], [3.0, "c"]]

    def test_not_sorted_by_timestamp(self) -> None:
        series = aggregate([
            MetricSample(3.0, "c", SERIES_X),
            MetricSample(1.0, "a", SERIES_X),
        ], ranged=True)
        assert [s.timestamp for s in series[0].samples] == [3.0, 1.0]

    def test_interleaved_series(self) -> None:
        series = aggregate([
            MetricSample(1.0, "x1", SERIES_X),
            MetricSample(1.0, "y1", SERIES_Y),
            MetricSample(2.0, "x2", SERIES_X),
        ], ranged=True)
        assert len(series) == 2
        assert [s.value for s in series[0].samples] == ["x1", "x2"]
        assert [s.value for s in series[1].samples] == ["y1"]


class TestSeriesAggregator:
    """Test SeriesAggregator bookkeeping."""

    def test_skipped_documents_counted(self) -> None:
        aggregator = SeriesAggregator()
        aggregator.extend([None, MetricSample(1.0, "1", SERIES_X), None])
        assert aggregator.skipped == 2
        assert len(aggregator) == 1

    def test_add_documents(self, descriptor: CollectionDescriptor) -> None:
        documents = [
            {"timestamp": datetime(2024, 1, 1, 0, 0), "metric_name": "m", "value": 1, "status_code": 200},
            "garbage",
            {"timestamp": datetime(2024, 1, 1, 0, 1), "metric_name": "m", "value": 2, "status_code": 200},
        ]
        aggregator = SeriesAggregator(ranged=False)
        aggregator.add_documents(iter(documents), descriptor)

        series = aggregator.series()
        assert aggregator.skipped == 1
        assert len(series) == 1
        assert series[0].labels == {"environment": "production", "code": "200", "__name__": "m"}
        assert series[0].samples[0].value == "2"

    def test_empty(self) -> None:
        assert SeriesAggregator(ranged=True).series() == []
