"""
Grouping of decoded samples into label-keyed series.
"""

import json
import logging
from typing import Any, Iterable, Optional

from .decoder import decode_document
from .models import CollectionDescriptor, MetricSample, MetricSeries

logger = logging.getLogger(__name__)


def label_signature(labels: dict[str, str]) -> str:
    """Canonical grouping key of a label set.

    Keys are sorted and separators fixed, so two label sets with the same
    content map to the same key however they were built.
    """
    return json.dumps(labels, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class SeriesAggregator:
    """
    Folds samples into series keyed by label signature.

    In range mode every sample is appended to its series in arrival
    order. In instant mode each series keeps only the sample with the
    greatest timestamp; on equal timestamps the sample seen first is kept.

    Series come out in the order their label set was first seen.
    """

    def __init__(self, ranged: bool = False):
        self.ranged = ranged
        self.skipped = 0
        self._series: dict[str, MetricSeries] = {}

    def add(self, sample: Optional[MetricSample]) -> None:
        """
        Fold one sample into its series.

        Args:
            sample: Decoded sample, or None for a skipped document.
        """
        if sample is None:
            self.skipped += 1
            return

        signature = label_signature(sample.labels)
        series = self._series.get(signature)
        if series is None:
            self._series[signature] = MetricSeries(labels=dict(sample.labels), samples=[sample])
            return

        if self.ranged:
            series.samples.append(sample)
        elif sample.timestamp > series.samples[0].timestamp:
            series.samples[0] = sample

    def extend(self, samples: Iterable[Optional[MetricSample]]) -> None:
        for sample in samples:
            self.add(sample)

    def add_documents(self, documents: Iterable[Any], descriptor: CollectionDescriptor) -> None:
        """
        Decode and fold every document of a cursor.

        Errors raised by the cursor itself propagate to the caller.

        Args:
            documents: Single-pass iterable of raw store documents.
            descriptor: Field layout of the collection.
        """
        for document in documents:
            self.add(decode_document(document, descriptor))

        if self.skipped:
            logger.warning("Skipped %d undecodable documents", self.skipped)

    def series(self) -> list[MetricSeries]:
        """Aggregated series in first-seen order."""
        return list(self._series.values())

    def __len__(self) -> int:
        return len(self._series)


def aggregate(samples: Iterable[Optional[MetricSample]], ranged: bool = False) -> list[MetricSeries]:
    """
    Group samples into series in one call.

    Args:
        samples: Decoded samples in arrival order.
        ranged: Keep every sample (matrix) rather than the latest (vector).

    Returns:
        List of MetricSeries.
    """
    aggregator = SeriesAggregator(ranged=ranged)
    aggregator.extend(samples)
    return aggregator.series()
