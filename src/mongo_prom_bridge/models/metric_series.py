"""
MetricSeries model representing datapoints that share one label set.
"""

from dataclasses import dataclass, field

from .metric_sample import MetricSample


@dataclass
class MetricSeries:
    """
    A series of metric datapoints sharing common labels.

    Instant results hold exactly one sample; range results hold samples
    in the order the store returned them.

    Attributes:
        labels: Dictionary of label key-value pairs identifying this series.
        samples: List of MetricSample objects.
    """

    labels: dict[str, str]
    samples: list[MetricSample] = field(default_factory=list)

    def to_vector_dict(self) -> dict:
        """
        Render as a Prometheus vector entry using the latest held sample.

        Returns:
            Dictionary with 'metric' and a single 'value' pair.
        """
        return {
            "metric": dict(self.labels),
            "value": self.samples[-1].to_prom_value()
        }

    def to_matrix_dict(self) -> dict:
        """
        Render as a Prometheus matrix entry.

        Returns:
            Dictionary with 'metric' and the ordered 'values' pairs.
        """
        return {
            "metric": dict(self.labels),
            "values": [sample.to_prom_value() for sample in self.samples]
        }

    def to_dict(self) -> dict:
        return {
            "labels": dict(self.labels),
            "samples": [sample.to_dict() for sample in self.samples]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MetricSeries":
        samples = [MetricSample.from_dict(s) for s in data.get("samples", [])]
        return cls(
            labels=data["labels"],
            samples=samples
        )

    @classmethod
    def from_prom_matrix(cls, data: dict) -> "MetricSeries":
        """
        Create MetricSeries from a matrix result entry.

        Format: {"metric": {labels}, "values": [[ts, val], ...]}

        Args:
            data: Dictionary with 'metric' (labels) and 'values' (datapoints).

        Returns:
            MetricSeries instance.
        """
        labels = data.get("metric", {})
        values = data.get("values", [])
        samples = [MetricSample.from_prom_value(v, labels) for v in values]
        return cls(labels=labels, samples=samples)

    @classmethod
    def from_prom_vector(cls, data: dict) -> "MetricSeries":
        """
        Create MetricSeries from a vector result entry.

        Format: {"metric": {labels}, "value": [ts, val]}

        Args:
            data: Dictionary with 'metric' (labels) and 'value' (single datapoint).

        Returns:
            MetricSeries instance with one sample.
        """
        labels = data.get("metric", {})
        value = data.get("value", [])
        samples = [MetricSample.from_prom_value(value, labels)] if value else []
        return cls(labels=labels, samples=samples)
