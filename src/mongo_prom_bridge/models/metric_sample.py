"""
MetricSample model representing a single decoded datapoint.
"""

from dataclasses import dataclass, field


@dataclass
class MetricSample:
    """
    A single metric datapoint decoded from a store document.

    Attributes:
        timestamp: Unix timestamp in seconds (may be fractional).
        value: The sample value as decimal text, as Prometheus renders it.
        labels: Label set of the series this sample belongs to.
    """

    timestamp: float
    value: str
    labels: dict[str, str] = field(default_factory=dict)

    def to_prom_value(self) -> list:
        """
        Render as Prometheus's [timestamp, "value"] pair.

        Returns:
            Two-element list of timestamp seconds and value text.
        """
        return [self.timestamp, self.value]

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary with timestamp, value and labels.
        """
        return {
            "timestamp": self.timestamp,
            "value": self.value,
            "labels": dict(self.labels)
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MetricSample":
        """
        Create MetricSample from dictionary.

        Args:
            data: Dictionary with timestamp, value and optional labels keys.

        Returns:
            MetricSample instance.
        """
        return cls(
            timestamp=float(data["timestamp"]),
            value=str(data["value"]),
            labels=dict(data.get("labels", {}))
        )

    @classmethod
    def from_prom_value(cls, value: list, labels: dict[str, str] | None = None) -> "MetricSample":
        """
        Create MetricSample from Prometheus's [timestamp, value] format.

        Args:
            value: List of [timestamp_seconds, value_string].
            labels: Labels of the enclosing series.

        Returns:
            MetricSample instance.
        """
        return cls(
            timestamp=float(value[0]),
            value=str(value[1]),
            labels=dict(labels or {})
        )
