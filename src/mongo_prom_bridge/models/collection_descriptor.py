"""
CollectionDescriptor model describing where and how a metric is stored.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class CollectionDescriptor:
    """
    Field layout of a MongoDB collection holding metric documents.

    Attributes:
        name: MongoDB collection name.
        time_field: Document field holding the sample timestamp.
        metric_field: Document field whose value becomes the __name__ label.
        value_field: Document field holding the numeric sample value.
        label_fields: Query label name -> document field name.
        default_labels: Labels applied when a document lacks the field.
    """

    name: str
    time_field: str = ""
    metric_field: str = ""
    value_field: str = ""
    label_fields: Mapping[str, str] = field(default_factory=dict)
    default_labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "label_fields", MappingProxyType(dict(self.label_fields))
        )
        object.__setattr__(
            self,
            "default_labels",
            MappingProxyType({k: str(v) for k, v in self.default_labels.items()}),
        )

    def to_dict(self) -> dict:
        """
        Convert to dictionary using the configuration file's key names.

        Returns:
            Dictionary with name, field names, labelFields and defaultLabels.
        """
        return {
            "name": self.name,
            "timeField": self.time_field,
            "metricField": self.metric_field,
            "valueField": self.value_field,
            "labelFields": dict(self.label_fields),
            "defaultLabels": dict(self.default_labels)
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CollectionDescriptor":
        """
        Create CollectionDescriptor from a configuration entry.

        Args:
            data: Dictionary with name, timeField, metricField, valueField,
                labelFields and defaultLabels keys.

        Returns:
            CollectionDescriptor instance.
        """
        return cls(
            name=data["name"],
            time_field=data.get("timeField") or "",
            metric_field=data.get("metricField") or "",
            value_field=data.get("valueField") or "",
            label_fields=data.get("labelFields") or {},
            default_labels=data.get("defaultLabels") or {}
        )
