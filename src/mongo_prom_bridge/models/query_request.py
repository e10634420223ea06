"""
QueryRequest model representing one validated inbound query.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from ..exceptions import BadDataError


@dataclass(frozen=True)
class QueryRequest:
    """
    A selector query ready for translation into a store filter.

    Validation happens on construction, so an invalid window or step is
    rejected before any store call is made.

    Attributes:
        metric: Metric name to resolve through the mapping table.
        matchers: Label name -> required exact value.
        start: Inclusive window start in Unix seconds.
        end: Inclusive window end in Unix seconds.
        step: Range query resolution in seconds (validated, not applied).
        is_range: Whether the answer is a matrix rather than a vector.
    """

    metric: str
    matchers: Mapping[str, str] = field(default_factory=dict)
    start: Optional[float] = None
    end: Optional[float] = None
    step: Optional[float] = None
    is_range: bool = False

    def __post_init__(self) -> None:
        if not self.metric:
            raise BadDataError("missing metric name")
        if (self.start is None) != (self.end is None):
            raise BadDataError("start and end must be given together")
        if self.start is not None and self.end < self.start:
            raise BadDataError("end time must not be before start time")
        if self.is_range:
            if self.start is None:
                raise BadDataError("range queries require start and end")
            if self.step is not None and self.step <= 0:
                raise BadDataError("zero or negative query resolution step widths are not accepted")
        object.__setattr__(self, "matchers", MappingProxyType(dict(self.matchers)))

    @property
    def has_window(self) -> bool:
        """Whether the request restricts the time range."""
        return self.start is not None and self.end is not None

    @property
    def result_type(self) -> str:
        """Prometheus result type this request produces."""
        return "matrix" if self.is_range else "vector"

    def to_dict(self) -> dict:
        """
        Convert to dictionary for logging and serialization.

        Returns:
            Dictionary with metric, matchers, window, step and range flag.
        """
        return {
            "metric": self.metric,
            "matchers": dict(self.matchers),
            "start": self.start,
            "end": self.end,
            "step": self.step,
            "is_range": self.is_range
        }
