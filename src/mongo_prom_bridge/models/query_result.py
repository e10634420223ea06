"""
QueryResult model representing the Prometheus API response envelope.
"""

from dataclasses import dataclass, field
from typing import Optional

from .metric_series import MetricSeries

RESULT_TYPE_VECTOR = "vector"
RESULT_TYPE_MATRIX = "matrix"

ERROR_BAD_DATA = "bad_data"
ERROR_INTERNAL = "internal"


@dataclass
class QueryResult:
    """
    Result of a query: either a success carrying series or an error.

    Attributes:
        status: "success" or "error".
        result_type: "vector" or "matrix" (success only).
        series: List of MetricSeries objects (success only).
        error_type: "bad_data" or "internal" (error only).
        error: Human-readable error message (error only).
    """

    status: str
    result_type: Optional[str] = None
    series: list[MetricSeries] = field(default_factory=list)
    error_type: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, result_type: str, series: list[MetricSeries]) -> "QueryResult":
        """
        Build a success envelope.

        Args:
            result_type: "vector" or "matrix".
            series: Aggregated series.

        Returns:
            QueryResult with status "success".
        """
        if result_type not in (RESULT_TYPE_VECTOR, RESULT_TYPE_MATRIX):
            raise ValueError(f"unsupported result type: {result_type!r}")
        return cls(status="success", result_type=result_type, series=list(series))

    @classmethod
    def failure(cls, error_type: str, message: str) -> "QueryResult":
        """
        Build an error envelope.

        Args:
            error_type: "bad_data" for client input, "internal" otherwise.
            message: Description of what went wrong.

        Returns:
            QueryResult with status "error".
        """
        return cls(status="error", error_type=error_type, error=message)

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def total_samples(self) -> int:
        """
        Get total number of samples across all series.

        Returns:
            Total sample count.
        """
        return sum(len(series.samples) for series in self.series)

    def to_prom_response(self) -> dict:
        """
        Render the Prometheus HTTP API JSON body.

        Returns:
            Success body with data.resultType/data.result, or error body
            with errorType/error.
        """
        if not self.is_success:
            return {
                "status": "error",
                "errorType": self.error_type,
                "error": self.error
            }

        if self.result_type == RESULT_TYPE_MATRIX:
            result = [series.to_matrix_dict() for series in self.series]
        else:
            result = [series.to_vector_dict() for series in self.series if series.samples]

        return {
            "status": "success",
            "data": {
                "resultType": self.result_type,
                "result": result
            }
        }

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary with status, result_type, series and error fields.
        """
        return {
            "status": self.status,
            "result_type": self.result_type,
            "series": [s.to_dict() for s in self.series],
            "error_type": self.error_type,
            "error": self.error
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QueryResult":
        series = [MetricSeries.from_dict(s) for s in data.get("series", [])]
        return cls(
            status=data["status"],
            result_type=data.get("result_type"),
            series=series,
            error_type=data.get("error_type"),
            error=data.get("error"),
        )

    @classmethod
    def from_prom_response(cls, response_data: dict) -> "QueryResult":
        """
        Create QueryResult from a Prometheus API response body.

        Args:
            response_data: Full response from the query API.

        Returns:
            QueryResult instance.
        """
        status = response_data.get("status", "unknown")
        if status == "error":
            return cls.failure(
                response_data.get("errorType", ERROR_INTERNAL),
                response_data.get("error", "Unknown error"),
            )

        data = response_data.get("data", {})
        result_type = data.get("resultType", RESULT_TYPE_VECTOR)
        result_list = data.get("result", [])

        if result_type == RESULT_TYPE_MATRIX:
            series = [MetricSeries.from_prom_matrix(r) for r in result_list]
        else:
            series = [MetricSeries.from_prom_vector(r) for r in result_list]

        return cls(status=status, result_type=result_type, series=series)
