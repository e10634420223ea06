"""
PromQueryClient for querying a Prometheus-compatible query API.
"""

from datetime import datetime
from typing import Optional, Union

import requests

from .exceptions import BridgeConnectionError, BridgeQueryError
from .models import QueryResult
from .utils import datetime_to_seconds

TimeValue = Union[float, int, str, datetime]


def _format_time(value: TimeValue) -> str:
    """Render a time parameter as Unix seconds or pass RFC3339 text through.

    Args:
        value: Unix seconds, datetime, or text already in API format.

    Returns:
        Parameter string.
    """
    if isinstance(value, datetime):
        return repr(datetime_to_seconds(value))
    if isinstance(value, (int, float)):
        return repr(value) if isinstance(value, float) else str(value)
    return value


def _format_step(step: Union[float, int, str]) -> str:
    if isinstance(step, (int, float)):
        return str(step)
    return step


class PromQueryClient:
    """
    Client for the bridge's Prometheus-style query API.

    Example:
        client = PromQueryClient(base_url="http://localhost:9090")

        result = client.query('http_requests_total{code="200"}')
        for series in result.series:
            print(series.labels, series.samples[-1].value)
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        query_path: str = "/api/v1/query",
        query_range_path: str = "/api/v1/query_range"
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the server (e.g., "http://localhost:9090").
            timeout: Request timeout in seconds.
            query_path: Path of the instant query endpoint.
            query_range_path: Path of the range query endpoint.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.query_path = query_path
        self.query_range_path = query_range_path

        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        """
        Get or create HTTP session.

        Returns:
            requests.Session instance.
        """
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _request(self, endpoint: str, data: dict) -> QueryResult:
        """
        POST form parameters to the query API.

        Args:
            endpoint: API endpoint path.
            data: Form parameters.

        Returns:
            QueryResult parsed from a success response.

        Raises:
            BridgeConnectionError: If the server cannot be reached.
            BridgeQueryError: If the server answers with an error.
        """
        url = f"{self.base_url}{endpoint}"

        try:
            response = self.session.post(url, data=data, timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            raise BridgeConnectionError(f"Failed to connect to {url}: {e}") from e
        except requests.exceptions.Timeout as e:
            raise BridgeConnectionError(f"Request to {url} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise BridgeConnectionError(f"Request to {url} failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise BridgeQueryError(
                f"Invalid JSON response (status {response.status_code}): {e}"
            ) from e

        if not isinstance(body, dict):
            raise BridgeQueryError(f"Unexpected response body: {body!r}")

        if body.get("status") == "error" or response.status_code != 200:
            error_type = body.get("errorType")
            message = body.get("error", response.text)
            raise BridgeQueryError(
                f"Query failed with status {response.status_code} ({error_type}): {message}",
                error_type=error_type,
            )

        return QueryResult.from_prom_response(body)

    def query(self, promql: str, time: Optional[TimeValue] = None) -> QueryResult:
        """
        Execute an instant query.

        Args:
            promql: Selector text (e.g., 'node_cpu_seconds_total{mode="idle"}').
            time: Optional evaluation time.

        Returns:
            QueryResult containing a vector.
        """
        data = {"query": promql}
        if time is not None:
            data["time"] = _format_time(time)
        return self._request(self.query_path, data)

    def query_range(
        self,
        promql: str,
        start: TimeValue,
        end: TimeValue,
        step: Union[float, int, str] = "1m"
    ) -> QueryResult:
        """
        Execute a range query across a time period.

        Args:
            promql: Selector text.
            start: Window start (Unix seconds, datetime or RFC3339 text).
            end: Window end (Unix seconds, datetime or RFC3339 text).
            step: Query resolution (seconds or duration text such as "15s").

        Returns:
            QueryResult containing a matrix.
        """
        data = {
            "query": promql,
            "start": _format_time(start),
            "end": _format_time(end),
            "step": _format_step(step),
        }
        return self._request(self.query_range_path, data)

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "PromQueryClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes session."""
        self.close()
