"""
QueryEngine turning selector queries into Prometheus API results.
"""

import logging
from typing import Any, Iterable, Optional, Protocol

from .aggregator import SeriesAggregator
from .exceptions import BadDataError, StoreError
from .filters import build_filter
from .mapping import MappingTable
from .models import QueryRequest, QueryResult
from .models.query_result import ERROR_BAD_DATA, ERROR_INTERNAL
from .selector import parse_selector
from .utils import now_seconds, parse_duration, parse_time

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT = 15


class DocumentStore(Protocol):
    """Anything that can stream documents matching a filter and be pinged."""

    def find(
        self, collection: str, query_filter: dict, timeout: Optional[float] = None
    ) -> Iterable[Any]:
        ...

    def ping(self) -> bool:
        ...


def _parse_param(parser, name: str, text: Optional[str]) -> float:
    try:
        return parser(text)
    except ValueError as e:
        raise BadDataError(f"invalid parameter {name!r}: {e}") from e


class QueryEngine:
    """
    Runs the query pipeline for one request at a time.

    Each call builds its own aggregator, so one engine can serve
    concurrent requests. The only shared state is the read-only mapping
    table and the store's connection pool.

    Example:
        engine = QueryEngine(mapping, MongoStore(uri, "metrics_db"))
        result = engine.instant_query('http_requests_total{code="200"}')
        body = result.to_prom_response()
    """

    def __init__(
        self,
        mapping: MappingTable,
        store: DocumentStore,
        timeout: float = DEFAULT_QUERY_TIMEOUT
    ):
        """
        Initialize the engine.

        Args:
            mapping: Metric name to collection lookup.
            store: Document store to query.
            timeout: Deadline for each store round trip in seconds.
        """
        self.mapping = mapping
        self.store = store
        self.timeout = timeout

    def execute(self, request: QueryRequest) -> QueryResult:
        """
        Answer a validated request.

        Client-input problems produce a "bad_data" envelope; store
        problems and any other processing fault produce an "internal" one.
        This method does not raise.

        Args:
            request: The query to answer.

        Returns:
            QueryResult success or error envelope.
        """
        try:
            descriptor = self.mapping.resolve(request.metric)
            query_filter = build_filter(
                request.matchers, descriptor, request.start, request.end
            )

            aggregator = SeriesAggregator(ranged=request.is_range)
            documents = self.store.find(descriptor.name, query_filter, timeout=self.timeout)
            aggregator.add_documents(documents, descriptor)
        except BadDataError as e:
            logger.warning("Rejected query for %r: %s", request.metric, e)
            return QueryResult.failure(ERROR_BAD_DATA, str(e))
        except StoreError as e:
            logger.error("Store failure for %r: %s", request.metric, e)
            return QueryResult.failure(ERROR_INTERNAL, str(e))
        except Exception as e:
            logger.exception("Unexpected error while answering %r", request.metric)
            return QueryResult.failure(ERROR_INTERNAL, f"unexpected error: {e}")

        series = aggregator.series()
        logger.debug(
            "Query %r on %r returned %d series (%s)",
            request.metric, descriptor.name, len(series), request.result_type,
        )
        return QueryResult.success(request.result_type, series)

    def instant_query(self, query: str) -> QueryResult:
        """
        Answer an instant query with the latest sample of each series.

        A range selector such as 'metric[5m]' is answered as a matrix of
        the samples within that duration before now.

        Args:
            query: Selector text.

        Returns:
            QueryResult with a vector (or matrix for range selectors).
        """
        try:
            selector = parse_selector(query)
            if selector.range_seconds is not None:
                end = now_seconds()
                request = QueryRequest(
                    metric=selector.metric,
                    matchers=selector.matchers,
                    start=end - selector.range_seconds,
                    end=end,
                    is_range=True,
                )
            else:
                request = QueryRequest(metric=selector.metric, matchers=selector.matchers)
        except BadDataError as e:
            return QueryResult.failure(ERROR_BAD_DATA, str(e))

        return self.execute(request)

    def range_query(
        self,
        query: str,
        start: Optional[str],
        end: Optional[str],
        step: Optional[str]
    ) -> QueryResult:
        """
        Answer a range query with every sample in [start, end].

        Samples are returned as stored; step is validated but no step
        alignment is applied.

        Args:
            query: Selector text.
            start: Window start, Unix seconds or RFC3339.
            end: Window end, Unix seconds or RFC3339.
            step: Resolution, seconds or duration such as "1m".

        Returns:
            QueryResult with a matrix.
        """
        try:
            start_time = _parse_param(parse_time, "start", start)
            end_time = _parse_param(parse_time, "end", end)
            step_seconds = _parse_param(parse_duration, "step", step)

            selector = parse_selector(query)
            if selector.range_seconds is not None:
                raise BadDataError("range selectors are not supported in range queries")

            request = QueryRequest(
                metric=selector.metric,
                matchers=selector.matchers,
                start=start_time,
                end=end_time,
                step=step_seconds,
                is_range=True,
            )
        except BadDataError as e:
            return QueryResult.failure(ERROR_BAD_DATA, str(e))

        return self.execute(request)
