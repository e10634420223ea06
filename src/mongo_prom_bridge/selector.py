"""
Reduction of parsed PromQL to the plain selectors the bridge can answer.

Query text is parsed by promql-parser. Only a vector selector such as
`metric{label="value", ...}` or `{__name__="metric", ...}`, optionally as
a range such as `[5m]`, is accepted. Anything else (regex or negated
matchers, functions, operators, offsets, subqueries) is rejected with
UnsupportedQueryError.
"""

from dataclasses import dataclass, field
from typing import Optional

import promql_parser

from .exceptions import UnsupportedQueryError

METRIC_NAME_LABEL = "__name__"


@dataclass(frozen=True)
class ParsedSelector:
    """
    Metric name and equality matchers extracted from query text.

    Attributes:
        metric: Metric name.
        matchers: Label name -> exact value, excluding __name__.
        range_seconds: Range duration in seconds when the text ends in [d].
    """

    metric: str
    matchers: dict[str, str] = field(default_factory=dict)
    range_seconds: Optional[float] = None


def _equality_matchers(selector: promql_parser.VectorSelector) -> dict[str, str]:
    if selector.matchers.or_matchers:
        raise UnsupportedQueryError("'or' inside label matchers is not supported")

    matchers: dict[str, str] = {}
    for matcher in selector.matchers.matchers:
        if matcher.op != promql_parser.MatchOp.Equal:
            raise UnsupportedQueryError(
                f"matcher on {matcher.name!r} is not supported, only equality matchers are"
            )
        if matcher.name in matchers:
            raise UnsupportedQueryError(f"label {matcher.name!r} is matched more than once")
        matchers[matcher.name] = matcher.value
    return matchers


def _reduce(selector: promql_parser.VectorSelector) -> tuple[str, dict[str, str]]:
    if selector.offset is not None:
        raise UnsupportedQueryError("offset modifiers are not supported")
    if selector.at is not None:
        raise UnsupportedQueryError("@ modifiers are not supported")

    matchers = _equality_matchers(selector)
    metric = selector.name
    name_matcher = matchers.pop(METRIC_NAME_LABEL, None)
    if name_matcher is not None and metric and name_matcher != metric:
        raise UnsupportedQueryError("metric name must not be set twice")
    metric = metric or name_matcher

    if not metric:
        raise UnsupportedQueryError("query must name a metric")
    return metric, matchers


def parse_selector(text: str) -> ParsedSelector:
    """
    Parse query text into a metric name and equality matchers.

    Args:
        text: Query text, e.g. 'http_requests_total{code="200"}'.

    Returns:
        ParsedSelector with the metric name and matchers.

    Raises:
        UnsupportedQueryError: If the text does not parse or is not a
            plain equality selector.
    """
    if not text or not text.strip():
        raise UnsupportedQueryError("empty query")

    try:
        expr = promql_parser.parse(text)
    except ValueError as e:
        raise UnsupportedQueryError(f"invalid query: {e}") from e

    if isinstance(expr, promql_parser.VectorSelector):
        metric, matchers = _reduce(expr)
        return ParsedSelector(metric=metric, matchers=matchers)

    if isinstance(expr, promql_parser.MatrixSelector):
        metric, matchers = _reduce(expr.vector_selector)
        range_seconds = expr.range.total_seconds()
        if range_seconds <= 0:
            raise UnsupportedQueryError("range duration must be positive")
        return ParsedSelector(metric=metric, matchers=matchers, range_seconds=range_seconds)

    if isinstance(expr, promql_parser.SubqueryExpr):
        raise UnsupportedQueryError("subqueries are not supported")

    raise UnsupportedQueryError(
        f"unsupported expression type {type(expr).__name__}, only plain selectors are accepted"
    )
