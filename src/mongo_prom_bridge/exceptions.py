"""
Custom exceptions for mongo-prom-bridge.
"""

from typing import Optional


class BridgeError(Exception):
    """Base exception for all bridge errors."""
    pass


class ConfigError(BridgeError):
    """Raised when the configuration file is missing or malformed."""
    pass


class BadDataError(BridgeError):
    """Raised when a request carries input the bridge cannot answer."""

    error_type = "bad_data"


class UnknownMetricError(BadDataError):
    """Raised when a metric name has no collection mapping."""

    def __init__(self, metric: str):
        super().__init__(f"unknown metric: {metric!r}")
        self.metric = metric


class UnsupportedQueryError(BadDataError):
    """Raised when query text uses constructs beyond plain selectors."""
    pass


class StoreError(BridgeError):
    """Raised when the document store fails or cannot be reached."""

    error_type = "internal"


class StoreTimeoutError(StoreError):
    """Raised when a store round trip exceeds its deadline."""
    pass


class BridgeConnectionError(BridgeError):
    """Raised when the client cannot reach the bridge's query API."""
    pass


class BridgeQueryError(BridgeError):
    """Raised when the query API answers with an error envelope."""

    def __init__(self, message: str, error_type: Optional[str] = None):
        super().__init__(message)
        self.error_type = error_type
