"""
MongoStore running filter documents against MongoDB collections.
"""

import logging
from typing import Iterator, Optional

from bson.codec_options import CodecOptions
from bson.errors import BSONError
from bson.raw_bson import RawBSONDocument
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    ExecutionTimeout,
    NetworkTimeout,
    PyMongoError,
    ServerSelectionTimeoutError,
)

from .exceptions import StoreError, StoreTimeoutError

logger = logging.getLogger(__name__)

# Documents are decoded one at a time by the decoder so a single bad
# document can be skipped without failing the cursor.
RAW_CODEC_OPTIONS = CodecOptions(document_class=RawBSONDocument)


def _translate_error(e: PyMongoError, collection: str) -> StoreError:
    if isinstance(e, (ExecutionTimeout, NetworkTimeout)):
        return StoreTimeoutError(f"Query on collection {collection!r} timed out: {e}")
    if isinstance(e, ServerSelectionTimeoutError):
        return StoreError(f"No MongoDB server available: {e}")
    if isinstance(e, ConnectionFailure):
        return StoreError(f"Failed to connect to MongoDB: {e}")
    return StoreError(f"Query on collection {collection!r} failed: {e}")


class MongoStore:
    """
    Read-only access to the MongoDB database holding metric documents.

    The underlying MongoClient is created on first use and shared by all
    requests; it pools connections and is safe to use from many threads.

    Example:
        with MongoStore("mongodb://localhost:27017", "metrics_db") as store:
            for document in store.find("metrics_http", {"status_code": 200}):
                ...
    """

    def __init__(
        self,
        uri: str,
        database: str,
        timeout: float = 30,
        client: Optional[MongoClient] = None
    ):
        """
        Initialize the store.

        Args:
            uri: MongoDB connection string.
            database: Database name.
            timeout: Connect and server selection timeout in seconds.
            client: Optional pre-built MongoClient to use instead.
        """
        self.uri = uri
        self.database_name = database
        self.timeout = timeout

        self._client: Optional[MongoClient] = client

    @property
    def client(self) -> MongoClient:
        """
        Get or create the MongoClient.

        Returns:
            Shared MongoClient instance.
        """
        if self._client is None:
            timeout_ms = int(self.timeout * 1000)
            self._client = MongoClient(
                self.uri,
                connectTimeoutMS=timeout_ms,
                serverSelectionTimeoutMS=timeout_ms,
            )
        return self._client

    @property
    def database(self) -> Database:
        return self.client[self.database_name]

    def find(
        self,
        collection: str,
        query_filter: dict,
        timeout: Optional[float] = None
    ) -> Iterator[RawBSONDocument]:
        """
        Stream the documents of a collection matching a filter.

        The returned iterator is single-pass. Store failures raise when the
        iterator is consumed, including failures in the middle of a cursor.

        Args:
            collection: Collection name.
            query_filter: MongoDB filter document.
            timeout: Server-side deadline for the query in seconds.

        Yields:
            RawBSONDocument instances in the store's natural order.

        Raises:
            StoreTimeoutError: If the deadline is exceeded.
            StoreError: If the query or cursor fails.
        """
        logger.debug("find %s filter=%r timeout=%s", collection, query_filter, timeout)
        max_time_ms = int(timeout * 1000) if timeout else None

        try:
            raw_collection = self.database.get_collection(collection, codec_options=RAW_CODEC_OPTIONS)
            cursor = raw_collection.find(query_filter, max_time_ms=max_time_ms)
            try:
                yield from cursor
            finally:
                cursor.close()
        except PyMongoError as e:
            raise _translate_error(e, collection) from e
        except BSONError as e:
            raise StoreError(f"Malformed reply from collection {collection!r}: {e}") from e

    def ping(self) -> bool:
        """
        Check that the server is reachable.

        Returns:
            True when the server answers.

        Raises:
            StoreError: If the server cannot be reached.
        """
        try:
            self.client.admin.command("ping")
        except PyMongoError as e:
            raise _translate_error(e, "admin") from e
        return True

    def close(self) -> None:
        """Close the MongoDB client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "MongoStore":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes the client."""
        self.close()
