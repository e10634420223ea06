"""
HTTP service exposing the Prometheus query API over MongoDB.
"""

import argparse
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import parse_qs

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from .config import Settings, load_config
from .engine import QueryEngine
from .exceptions import BridgeError, StoreError
from .models import QueryResult
from .models.query_result import ERROR_BAD_DATA, ERROR_INTERNAL
from .store import MongoStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_STATUS_CODES = {ERROR_BAD_DATA: 400, ERROR_INTERNAL: 500}


def _to_response(result: QueryResult) -> JSONResponse:
    status_code = 200 if result.is_success else _STATUS_CODES.get(result.error_type, 500)
    return JSONResponse(content=result.to_prom_response(), status_code=status_code)


async def _request_params(request: Request) -> dict[str, str]:
    """Collect parameters from the URL, then a form or JSON body.

    URL parameters take precedence over body values of the same name.
    """
    params = dict(request.query_params)
    if request.method != "POST":
        return params

    body = await request.body()
    if not body:
        return params

    content_type = request.headers.get("content-type", "")
    if "json" in content_type:
        try:
            data = json.loads(body)
        except ValueError:
            logger.debug("Ignoring POST body that is not valid JSON")
            return params
        if isinstance(data, dict):
            for key, value in data.items():
                if value is not None:
                    params.setdefault(key, str(value))
    else:
        for key, values in parse_qs(body.decode("utf-8", errors="replace")).items():
            params.setdefault(key, values[0])

    return params


def create_app(settings: Settings, engine: Optional[QueryEngine] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Loaded configuration.
        engine: Query engine to serve; built from settings when omitted.

    Returns:
        FastAPI app with the query, query_range, health and readiness endpoints.
    """
    store: Optional[MongoStore] = None
    if engine is None:
        store = MongoStore(
            settings.mongodb.uri,
            settings.mongodb.database,
            timeout=settings.mongodb.timeout,
        )
        engine = QueryEngine(settings.mapping, store, timeout=settings.query_timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Serving %d mapped metrics from database %r",
            len(settings.mapping), settings.mongodb.database,
        )
        yield
        if store is not None:
            store.close()
        logger.info("Shutdown complete")

    app = FastAPI(title="mongo-prom-bridge", lifespan=lifespan)

    async def run(func, *args) -> JSONResponse:
        try:
            result = await run_in_threadpool(func, *args)
        except BridgeError as e:
            logger.error("Query failed: %s", e)
            result = QueryResult.failure(ERROR_INTERNAL, str(e))
        except Exception as e:
            logger.exception("Unexpected error while processing query")
            result = QueryResult.failure(ERROR_INTERNAL, f"unexpected error: {e}")
        return _to_response(result)

    @app.api_route(settings.server.query_path, methods=["GET", "POST"])
    async def query(request: Request) -> JSONResponse:
        """Instant query; runs as a range query when start, end and step are all given."""
        params = await _request_params(request)
        text = params.get("query", "")
        if not text:
            return _to_response(QueryResult.failure(ERROR_BAD_DATA, "empty query parameter"))

        if params.get("start") and params.get("end") and params.get("step"):
            logger.debug("Range query on instant endpoint: %s", text)
            return await run(engine.range_query, text, params["start"], params["end"], params["step"])

        logger.debug("Instant query: %s", text)
        return await run(engine.instant_query, text)

    @app.api_route(settings.server.query_range_path, methods=["GET", "POST"])
    async def query_range(request: Request) -> JSONResponse:
        """Range query over [start, end]."""
        params = await _request_params(request)
        text = params.get("query", "")
        if not text:
            return _to_response(QueryResult.failure(ERROR_BAD_DATA, "empty query parameter"))

        logger.debug("Range query: %s", text)
        return await run(
            engine.range_query, text, params.get("start"), params.get("end"), params.get("step")
        )

    @app.get("/-/healthy")
    async def healthy() -> PlainTextResponse:
        return PlainTextResponse("OK")

    @app.get("/-/ready")
    async def ready() -> PlainTextResponse:
        """Readiness check; fails while the store cannot be reached."""
        try:
            await run_in_threadpool(engine.store.ping)
        except StoreError as e:
            logger.warning("Readiness check failed: %s", e)
            return PlainTextResponse(f"Service Unavailable: {e}", status_code=503)
        return PlainTextResponse("OK")

    return app


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the bridge server."""
    parser = argparse.ArgumentParser(description="Prometheus query API over MongoDB")
    parser.add_argument("-c", "--config", help="Path to YAML config", default=None)
    args = parser.parse_args(argv)

    settings = load_config(args.config)
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    app = create_app(settings)

    logger.info("Server listening on %s:%d", settings.server.host, settings.server.port)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        access_log=False,
    )


if __name__ == "__main__":
    main()
