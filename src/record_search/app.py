"""Main ASGI application entry point.

Exposes the search engine over HTTP:

    POST /search   -> ranked records for a free-text query
    GET  /health   -> liveness probe
    GET  /metrics  -> Prometheus exposition

Usage:
    # Configure via environment (or .env), then
    python -m record_search.app
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
import uvicorn

from .adapters.record_source import AbstractRecordSource, AirtableRecordSource
from .config import Settings
from .domain.errors import CorpusFetchError, InvalidQueryError
from .domain.filters import RecordFilter
from .domain.model import MatchResult, SearchOptions, SearchResponse
from .observability import (
    TraceContextMiddleware,
    configure_logging,
    get_metrics,
    get_metrics_content_type,
    init_tracing,
    trace_request,
)
from .service_layer.search_service import SearchService


logger = logging.getLogger(__name__)


class SearchRequest(BaseModel):
    """JSON body accepted by ``POST /search``.

    Accepts the camelCase keys of the original endpoint as well as snake_case.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    query: str | None = None
    search_fields: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("searchFields", "search_fields")
    )
    limit: int | None = Field(default=None, ge=0)
    threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    filters: list[RecordFilter] | None = None
    match_mode: str | None = Field(default=None, validation_alias=AliasChoices("matchMode", "match_mode"))


def render_result(result: MatchResult) -> dict[str, Any]:
    """Flatten a match into ``{**fields, "id", "score"}`` with JSON-safe values.

    The identifier and score are set last so a field named ``id`` or ``score``
    cannot mask them.
    """
    record = result.record.model_dump(mode="json")
    return {**record["fields"], "id": record["id"], "score": round(result.score, 6)}


def render_response(response: SearchResponse) -> dict[str, Any]:
    return {
        "query": response.query,
        "count": response.count,
        "results": [render_result(result) for result in response.results],
    }


def _error_response(message: str, status_code: int, details: Any = None) -> JSONResponse:
    payload: dict[str, Any] = {"error": message}
    if details is not None:
        payload["details"] = details
    return JSONResponse(payload, status_code=status_code)


async def search_endpoint(request: Request) -> JSONResponse:
    service: SearchService = request.app.state.search_service

    try:
        body = await request.json()
    except ValueError:
        return _error_response("Request body must be valid JSON", 400)
    if not isinstance(body, dict):
        return _error_response("Request body must be a JSON object", 400)

    try:
        payload = SearchRequest.model_validate(body)
        response = await service.search(
            payload.query,
            fields=payload.search_fields,
            limit=payload.limit,
            threshold=payload.threshold,
            filters=payload.filters,
            match_mode=payload.match_mode,
        )
    except ValidationError as exc:
        return _error_response("Invalid search request", 400, exc.errors(include_url=False, include_context=False))
    except InvalidQueryError as exc:
        return _error_response(str(exc), 400)
    except CorpusFetchError as exc:
        logger.error("Search failed while fetching records: %s", exc)
        return _error_response(str(exc), 502)

    return JSONResponse(render_response(response))


async def health_endpoint(request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy"})


async def metrics_endpoint(request: Request) -> Response:
    return Response(get_metrics(), media_type=get_metrics_content_type())


def create_app(
    settings: Settings | None = None,
    record_source: AbstractRecordSource | None = None,
) -> Starlette:
    """Create ASGI application.

    Args:
        settings: Startup configuration (defaults to environment)
        record_source: Corpus supplier (defaults to the configured Airtable table)

    Returns:
        Starlette application serving the search endpoints
    """
    settings = settings or Settings()
    source = record_source or AirtableRecordSource(settings)
    service = SearchService(
        source,
        default_options=SearchOptions(
            threshold=settings.search_threshold,
            limit=settings.search_default_limit,
            min_match_length=settings.search_min_match_length,
        ),
        allowed_fields=settings.get_allowed_fields(),
    )

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info("Search service ready")
        try:
            yield
        finally:
            await service.aclose()
            logger.info("Search service stopped")

    app = Starlette(
        debug=settings.log_level.lower() == "debug",
        routes=[
            Route("/search", search_endpoint, methods=["POST"]),
            Route("/health", health_endpoint, methods=["GET"]),
            Route("/metrics", metrics_endpoint, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
    app.state.search_service = service
    app.state.settings = settings

    app.add_middleware(BaseHTTPMiddleware, dispatch=trace_request)
    app.add_middleware(TraceContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_allow_origins(),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    return app


def main() -> None:
    """Run the server with uvicorn using environment configuration."""
    settings = Settings()
    configure_logging(level=settings.log_level, json_output=settings.log_json)
    init_tracing()

    app = create_app(settings)
    logger.info("Starting record-search on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
