#!/usr/bin/env python3
"""
Researcher search proxy - HTTP API

Exposes the search-and-enrich pipeline as JSON endpoints:
- GET /api/search?q=...&results=10&maxLength=8000
- GET /api/fetch?url=...&maxLength=8000
- GET /health
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config.settings import settings
from .search.aggregator import SearchAggregator
from .search.errors import PageContentError, SearchProviderError
from .utils.params import parse_int

logger = logging.getLogger(__name__)

router = APIRouter()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def get_aggregator(request: Request) -> SearchAggregator:
    return request.app.state.aggregator


@router.get("/api/search")
async def search_endpoint(
    q: Optional[str] = None,
    results: Optional[str] = None,
    max_length: Optional[str] = Query(None, alias="maxLength"),
    aggregator: SearchAggregator = Depends(get_aggregator),
):
    """Search and return every result enriched with its page text"""
    if not q:
        return error_response(400, "query parameter is required")

    num_results = parse_int(results, settings.config.search.default_num_results)
    max_content_length = parse_int(
        max_length, settings.config.content_extraction.default_max_content_length
    )

    try:
        response = await aggregator.search(q, num_results, max_content_length)
    except SearchProviderError as e:
        logger.error(f"Search error: {e}")
        return error_response(500, str(e))

    return response.to_dict()


@router.get("/api/fetch")
async def fetch_endpoint(
    url: Optional[str] = None,
    max_length: Optional[str] = Query(None, alias="maxLength"),
    aggregator: SearchAggregator = Depends(get_aggregator),
):
    """Return the extracted text of a single page"""
    if not url:
        return error_response(400, "url parameter is required")

    max_content_length = parse_int(
        max_length, settings.config.content_extraction.default_max_content_length
    )

    try:
        content = await aggregator.fetch_page_content(url, max_content_length)
    except PageContentError as e:
        logger.warning(f"Fetch error for {url}: {e}")
        return error_response(500, str(e))

    return {"contents": content}


@router.get("/health")
async def health(aggregator: SearchAggregator = Depends(get_aggregator)):
    """Health check with cache statistics"""
    return {
        "status": "ok",
        "caches": {
            "search": aggregator.search_cache.stats(),
            "page": aggregator.page_cache.stats(),
        },
    }


def create_app(aggregator: Optional[SearchAggregator] = None) -> FastAPI:
    """Build the API application.

    When no aggregator is given, one is created on startup from the settings
    and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = aggregator or SearchAggregator()
        app.state.aggregator = service
        logger.info("HTTP API Server started")

        yield

        if aggregator is None:
            await service.close()
        logger.info("HTTP API Server stopped")

    app = FastAPI(
        title="Researcher Search Proxy",
        description="Web search with page content extraction",
        version="1.0.0",
        lifespan=lifespan,
    )

    server_config = settings.config.server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_config.cors_allow_origins,
        allow_methods=server_config.cors_allow_methods,
        allow_headers=server_config.cors_allow_headers,
    )
    app.include_router(router)
    return app


app = create_app()


def main():
    """Run the HTTP server"""
    settings.setup_logging()

    if not settings.validate_config():
        logger.error("Invalid configuration, exiting")
        raise SystemExit(1)

    server_config = settings.config.server
    logger.info(f"Starting server on {server_config.host}:{server_config.port}...")
    uvicorn.run(
        app,
        host=server_config.host,
        port=server_config.port,
        log_level=settings.config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
