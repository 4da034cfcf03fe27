"""FastAPI application for upld.

Routes:
    GET /                       - informational page
    PUT /[<anything>/]<name>    - upload the request body
    GET /<identifier>[/...]     - fetch a paste, trailing segments ignored
    any other method            - 403
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from upld import __version__
from upld.config import LIMITS, Limits, Settings, settings
from upld.errors import Forbidden, TooLarge, UpldError
from upld.services import RetrievalService, StatsTracker, Tier, UploadService, render_info
from upld.storage import (
    ContentStore,
    EdgeCache,
    RedisEdgeCache,
    SqlContentStore,
    build_content_store,
    build_edge_cache,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:
    store: ContentStore
    cache: EdgeCache
    stats: StatsTracker
    uploads: UploadService
    retrievals: RetrievalService


def build_services(
    config: Settings,
    store: ContentStore | None = None,
    cache: EdgeCache | None = None,
    limits: Limits = LIMITS,
) -> Services:
    """Wire the services around the configured (or given) storage tiers."""
    store = store if store is not None else build_content_store(config)
    cache = cache if cache is not None else build_edge_cache(config)
    stats = StatsTracker(store, limits)
    return Services(
        store=store,
        cache=cache,
        stats=stats,
        uploads=UploadService(store, stats, limits, scheme=config.public_scheme),
        retrievals=RetrievalService(store, cache, limits),
    )


def _services(request: Request) -> Services:
    return request.app.state.services


def _host(request: Request) -> str:
    return request.url.hostname or "localhost"


async def read_capped_body(request: Request, limit: int) -> bytes:
    """Read the request body, refusing anything over ``limit`` bytes.

    A declared ``Content-Length`` above the limit is rejected before any
    of the body is read; otherwise the stream is read until it ends or
    crosses the limit.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise TooLarge()

    body = bytearray()
    async for chunk in request.stream():
        body += chunk
        if len(body) > limit:
            raise TooLarge()
    return bytes(body)


def create_app(
    config: Settings = settings,
    store: ContentStore | None = None,
    cache: EdgeCache | None = None,
    limits: Limits = LIMITS,
) -> FastAPI:
    """Build the application.

    Tests pass in-memory ``store``/``cache`` fakes; otherwise both tiers are
    built from ``config``.
    """
    services = build_services(config, store=store, cache=cache, limits=limits)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan handler."""
        if isinstance(services.store, SqlContentStore):
            from upld.db import init_db

            await init_db()
        yield
        if isinstance(services.cache, RedisEdgeCache):
            await services.cache.close()

    app = FastAPI(
        title="upld",
        description="Content-addressed command line pastebin",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.services = services

    @app.middleware("http")
    async def log_service_version(request: Request, call_next):
        logger.debug("service version %s", config.service_version)
        return await call_next(request)

    @app.exception_handler(UpldError)
    async def upld_error_handler(request: Request, exc: UpldError) -> PlainTextResponse:
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        # Only GET and PUT are routed; every other method is forbidden
        if exc.status_code == 405:
            forbidden = Forbidden()
            return PlainTextResponse(forbidden.message, status_code=forbidden.status_code)
        return await http_exception_handler(request, exc)

    @app.get("/", response_class=PlainTextResponse)
    async def info(request: Request) -> str:
        count = await _services(request).stats.current_count()
        return render_info(_host(request), count, limits)

    @app.get("/{path:path}")
    async def retrieve(path: str, request: Request) -> Response:
        identifier = path.split("/", 1)[0]
        result = await _services(request).retrievals.handle_retrieve(identifier)
        return Response(
            content=result.content,
            headers={"X-Cache": "HIT" if result.tier is Tier.CACHE else "MISS"},
        )

    @app.put("/{path:path}", response_class=PlainTextResponse)
    async def upload(path: str, request: Request) -> str:
        filename = path.rsplit("/", 1)[-1] or None
        body = await read_capped_body(request, limits.max_content_size)
        result = await _services(request).uploads.handle_upload(
            body, _host(request), filename=filename
        )
        return f"{result.location}\n"

    return app


app = create_app()
