from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from formrelay.api.main import api_router
from formrelay.core.config import get_settings
from formrelay.core.constants import CORS_HEADERS
from formrelay.core.database import close_pool, init_pool, persistence_enabled
from formrelay.core.forms import get_forms_catalog
from formrelay.core.redis import close_redis, init_redis, rate_limit_enabled


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    get_forms_catalog()
    use_redis = rate_limit_enabled(settings)
    use_database = persistence_enabled(settings)
    if use_redis:
        await init_redis()
    if use_database:
        await init_pool()
    try:
        yield
    finally:
        if use_database:
            await close_pool()
        if use_redis:
            await close_redis()


async def _plain_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


def create_app() -> FastAPI:
    """FastAPI application factory."""
    settings = get_settings()
    logging.getLogger("formrelay").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="Form Relay",
        lifespan=lifespan,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        redirect_slashes=False,
    )
    app.include_router(api_router)
    app.add_exception_handler(StarletteHTTPException, _plain_http_exception)

    @app.middleware("http")
    async def cors_headers(request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    return app


app = create_app()
