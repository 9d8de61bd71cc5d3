"""
Application factory for the Ujala news API.

Run with:
    uvicorn ujala_news.app:app --reload

or through the installed ``ujala-news`` script.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from ujala_news.accounts.middleware import BearerAuthenticationMiddleware
from ujala_news.accounts.routes import auth_router, users_router
from ujala_news.core.config import UjalaSettings
from ujala_news.core.config import settings as default_settings
from ujala_news.core.exceptions import UjalaError
from ujala_news.core.logging import configure_logging
from ujala_news.core.middleware import RequestContextMiddleware
from ujala_news.core.schemas.response import ErrorResponse
from ujala_news.db.db import close_db, create_tables, init_db
from ujala_news.feed.client import NewsFeedService
from ujala_news.media.cleanup import MediaCleanupQueue
from ujala_news.media.storage import LocalFileStore
from ujala_news.news.routes import router as news_router
from ujala_news.news.workflow import NewsWorkflow

logger = logging.getLogger(__name__)


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def register_exception_handlers(app: FastAPI, settings: UjalaSettings) -> None:
    @app.exception_handler(UjalaError)
    async def handle_ujala_error(_request: Request, exc: UjalaError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s: %s", type(exc).__name__, exc.message)
        return _error(
            exc.status_code,
            ErrorResponse(message=exc.message, hint=exc.context.get("hint")),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = sorted(
            {".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()}
        )
        return _error(
            400,
            ErrorResponse(
                message="Validation failed",
                error=f"Invalid or missing fields: {', '.join(fields)}",
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return _error(exc.status_code, ErrorResponse(message=message))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(
            500,
            ErrorResponse(
                message="Something went wrong!",
                error=str(exc) if settings.DEBUG else None,
            ),
        )


def create_app(settings: UjalaSettings | None = None) -> FastAPI:
    """
    Build the application and its long-lived services.

    The database engine is created in the lifespan, so the app can be built
    at import time without touching the database.

    Example:
        >>> app = create_app(UjalaSettings(DATABASE_URL="sqlite+aiosqlite:///dev.db"))
    """
    settings = settings or default_settings
    configure_logging(settings)

    file_store = LocalFileStore(settings.MEDIA_ROOT, settings.UPLOAD_URL_PREFIX)
    cleanup_queue = MediaCleanupQueue(file_store)
    feed = NewsFeedService(settings)
    workflow = NewsWorkflow(settings, cleanup_queue, file_store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(
            settings.DATABASE_URL,
            echo=False,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
        await create_tables()
        await cleanup_queue.start()
        logger.info("Ujala news API started (%s)", settings.ENVIRONMENT)
        yield
        await cleanup_queue.shutdown(wait=True)
        await feed.aclose()
        await close_db()

    app = FastAPI(
        title="Moradabad Ujala News API",
        version="0.1.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.file_store = file_store
    app.state.cleanup_queue = cleanup_queue
    app.state.feed = feed
    app.state.workflow = workflow

    app.add_middleware(BearerAuthenticationMiddleware, settings=settings)  # ty:ignore[invalid-argument-type]
    if settings.ENABLE_CORS:
        app.add_middleware(
            CORSMiddleware,  # ty:ignore[invalid-argument-type]
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(
        RequestContextMiddleware,  # ty:ignore[invalid-argument-type]
        request_id=settings.ENABLE_REQUEST_ID,
        timing=settings.ENABLE_TIMING_METRICS,
    )

    register_exception_handlers(app, settings)

    @app.get("/")
    async def index() -> dict:
        return {
            "message": "Welcome to the Moradabad Ujala News API",
            "endpoints": {
                "news": "/api/news",
                "ujala": "/api/news/ujala",
                "breaking": "/api/news/breaking",
                "featured": "/api/news/featured",
                "trending": "/api/news/trending",
                "auth": "/api/auth",
            },
        }

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(news_router)

    upload_dir = Path(settings.MEDIA_ROOT) / settings.UPLOAD_URL_PREFIX.strip("/")
    app.mount(
        settings.UPLOAD_URL_PREFIX,
        StaticFiles(directory=upload_dir, check_dir=False),
        name="uploads",
    )
    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "ujala_news.app:app",
        host="0.0.0.0",
        port=5000,
        reload=default_settings.is_development(),
    )
