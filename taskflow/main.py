"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskflow.api.auth import router as auth_router
from taskflow.api.tasks import router as tasks_router
from taskflow.api.users import router as users_router
from taskflow.config import Settings, configure_logging, get_settings
from taskflow.db.session import Store, create_store
from taskflow.errors import AppError, DependencyError, FieldError
from taskflow.models.envelope import error_envelope
from taskflow.services.tasks import TaskRepository

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Server Error"


def _validation_field(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    if parts:
        return ".".join(parts)
    return str(loc[0]) if loc else "body"


def _validation_message(message: str) -> str:
    prefix = "Value error, "
    return message[len(prefix):] if message.startswith(prefix) else message


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    errors = getattr(exc, "errors", None)
    return JSONResponse(status_code=exc.status_code, content=error_envelope(exc.message, errors))


async def dependency_error_handler(request: Request, exc: DependencyError) -> JSONResponse:
    # Outside /health a store outage is a generic failure; details stay in the log
    logger.error("Dependency failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(GENERIC_FAILURE),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldError(_validation_field(tuple(error.get("loc", ()))), _validation_message(error["msg"]))
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope("Validation failed", errors),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(GENERIC_FAILURE),
    )


def _bind_store(app: FastAPI, store: Store) -> None:
    app.state.store = store
    app.state.tasks = TaskRepository(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared store on startup and release it on shutdown."""
    settings: Settings = app.state.settings
    owns_store = app.state.store is None
    if owns_store:
        settings.validate()
        _bind_store(app, create_store(settings))
    if settings.AUTO_CREATE_TABLES:
        await app.state.store.create_all()
    logger.info("Taskflow API started")
    yield
    if owns_store:
        await app.state.store.dispose()


def create_app(settings: Settings | None = None, store: Store | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration (default: environment settings)
        store: Pre-built store; when omitted one is created at startup
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Taskflow API",
        description="Personal task management with owner-scoped queries and statistics",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = None
    if store is not None:
        _bind_store(app, store)

    cors_origins = [origin for origin in {settings.FRONTEND_URL, "http://localhost:3000"} if origin]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DependencyError, dependency_error_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router)
    app.include_router(tasks_router)
    app.include_router(users_router)

    @app.get("/health")
    async def health_check(request: Request) -> JSONResponse:
        """Health check endpoint: 503 when the store does not answer."""
        try:
            await request.app.state.store.ping()
        except DependencyError as exc:
            logger.warning("Health check failed: %s", exc.message)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=error_envelope("Database unavailable"),
            )
        return JSONResponse(content={"success": True, "data": {"status": "healthy"}})

    return app


def build_default_app() -> FastAPI:
    """Build the application from environment settings."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    return create_app(settings)


app = build_default_app()
