"""FastAPI application factory.

Creates the app with CORS, exception handlers and route registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from policychat import __version__
from policychat.api.dependencies import get_settings, reset_dependencies
from policychat.api.models import ErrorBody, ErrorResponse
from policychat.api.routes import register_routes
from policychat.api.routes.health import get_metrics
from policychat.exceptions import PolicyChatError
from policychat.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    await reset_dependencies()
    logger.info("app_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging_config = settings.observability.logging
    setup_logging(
        level=logging_config.level,
        format=logging_config.format,
        redact_secrets=logging_config.redact_secrets,
    )

    app = FastAPI(
        title="Policy Assistant API",
        description="Upload a policy document and chat with an agent about it",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    register_routes(app)

    metrics_config = settings.observability.metrics
    if metrics_config.enabled:
        app.add_api_route(
            metrics_config.path, get_metrics, methods=["GET"], tags=["Health"]
        )

    logger.info(
        "app_created",
        debug=settings.debug,
        backend=settings.backend.base_url,
    )

    return app


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PolicyChatError)
    async def policychat_error_handler(
        request: Request, exc: PolicyChatError
    ) -> JSONResponse:
        logger.warning(
            "api_error",
            error_code=exc.error_code,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(exc.status_code, exc.error_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        return _error_response(exc.status_code, code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
        fields = ", ".join(".".join(str(p) for p in e["loc"]) for e in exc.errors())
        return _error_response(400, "INVALID_REQUEST", f"Request validation failed: {fields}")

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


# Create the app instance for uvicorn:
#   uvicorn policychat.api.app:app --host 127.0.0.1 --port 8000
app = create_app()
