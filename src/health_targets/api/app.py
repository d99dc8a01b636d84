"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from health_targets.api.admin import router as admin_router
from health_targets.api.metrics import router as metrics_router
from health_targets.api.plans import router as plans_router
from health_targets.api.profile import router as profile_router
from health_targets.app_logging import configure_logging
from health_targets.containers import AppContainer
from health_targets.domain.errors import (
    InvalidStateError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)

GENERIC_ERROR = "An unexpected error occurred. Please try again."


def _field_errors(exc: RequestValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors[".".join(location) or "body"] = str(error.get("msg", "Invalid value"))
    return errors


def _register_exception_handlers(app: FastAPI, logger: logging.Logger) -> None:
    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"error": exc.message}
        )

    @app.exception_handler(InvalidStateError)
    async def invalid_state(request: Request, exc: InvalidStateError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": exc.message}
        )

    @app.exception_handler(ValidationError)
    async def validation(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation error", "fieldErrors": exc.field_errors},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation error", "fieldErrors": _field_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(UnexpectedError)
    async def unexpected(request: Request, exc: UnexpectedError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": exc.message},
        )

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: path=%s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": GENERIC_ERROR},
        )


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting health targets API: environment=%s",
            container.settings.environment,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Health Targets", lifespan=lifespan)
    app.state.container = container

    _register_exception_handlers(app, logger)
    app.include_router(plans_router)
    app.include_router(metrics_router)
    app.include_router(profile_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
