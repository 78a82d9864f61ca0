"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from carbon_tracker.api.routes import router
from carbon_tracker.app_logging import configure_logging
from carbon_tracker.containers import AppContainer
from carbon_tracker.domain.errors import (
    StoreError,
    UnknownUserError,
    ValidationError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container
    app.include_router(router)

    @app.exception_handler(ValidationError)
    async def validation_error(
        _request: Request, exc: ValidationError
    ) -> JSONResponse:
        code = 422
        if isinstance(exc, UnknownUserError):
            code = status.HTTP_404_NOT_FOUND
        return JSONResponse(
            status_code=code,
            content={"error": "validation", "field": exc.field, "detail": exc.message},
        )

    @app.exception_handler(StoreError)
    async def store_error(_request: Request, exc: StoreError) -> JSONResponse:
        logger.exception("Store failure", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "store", "detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
