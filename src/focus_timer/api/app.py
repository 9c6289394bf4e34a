"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from focus_timer.api.timer import router as timer_router
from focus_timer.app_logging import configure_logging
from focus_timer.containers import AppContainer
from focus_timer.domain.errors import (
    NotFoundError,
    PersistenceError,
    StateConflictError,
    TimerError,
    ValidationError,
)

_ERROR_STATUS: dict[type[TimerError], int] = {
    ValidationError: 422,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StateConflictError: status.HTTP_409_CONFLICT,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Focus Timer API")
    app.state.container = container

    app.include_router(timer_router)

    @app.exception_handler(TimerError)
    async def timer_error_handler(request: Request, exc: TimerError) -> JSONResponse:
        if isinstance(exc, PersistenceError):
            logger.error(
                "Session store failure",
                extra={"path": request.url.path, "error": repr(exc.__cause__ or exc)},
            )
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"detail": _public_detail(container, exc, "Server error")},
            )
        status_code = _ERROR_STATUS.get(type(exc))
        if status_code is None:
            logger.exception("Unhandled timer error", extra={"path": request.url.path})
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _public_detail(container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a client-facing error message with local debug info."""
    if container.settings.environment == "local":
        cause = exc.__cause__ or exc
        return f"{fallback} (debug: {type(cause).__name__}: {cause})"
    return fallback
