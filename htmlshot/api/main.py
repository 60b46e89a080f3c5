"""
FastAPI Application
==================

FastAPI application exposing HTML rendering over HTTP.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
import uvicorn

from htmlshot.config.settings import get_settings
from htmlshot.config.logging import get_logger
from htmlshot.core.rendering.content import ContentResolutionError
from htmlshot.core.rendering.renderer import RenderError
from htmlshot.core.storage.manager import StorageError, close_storage_manager
from htmlshot.api.routes.health import router as health_router
from htmlshot.api.routes.render import router as render_router
from htmlshot.models.schemas import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting FastAPI application", disks=settings.disk_config())
    try:
        yield
    finally:
        logger.info("Shutting down FastAPI application")
        close_storage_manager()


settings = get_settings()
app = FastAPI(
    title="htmlshot",
    description="Render HTML fragments, templates and URLs to images or PDF",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.include_router(health_router)
app.include_router(render_router)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> JSONResponse:  # type: ignore
    """Add request ID to all requests."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)  # type: ignore
    response.headers["X-Request-ID"] = request_id  # type: ignore

    return response  # type: ignore


def error_response(
    request: Request, status_code: int, error: str, error_code: str, exc: Exception
) -> JSONResponse:
    """Build a structured error response and log it."""
    body = ErrorResponse(
        error=error,
        error_code=error_code,
        details={"message": str(exc)} if settings.debug else None,
        request_id=getattr(request.state, "request_id", None),
    )

    logger.error(
        error,
        error_code=error_code,
        error_message=str(exc),
        request_id=body.request_id,
    )

    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


# Exception handlers
@app.exception_handler(HTTPException)
async def custom_http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom HTTP exception handler with structured error response."""
    return error_response(request, exc.status_code, str(exc.detail), str(exc.status_code), exc)


@app.exception_handler(ContentResolutionError)
async def content_resolution_exception_handler(
    request: Request, exc: ContentResolutionError
) -> JSONResponse:
    """Template or URL content could not be resolved."""
    return error_response(request, 422, "Content could not be resolved", "CONTENT_RESOLUTION_ERROR", exc)


@app.exception_handler(RenderError)
async def render_exception_handler(request: Request, exc: RenderError) -> JSONResponse:
    """The browser renderer failed."""
    return error_response(request, 502, "Rendering failed", "RENDER_ERROR", exc)


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Storage is misconfigured."""
    return error_response(request, 500, "Storage is misconfigured", "STORAGE_ERROR", exc)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """General exception handler for unexpected errors."""
    return error_response(request, 500, "Internal server error", "INTERNAL_ERROR", exc)


def main() -> None:
    """Run the API server."""
    uvicorn.run("htmlshot.api.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
