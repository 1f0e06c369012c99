"""
Module: main.py
Description: FastAPI application entry point for the Turn Relay.

Initializes the FastAPI application with all routes, middleware,
and error handlers, and exposes the AWS Lambda handler.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum
from starlette.exceptions import HTTPException

from turn_relay.config.settings import settings
from turn_relay.handlers.queue import router as queue_router
from turn_relay.handlers.turns import router as turns_router
from turn_relay.models.response import error_response
from turn_relay.utils.logger import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Relays resolved game turns to a Notion database",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(turns_router)
app.include_router(queue_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Reports whether Notion credentials and the retry queue are
    configured, without contacting either.
    """
    logger.info("Health check requested")

    return {
        "status": "ok",
        "message": "Turn Relay is healthy",
        "version": settings.app_version,
        "environment": settings.stage,
        "notion_configured": settings.notion_configured,
        "queue_configured": bool(settings.queue_table_name)
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Log HTTP exceptions and return structured error responses."""
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )

    return error_response(exc.status_code, str(exc.detail), "http_exception")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return 400 for invalid query parameters."""
    logger.warning(
        "Request validation failed",
        errors=exc.errors(),
        path=request.url.path
    )

    return error_response(400, "Invalid request parameters", "validation_error")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Log unexpected exceptions and return a generic error response."""
    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method
    )

    return error_response(500, "Internal server error", "internal_error")


@app.on_event("startup")
async def startup_event():
    """Application startup event handler."""
    logger.info(
        "Starting Turn Relay",
        version=settings.app_version,
        stage=settings.stage,
        notion_configured=settings.notion_configured,
        queue_configured=bool(settings.queue_table_name)
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event handler."""
    logger.info("Shutting down Turn Relay")


# Lambda handler. Mangum runs background tasks before the invocation
# returns, so on Lambda the retry sweep delays the caller's response.
handler = Mangum(app, lifespan="off")
