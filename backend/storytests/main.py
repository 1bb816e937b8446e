"""
Main FastAPI application for the User Story to Tests service.

This module initializes the FastAPI application with error handling,
structured logging, correlation tracking, and the API routers.
"""

from contextlib import asynccontextmanager
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import structlog

from storytests.core.config import settings
from storytests.core.exception_handler import EXCEPTION_HANDLERS
from storytests.utils.logging import setup_logging
from storytests.utils.correlation import CorrelationIdManager, get_correlation_logger
from storytests.api.v1.endpoints.health import router as health_router
from storytests.api.v1.api import api_router


setup_logging()
logger = get_correlation_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration and shutdown."""
    logger.info(
        "Starting User Story to Tests",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        debug_mode=settings.DEBUG,
        model=settings.OPENAI_MODEL,
        generation_configured=settings.generation_configured,
        jira_configured=settings.jira_configured,
    )
    if not settings.generation_configured:
        logger.warning("OPENAI_API_KEY is not set; /generate will fail until it is configured")

    yield

    logger.info("Shutting down User Story to Tests")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Generate Manual or BDD test cases from user stories",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    lifespan=lifespan,
    debug=settings.DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    """
    Extract or generate the request's correlation id, bind it for logging
    and echo it back in the response headers.
    """
    correlation_id = CorrelationIdManager.extract_from_request(request)
    token = CorrelationIdManager.set_correlation_id(correlation_id)
    request.state.correlation_id = correlation_id

    structlog.contextvars.bind_contextvars(
        request_method=request.method,
        request_path=request.url.path
    )

    try:
        response = await call_next(request)
        CorrelationIdManager.add_to_response(response, correlation_id)
        return response
    finally:
        structlog.contextvars.clear_contextvars()
        CorrelationIdManager.reset(token)


@app.middleware("http")
async def timing_middleware(request: Request, call_next):
    """Add processing time headers and log request timing."""
    start_time = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception as exc:
        logger.error(
            "Request failed during processing",
            processing_time_seconds=time.perf_counter() - start_time,
            error=str(exc),
            error_type=type(exc).__name__,
            method=request.method,
            path=request.url.path
        )
        raise

    process_time = time.perf_counter() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    response.headers["X-Process-Time-Ms"] = f"{process_time * 1000:.2f}"

    logger.info(
        "Request timing",
        processing_time_ms=round(process_time * 1000, 2),
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        event_type="performance_metric"
    )
    return response


for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)


@app.get("/")
async def root():
    """API information and documentation links."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": {
            "swagger_ui": f"{settings.API_PREFIX}/docs",
            "redoc": f"{settings.API_PREFIX}/redoc",
            "openapi_schema": f"{settings.API_PREFIX}/openapi.json"
        },
        "api_prefix": settings.API_PREFIX,
        "endpoints": [
            f"{settings.API_PREFIX}/generate",
            f"{settings.API_PREFIX}/jira/fetch",
            f"{settings.API_PREFIX}/testdata/generate",
            f"{settings.API_PREFIX}/testdata/csv",
        ],
        "correlation_id": CorrelationIdManager.get_correlation_id(),
    }


app.include_router(health_router, tags=["health"])

app.include_router(
    api_router,
    prefix=settings.API_PREFIX,
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Jira rejected the configured credentials"},
        404: {"description": "Jira issue not found"},
        500: {"description": "Internal Server Error"},
        502: {"description": "Generation service or Jira failure"},
    }
)


if __name__ == "__main__":
    import uvicorn

    uvicorn_config = {
        "host": "0.0.0.0",
        "port": 8000,
        "reload": settings.DEBUG,
        "log_level": settings.LOG_LEVEL.lower(),
        "access_log": True,
    }

    logger.info(
        "Starting uvicorn server",
        config=uvicorn_config,
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION
    )

    uvicorn.run("storytests.main:app", **uvicorn_config)
