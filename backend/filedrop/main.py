"""
FastAPI application entry point.
Sets up the API with lifespan events for database initialization
and the JSON error contract shared by every endpoint.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from filedrop.config import settings
from filedrop.database import init_db
from filedrop.api.router import api_router
from filedrop.errors import FiledropError, ValidationError
from filedrop.middleware.metrics_middleware import MetricsMiddleware
from filedrop.schemas import format_errors
from filedrop.utils.logging import configure_logging

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: Configure logging, create tables
    """
    configure_logging('filedrop-api', settings.log_level)
    
    await init_db()
    
    yield


app = FastAPI(
    title="Filedrop API",
    description="Presigned direct-to-storage uploads with a metadata catalog",
    version=API_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (must be after CORS to track all requests)
app.add_middleware(MetricsMiddleware)

app.include_router(api_router, prefix="/api")


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": format_errors(exc.errors())}
    )


@app.exception_handler(FiledropError)
async def filedrop_error_handler(request: Request, exc: FiledropError):
    if exc.status_code >= 500:
        logger.error(
            f"Request failed: {request.method} {request.url.path} - {exc.message}",
            extra={"event": "request_failed", "error": exc.message, "error_type": type(exc).__name__}
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error: {request.method} {request.url.path}",
        extra={"event": "unhandled_error", "error": str(exc)},
        exc_info=exc
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Filedrop API",
        "version": API_VERSION,
        "environment": settings.environment
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
