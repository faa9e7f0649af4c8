"""
Campus Events API - Main Application Entry Point

Students browse and apply to campus events; administrators create events
and manage applications:
- Capacity-safe applications (conditional counter increment + unique constraint)
- Configurable status transition policy
- Redis caching of event listings
- Structured logging with request correlation
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from campus_events.core.config import get_settings
from campus_events.core.exceptions import TransientStorageError
from campus_events.core.logging import setup_logging, get_logger
from campus_events.core.metrics import metrics_endpoint
from campus_events.api.router import api_router
from campus_events.api.middleware import RequestLoggingMiddleware
from campus_events.db.session import dispose_engine
from campus_events.services.cache_service import get_redis, close_redis, get_cache_stats
from campus_events.services.policy_factory import get_transition_policy

settings = get_settings()
logger = get_logger(__name__)

RETRY_AFTER_SECONDS = "2"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        transition_policy=get_transition_policy().name,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    yield

    await close_redis()
    await dispose_engine()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Campus event management API with capacity-safe applications",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(OperationalError)
@app.exception_handler(PoolTimeoutError)
async def transient_storage_handler(request: Request, exc: Exception) -> JSONResponse:
    """Storage timeouts and dropped connections are reported as retryable."""
    logger.error("storage_unavailable", error=str(exc), error_type=type(exc).__name__)
    error = TransientStorageError(
        "Storage is temporarily unavailable. Please retry.",
        headers={"Retry-After": RETRY_AFTER_SECONDS},
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": error.detail},
        headers=error.headers,
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "transition_policy": get_transition_policy().name,
        "cache": cache_stats,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
