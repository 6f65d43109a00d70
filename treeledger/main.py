"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from treeledger.config import settings
from treeledger.middleware.error_handler import (
    ErrorHandlerMiddleware,
    http_exception_handler,
    validation_exception_handler,
)
from treeledger.api.v1.routers import planting, trees

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_requests}/minute"],
    enabled=settings.rate_limit_enabled,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    from treeledger.infrastructure.ledger import get_ledger
    ledger = get_ledger()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Ledger: store={type(ledger.store).__name__}, clock={type(ledger.clock).__name__}")
    logger.info(f"Caller identity header: {settings.caller_identity_header}, "
                f"coordinators configured: {len(settings.coordinator_identities)}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute "
                f"(enabled={settings.rate_limit_enabled})")

    yield

    # Shutdown
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Urban Forestry Registry API

    This API records city trees and coordinates planting work on top of an
    append-only ledger.

    ## Features

    - **Tree Registry**: Register trees, track measurements, condition and
      status, transfer ownership, and read the full audit history
    - **Planting Sites**: Register candidate sites, manage priority, recommended
      species and status, and search for sites near a point
    - **Initiatives and Events**: Run planting campaigns with progress tracking
      and schedule volunteer events against registered sites
    - **Species Diversity**: Keep target and observed species shares side by side

    ## Conventions

    - Every response is a tagged result: `{"type": "ok", "value": ...}` or
      `{"type": "err", "error": "<Kind>", "detail": "..."}`
    - Mutating requests identify the caller with the `X-Caller-Identity` header
    - Coordinates are micro-degrees (40712776 = 40.712776 degrees)
    - Height, diameter and available space are scaled by 100 (500 = 5.00 m)
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Tagged error bodies for validation failures and HTTP errors
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(trees.router, prefix="/api/v1")
app.include_router(planting.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
