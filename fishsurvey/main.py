"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from fishsurvey.api.v1.routers import analysis, events
from fishsurvey.config import settings
from fishsurvey.infrastructure.event_store import get_event_store
from fishsurvey.infrastructure.report_generator_client import get_report_generator_client
from fishsurvey.middleware.error_handler import ErrorHandlerMiddleware

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
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Logs the effective configuration on startup and closes the
    collaborator clients on shutdown.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(
        f"Event store: {settings.document_store_url or 'in-memory'} "
        f"(collection {settings.document_store_collection})"
    )
    logger.info(f"Report generator: {settings.report_generator_url}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await get_event_store().close()
    await get_report_generator_client().close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Biological metrics API for reservoir fish surveys

    Biologists record sampling events (electrofishing transects and gill/fyke
    net sets with the fish caught on them) and get back the standard
    fisheries tables for each event.

    ## Features

    - **Event entry**: Create events, add transects and net sets, pull nets,
      record, correct and delete fish, finalize
    - **Catch summary**: Number and biomass share per species
    - **Abundance & condition**: CPUE, length/weight statistics and relative
      weight (Wr) or Fulton's K per species
    - **Angler units**: The same table in inches and pounds
    - **Length frequency**: One-inch histograms with size-category markers
    - **Size structure**: PSD, PSD-P, PSD-M and PSD-T
    - **Exports**: Spreadsheet rows and Word/PDF monitoring reports
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
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
app.include_router(events.router, prefix="/api/v1")
app.include_router(analysis.router, prefix="/api/v1")


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
