"""Main application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from quantdesk.config import get_settings
from quantdesk.logging_setup import configure_logging

# Configure logging FIRST, before any other imports
configure_logging(get_settings().log_level)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from quantdesk.api import router
from quantdesk.clients import PolygonRestClient
from quantdesk.services import EvaluationBatchRunner, EvaluationScheduler
from quantdesk.storage import RecommendationRepository, init_database

# Startup timeout in seconds
STARTUP_TIMEOUT = 30

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting quant evaluation service...")

    if not settings.polygon_api_key:
        logger.warning("POLYGON_API_KEY not configured - outcome checks will fail per record")

    try:
        database = await asyncio.wait_for(
            init_database(settings.database_url, echo=settings.debug),
            timeout=STARTUP_TIMEOUT,
        )
    except asyncio.TimeoutError:
        raise RuntimeError(f"Database initialization timed out after {STARTUP_TIMEOUT}s")
    logger.info("Database initialized")

    client = PolygonRestClient(
        api_key=settings.polygon_api_key,
        base_url=settings.polygon_base_url,
        timeout=settings.request_timeout_seconds,
    )
    repository = RecommendationRepository(database)
    runner = EvaluationBatchRunner.from_settings(settings, repository, client)
    scheduler = EvaluationScheduler(runner, settings.check_interval_minutes * 60)

    app.state.repository = repository
    app.state.runner = runner
    app.state.scheduler = scheduler

    if settings.scheduler_enabled:
        scheduler.start()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await scheduler.stop()
    await client.close()
    try:
        await database.close()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning(f"Error closing database: {e}")

    logger.info("Shutdown complete")


# Create FastAPI app with orjson for faster JSON serialization
app = FastAPI(
    title="Quant Indicator & Outcome Service",
    description="Indicator snapshots and trade recommendation outcome tracking",
    version="0.1.0",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include REST routes
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Quant Indicator & Outcome Service",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "quantdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
