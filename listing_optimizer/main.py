"""
Listing optimizer API: application factory wiring, lifecycle and
request logging.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from listing_optimizer.config import settings
from listing_optimizer.db.pool import db_pool
from listing_optimizer.db.schema import ensure_schema
from listing_optimizer.infrastructure.observability.logging import (
    get_logger,
    log_request,
    setup_logging,
)
from listing_optimizer.middleware import CORSMiddleware, RequestContextMiddleware
from listing_optimizer.routes import analytics, email, health, optimizer

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        max_optimizations_per_day=settings.MAX_OPTIMIZATIONS_PER_DAY,
    )

    try:
        logger.info("Initializing database pool")
        await db_pool.initialize()

        if settings.DB_AUTO_CREATE_SCHEMA:
            await ensure_schema()

        logger.info("All services initialized successfully")

    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        try:
            await db_pool.close()
        except Exception as cleanup_error:
            logger.error("Error cleaning up database pool", error=str(cleanup_error))
        raise

    yield

    logger.info("Application shutting down")

    try:
        await db_pool.close()
        logger.info("All services closed successfully")
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))


app = FastAPI(
    title="Etsy Listing Optimizer",
    description="AI-generated titles, descriptions and tags for Etsy listings with a daily quota",
    version="0.1.0",
    lifespan=lifespan,
)


# Must be registered before RequestContextMiddleware: the log line reads the
# request_id that middleware binds
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


app.add_middleware(CORSMiddleware, allowed_origins=settings.ALLOWED_ORIGINS)
app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(optimizer.router)
app.include_router(email.router)
app.include_router(analytics.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies get the same {"error": ...} shape as every other failure."""
    logger.info("Invalid request body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
