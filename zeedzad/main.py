"""Main FastAPI application."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from zeedzad import __version__
from zeedzad.api import api_router
from zeedzad.config import get_settings
from zeedzad.constants import GZIP_MINIMUM_SIZE, MAX_CONSECUTIVE_FAILURES, SHUTDOWN_GRACE_PERIOD
from zeedzad.db import Repository, Storage, StorageError, create_storage, get_storage, init_db
from zeedzad.models.schemas import DatabaseHealth
from zeedzad.services.igdb import IGDBClient
from zeedzad.services.steam import SteamClient
from zeedzad.services.youtube import YouTubeClient, sync_channel_videos
from zeedzad.utils.http_client import close_all_clients
from zeedzad.utils.logging import get_logger, setup_logging

settings = get_settings()
setup_logging()
logger = get_logger(__name__)

SWAGGER_UI_PATH = "/api/swagger/index.html"

VALIDATION_MESSAGES = {
    "body": "invalid request body",
    "query": "invalid query parameters",
    "path": "invalid path parameters",
}


async def periodic_youtube_sync(
    storage: Storage,
    youtube: YouTubeClient,
    shutdown_event: asyncio.Event,
    interval: float,
) -> None:
    """Background task that ingests new channel uploads periodically."""
    consecutive_failures = 0
    max_failures = MAX_CONSECUTIVE_FAILURES

    while not shutdown_event.is_set():
        try:
            await asyncio.wait_for(
                shutdown_event.wait(),
                timeout=interval
            )
            break  # Shutdown requested
        except TimeoutError:
            pass  # Normal timeout, continue with sync

        try:
            result = await sync_channel_videos(Repository(storage), youtube)
            logger.info(
                f"[YouTube Sync] completed - Added: {result.added}, Skipped: {result.skipped}, "
                f"Errors: {result.errors}, Total: {result.total}"
            )
            consecutive_failures = 0
        except Exception as e:
            consecutive_failures += 1
            logger.error(f"[YouTube Sync] failed ({consecutive_failures}/{max_failures}): {e}")
            if consecutive_failures >= max_failures:
                logger.critical("YouTube sync: Too many consecutive failures, backing off")
                await asyncio.sleep(interval)  # Extra delay after repeated failures
                consecutive_failures = 0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    storage = create_storage(settings)
    await init_db(storage)
    logger.info(f"Database initialized ({storage.backend})")

    youtube = YouTubeClient(settings.youtube_api_key)
    app.state.storage = storage
    app.state.youtube = youtube
    app.state.steam = SteamClient()
    app.state.igdb = (
        IGDBClient(settings.igdb_client_id, settings.igdb_client_secret)
        if settings.has_igdb_credentials
        else None
    )

    shutdown_event = asyncio.Event()
    tasks: list[asyncio.Task] = []
    if settings.youtube_api_key and settings.youtube_sync_interval > 0:
        tasks.append(
            asyncio.create_task(
                periodic_youtube_sync(storage, youtube, shutdown_event, settings.youtube_sync_interval),
                name="youtube_sync",
            )
        )
        logger.info(f"Started periodic YouTube sync (every {settings.youtube_sync_interval}s)")
    else:
        logger.info("Periodic YouTube sync disabled")

    yield

    # Graceful shutdown - signal all tasks to stop
    logger.info("Shutting down background tasks...")
    shutdown_event.set()

    try:
        await asyncio.wait_for(
            asyncio.gather(*tasks, return_exceptions=True),
            timeout=SHUTDOWN_GRACE_PERIOD
        )
        logger.info("All background tasks stopped gracefully")
    except TimeoutError:
        logger.warning("Background tasks did not stop in time, forcing cancellation")
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # Close persistent HTTP clients
    await close_all_clients()
    logger.info("HTTP clients closed")

    await storage.close()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    lifespan=lifespan,
    docs_url=SWAGGER_UI_PATH,
    openapi_url="/api/swagger/doc.json",
    redoc_url=None,
)

# Middleware (order matters - first added = last executed)
app.add_middleware(GZipMiddleware, minimum_size=GZIP_MINIMUM_SIZE)  # Compress responses > 500 bytes
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as ``{"error": ...}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report binding failures as 400 with the part of the request that was wrong."""
    errors = exc.errors()
    location = errors[0]["loc"][0] if errors and errors[0].get("loc") else "body"
    logger.debug(f"Rejected request to {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={"error": VALIDATION_MESSAGES.get(location, "invalid request body")},
    )


# Store app start time for uptime tracking
_app_start_time = datetime.now(UTC)


@app.get("/api/databasez", response_model=DatabaseHealth, tags=["health"])
async def database_health(storage: Annotated[Storage, Depends(get_storage)]) -> JSONResponse:
    """Database health check.

    Returns:
        JSONResponse with status, timestamp, database state and uptime;
        503 when the database cannot be reached.
    """
    health = DatabaseHealth(
        status="healthy",
        timestamp=datetime.now(UTC),
        database="healthy",
        uptime=str(datetime.now(UTC) - _app_start_time),
    )

    try:
        await storage.ping()
    except StorageError as e:
        logger.warning(f"Database health check failed: {e}")
        health.status = "degraded"
        health.database = "unhealthy"

    status_code = 200 if health.status == "healthy" else 503
    return JSONResponse(content=health.model_dump(mode="json"), status_code=status_code)


@app.get("/api/swagger", include_in_schema=False)
@app.get("/api/swagger/", include_in_schema=False)
async def swagger_redirect() -> RedirectResponse:
    return RedirectResponse(url=SWAGGER_UI_PATH)


# Routers
app.include_router(api_router)

# Front end, with 404.html as the fallback page
app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="web")
