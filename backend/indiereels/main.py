"""IndieReels — FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from indiereels.config import settings
from indiereels.errors import setup_exception_handlers
from indiereels.api import (
    health, users, tags, moods, feed, swipes, library, games, analytics,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup: create tables, wire hosted backend clients, probe them
    from indiereels.clients.auth import HostedAuthClient
    from indiereels.clients.storage import HostedStorageClient
    from indiereels.database import engine, init_db
    from indiereels.services.integration_probe import probe_all

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db()
    if settings.has_backend:
        app.state.auth_provider = HostedAuthClient(
            settings.backend_url, settings.backend_anon_key, timeout=settings.http_timeout,
        )
        app.state.storage = HostedStorageClient(
            settings.backend_url, settings.backend_anon_key, bucket=settings.video_bucket,
        )
    else:
        logging.getLogger(__name__).warning("Hosted backend not configured; auth and uploads disabled")
    app.state.integrations = await probe_all(settings)
    yield
    # Shutdown: close DB pool
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="Swipe-based discovery of indie games through short video reels",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

# CORS: frontend dev server and the production URL
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",     # Vite dev server
        settings.app_url,
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# ── Mount routers ────────────────────────────────────────────────
app.include_router(health.router,     prefix="/api/v1", tags=["system"])
app.include_router(users.router,      prefix="/api/v1", tags=["users"])
app.include_router(tags.router,       prefix="/api/v1", tags=["tags"])
app.include_router(moods.router,      prefix="/api/v1", tags=["moods"])
app.include_router(feed.router,       prefix="/api/v1", tags=["feed"])
app.include_router(swipes.router,     prefix="/api/v1", tags=["swipes"])
app.include_router(library.router,    prefix="/api/v1", tags=["library"])
app.include_router(games.router,      prefix="/api/v1", tags=["catalog"])
app.include_router(analytics.router,  prefix="/api/v1", tags=["analytics"])


def run():
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "indiereels.main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        log_level=settings.log_level,
    )
