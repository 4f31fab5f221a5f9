"""Handset League - FastAPI Backend.

Round settlement service for the multiplayer phone-company simulation.
Games are played in memory; PostgreSQL, when reachable, keeps a copy of
every settled round for replay and audit.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .api import api_router
from .services.game_profile import ConfigurationError, load_profile_file

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} API...")

    # A bad profile file stops startup here
    app.state.default_profile = None
    if settings.profile_path:
        app.state.default_profile = load_profile_file(Path(settings.profile_path))
        logger.info(f"New games use the profile at {settings.profile_path}")

    from .database import check_connection, dispose
    app.state.db_available = await check_connection()

    yield

    logger.info(f"Shutting down {settings.app_name} API...")
    if app.state.db_available:
        await dispose()


app = FastAPI(
    title=settings.app_name,
    description="""
    Handset League API - round settlement for the phone-company business simulation.

    Features:
    - Segment demand allocation across competing teams
    - Supply chain disruptions and sourcing
    - Tariffs, trade agreements and geopolitical events
    - Economic cycle with forecasts
    - Achievement ledger
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Facilitator console runs on localhost in development
cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

frontend_url = os.environ.get("FRONTEND_URL")
if frontend_url:
    cors_origins.append(frontend_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.warning(f"Rejected profile on {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


app.include_router(api_router, prefix=f"/api/{settings.api_version}")


@app.get("/")
async def root():
    """Service info."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "handset_sim.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8000)),
        reload=settings.debug,
    )
