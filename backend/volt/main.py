"""
Volt Trail API

FastAPI application for GPX track analytics and route synthesis.
"""

from contextlib import asynccontextmanager
import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from volt.config import settings
from volt.db.session import init_db, AsyncSessionLocal
from volt.api.v1.router import api_router
from volt.features.synthesis import synthesis_runner
from volt.shared.errors import register_error_handlers


# === Logging Setup ===
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


# === Lifespan ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    logger.info("Starting Volt Trail API...")
    init_db()
    logger.info("Database initialized")

    await synthesis_runner.start(AsyncSessionLocal)

    yield

    # Shutdown
    await synthesis_runner.stop()
    logger.info("Shutting down...")


# === App Creation ===
app = FastAPI(
    title="Volt Trail API",
    description="GPX track analytics and similar-route synthesis for trail runners",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# === Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === Errors ===
register_error_handlers(app)


# === Routes ===
app.include_router(api_router, prefix=settings.api_prefix)


# === Health Check ===
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}
