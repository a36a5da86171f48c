"""
ShortForge API - Short Video Generation Pipeline
FastAPI Backend Entry Point
"""

import io
import logging
import mimetypes
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shortforge.core.config import settings
from shortforge.core.database import SessionLocal, init_db
from shortforge.core.logging import configure_logging
from shortforge.api import admin, climates, credits, shorts
from shortforge.services.image_generation import ImageGenerationService
from shortforge.services.model_registry import ModelConfigCache
from shortforge.services.storage import StorageService
from shortforge.services.text_generation import TextGenerationService

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    configure_logging()
    logger.info("Starting ShortForge API...")
    init_db()

    app.state.storage = StorageService()
    app.state.model_cache = ModelConfigCache()
    app.state.text_service = TextGenerationService()
    app.state.image_service = ImageGenerationService(storage_service=app.state.storage)
    yield
    logger.info("Shutting down ShortForge API...")


app = FastAPI(
    title=settings.APP_NAME,
    description="Turns a premise into narrated, illustrated scenes for short-form video",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(shorts.router, prefix="/api/v1/shorts", tags=["Shorts"])
app.include_router(climates.router, prefix="/api/v1/climates", tags=["Climates"])
app.include_router(credits.router, prefix="/api/v1/credits", tags=["Credits"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Cloud Run and monitoring."""
    status = {
        "status": "healthy",
        "version": VERSION,
        "environment": {
            "storage": "gcs" if settings.USE_GCS else "local",
            "database": "sqlite" if settings.DATABASE_URL.startswith("sqlite") else "postgresql",
        },
        "services": {},
    }

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        status["services"]["database"] = "ok"
    except SQLAlchemyError as e:
        status["services"]["database"] = f"error: {e}"
        status["status"] = "degraded"
    finally:
        db.close()

    return status


@app.get("/files/{file_path:path}", tags=["Files"])
async def serve_file(file_path: str):
    """Serve generated scene media from storage."""
    storage = getattr(app.state, "storage", None) or StorageService()
    try:
        file_bytes = await storage.get_file(file_path)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")

    content_type = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
    return StreamingResponse(
        io.BytesIO(file_bytes),
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=3600"},
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": "ShortForge API - Short Video Generation Pipeline",
        "docs": "/docs",
        "health": "/health",
    }
