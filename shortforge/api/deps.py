"""
API Dependencies
Common dependencies for FastAPI routes (database sessions, caller identity,
generation services).
"""

from typing import Generator, Optional

from fastapi import Header, HTTPException, Request, status

from shortforge.core.config import settings
from shortforge.core.database import SessionLocal
from shortforge.services.image_generation import ImageGenerationService
from shortforge.services.model_registry import ModelConfigCache
from shortforge.services.text_generation import TextGenerationService


def get_db() -> Generator:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Caller identity, set by the upstream identity provider."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()


def require_admin(x_admin_token: Optional[str] = Header(default=None)):
    if not settings.ADMIN_API_TOKEN or x_admin_token != settings.ADMIN_API_TOKEN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin token required",
        )


def get_model_cache(request: Request) -> ModelConfigCache:
    return request.app.state.model_cache


def get_text_service(request: Request) -> TextGenerationService:
    return request.app.state.text_service


def get_image_service(request: Request) -> ImageGenerationService:
    return request.app.state.image_service
