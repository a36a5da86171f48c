"""
Short Schemas
Pydantic models for short (generation job) API requests and responses.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

from shortforge.narrative.types import ShortFormat


class CharacterCast(BaseModel):
    """Character cast in a new short."""
    character_id: str
    role: Optional[str] = None
    custom_prompt: Optional[str] = None
    custom_clothing: Optional[str] = None


class CreateShortRequest(BaseModel):
    """Schema for creating a short in DRAFT."""
    premise: str = Field(..., min_length=1, max_length=4000)
    format: ShortFormat = ShortFormat.SHORT
    target_duration: Optional[int] = Field(default=None, ge=1)
    style_id: Optional[str] = None
    climate_id: Optional[str] = None
    ai_model: Optional[str] = Field(default=None, description="'provider:modelId' override")
    scene_count_override: Optional[int] = Field(default=None, ge=1)
    scene_duration_override: Optional[float] = Field(default=None, gt=0)
    characters: List[CharacterCast] = []


class SceneResponse(BaseModel):
    """Schema for a scene."""
    id: str
    order: int
    duration: float
    narration: str
    visual_desc: str
    goal: Optional[str]
    image_prompt: Optional[str]
    negative_prompt: Optional[str]
    media_url: Optional[str]
    media_width: Optional[int]
    media_height: Optional[int]
    is_generated: bool
    error_message: Optional[str]

    class Config:
        from_attributes = True


class ShortSummary(BaseModel):
    """Short without its scenes, for listings."""
    id: str
    premise: str
    format: str
    target_duration: int
    status: str
    progress: int
    title: Optional[str]
    credits_used: int
    error_message: Optional[str]
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True


class ShortResponse(ShortSummary):
    """Schema for a short with its scenes."""
    user_id: str
    style_id: Optional[str]
    climate_id: Optional[str]
    ai_model: Optional[str]
    scene_count_override: Optional[int]
    scene_duration_override: Optional[float]
    hook: Optional[str]
    cta: Optional[str]
    script: Optional[Dict[str, Any]]
    scenes: List[SceneResponse] = []

    class Config:
        from_attributes = True


class ShortListResponse(BaseModel):
    shorts: List[ShortSummary]
    total: int
