"""
Generate Schemas
Request/response models for triggering the pipeline and previewing scene parameters.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from shortforge.narrative.types import NarrativePressure, ShortFormat

PipelineStep = Literal["full", "script", "prompts", "media"]


class GenerateRequest(BaseModel):
    """Schema for a pipeline run request."""
    step: PipelineStep = "full"


class SceneParamsRequest(BaseModel):
    """Preview the scene calculator for a format/pressure, plus override warnings."""
    format: ShortFormat = ShortFormat.SHORT
    narrative_pressure: Optional[NarrativePressure] = None
    scene_count: Optional[int] = Field(default=None, ge=0)
    avg_scene_duration: Optional[float] = Field(default=None, ge=0)


class SceneParamsResponse(BaseModel):
    scene_count: int
    avg_scene_duration: float
    total_duration: float
    warnings: List[str] = []


class RangeLimits(BaseModel):
    min: float
    max: float
    suggested: float


class FormatLimitsResponse(BaseModel):
    format: ShortFormat
    scenes: RangeLimits
    duration: RangeLimits
