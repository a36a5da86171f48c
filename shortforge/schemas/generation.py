"""
Generation Schemas
Provider-neutral request/response shapes for the image generation contract.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class ImageRequest(BaseModel):
    """One image generation call (one image per scene)."""
    prompt: str
    negative_prompt: Optional[str] = None
    image_size: str = "portrait_16_9"
    num_images: int = Field(default=1, ge=1)


class GeneratedImage(BaseModel):
    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class ImageResult(BaseModel):
    """Result of an image generation call."""
    images: List[GeneratedImage] = []
    seed: Optional[int] = None
