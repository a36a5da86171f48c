"""
Image Generation Service
Routes image requests to the provider named by a ModelRef.
"""

import logging

from shortforge.pipeline.base import NonRetryableError
from shortforge.schemas.generation import ImageRequest, ImageResult
from shortforge.services.model_registry import ModelRef, Provider

logger = logging.getLogger(__name__)


class ImageGenerationService:
    """Provider-neutral entry point for scene image generation."""

    def __init__(self, fal_service=None, gemini_service=None, storage_service=None):
        self._fal = fal_service
        self._gemini = gemini_service
        self._storage = storage_service

    @property
    def fal(self):
        if self._fal is None:
            from shortforge.services.fal_image import FalImageService
            self._fal = FalImageService()
        return self._fal

    @property
    def gemini(self):
        if self._gemini is None:
            from shortforge.services.gemini_image import GeminiImageService
            from shortforge.services.storage import StorageService
            self._gemini = GeminiImageService(self._storage or StorageService())
        return self._gemini

    async def generate(self, request: ImageRequest, model: ModelRef) -> ImageResult:
        if model.provider == Provider.FAL:
            return await self.fal.generate(request, model.model_id)
        if model.provider == Provider.GEMINI:
            return await self.gemini.generate(request, model.model_id)

        raise NonRetryableError(
            f"Provider '{model.provider.value}' does not support image generation",
            details={"model": str(model)},
        )
