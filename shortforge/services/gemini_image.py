"""
Gemini Image Generation Service
Uses native Gemini image generation models (e.g. gemini-2.5-flash-image).
Gemini answers with inline image bytes, so results are stored through the
StorageService and served from /files/.
Documentation: https://ai.google.dev/gemini-api/docs/image-generation
"""

import io
import logging
import uuid

from google import genai
from google.genai import errors, types
from PIL import Image

from shortforge.core.config import settings
from shortforge.pipeline.base import NonRetryableError, with_retry
from shortforge.schemas.generation import GeneratedImage, ImageRequest, ImageResult
from shortforge.services.gemini_text import map_genai_error

logger = logging.getLogger(__name__)

# fal-style size names -> Gemini aspect ratios
ASPECT_RATIOS = {
    "portrait_16_9": "9:16",
    "portrait_4_3": "3:4",
    "square": "1:1",
    "square_hd": "1:1",
    "landscape_4_3": "4:3",
    "landscape_16_9": "16:9",
}


def _extract_image_bytes(response) -> bytes:
    """Return the first inline image in a generate_content response."""
    if getattr(response, "parts", None):
        for part in response.parts:
            if part.inline_data is not None:
                return part.inline_data.data

    finish_reason = "Unknown"
    if getattr(response, "candidates", None):
        candidate = response.candidates[0]
        finish_reason = candidate.finish_reason
        if candidate.content and candidate.content.parts:
            for part in candidate.content.parts:
                if part.inline_data is not None:
                    return part.inline_data.data

    raise NonRetryableError(f"No image generated. Finish Reason: {finish_reason}")


class GeminiImageService:
    """Service for image generation using Gemini models."""

    def __init__(self, storage_service, client: genai.Client = None):
        self.client = client or genai.Client(api_key=settings.GEMINI_API_KEY)
        self.storage_service = storage_service

    @with_retry(max_retries=settings.EXTERNAL_MAX_RETRIES, retry_delay=settings.EXTERNAL_RETRY_DELAY)
    async def generate(self, request: ImageRequest, model_id: str) -> ImageResult:
        prompt = request.prompt
        if request.negative_prompt:
            prompt = f"{prompt}\n\nAvoid: {request.negative_prompt}"

        config = types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=types.ImageConfig(
                aspect_ratio=ASPECT_RATIOS.get(request.image_size, "9:16"),
            ),
        )

        logger.info(f"[Gemini] Generating image with {model_id}")
        try:
            response = await self.client.aio.models.generate_content(
                model=model_id,
                contents=prompt,
                config=config,
            )
        except errors.APIError as e:
            raise map_genai_error(e, model_id)

        image_bytes = _extract_image_bytes(response)
        with Image.open(io.BytesIO(image_bytes)) as img:
            width, height = img.size

        path = f"scenes/{uuid.uuid4().hex}.png"
        url = await self.storage_service.upload_bytes(image_bytes, path, content_type="image/png")
        logger.info(f"[Gemini] Image stored at {url} ({width}x{height})")

        return ImageResult(images=[GeneratedImage(url=url, width=width, height=height)])
