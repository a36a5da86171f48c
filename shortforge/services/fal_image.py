"""
fal.ai Image Generation Service
Text-to-image through hosted fal.ai models (FLUX schnell by default).
"""

import logging

import fal_client
import httpx

from shortforge.core.config import settings
from shortforge.pipeline.base import NonRetryableError, RetryableError, with_retry
from shortforge.schemas.generation import GeneratedImage, ImageRequest, ImageResult

logger = logging.getLogger(__name__)


class FalImageService:
    """Service for fal.ai image generation."""

    def __init__(self, client: fal_client.AsyncClient = None):
        self.client = client or fal_client.AsyncClient(key=settings.FAL_KEY or None)

    def _arguments(self, request: ImageRequest) -> dict:
        args = {
            "prompt": request.prompt,
            "image_size": request.image_size,
            "num_images": request.num_images,
            "num_inference_steps": settings.IMAGE_NUM_INFERENCE_STEPS,
        }
        if request.negative_prompt:
            args["negative_prompt"] = request.negative_prompt
        return args

    @with_retry(max_retries=settings.EXTERNAL_MAX_RETRIES, retry_delay=settings.EXTERNAL_RETRY_DELAY)
    async def generate(self, request: ImageRequest, model_id: str) -> ImageResult:
        logger.info(f"[Fal] Generating image with {model_id}")
        try:
            result = await self.client.subscribe(model_id, arguments=self._arguments(request))
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            if code == 429 or code >= 500:
                raise RetryableError(f"fal.ai request failed ({code})", details={"model": model_id})
            raise NonRetryableError(
                f"fal.ai rejected the request ({code}): {e.response.text[:200]}",
                details={"model": model_id, "status_code": code},
            )
        except httpx.TransportError as e:
            raise RetryableError(f"fal.ai unreachable: {e}", details={"model": model_id})

        images = [
            GeneratedImage(url=img["url"], width=img.get("width"), height=img.get("height"))
            for img in (result or {}).get("images", [])
            if img.get("url")
        ]
        if not images:
            raise NonRetryableError("fal.ai returned no images", details={"model": model_id})

        return ImageResult(images=images, seed=result.get("seed"))
