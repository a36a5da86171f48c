"""
Gemini Text Service
Text generation with Gemini models through the google-genai async client.
"""

import logging
from typing import Optional

from google import genai
from google.genai import errors, types

from shortforge.core.config import settings
from shortforge.pipeline.base import NonRetryableError, RetryableError, with_retry

logger = logging.getLogger(__name__)


def map_genai_error(e: errors.APIError, model_id: str):
    """Translate a google-genai API error into the retry taxonomy."""
    details = {"model": model_id, "status_code": e.code}
    if isinstance(e, errors.ServerError) or e.code == 429:
        return RetryableError(f"Gemini request failed ({e.code}): {e.message}", details=details)
    return NonRetryableError(f"Gemini rejected the request ({e.code}): {e.message}", details=details)


class GeminiTextService:
    """Service for Gemini text completions."""

    def __init__(self, client: genai.Client = None):
        self.client = client or genai.Client(api_key=settings.GEMINI_API_KEY)

    @with_retry(max_retries=settings.EXTERNAL_MAX_RETRIES, retry_delay=settings.EXTERNAL_RETRY_DELAY)
    async def complete(
        self,
        system: str,
        prompt: str,
        model_id: str,
        temperature: Optional[float] = None,
    ) -> str:
        logger.info(f"[Gemini] Completion with {model_id} ({len(prompt)} chars)")
        config = types.GenerateContentConfig(
            system_instruction=system,
            temperature=temperature,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=model_id,
                contents=prompt,
                config=config,
            )
        except errors.APIError as e:
            raise map_genai_error(e, model_id)

        text = response.text
        if not text:
            finish_reason = response.candidates[0].finish_reason if response.candidates else "Unknown"
            raise NonRetryableError(
                f"Gemini returned no text. Finish Reason: {finish_reason}",
                details={"model": model_id},
            )
        return text.strip()
