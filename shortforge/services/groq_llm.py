"""
Groq LLM Service
Chat completions on Groq for the scriptwriter and prompt-engineer agents.
"""

import logging
from typing import Optional

import groq
from groq import AsyncGroq

from shortforge.core.config import settings
from shortforge.pipeline.base import NonRetryableError, RetryableError, with_retry

logger = logging.getLogger(__name__)


class GroqLLMService:
    """Service for Groq LLM operations."""

    def __init__(self, client: AsyncGroq = None):
        self.client = client or AsyncGroq(api_key=settings.GROQ_API_KEY)
        self.temperature = settings.GROQ_TEMPERATURE
        self.max_tokens = settings.GROQ_MAX_TOKENS

    @with_retry(max_retries=settings.EXTERNAL_MAX_RETRIES, retry_delay=settings.EXTERNAL_RETRY_DELAY)
    async def complete(
        self,
        system: str,
        prompt: str,
        model_id: str,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Run one chat completion and return the assistant text.

        Raises:
            RetryableError: Connection problems, timeouts, rate limits, 5xx
            NonRetryableError: Any other API error or an empty answer
        """
        logger.info(f"[Groq] Completion with {model_id} ({len(prompt)} chars)")
        try:
            response = await self.client.chat.completions.create(
                model=model_id,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=self.max_tokens,
            )
        except (groq.APIConnectionError, groq.RateLimitError, groq.InternalServerError) as e:
            raise RetryableError(f"Groq request failed: {e}", details={"model": model_id})
        except groq.APIStatusError as e:
            raise NonRetryableError(
                f"Groq rejected the request ({e.status_code}): {e.message}",
                details={"model": model_id, "status_code": e.status_code},
            )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise NonRetryableError("Groq returned an empty completion", details={"model": model_id})
        return content.strip()
