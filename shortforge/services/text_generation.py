"""
Text Generation Service
Routes completions to the provider named by a ModelRef.
"""

import logging
from typing import Optional

from shortforge.pipeline.base import NonRetryableError
from shortforge.services.model_registry import ModelRef, Provider

logger = logging.getLogger(__name__)


class TextGenerationService:
    """Provider-neutral entry point for the scriptwriter and prompt-engineer calls."""

    def __init__(self, groq_service=None, gemini_service=None):
        self._groq = groq_service
        self._gemini = gemini_service

    @property
    def groq(self):
        if self._groq is None:
            from shortforge.services.groq_llm import GroqLLMService
            self._groq = GroqLLMService()
        return self._groq

    @property
    def gemini(self):
        if self._gemini is None:
            from shortforge.services.gemini_text import GeminiTextService
            self._gemini = GeminiTextService()
        return self._gemini

    async def complete(
        self,
        system: str,
        prompt: str,
        model: ModelRef,
        temperature: Optional[float] = None,
    ) -> str:
        """Run one completion on ``model`` and return the raw response text."""
        if model.provider == Provider.GROQ:
            return await self.groq.complete(system, prompt, model.model_id, temperature=temperature)
        if model.provider == Provider.GEMINI:
            return await self.gemini.complete(system, prompt, model.model_id, temperature=temperature)

        raise NonRetryableError(
            f"Provider '{model.provider.value}' does not support text generation",
            details={"model": str(model)},
        )
