"""
Model Registry
Resolves which provider/model serves each pipeline feature.

Model strings ("provider:modelId") are parsed once, when configuration is
read, into ModelRef values; call sites dispatch on ``ModelRef.provider`` and
never split strings themselves. Resolved defaults are held by an explicit,
injectable ModelConfigCache with a TTL and manual invalidation.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from shortforge.core.config import settings

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    """Generation service providers."""
    GROQ = "groq"
    GEMINI = "gemini"
    FAL = "fal"


class ModelFeature:
    """Feature keys with a configurable default model."""
    SCRIPTWRITER = "agent_scriptwriter"
    PROMPT_ENGINEER = "agent_prompt_engineer"
    IMAGE = "ai_image"


@dataclass(frozen=True)
class ModelRef:
    """A provider plus the provider-specific model id."""
    provider: Provider
    model_id: str

    @classmethod
    def parse(cls, value: str) -> "ModelRef":
        """
        Parse a "provider:modelId" string.

        Only the first colon separates the provider, so model ids may contain
        colons themselves (e.g. "groq:org/model:beta").

        Raises:
            ValueError: If the string has no provider prefix or an unknown provider
        """
        if not value or ":" not in value:
            raise ValueError(f"Model '{value}' must look like 'provider:modelId'")
        provider, model_id = value.split(":", 1)
        if not model_id:
            raise ValueError(f"Model '{value}' has an empty model id")
        return cls(provider=Provider(provider.strip().lower()), model_id=model_id.strip())

    def __str__(self) -> str:
        return f"{self.provider.value}:{self.model_id}"


def hardcoded_defaults() -> Dict[str, str]:
    """Defaults from settings, used when no admin override exists."""
    return {
        ModelFeature.SCRIPTWRITER: settings.DEFAULT_SCRIPT_MODEL,
        ModelFeature.PROMPT_ENGINEER: settings.DEFAULT_PROMPT_MODEL,
        ModelFeature.IMAGE: settings.DEFAULT_IMAGE_MODEL,
    }


def load_admin_default_models(session_factory=None) -> Dict[str, str]:
    """Read the admin_settings singleton's default_models mapping."""
    from shortforge.core.database import SessionLocal
    from shortforge.models.settings import AdminSetting, SINGLETON_ID

    db = (session_factory or SessionLocal)()
    try:
        row = db.query(AdminSetting).filter(AdminSetting.id == SINGLETON_ID).first()
        return dict(row.default_models or {}) if row else {}
    finally:
        db.close()


class ModelConfigCache:
    """
    Time-boxed cache of resolved default models.

    ``value`` holds the parsed mapping, ``fetched_at`` the monotonic time of the
    last successful load. Administrators call ``invalidate()`` after changing
    the defaults.
    """

    def __init__(
        self,
        loader: Optional[Callable[[], Dict[str, str]]] = None,
        ttl: float = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.loader = loader or load_admin_default_models
        self.ttl = settings.MODEL_CACHE_TTL_SECONDS if ttl is None else ttl
        self.clock = clock
        self.value: Optional[Dict[str, ModelRef]] = None
        self.fetched_at: float = 0.0

    def _is_fresh(self) -> bool:
        return self.value is not None and (self.clock() - self.fetched_at) < self.ttl

    def _resolve_all(self, overrides: Dict[str, str]) -> Dict[str, ModelRef]:
        resolved = {}
        for feature, default in hardcoded_defaults().items():
            raw = overrides.get(feature) or default
            try:
                resolved[feature] = ModelRef.parse(raw)
            except ValueError as e:
                logger.warning(f"[Models] Ignoring invalid model for {feature}: {e}")
                resolved[feature] = ModelRef.parse(default)
        return resolved

    def get(self, feature: str) -> ModelRef:
        """Resolve the default model for a feature."""
        if not self._is_fresh():
            try:
                overrides = self.loader()
            except SQLAlchemyError as e:
                # Serve hardcoded defaults without caching, so the next call retries the store
                logger.error(f"[Models] Could not load default models: {e}")
                return self._resolve_all({})[feature]

            self.value = self._resolve_all(overrides)
            self.fetched_at = self.clock()
            logger.debug(f"[Models] Default models refreshed: {self.value}")

        return self.value[feature]

    def invalidate(self):
        """Drop the cached mapping; the next ``get`` reloads it."""
        self.value = None
        self.fetched_at = 0.0
        logger.info("[Models] Default model cache invalidated")


__all__ = [
    "Provider",
    "ModelFeature",
    "ModelRef",
    "ModelConfigCache",
    "hardcoded_defaults",
    "load_admin_default_models",
]
