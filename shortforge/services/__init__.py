# Services package
from shortforge.services.model_registry import (
    Provider, ModelRef, ModelFeature, ModelConfigCache
)
from shortforge.services.text_generation import TextGenerationService
from shortforge.services.image_generation import ImageGenerationService
from shortforge.services.storage import StorageService
from shortforge.services.credits import (
    CreditLedger, CreditFeature, InsufficientCreditsError, estimate_short_credits
)

__all__ = [
    "Provider",
    "ModelRef",
    "ModelFeature",
    "ModelConfigCache",
    "TextGenerationService",
    "ImageGenerationService",
    "StorageService",
    "CreditLedger",
    "CreditFeature",
    "InsufficientCreditsError",
    "estimate_short_credits",
]
