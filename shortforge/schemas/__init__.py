# Pydantic schemas package
from shortforge.schemas.generation import ImageRequest, GeneratedImage, ImageResult
from shortforge.schemas.job import (
    CharacterCast, CreateShortRequest, SceneResponse, ShortSummary, ShortResponse, ShortListResponse
)
from shortforge.schemas.generate import (
    GenerateRequest, SceneParamsRequest, SceneParamsResponse, RangeLimits, FormatLimitsResponse
)
from shortforge.schemas.preset import ClimateValues, ClimateValidateRequest, ClimateValidateResponse

__all__ = [
    "ImageRequest", "GeneratedImage", "ImageResult",
    "CharacterCast", "CreateShortRequest", "SceneResponse", "ShortSummary", "ShortResponse",
    "ShortListResponse",
    "GenerateRequest", "SceneParamsRequest", "SceneParamsResponse", "RangeLimits",
    "FormatLimitsResponse",
    "ClimateValues", "ClimateValidateRequest", "ClimateValidateResponse",
]
