"""
Preset Schemas
Climate validation request/response models.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel

from shortforge.narrative.types import (
    EmotionalState,
    RevelationDynamic,
    NarrativePressure,
    HookType,
    ClosingType,
)


class ClimateValues(BaseModel):
    emotional_state: Optional[EmotionalState] = None
    revelation_dynamic: Optional[RevelationDynamic] = None
    narrative_pressure: Optional[NarrativePressure] = None
    hook_type: Optional[HookType] = None
    closing_type: Optional[ClosingType] = None


class ClimateValidateRequest(ClimateValues):
    """Climate fields to check, plus values the user explicitly confirmed."""
    confirmed: Optional[ClimateValues] = None


class ClimateValidateResponse(BaseModel):
    valid: bool
    corrected: Dict[str, str]
    warnings: List[str] = []
