"""
Narrative Enumerations
Value sets shared by the scene calculator, guard rails and payload builder.
"""

from enum import Enum


class ShortFormat(str, Enum):
    """Target video format."""
    SHORT = "SHORT"
    REEL = "REEL"
    LONG = "LONG"
    YOUTUBE = "YOUTUBE"


class NarrativePressure(str, Enum):
    """Pacing dial feeding the scene-count multiplier."""
    SLOW = "SLOW"
    FLUID = "FLUID"
    FAST = "FAST"


class EmotionalState(str, Enum):
    CURIOSITY = "CURIOSITY"
    THREAT = "THREAT"
    FASCINATION = "FASCINATION"
    CONFRONTATION = "CONFRONTATION"
    DARK_INSPIRATION = "DARK_INSPIRATION"


class RevelationDynamic(str, Enum):
    PROGRESSIVE = "PROGRESSIVE"
    HIDDEN = "HIDDEN"
    EARLY = "EARLY"
    FRAGMENTS = "FRAGMENTS"


class HookType(str, Enum):
    """Opening type of a Climate."""
    QUESTION = "QUESTION"
    SHOCK = "SHOCK"
    CHALLENGE = "CHALLENGE"
    MYSTERY = "MYSTERY"
    STATEMENT = "STATEMENT"


class ClosingType(str, Enum):
    """Closing type of a Climate."""
    CTA_DIRECT = "CTA_DIRECT"
    REVELATION = "REVELATION"
    QUESTION = "QUESTION"
    CHALLENGE = "CHALLENGE"
    LOOP = "LOOP"


__all__ = [
    "ShortFormat",
    "NarrativePressure",
    "EmotionalState",
    "RevelationDynamic",
    "HookType",
    "ClosingType",
]
