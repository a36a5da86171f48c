"""
Climate Guard Rails
Enforces allowed combinations of emotional state, revelation dynamic and
narrative pressure. Invalid inputs are corrected silently; every correction
is reported as a warning so callers can choose to treat it as an error.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Tuple

from shortforge.narrative.resolve import resolve
from shortforge.narrative.types import (
    EmotionalState,
    RevelationDynamic,
    NarrativePressure,
    HookType,
    ClosingType,
)

DEFAULT_EMOTIONAL_STATE = EmotionalState.CURIOSITY
DEFAULT_HOOK_TYPE = HookType.QUESTION
DEFAULT_CLOSING_TYPE = ClosingType.CTA_DIRECT


@dataclass(frozen=True)
class GuardRailRule:
    allowed_revelations: Tuple[RevelationDynamic, ...]
    allowed_pressures: Tuple[NarrativePressure, ...]
    forced_hook: Optional[HookType] = None
    forced_closing: Optional[ClosingType] = None


VALID_COMBINATIONS: Dict[EmotionalState, GuardRailRule] = {
    EmotionalState.CURIOSITY: GuardRailRule(
        allowed_revelations=(RevelationDynamic.PROGRESSIVE, RevelationDynamic.FRAGMENTS),
        allowed_pressures=(NarrativePressure.SLOW, NarrativePressure.FLUID),
    ),
    EmotionalState.THREAT: GuardRailRule(
        allowed_revelations=(RevelationDynamic.PROGRESSIVE, RevelationDynamic.HIDDEN),
        allowed_pressures=(NarrativePressure.FLUID, NarrativePressure.FAST),
        forced_hook=HookType.SHOCK,
    ),
    EmotionalState.FASCINATION: GuardRailRule(
        allowed_revelations=(
            RevelationDynamic.PROGRESSIVE,
            RevelationDynamic.FRAGMENTS,
            RevelationDynamic.EARLY,
        ),
        allowed_pressures=(NarrativePressure.SLOW, NarrativePressure.FLUID),
    ),
    EmotionalState.CONFRONTATION: GuardRailRule(
        allowed_revelations=(RevelationDynamic.PROGRESSIVE, RevelationDynamic.EARLY),
        allowed_pressures=(NarrativePressure.FLUID, NarrativePressure.FAST),
        forced_hook=HookType.CHALLENGE,
        forced_closing=ClosingType.CHALLENGE,
    ),
    EmotionalState.DARK_INSPIRATION: GuardRailRule(
        allowed_revelations=(RevelationDynamic.PROGRESSIVE, RevelationDynamic.HIDDEN),
        allowed_pressures=(NarrativePressure.SLOW, NarrativePressure.FLUID),
        forced_closing=ClosingType.REVELATION,
    ),
}


@dataclass(frozen=True)
class ClimateConfig:
    """A complete, internally consistent climate combination."""
    emotional_state: EmotionalState
    revelation_dynamic: RevelationDynamic
    narrative_pressure: NarrativePressure
    hook_type: HookType
    closing_type: ClosingType

    def to_dict(self) -> dict:
        return {key: value.value for key, value in asdict(self).items()}


@dataclass
class GuardRailResult:
    valid: bool
    corrected: ClimateConfig
    warnings: List[str] = field(default_factory=list)


def _coerce(enum_cls, value):
    if value is None or value == "":
        return None
    return enum_cls(value)


def validate_climate(
    emotional_state=None,
    revelation_dynamic=None,
    narrative_pressure=None,
    hook_type=None,
    closing_type=None,
    confirmed: Optional[dict] = None,
) -> GuardRailResult:
    """
    Validate and correct a (possibly partial) climate configuration.

    Args:
        emotional_state: Defaults to CURIOSITY when missing
        revelation_dynamic: Replaced by the first allowed value if invalid
        narrative_pressure: Replaced by the first allowed value if invalid
        hook_type: Overridden when the emotional state forces a hook
        closing_type: Overridden when the emotional state forces a closing
        confirmed: Field values the user explicitly confirmed; re-injected
            after correction and trusted over the table

    Raises:
        ValueError: If a value is not a member of its enumeration
    """
    state = _coerce(EmotionalState, emotional_state) or DEFAULT_EMOTIONAL_STATE
    revelation = _coerce(RevelationDynamic, revelation_dynamic)
    pressure = _coerce(NarrativePressure, narrative_pressure)
    rules = VALID_COMBINATIONS[state]
    warnings: List[str] = []

    if revelation not in rules.allowed_revelations:
        if revelation is not None:
            warnings.append(
                f'Revelation "{revelation.value}" is not recommended for state "{state.value}"; '
                f'using "{rules.allowed_revelations[0].value}".'
            )
        revelation = rules.allowed_revelations[0]

    if pressure not in rules.allowed_pressures:
        if pressure is not None:
            warnings.append(
                f'Pressure "{pressure.value}" is not recommended for state "{state.value}"; '
                f'using "{rules.allowed_pressures[0].value}".'
            )
        pressure = rules.allowed_pressures[0]

    hook = rules.forced_hook or resolve(_coerce(HookType, hook_type), DEFAULT_HOOK_TYPE)
    closing = rules.forced_closing or resolve(_coerce(ClosingType, closing_type), DEFAULT_CLOSING_TYPE)

    corrected = ClimateConfig(
        emotional_state=state,
        revelation_dynamic=revelation,
        narrative_pressure=pressure,
        hook_type=hook,
        closing_type=closing,
    )

    if confirmed:
        corrected = _apply_confirmed(corrected, confirmed)

    return GuardRailResult(valid=not warnings, corrected=corrected, warnings=warnings)


_FIELD_ENUMS = {
    "emotional_state": EmotionalState,
    "revelation_dynamic": RevelationDynamic,
    "narrative_pressure": NarrativePressure,
    "hook_type": HookType,
    "closing_type": ClosingType,
}


def _apply_confirmed(config: ClimateConfig, confirmed: dict) -> ClimateConfig:
    values = {}
    for name, enum_cls in _FIELD_ENUMS.items():
        values[name] = resolve(_coerce(enum_cls, confirmed.get(name)), getattr(config, name))
    return ClimateConfig(**values)


__all__ = [
    "VALID_COMBINATIONS",
    "GuardRailRule",
    "ClimateConfig",
    "GuardRailResult",
    "validate_climate",
]
