import json

import pytest

from shortforge.narrative import ShortFormat, build_scriptwriter_payload
from shortforge.pipeline.base import PresetValidationError

STYLE = {
    "name": "Curious Facts",
    "hook_type": "QUESTION",
    "hook_example": "Did you know?",
    "cta_type": "COMMUNITY",
    "visual_prompt_base": "cinematic vertical frame",
    "advanced_instructions": "Keep sentences short.",
}

CLIMATE = {
    "name": "Curiosity & Mystery",
    "emotional_state": "CURIOSITY",
    "revelation_dynamic": "PROGRESSIVE",
    "narrative_pressure": "FLUID",
    "prompt_fragment": "Tease the answer.",
}


def test_payload_document_shape():
    payload = build_scriptwriter_payload("Octopuses", STYLE, CLIMATE).to_dict()

    assert set(payload) == {"premise", "style", "climate", "constraints", "characters"}
    assert payload["style"]["hookType"] == "QUESTION"
    assert payload["style"]["ctaType"] == "COMMUNITY"
    assert payload["style"]["visualPrompt"] == "cinematic vertical frame"
    assert payload["style"]["scriptInstructions"] == "Keep sentences short."
    assert payload["climate"]["emotionalState"] == "CURIOSITY"
    assert payload["climate"]["customInstructions"] == "Tease the answer."
    assert payload["constraints"] == {
        "format": "SHORT",
        "maxScenes": 4,
        "avgSceneDuration": 5,
        "totalDuration": 20,
        "isOverridden": False,
    }
    assert payload["characters"] == []


def test_payload_serializes_to_json():
    payload = build_scriptwriter_payload("Octopuses", STYLE, CLIMATE)
    assert json.loads(payload.to_json()) == payload.to_dict()


def test_climate_is_corrected_before_calculating_scenes():
    climate = {**CLIMATE, "narrative_pressure": "FAST"}
    payload = build_scriptwriter_payload("Octopuses", STYLE, climate).to_dict()

    # CURIOSITY does not allow FAST; first allowed pressure is SLOW
    assert payload["climate"]["narrativePressure"] == "SLOW"
    assert payload["constraints"]["maxScenes"] == 3


def test_threat_climate_gets_forced_hook():
    climate = {**CLIMATE, "emotional_state": "THREAT", "revelation_dynamic": "EARLY"}
    payload = build_scriptwriter_payload("Octopuses", STYLE, climate).to_dict()

    assert payload["climate"]["revelationDynamic"] == "PROGRESSIVE"
    assert payload["climate"]["hookType"] == "SHOCK"


def test_overrides_replace_calculated_values():
    payload = build_scriptwriter_payload(
        "Octopuses", STYLE, CLIMATE, format=ShortFormat.REEL, scene_count=8,
    ).to_dict()

    assert payload["constraints"]["maxScenes"] == 8
    assert payload["constraints"]["avgSceneDuration"] == 8
    assert payload["constraints"]["totalDuration"] == 64
    assert payload["constraints"]["isOverridden"] is True


def test_characters_are_included():
    characters = [{"name": "Ana", "description": "marine biologist", "visual_prompt": "red hair", "role": "host"}]
    payload = build_scriptwriter_payload("Octopuses", STYLE, CLIMATE, characters=characters).to_dict()

    assert payload["characters"] == [
        {"name": "Ana", "description": "marine biologist", "visualPrompt": "red hair", "role": "host"}
    ]


@pytest.mark.parametrize(
    "style,climate",
    [
        ({**STYLE, "hook_type": None}, CLIMATE),
        ({**STYLE, "cta_type": ""}, CLIMATE),
        (STYLE, {**CLIMATE, "emotional_state": None}),
        (None, CLIMATE),
        (STYLE, None),
    ],
)
def test_incomplete_presets_are_rejected(style, climate):
    with pytest.raises(PresetValidationError):
        build_scriptwriter_payload("Octopuses", style, climate)


def test_invalid_climate_value_is_rejected():
    with pytest.raises(PresetValidationError):
        build_scriptwriter_payload("Octopuses", STYLE, {**CLIMATE, "revelation_dynamic": "SOMETIMES"})
