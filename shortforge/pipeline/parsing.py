"""
Response Parsing
Turns text-generation output into validated script / prompt documents.
Models often wrap JSON in markdown fences; those are stripped before parsing.
"""

import json
import re
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError

from shortforge.pipeline.base import ResponseParseError

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?|\n?```")


class _ResponseModel(BaseModel):
    class Config:
        populate_by_name = True
        extra = "allow"


class ScriptScene(_ResponseModel):
    narration: str
    visual_description: str = Field(default="", alias="visualDescription")
    duration: Optional[float] = None
    goal: Optional[str] = None
    order: Optional[int] = None


class ScriptDocument(_ResponseModel):
    title: Optional[str] = None
    hook: Optional[str] = None
    cta: Optional[str] = None
    scenes: List[ScriptScene]


class ScenePrompt(_ResponseModel):
    scene_order: int = Field(alias="sceneOrder")
    image_prompt: str = Field(default="", alias="imagePrompt")
    negative_prompt: Optional[str] = Field(default=None, alias="negativePrompt")


class PromptDocument(_ResponseModel):
    prompts: List[ScenePrompt]
    style: Optional[str] = None
    consistency: Optional[str] = None


def strip_markdown_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_json_document(text: str) -> dict:
    """
    Parse a JSON object out of a model response.

    Raises:
        ResponseParseError: If no JSON object can be decoded
    """
    cleaned = strip_markdown_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # Tolerate prose around the object
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ResponseParseError("Response is not valid JSON", details={"response": cleaned[:500]})
        try:
            data = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError as e:
            raise ResponseParseError(f"Response is not valid JSON: {e}", details={"response": cleaned[:500]})

    if not isinstance(data, dict):
        raise ResponseParseError("Response JSON is not an object", details={"response": cleaned[:500]})
    return data


def _validate(model_cls, data: dict, what: str) -> Any:
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError(f"Invalid {what}: {e.errors()[0]['msg']}", details={"errors": e.errors()})


def parse_script(text: str) -> tuple:
    """
    Parse a scriptwriter response.

    Returns:
        (ScriptDocument, raw dict) - the raw dict is persisted verbatim

    Raises:
        ResponseParseError: On malformed JSON, missing or empty ``scenes``
    """
    data = parse_json_document(text)
    if not data.get("scenes"):
        raise ResponseParseError("Script has no scenes", details={"keys": sorted(data)})
    return _validate(ScriptDocument, data, "script"), data


def parse_prompts(text: str) -> PromptDocument:
    """
    Parse a prompt-engineer response.

    Raises:
        ResponseParseError: On malformed JSON, missing or empty ``prompts``
    """
    data = parse_json_document(text)
    if not data.get("prompts"):
        raise ResponseParseError("Prompt response has no prompts", details={"keys": sorted(data)})
    return _validate(PromptDocument, data, "prompts")
