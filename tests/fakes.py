import asyncio
import json
from typing import List

from shortforge.pipeline.base import NonRetryableError
from shortforge.schemas.generation import GeneratedImage, ImageResult


def script_response(count: int = 3, with_order: bool = True, fenced: bool = True) -> str:
    scenes = []
    for i in range(count):
        scene = {
            "narration": f"Narration {i}",
            "visualDescription": f"Visual {i}",
            "duration": 5,
            "goal": f"Goal {i}",
        }
        if with_order:
            scene["order"] = i
        scenes.append(scene)
    body = json.dumps({"title": "Deep Sea", "hook": "Narration 0", "cta": f"Narration {count - 1}", "scenes": scenes})
    return f"```json\n{body}\n```" if fenced else body


def prompts_response(orders: List[int], fail_orders=()) -> str:
    prompts = []
    for order in orders:
        marker = "FAIL " if order in fail_orders else ""
        prompts.append({
            "sceneOrder": order,
            "imagePrompt": f"{marker}prompt for scene {order}",
            "negativePrompt": "blurry",
        })
    return json.dumps({"prompts": prompts, "style": "cinematic", "consistency": "same palette"})


class FakeTextService:
    """Returns queued responses in order; queued exceptions are raised."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    async def complete(self, system, prompt, model, temperature=None):
        self.calls.append({"system": system, "prompt": prompt, "model": model, "temperature": temperature})
        if not self.responses:
            raise AssertionError("unexpected text generation call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeImageService:
    """Succeeds unless the prompt contains "FAIL"; tracks concurrency."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def generate(self, request, model):
        self.calls.append(request)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if "FAIL" in request.prompt:
                raise NonRetryableError("content policy violation")
            index = len(self.calls)
            return ImageResult(
                images=[GeneratedImage(url=f"/files/scenes/img_{index}.png", width=768, height=1344)],
                seed=index,
            )
        finally:
            self.active -= 1
