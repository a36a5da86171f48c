"""
Media Stage
Generates one image per scene in sequential batches with bounded concurrency.
A failing scene is recorded on the scene itself and never aborts its batch.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from shortforge.core.config import settings
from shortforge.schemas.generation import ImageRequest
from shortforge.services.model_registry import ModelRef

logger = logging.getLogger(__name__)


@dataclass
class MediaOutcome:
    total: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0


class MediaStage:
    """Scene image prompts -> stored images."""

    def __init__(self, db: Session, image_service, batch_size: int = None):
        self.db = db
        self.image_service = image_service
        self.batch_size = batch_size or settings.MEDIA_BATCH_SIZE

    async def run(
        self,
        scenes: List,
        model: ModelRef,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> MediaOutcome:
        """
        Generate images for ``scenes``.

        Args:
            scenes: Scene rows, already ordered
            model: Image model to use
            on_progress: Called with (finished, total) after every scene
        """
        outcome = MediaOutcome()
        pending = []
        for scene in scenes:
            if not (scene.image_prompt or "").strip():
                logger.warning(f"[Media] Scene {scene.order} has no image prompt, skipping")
                outcome.skipped += 1
                continue
            pending.append(scene)

        outcome.total = len(pending)
        logger.info(
            f"[Media] Generating {outcome.total} images with {model} "
            f"in batches of {self.batch_size}"
        )

        for start in range(0, len(pending), self.batch_size):
            batch = pending[start:start + self.batch_size]
            await asyncio.gather(*(self._generate_scene(scene, model, outcome, on_progress) for scene in batch))

        logger.info(
            f"[Media] Done: {outcome.completed} generated, {outcome.failed} failed, "
            f"{outcome.skipped} skipped"
        )
        return outcome

    async def _generate_scene(self, scene, model: ModelRef, outcome: MediaOutcome, on_progress):
        request = ImageRequest(
            prompt=scene.image_prompt,
            negative_prompt=scene.negative_prompt,
            image_size=settings.IMAGE_SIZE,
            num_images=1,
        )

        error = None
        image = None
        try:
            result = await self.image_service.generate(request, model)
            if not result.images:
                error = "Image service returned no images"
                logger.error(f"[Media] Scene {scene.order} failed: {error}")
            else:
                image = result.images[0]
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.error(f"[Media] Scene {scene.order} failed: {error}")

        if image is not None:
            scene.media_url = image.url
            scene.media_width = image.width
            scene.media_height = image.height
            scene.is_generated = True
            scene.error_message = None
            outcome.completed += 1
        else:
            scene.is_generated = False
            scene.error_message = error
            outcome.failed += 1
        self.db.commit()

        if on_progress:
            on_progress(outcome.completed + outcome.failed, outcome.total)
