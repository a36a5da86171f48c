"""
Pipeline Orchestrator
Sequences the script, prompt and media stages for one short and owns its
status and progress. It is the only writer of ``GenerationJob.status``.

    DRAFT/FAILED -> SCRIPTING -> PROMPTING -> GENERATING -> COMPLETED | FAILED

Credits are handled by the caller; the orchestrator never touches them.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from shortforge.models.job import GenerationJob, JobStatus, Scene
from shortforge.narrative.payload_builder import ScriptwriterPayload, build_scriptwriter_payload
from shortforge.narrative.types import ShortFormat
from shortforge.pipeline.base import (
    JobConflictError,
    JobNotFoundError,
    PresetValidationError,
    StageError,
)
from shortforge.pipeline.media_stage import MediaStage
from shortforge.pipeline.prompt_stage import DEFAULT_NEGATIVE_PROMPT, PromptStage
from shortforge.pipeline.script_stage import ScriptStage
from shortforge.services.model_registry import ModelFeature, ModelRef

logger = logging.getLogger(__name__)

STEPS = ("full", "script", "prompts", "media")


class Progress:
    """Progress checkpoints per stage."""
    SCRIPT_START = 10
    SCRIPT_DONE = 30
    PROMPTS_START = 35
    PROMPTS_DONE = 50
    MEDIA_START = 55
    MEDIA_SPAN = 40
    DONE = 100


# Status and progress a run enters with, per requested step
_ENTRY = {
    "full": (JobStatus.SCRIPTING, Progress.SCRIPT_START),
    "script": (JobStatus.SCRIPTING, Progress.SCRIPT_START),
    "prompts": (JobStatus.PROMPTING, Progress.PROMPTS_START),
    "media": (JobStatus.GENERATING, Progress.MEDIA_START),
}

# Stage blamed when a run breaks outside a stage body
_STAGE_BY_STATUS = {
    JobStatus.SCRIPTING: "script",
    JobStatus.PROMPTING: "prompts",
    JobStatus.GENERATING: "media",
}


def media_progress(finished: int, total: int) -> int:
    if total <= 0:
        return Progress.MEDIA_START + Progress.MEDIA_SPAN
    return Progress.MEDIA_START + math.floor(finished / total * Progress.MEDIA_SPAN)


@dataclass
class RunPlan:
    """A validated run, ready for admission."""
    job: GenerationJob
    step: str
    entry_status: str
    entry_progress: int
    payload: Optional[ScriptwriterPayload] = None
    script_model: Optional[ModelRef] = None


def build_roster(job: GenerationJob) -> List[dict]:
    """Characters cast in the job, in cast order."""
    roster = []
    for link in job.characters:
        character = link.character
        if character is None:
            continue
        visual = link.custom_prompt or character.prompt_description or ""
        if link.custom_clothing:
            visual = f"{visual}, wearing {link.custom_clothing}" if visual else f"wearing {link.custom_clothing}"
        roster.append({
            "name": character.name,
            "description": character.description or character.prompt_description or "",
            "visual_prompt": visual,
            "role": link.role or "character",
        })
    return roster


class PipelineOrchestrator:
    """Runs pipeline steps for a short inside the caller's request."""

    def __init__(self, db: Session, text_service, image_service, model_cache, batch_size: int = None):
        self.db = db
        self.model_cache = model_cache
        self.script_stage = ScriptStage(text_service)
        self.prompt_stage = PromptStage(text_service)
        self.media_stage = MediaStage(db, image_service, batch_size=batch_size)

    async def run(self, job_id: str, step: str = "full") -> GenerationJob:
        """
        Run one pipeline step (or all of them) for a job.

        Raises:
            JobNotFoundError: Unknown job
            PresetValidationError: Preconditions not met; nothing was mutated
            JobConflictError: The job is already running or cannot be restarted
            StageError: A stage failed; the job is FAILED
        """
        return await self.execute(self.prepare(job_id, step))

    def prepare(self, job_id: str, step: str = "full") -> RunPlan:
        """Check preconditions and resolve inputs without mutating anything."""
        if step not in STEPS:
            raise PresetValidationError(f"Unknown step '{step}'", details={"steps": list(STEPS)})

        job = self.db.get(GenerationJob, job_id)
        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found", details={"job_id": job_id})

        has_scenes = bool(job.scenes)
        needs_script = step == "script" or (step == "full" and not has_scenes)

        if step == "script" and has_scenes:
            raise PresetValidationError(
                "Job already has scenes; scripts are only generated for jobs without scenes",
                details={"job_id": job_id},
            )
        if step in ("prompts", "media") and not has_scenes:
            raise PresetValidationError(
                f"Job has no scenes; run the script step before '{step}'",
                details={"job_id": job_id},
            )

        # Resolve everything that can fail validation before the job is touched
        payload = self._build_payload(job) if needs_script else None
        script_model = self._script_model(job) if needs_script else None

        entry_status, entry_progress = _ENTRY[step]
        if step == "full" and not needs_script:
            entry_status, entry_progress = JobStatus.PROMPTING, Progress.PROMPTS_START

        return RunPlan(
            job=job,
            step=step,
            entry_status=entry_status,
            entry_progress=entry_progress,
            payload=payload,
            script_model=script_model,
        )

    async def execute(self, plan: RunPlan) -> GenerationJob:
        """
        Admit the run and drive the planned stages.

        Once admitted, the job always ends in a settled status: any error
        escaping the stages marks it FAILED and surfaces as a StageError.
        """
        job = plan.job
        self._admit(job, plan.entry_status, plan.entry_progress)

        logger.info(f"[Pipeline] Job {job.id}: starting step '{plan.step}' ({plan.entry_status})")

        try:
            return await self._drive(plan)
        except StageError:
            raise
        except Exception as e:
            self.db.rollback()
            stage = _STAGE_BY_STATUS.get(job.status, plan.step)
            self._fail_stage(job, stage, e)

    async def _drive(self, plan: RunPlan) -> GenerationJob:
        job, step = plan.job, plan.step
        if plan.payload is not None:
            await self.run_script(job, plan.payload, plan.script_model)
            if step == "script":
                return self._finish_partial(job)
            self._transition(job, JobStatus.PROMPTING, Progress.PROMPTS_START)

        if step in ("full", "prompts"):
            await self.run_prompts(job)
            if step == "prompts":
                return self._finish_partial(job)
            self._transition(job, JobStatus.GENERATING, Progress.MEDIA_START)

        return await self.run_media(job)

    async def run_script(self, job: GenerationJob, payload: ScriptwriterPayload, model: ModelRef):
        try:
            result = await self.script_stage.run(payload, model)

            job.title = result.title
            job.hook = result.hook
            job.cta = result.cta
            job.script = result.raw
            for parsed in result.scenes:
                self.db.add(Scene(
                    id=f"scene_{uuid.uuid4().hex[:12]}",
                    job_id=job.id,
                    order=parsed.order,
                    duration=parsed.duration,
                    narration=parsed.narration,
                    visual_desc=parsed.visual_desc,
                    goal=parsed.goal,
                ))
            job.progress = max(job.progress or 0, Progress.SCRIPT_DONE)
            self.db.commit()
        except Exception as e:
            self._fail_stage(job, "script", e)

        self.db.refresh(job)
        logger.info(f"[Pipeline] Job {job.id}: script ready with {len(job.scenes)} scenes")

    async def run_prompts(self, job: GenerationJob):
        try:
            scenes = list(job.scenes)
            prompts = await self.prompt_stage.run(
                scenes,
                self.model_cache.get(ModelFeature.PROMPT_ENGINEER),
                title=job.title,
                visual_style=job.style.visual_prompt_base if job.style else None,
                characters=[
                    {"name": entry["name"], "promptDescription": entry["visual_prompt"]}
                    for entry in build_roster(job)
                ],
            )

            matched = 0
            for scene in scenes:
                prompt = prompts.get(scene.order)
                if prompt is None or not prompt.image_prompt.strip():
                    continue
                scene.image_prompt = prompt.image_prompt.strip()
                scene.negative_prompt = prompt.negative_prompt or DEFAULT_NEGATIVE_PROMPT
                matched += 1
            job.progress = max(job.progress or 0, Progress.PROMPTS_DONE)
            self.db.commit()
            logger.info(f"[Pipeline] Job {job.id}: prompts set on {matched}/{len(scenes)} scenes")
        except Exception as e:
            self._fail_stage(job, "prompts", e)

    async def run_media(self, job: GenerationJob) -> GenerationJob:
        try:
            scenes = [scene for scene in job.scenes if not scene.is_generated]
            outcome = await self.media_stage.run(
                scenes,
                self.model_cache.get(ModelFeature.IMAGE),
                on_progress=lambda finished, total: self._set_progress(job, media_progress(finished, total)),
            )

            generated = sum(1 for scene in job.scenes if scene.is_generated)
            job.credits_used = generated
            if outcome.failed == 0:
                job.status = JobStatus.COMPLETED
                job.progress = Progress.DONE
                job.error_message = None
                job.completed_at = datetime.utcnow()
            else:
                job.status = JobStatus.FAILED
                job.error_message = f"{outcome.failed} scene(s) failed"
            self.db.commit()
        except Exception as e:
            self._fail_stage(job, "media", e)

        self.db.refresh(job)
        logger.info(
            f"[Pipeline] Job {job.id}: {job.status} "
            f"({job.credits_used} generated, progress {job.progress}%)"
        )
        return job

    def _build_payload(self, job: GenerationJob) -> ScriptwriterPayload:
        try:
            fmt = ShortFormat(job.format or ShortFormat.SHORT.value)
        except ValueError:
            raise PresetValidationError(f"Unknown format '{job.format}'")

        return build_scriptwriter_payload(
            premise=job.premise,
            style=job.style,
            climate=job.climate,
            format=fmt,
            characters=build_roster(job),
            scene_count=job.scene_count_override,
            avg_scene_duration=job.scene_duration_override,
        )

    def _script_model(self, job: GenerationJob) -> ModelRef:
        if job.ai_model:
            try:
                return ModelRef.parse(job.ai_model)
            except ValueError as e:
                raise PresetValidationError(f"Invalid AI model: {e}")
        return self.model_cache.get(ModelFeature.SCRIPTWRITER)

    def _admit(self, job: GenerationJob, status: str, progress: int):
        """Flip the job into a running status, unless another run got there first."""
        result = self.db.execute(
            update(GenerationJob)
            .where(GenerationJob.id == job.id, GenerationJob.status.in_(JobStatus.STARTABLE))
            .values(
                status=status,
                progress=progress,
                error_message=None,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(job)

        if result.rowcount == 0:
            logger.warning(f"[Pipeline] Job {job.id}: run rejected, status is {job.status}")
            raise JobConflictError(job.id, job.status)

    def _transition(self, job: GenerationJob, status: str, progress: int):
        job.status = status
        job.progress = max(job.progress or 0, progress)
        self.db.commit()

    def _set_progress(self, job: GenerationJob, progress: int):
        if progress > (job.progress or 0):
            job.progress = progress
            self.db.commit()

    def _finish_partial(self, job: GenerationJob) -> GenerationJob:
        """A standalone script/prompts step hands the job back in DRAFT."""
        job.status = JobStatus.DRAFT
        self.db.commit()
        self.db.refresh(job)
        logger.info(f"[Pipeline] Job {job.id}: step finished, back to {job.status}")
        return job

    def _fail_stage(self, job: GenerationJob, stage: str, error: Exception):
        self.db.rollback()
        reason = getattr(error, "message", None) or str(error) or error.__class__.__name__
        job.status = JobStatus.FAILED
        job.error_message = f"{stage} stage failed: {reason}"
        self.db.commit()
        logger.error(f"[Pipeline] Job {job.id}: {job.error_message}")
        raise StageError(stage, reason, details={"job_id": job.id}) from error


__all__ = ["PipelineOrchestrator", "Progress", "STEPS", "build_roster", "media_progress"]
