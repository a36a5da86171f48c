"""
Shorts API Routes
Create shorts, run the generation pipeline and preview scene parameters.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shortforge.api.deps import (
    get_db,
    get_current_user_id,
    get_model_cache,
    get_text_service,
    get_image_service,
)
from shortforge.models import Character, Climate, GenerationJob, JobCharacter, JobStatus, Style
from shortforge.narrative import FORMAT_CONFIG, ShortFormat, calculate_scene_params, format_limits, validate_overrides
from shortforge.pipeline.base import JobConflictError, PresetValidationError, StageError
from shortforge.pipeline.orchestrator import PipelineOrchestrator
from shortforge.schemas.generate import (
    FormatLimitsResponse,
    GenerateRequest,
    SceneParamsRequest,
    SceneParamsResponse,
)
from shortforge.schemas.job import CreateShortRequest, ShortListResponse, ShortResponse, ShortSummary
from shortforge.services.credits import (
    CreditFeature,
    CreditLedger,
    InsufficientCreditsError,
    estimate_short_credits,
)
from shortforge.services.model_registry import ModelRef

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_owned_short(db: Session, short_id: str, user_id: str) -> GenerationJob:
    job = db.query(GenerationJob).filter(
        GenerationJob.id == short_id,
        GenerationJob.user_id == user_id,
    ).first()
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Short not found")
    return job


def _visible_preset(db: Session, model, preset_id: Optional[str], user_id: str, label: str):
    """System presets are visible to everyone; user presets only to their owner."""
    if not preset_id:
        return None
    preset = db.query(model).filter(model.id == preset_id).first()
    if not preset or not (preset.is_system or preset.user_id == user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} '{preset_id}' not found")
    return preset


@router.post("", response_model=ShortResponse, status_code=status.HTTP_201_CREATED)
async def create_short(
    request: CreateShortRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a short in DRAFT. Nothing is generated until /generate is called."""
    _visible_preset(db, Style, request.style_id, user_id, "Style")
    _visible_preset(db, Climate, request.climate_id, user_id, "Climate")

    if request.ai_model:
        try:
            ModelRef.parse(request.ai_model)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid AI model: {e}")

    config = FORMAT_CONFIG[request.format]
    target_duration = request.target_duration or config.default_duration
    if not config.min_duration <= target_duration <= config.max_duration:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Target duration for {request.format.value} must be between "
                f"{config.min_duration}s and {config.max_duration}s"
            ),
        )

    job = GenerationJob(
        id=f"short_{uuid.uuid4().hex[:12]}",
        user_id=user_id,
        premise=request.premise.strip(),
        target_duration=target_duration,
        format=request.format.value,
        style_id=request.style_id,
        climate_id=request.climate_id,
        ai_model=request.ai_model,
        scene_count_override=request.scene_count_override,
        scene_duration_override=request.scene_duration_override,
        status=JobStatus.DRAFT,
        progress=0,
    )
    db.add(job)

    for index, cast in enumerate(request.characters):
        character = db.query(Character).filter(
            Character.id == cast.character_id,
            Character.user_id == user_id,
        ).first()
        if not character:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Character '{cast.character_id}' not found",
            )
        db.add(JobCharacter(
            job_id=job.id,
            character_id=character.id,
            order_index=index,
            role=cast.role,
            custom_prompt=cast.custom_prompt,
            custom_clothing=cast.custom_clothing,
        ))

    db.commit()
    db.refresh(job)

    for warning in validate_overrides(request.format, request.scene_count_override, request.scene_duration_override):
        logger.warning(f"[Shorts] {job.id}: {warning}")

    logger.info(f"[Shorts] Created {job.id} for {user_id} ({job.format}, {job.target_duration}s)")
    return job


@router.get("", response_model=ShortListResponse)
async def list_shorts(
    short_status: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the caller's shorts, newest first."""
    query = db.query(GenerationJob).filter(GenerationJob.user_id == user_id)
    if short_status:
        query = query.filter(GenerationJob.status == short_status.upper())

    total = query.count()
    shorts = query.order_by(GenerationJob.created_at.desc()).offset(offset).limit(limit).all()
    return ShortListResponse(shorts=[ShortSummary.model_validate(s) for s in shorts], total=total)


@router.post("/scene-params", response_model=SceneParamsResponse)
async def preview_scene_params(request: SceneParamsRequest):
    """Preview the scene calculator, applying manual overrides and reporting their warnings."""
    params = calculate_scene_params(request.format, request.narrative_pressure)
    scene_count = request.scene_count if request.scene_count is not None else params.scene_count
    duration = (
        request.avg_scene_duration if request.avg_scene_duration is not None else params.avg_scene_duration
    )
    return SceneParamsResponse(
        scene_count=scene_count,
        avg_scene_duration=duration,
        total_duration=scene_count * duration,
        warnings=validate_overrides(request.format, request.scene_count, request.avg_scene_duration),
    )


@router.get("/format-limits/{short_format}", response_model=FormatLimitsResponse)
async def get_format_limits(short_format: ShortFormat):
    return FormatLimitsResponse(format=short_format, **format_limits(short_format))


@router.get("/{short_id}", response_model=ShortResponse)
async def get_short(
    short_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get a short with its scenes."""
    return _get_owned_short(db, short_id, user_id)


@router.post("/{short_id}/generate", response_model=ShortResponse)
async def generate_short(
    short_id: str,
    request: Optional[GenerateRequest] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    model_cache=Depends(get_model_cache),
    text_service=Depends(get_text_service),
    image_service=Depends(get_image_service),
):
    """
    Run the pipeline for a short inside this request.

    Credits are validated and debited before any stage runs and refunded if
    a stage fails. A run that ends with some failed scenes is returned as-is
    (status FAILED, per-scene errors) without a refund.
    """
    step = request.step if request else "full"
    job = _get_owned_short(db, short_id, user_id)

    if job.status not in JobStatus.STARTABLE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Short is {job.status}; runs start from DRAFT or FAILED",
        )

    orchestrator = PipelineOrchestrator(db, text_service, image_service, model_cache)
    try:
        plan = orchestrator.prepare(short_id, step)
    except PresetValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    credits_needed = estimate_short_credits(job.target_duration)
    ledger = CreditLedger(db)
    details = {"short_id": short_id, "step": step}
    try:
        ledger.validate(user_id, CreditFeature.SHORT_GENERATION, credits_needed)
        ledger.debit(user_id, CreditFeature.SHORT_GENERATION, credits_needed, details=details)
    except InsufficientCreditsError as e:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={"error": "insufficient_credits", "required": e.required, "available": e.available},
        )

    logger.info(f"[Shorts] Running '{step}' for {short_id} ({credits_needed} credits)")
    try:
        job = await orchestrator.execute(plan)
    except JobConflictError as e:
        ledger.refund(user_id, CreditFeature.SHORT_GENERATION, credits_needed, "run_rejected", details)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except StageError as e:
        ledger.refund(
            user_id, CreditFeature.SHORT_GENERATION, credits_needed, "pipeline_failed",
            {**details, "error": e.message},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "pipeline_failed", "stage": e.stage, "message": e.reason},
        )
    except Exception as e:
        logger.error(f"[Shorts] Unexpected pipeline error for {short_id}: {e}")
        db.rollback()
        ledger.refund(
            user_id, CreditFeature.SHORT_GENERATION, credits_needed, "pipeline_failed",
            {**details, "error": str(e)},
        )
        raise

    return job
