"""
Admin API Routes
Default model configuration.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shortforge.api.deps import get_db, get_model_cache, require_admin
from shortforge.models.settings import AdminSetting, SINGLETON_ID
from shortforge.services.model_registry import ModelRef, hardcoded_defaults

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/models")
async def get_default_models(model_cache=Depends(get_model_cache)):
    """Default model per feature, as currently resolved."""
    return {feature: str(model_cache.get(feature)) for feature in hardcoded_defaults()}


@router.put("/models")
async def update_default_models(
    default_models: Dict[str, str],
    db: Session = Depends(get_db),
    model_cache=Depends(get_model_cache),
):
    """Store default model overrides and drop the cached configuration."""
    known = hardcoded_defaults()
    for feature, value in default_models.items():
        if feature not in known:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown feature '{feature}'")
        try:
            ModelRef.parse(value)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    row = db.get(AdminSetting, SINGLETON_ID)
    if row is None:
        row = AdminSetting(id=SINGLETON_ID, default_models={})
        db.add(row)
    row.default_models = {**(row.default_models or {}), **default_models}
    db.commit()

    model_cache.invalidate()
    logger.info(f"[Admin] Default models updated: {default_models}")
    return {feature: str(model_cache.get(feature)) for feature in known}


@router.post("/models/invalidate-cache")
async def invalidate_model_cache(model_cache=Depends(get_model_cache)):
    """Force the next pipeline run to re-read the default models."""
    model_cache.invalidate()
    return {"invalidated": True}
