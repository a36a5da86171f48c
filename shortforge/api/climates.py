"""
Climates API Routes
Exposes the climate guard rails so editors can show corrections before saving.
"""

from fastapi import APIRouter, HTTPException, status

from shortforge.narrative import validate_climate
from shortforge.schemas.preset import ClimateValidateRequest, ClimateValidateResponse

router = APIRouter()


@router.post("/validate", response_model=ClimateValidateResponse)
async def validate_climate_combination(request: ClimateValidateRequest):
    """
    Validate a climate combination.

    Invalid values are corrected and every correction is reported in
    ``warnings``; ``valid`` is false whenever something was corrected.
    """
    values = request.model_dump(exclude={"confirmed"}, mode="json")
    confirmed = request.confirmed.model_dump(exclude_none=True, mode="json") if request.confirmed else None

    try:
        result = validate_climate(confirmed=confirmed, **values)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ClimateValidateResponse(
        valid=result.valid,
        corrected=result.corrected.to_dict(),
        warnings=result.warnings,
    )
