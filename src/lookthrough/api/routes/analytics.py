"""Stateless analytics endpoints."""

from fastapi import APIRouter

from lookthrough.analytics import compute
from lookthrough.schemas.analytics import AggregateResult, ComputeRequest

router = APIRouter()


@router.post("/compute", response_model=AggregateResult)
async def compute_analytics(request: ComputeRequest) -> AggregateResult:
    """
    Compute look-through analytics for a portfolio supplied in the body.

    Nothing is read from or written to storage. Negative or non-finite
    values in the snapshot are rejected by the engine.

    Raises:
        HTTPException:
            - 400: Invalid or malformed portfolio snapshot
            - 422: Body does not match the snapshot schema
    """
    return compute(request.portfolio, request.options)
