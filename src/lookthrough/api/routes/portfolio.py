"""Portfolio endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lookthrough.analytics import compute
from lookthrough.core.config import settings
from lookthrough.core.exceptions import ValidationError
from lookthrough.db.session import get_db
from lookthrough.schemas.analytics import AggregateResult, AttributionOptions
from lookthrough.schemas.portfolio import PortfolioSnapshot, PortfolioUpdate
from lookthrough.services import portfolio_service

router = APIRouter()


@router.get("/", response_model=PortfolioSnapshot)
async def get_portfolio(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PortfolioSnapshot:
    """
    Get the current portfolio.

    A default empty portfolio is created on first access.

    Returns:
        Portfolio snapshot with positions, securities, fundamentals and
        derived totals
    """
    return await portfolio_service.get_snapshot(db)


@router.put("/", response_model=PortfolioSnapshot)
async def update_portfolio(
    portfolio_in: PortfolioUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PortfolioSnapshot:
    """
    Replace the portfolio wholesale.

    Every existing position is removed and replaced by the supplied ones.
    Securities are created or refreshed from the position payloads.

    Raises:
        HTTPException:
            - 404: A position references an unknown security without details
            - 409: Conflicting definitions of the same security
            - 422: Negative quantities/prices or malformed payload

    Example:
        PUT /api/v1/portfolio/
        {
            "name": "Long-term",
            "cash": 2500,
            "positions": [
                {
                    "symbol": "AAPL",
                    "quantity": 10,
                    "average_cost": 100,
                    "current_price": 150,
                    "security": {"symbol": "AAPL", "name": "Apple Inc.", "sector": "Technology"}
                }
            ]
        }
    """
    portfolio = await portfolio_service.update_portfolio(db, portfolio_in)
    return PortfolioSnapshot.model_validate(portfolio)


@router.post("/import", response_model=PortfolioSnapshot)
async def import_portfolio_csv(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PortfolioSnapshot:
    """
    Replace the portfolio positions with the rows of a CSV document.

    The request body is the raw CSV (``Content-Type: text/csv``). Name and
    cash balance are kept.

    Raises:
        HTTPException:
            - 400: Malformed CSV, invalid row or non UTF-8 body
            - 409: Conflicting definitions of the same security
    """
    body = await request.body()
    try:
        csv_text = body.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("CSV body must be UTF-8 encoded") from e

    portfolio = await portfolio_service.import_positions_csv(db, csv_text)
    return PortfolioSnapshot.model_validate(portfolio)


@router.get("/analytics", response_model=AggregateResult)
async def get_portfolio_analytics(
    db: Annotated[AsyncSession, Depends(get_db)],
    top_n: Annotated[int | None, Query(ge=1)] = None,
    include_unclassified_sector: bool = True,
) -> AggregateResult:
    """
    Compute look-through analytics for the stored portfolio.

    Args:
        db: Database session
        top_n: Size of the contributor/detractor lists (defaults to the
            ANALYTICS_DEFAULT_TOP_N setting)
        include_unclassified_sector: Whether to report the Unclassified
            sector bucket

    Returns:
        Weighted fundamentals, sector allocation, attribution and dividends

    Raises:
        HTTPException:
            - 400: Stored data is invalid for analysis
            - 503: Portfolio could not be loaded
    """
    snapshot = await portfolio_service.get_snapshot(db)
    options = AttributionOptions(
        top_n=top_n or settings.ANALYTICS_DEFAULT_TOP_N,
        include_unclassified_sector=include_unclassified_sector,
    )
    return compute(snapshot, options)
