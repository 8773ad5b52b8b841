"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lookthrough.core.config import settings
from lookthrough.db.session import get_db
from lookthrough.models.portfolio import Portfolio

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness check."""
    return {"status": "healthy", "service": settings.APP_NAME, "environment": settings.ENVIRONMENT}


@router.get("/health/db")
async def database_health(db: Annotated[AsyncSession, Depends(get_db)]):
    """Snapshot store check: reachable, and whether a portfolio is stored yet."""
    try:
        portfolios = await db.scalar(select(func.count()).select_from(Portfolio))
    except SQLAlchemyError as e:
        return {"status": "unhealthy", "database": str(e)}
    return {"status": "healthy", "database": "connected", "portfolios": portfolios}
