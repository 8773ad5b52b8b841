"""Schemas package."""

from lookthrough.schemas.analytics import (
    AggregateResult,
    AttributionOptions,
    AttributionSummary,
    ComputeRequest,
    DividendSummary,
    LookThroughMetrics,
    PortfolioSummary,
    PositionAttribution,
    PositionDividend,
    SectorAllocation,
)
from lookthrough.schemas.portfolio import (
    FundamentalDataCreate,
    FundamentalDataSnapshot,
    PortfolioSnapshot,
    PortfolioUpdate,
    PositionCreate,
    PositionSnapshot,
    SecurityCreate,
    SecuritySnapshot,
)

__all__ = [
    # Portfolio snapshot
    "FundamentalDataSnapshot",
    "SecuritySnapshot",
    "PositionSnapshot",
    "PortfolioSnapshot",
    # Portfolio update
    "FundamentalDataCreate",
    "SecurityCreate",
    "PositionCreate",
    "PortfolioUpdate",
    # Analytics
    "AttributionOptions",
    "ComputeRequest",
    "AggregateResult",
    "PortfolioSummary",
    "LookThroughMetrics",
    "SectorAllocation",
    "PositionAttribution",
    "AttributionSummary",
    "PositionDividend",
    "DividendSummary",
]
