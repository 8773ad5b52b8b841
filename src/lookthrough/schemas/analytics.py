"""Analytics options and the aggregate result returned by the engine.

All result models are frozen: an ``AggregateResult`` is built fresh for each
computation and never modified afterwards.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from lookthrough.core.constants import AnalyticsConstants
from lookthrough.schemas.portfolio import PortfolioSnapshot

RESULT_CONFIG = ConfigDict(frozen=True)


class AttributionOptions(BaseModel):
    """Settings recognized by the engine."""

    model_config = RESULT_CONFIG

    top_n: int = Field(AnalyticsConstants.DEFAULT_TOP_N, ge=1)
    include_unclassified_sector: bool = True


class PortfolioSummary(BaseModel):
    """Portfolio-level valuation totals."""

    model_config = RESULT_CONFIG

    total_market_value: float = 0.0
    cash: float = 0.0
    invested_value: float = 0.0
    total_cost_basis: float = 0.0
    total_unrealized_pnl: float = 0.0
    total_unrealized_pnl_percent: float = 0.0
    position_count: int = 0


class LookThroughMetrics(BaseModel):
    """Fundamentals of the businesses the portfolio owns a slice of.

    Ratio-like fields and ``weighted_average_market_cap`` are market-value
    weighted sums (weights include cash in the denominator). Revenue, free
    cash flow and market cap are the portfolio's ownership share of each
    company's totals.
    """

    model_config = RESULT_CONFIG

    # Ownership-scaled extensive metrics
    revenue: float = 0.0
    free_cash_flow: float = 0.0
    market_cap: float = 0.0
    free_cash_flow_yield: float = 0.0

    # Market-value weighted metrics
    revenue_growth: float = 0.0
    earnings_growth: float = 0.0
    return_on_equity: float = 0.0
    dividend_yield: float = 0.0
    pe_ratio: float = 0.0
    pb_ratio: float = 0.0
    debt_to_equity: float = 0.0
    weighted_average_market_cap: float = 0.0

    covered_market_value: float = 0.0
    coverage_percent: float = 0.0
    missing_symbols: list[str] = Field(default_factory=list)


class SectorAllocation(BaseModel):
    """Market value held in one sector (or in cash)."""

    model_config = RESULT_CONFIG

    sector: str
    market_value: float
    percentage: float
    position_count: int = 0


class PositionAttribution(BaseModel):
    """One position's share of the portfolio's unrealized return."""

    model_config = RESULT_CONFIG

    position_id: int | None = None
    symbol: str
    name: str | None = None
    market_value: float
    cost_basis: float
    contribution: float
    contribution_percent: float
    return_percent: float


class AttributionSummary(BaseModel):
    """Contribution ranking for the whole portfolio."""

    model_config = RESULT_CONFIG

    total_unrealized_pnl: float = 0.0
    total_unrealized_pnl_percent: float = 0.0
    top_contributors: list[PositionAttribution] = Field(default_factory=list)
    top_detractors: list[PositionAttribution] = Field(default_factory=list)


class PositionDividend(BaseModel):
    """Trailing dividend income from one position."""

    model_config = RESULT_CONFIG

    position_id: int | None = None
    symbol: str
    quantity: float
    dividend_per_share: float
    annual_income: float
    yield_on_cost: float
    income_share_percent: float


class DividendSummary(BaseModel):
    """Portfolio dividend income and yields."""

    model_config = RESULT_CONFIG

    total_annual_income: float = 0.0
    monthly_income: float = 0.0
    yield_on_value: float = 0.0
    yield_on_cost: float = 0.0
    positions: list[PositionDividend] = Field(default_factory=list)


class AggregateResult(BaseModel):
    """Everything the engine computes for one portfolio snapshot."""

    model_config = RESULT_CONFIG

    portfolio_id: uuid.UUID | None = None
    portfolio_name: str
    as_of: datetime | None = None
    options: AttributionOptions
    summary: PortfolioSummary
    look_through: LookThroughMetrics
    sector_allocation: list[SectorAllocation]
    attribution: AttributionSummary
    dividends: DividendSummary


class ComputeRequest(BaseModel):
    """Body of the stateless compute endpoint."""

    portfolio: PortfolioSnapshot
    options: AttributionOptions = Field(default_factory=AttributionOptions)
