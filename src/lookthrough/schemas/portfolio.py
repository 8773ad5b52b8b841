"""Portfolio snapshot and update schemas.

The ``*Snapshot`` models are the read-only input of the analytics engine.
They can be validated from ORM rows (``from_attributes``) or from a JSON
body. Derived values are pure getters exposed as computed fields and are
recomputed on every read.

The ``*Create`` / ``PortfolioUpdate`` models validate incoming updates to
the stored portfolio.
"""

import math
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from lookthrough.core.constants import AnalyticsConstants

SNAPSHOT_CONFIG = ConfigDict(from_attributes=True, frozen=True)


def _normalize_symbol(value: str) -> str:
    return value.strip().upper()


def pnl_percent(pnl: float, cost_basis: float) -> float:
    """Unrealized P&L as a percent of cost; 0 when there is no cost exposure."""
    if cost_basis == 0:
        return 0.0
    return pnl / cost_basis * AnalyticsConstants.PERCENT_SCALE


class FundamentalDataSnapshot(BaseModel):
    """Company-wide fundamentals for one security."""

    model_config = SNAPSHOT_CONFIG

    symbol: str | None = None
    market_cap: float | None = None
    revenue: float | None = None
    free_cash_flow: float | None = None
    revenue_growth: float | None = None
    earnings_growth: float | None = None
    dividend_yield: float | None = None
    dividend_per_share: float | None = None
    pe_ratio: float | None = None
    pb_ratio: float | None = None
    return_on_equity: float | None = None
    debt_to_equity: float | None = None
    last_updated: datetime | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str | None) -> str | None:
        return _normalize_symbol(v) if v is not None else None


class SecuritySnapshot(BaseModel):
    """Security with its optional fundamentals."""

    model_config = SNAPSHOT_CONFIG

    symbol: str = Field(..., min_length=1, max_length=20)
    name: str | None = None
    isin: str | None = None
    sector: str | None = None
    industry: str | None = None
    exchange: str | None = None
    currency: str = "USD"
    fundamentals: FundamentalDataSnapshot | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return _normalize_symbol(v)


class PositionSnapshot(BaseModel):
    """One holding (lot) of a security."""

    model_config = SNAPSHOT_CONFIG

    id: int | None = None
    symbol: str = Field(..., min_length=1, max_length=20)
    quantity: float
    average_cost: float
    current_price: float
    purchase_date: datetime | None = None
    last_updated: datetime | None = None
    security: SecuritySnapshot | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return _normalize_symbol(v)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cost_basis(self) -> float:
        return self.quantity * self.average_cost

    @computed_field  # type: ignore[prop-decorator]
    @property
    def unrealized_pnl(self) -> float:
        return self.market_value - self.cost_basis

    @computed_field  # type: ignore[prop-decorator]
    @property
    def unrealized_pnl_percent(self) -> float:
        return pnl_percent(self.unrealized_pnl, self.cost_basis)


class PortfolioSnapshot(BaseModel):
    """Fully hydrated portfolio: cash plus positions with their securities."""

    model_config = SNAPSHOT_CONFIG

    id: uuid.UUID | None = None
    name: str = "Portfolio"
    cash: float = 0.0
    last_updated: datetime | None = None
    positions: list[PositionSnapshot] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def invested_value(self) -> float:
        """Market value of the positions, excluding cash."""
        return math.fsum(position.market_value for position in self.positions)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_market_value(self) -> float:
        return math.fsum([self.cash, *(position.market_value for position in self.positions)])

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_cost_basis(self) -> float:
        return math.fsum(position.cost_basis for position in self.positions)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_unrealized_pnl(self) -> float:
        return math.fsum(position.unrealized_pnl for position in self.positions)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_unrealized_pnl_percent(self) -> float:
        return pnl_percent(self.total_unrealized_pnl, self.total_cost_basis)


class FundamentalDataCreate(BaseModel):
    """Fundamentals supplied with a security in a portfolio update."""

    market_cap: float | None = Field(None, ge=0)
    revenue: float | None = None
    free_cash_flow: float | None = None
    revenue_growth: float | None = None
    earnings_growth: float | None = None
    dividend_yield: float | None = Field(None, ge=0)
    dividend_per_share: float | None = Field(None, ge=0)
    pe_ratio: float | None = None
    pb_ratio: float | None = None
    return_on_equity: float | None = None
    debt_to_equity: float | None = None


class SecurityCreate(BaseModel):
    """Security metadata supplied in a portfolio update."""

    symbol: str = Field(..., min_length=1, max_length=20)
    name: str | None = Field(None, max_length=200)
    isin: str | None = Field(None, max_length=12)
    sector: str | None = Field(None, max_length=100)
    industry: str | None = Field(None, max_length=100)
    exchange: str | None = Field(None, max_length=50)
    currency: str | None = Field(None, min_length=3, max_length=3)
    fundamentals: FundamentalDataCreate | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return _normalize_symbol(v)


class PositionCreate(BaseModel):
    """Position supplied in a portfolio update.

    ``security`` may be omitted when the security is already stored.
    """

    symbol: str = Field(..., min_length=1, max_length=20)
    quantity: float = Field(..., ge=0, allow_inf_nan=False)
    average_cost: float = Field(..., ge=0, allow_inf_nan=False)
    current_price: float = Field(..., ge=0, allow_inf_nan=False)
    purchase_date: datetime | None = None
    security: SecurityCreate | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return _normalize_symbol(v)

    @model_validator(mode="after")
    def check_security_symbol(self) -> "PositionCreate":
        if self.security is not None and self.security.symbol != self.symbol:
            raise ValueError(
                f"Security symbol '{self.security.symbol}' does not match position symbol '{self.symbol}'"
            )
        return self


class PortfolioUpdate(BaseModel):
    """Wholesale portfolio update: every existing position is replaced."""

    name: str = Field(..., min_length=1, max_length=200)
    cash: float = Field(0.0, ge=0, allow_inf_nan=False)
    positions: list[PositionCreate] = Field(default_factory=list)
