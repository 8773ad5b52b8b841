"""Look-through aggregation and attribution engine.

Pure calculators over a ``PortfolioSnapshot``:

    - valuation: per-position market value, cost basis and P&L (+ validation)
    - look_through: weighted and ownership-scaled fundamentals, coverage
    - sectors: sector allocation including a cash bucket
    - attribution: top contributors and detractors
    - dividends: income, yield on value and yield on cost
    - engine: ``compute`` runs all of the above

Usage:
    >>> from lookthrough.analytics import compute
    >>> from lookthrough.schemas import AttributionOptions
    >>> result = compute(snapshot, AttributionOptions(top_n=3))
    >>> result.look_through.coverage_percent
"""

from lookthrough.analytics.engine import compute
from lookthrough.analytics.valuation import (
    PositionValuation,
    validate_portfolio,
    validate_position,
    value_position,
)

__all__ = [
    "compute",
    "PositionValuation",
    "validate_portfolio",
    "validate_position",
    "value_position",
]
