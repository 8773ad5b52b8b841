"""Look-through aggregation of per-company fundamentals.

The portfolio is treated as a proportional owner of every underlying
business:

- Ratio-like metrics (growth rates, ROE, yields, P/E, P/B, debt-to-equity)
  are summed as ``weight * value``, where ``weight = position market value /
  total portfolio market value``. Cash is part of the denominator but
  carries no weight of its own.
- Extensive metrics (revenue, free cash flow, market cap) are company-wide
  totals, so each is scaled by the ownership fraction ``position market
  value / company market cap`` before summing. The owned market cap is
  therefore the market value of the positions that report one. Positions
  without a positive market cap are left out of these sums.
- ``weighted_average_market_cap`` is the market-value weighted company size.

Positions without fundamentals are excluded and reported in
``missing_symbols``; ``coverage_percent`` is the share of invested market
value that was covered.
"""

import math
from collections.abc import Callable, Sequence

from lookthrough.analytics.valuation import PositionValuation
from lookthrough.core.constants import AnalyticsConstants
from lookthrough.schemas.analytics import LookThroughMetrics
from lookthrough.schemas.portfolio import FundamentalDataSnapshot, PortfolioSnapshot

MetricAccessor = Callable[[FundamentalDataSnapshot], float | None]

WEIGHTED_METRICS: dict[str, MetricAccessor] = {
    "revenue_growth": lambda f: f.revenue_growth,
    "earnings_growth": lambda f: f.earnings_growth,
    "return_on_equity": lambda f: f.return_on_equity,
    "dividend_yield": lambda f: f.dividend_yield,
    "pe_ratio": lambda f: f.pe_ratio,
    "pb_ratio": lambda f: f.pb_ratio,
    "debt_to_equity": lambda f: f.debt_to_equity,
    "weighted_average_market_cap": lambda f: f.market_cap,
}

OWNERSHIP_METRICS: dict[str, MetricAccessor] = {
    "revenue": lambda f: f.revenue,
    "free_cash_flow": lambda f: f.free_cash_flow,
    "market_cap": lambda f: f.market_cap,
}


def ownership_fraction(market_value: float, fundamentals: FundamentalDataSnapshot) -> float | None:
    """Fraction of the company held by a position, or None without a usable market cap."""
    market_cap = fundamentals.market_cap
    if market_cap is None or not market_cap > 0:
        return None
    return market_value / market_cap


def missing_fundamentals(valuations: Sequence[PositionValuation]) -> list[str]:
    """Sorted, de-duplicated symbols whose security has no fundamentals."""
    return sorted(
        {v.symbol for v in valuations if v.position.security.fundamentals is None}
    )


def aggregate_look_through(
    portfolio: PortfolioSnapshot,
    valuations: Sequence[PositionValuation],
) -> LookThroughMetrics:
    """Compute look-through fundamentals for a valued snapshot.

    Args:
        portfolio: The snapshot the valuations were produced from
        valuations: Output of ``value_positions(portfolio)``

    Returns:
        LookThroughMetrics; all numeric fields are zero when the total
        portfolio market value is zero.
    """
    missing = missing_fundamentals(valuations)
    total_value = portfolio.total_market_value
    if total_value <= 0:
        return LookThroughMetrics(missing_symbols=missing)

    weighted_terms: dict[str, list[float]] = {name: [] for name in WEIGHTED_METRICS}
    owned_terms: dict[str, list[float]] = {name: [] for name in OWNERSHIP_METRICS}
    invested: list[float] = []
    covered: list[float] = []
    capped: list[float] = []

    for valuation in valuations:
        invested.append(valuation.market_value)
        fundamentals = valuation.position.security.fundamentals
        if fundamentals is None:
            continue

        covered.append(valuation.market_value)
        weight = valuation.market_value / total_value
        for name, accessor in WEIGHTED_METRICS.items():
            value = accessor(fundamentals)
            if value is not None:
                weighted_terms[name].append(weight * value)

        fraction = ownership_fraction(valuation.market_value, fundamentals)
        if fraction is None:
            continue
        capped.append(valuation.market_value)
        for name, accessor in OWNERSHIP_METRICS.items():
            value = accessor(fundamentals)
            if value is not None:
                owned_terms[name].append(fraction * value)

    invested_value = math.fsum(invested)
    covered_value = math.fsum(covered)
    capped_value = math.fsum(capped)
    owned = {name: math.fsum(terms) for name, terms in owned_terms.items()}

    coverage = (
        covered_value / invested_value * AnalyticsConstants.PERCENT_SCALE
        if invested_value > 0
        else 0.0
    )
    fcf_yield = (
        owned["free_cash_flow"] / capped_value * AnalyticsConstants.PERCENT_SCALE
        if capped_value > 0
        else 0.0
    )

    return LookThroughMetrics(
        **owned,
        free_cash_flow_yield=fcf_yield,
        **{name: math.fsum(terms) for name, terms in weighted_terms.items()},
        covered_market_value=covered_value,
        coverage_percent=coverage,
        missing_symbols=missing,
    )
