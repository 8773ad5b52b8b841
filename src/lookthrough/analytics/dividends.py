"""Dividend income and yield analysis."""

import math
from collections.abc import Sequence

from lookthrough.analytics.valuation import PositionValuation
from lookthrough.core.constants import AnalyticsConstants
from lookthrough.schemas.analytics import DividendSummary, PositionDividend
from lookthrough.schemas.portfolio import PortfolioSnapshot


def dividend_per_share(valuation: PositionValuation) -> float:
    """Trailing dividend per share, 0 when fundamentals or the figure are absent."""
    fundamentals = valuation.position.security.fundamentals
    if fundamentals is None or fundamentals.dividend_per_share is None:
        return 0.0
    return fundamentals.dividend_per_share


def _percent_of(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return part / whole * AnalyticsConstants.PERCENT_SCALE


def analyze_dividends(
    portfolio: PortfolioSnapshot,
    valuations: Sequence[PositionValuation],
) -> DividendSummary:
    """Estimate annual dividend income and the portfolio's yields.

    Yield on value divides by the total portfolio market value (cash
    included); yield on cost divides by the total cost basis. Either is 0
    when its denominator is 0. Only positions that pay a dividend are
    listed, ranked by income descending.
    """
    incomes: list[tuple[PositionValuation, float, float]] = []
    for valuation in valuations:
        per_share = dividend_per_share(valuation)
        incomes.append((valuation, per_share, valuation.position.quantity * per_share))

    total_income = math.fsum(income for _, _, income in incomes)
    total_cost = math.fsum(v.cost_basis for v in valuations)

    payers = sorted(
        (entry for entry in incomes if entry[2] > 0),
        key=lambda entry: (-entry[2], entry[0].sort_key),
    )

    positions = [
        PositionDividend(
            position_id=valuation.position.id,
            symbol=valuation.symbol,
            quantity=valuation.position.quantity,
            dividend_per_share=per_share,
            annual_income=income,
            yield_on_cost=_percent_of(income, valuation.cost_basis),
            income_share_percent=_percent_of(income, total_income),
        )
        for valuation, per_share, income in payers
    ]

    return DividendSummary(
        total_annual_income=total_income,
        monthly_income=total_income / AnalyticsConstants.MONTHS_PER_YEAR,
        yield_on_value=_percent_of(total_income, portfolio.total_market_value),
        yield_on_cost=_percent_of(total_income, total_cost),
        positions=positions,
    )
