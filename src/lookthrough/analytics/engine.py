"""Look-through aggregation and attribution engine.

``compute`` is a pure function of its arguments: it reads a frozen
portfolio snapshot, performs no I/O, reads no settings and returns a new
``AggregateResult``. It is safe to call concurrently on a shared snapshot.
"""

import logging
import warnings

from lookthrough.analytics.attribution import compute_attribution
from lookthrough.analytics.dividends import analyze_dividends
from lookthrough.analytics.look_through import aggregate_look_through
from lookthrough.analytics.sectors import allocate_sectors
from lookthrough.analytics.valuation import value_positions
from lookthrough.core.exceptions import InsufficientDataWarning
from lookthrough.schemas.analytics import AggregateResult, AttributionOptions, PortfolioSummary
from lookthrough.schemas.portfolio import PortfolioSnapshot

logger = logging.getLogger(__name__)


def summarize(portfolio: PortfolioSnapshot) -> PortfolioSummary:
    """Portfolio-level totals from the snapshot's derived getters."""
    return PortfolioSummary(
        total_market_value=portfolio.total_market_value,
        cash=portfolio.cash,
        invested_value=portfolio.invested_value,
        total_cost_basis=portfolio.total_cost_basis,
        total_unrealized_pnl=portfolio.total_unrealized_pnl,
        total_unrealized_pnl_percent=portfolio.total_unrealized_pnl_percent,
        position_count=len(portfolio.positions),
    )


def compute(
    portfolio: PortfolioSnapshot,
    options: AttributionOptions | None = None,
) -> AggregateResult:
    """Run every calculator over one portfolio snapshot.

    Args:
        portfolio: Fully hydrated snapshot (positions with securities and,
            optionally, fundamentals)
        options: Ranking and bucketing options; defaults when omitted

    Returns:
        AggregateResult with summary, look-through metrics, sector
        allocation, attribution ranking and dividend analysis

    Raises:
        ValidationError: Negative or non-finite inputs, or a malformed
            snapshot. Nothing partial is returned.

    Warns:
        InsufficientDataWarning: Some positions have no fundamental data.
    """
    options = options or AttributionOptions()

    valuations = value_positions(portfolio)

    look_through = aggregate_look_through(portfolio, valuations)
    if look_through.missing_symbols:
        message = (
            f"No fundamental data for {', '.join(look_through.missing_symbols)}; "
            f"look-through coverage is {look_through.coverage_percent:.1f}%"
        )
        logger.warning(message)
        warnings.warn(message, InsufficientDataWarning, stacklevel=2)

    result = AggregateResult(
        portfolio_id=portfolio.id,
        portfolio_name=portfolio.name,
        as_of=portfolio.last_updated,
        options=options,
        summary=summarize(portfolio),
        look_through=look_through,
        sector_allocation=allocate_sectors(
            portfolio,
            valuations,
            include_unclassified=options.include_unclassified_sector,
        ),
        attribution=compute_attribution(valuations, top_n=options.top_n),
        dividends=analyze_dividends(portfolio, valuations),
    )

    logger.debug(
        f"Computed analytics for portfolio '{portfolio.name}': "
        f"{len(valuations)} positions, total value {result.summary.total_market_value:.2f}"
    )
    return result
