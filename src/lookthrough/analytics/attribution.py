"""Performance attribution: which positions drove unrealized return."""

import math
from collections.abc import Sequence

from lookthrough.analytics.valuation import PositionValuation
from lookthrough.core.constants import AnalyticsConstants
from lookthrough.schemas.analytics import AttributionSummary, PositionAttribution
from lookthrough.schemas.portfolio import pnl_percent


def _attribute(valuation: PositionValuation, total_pnl: float) -> PositionAttribution:
    if total_pnl == 0:
        share = 0.0
    else:
        share = valuation.unrealized_pnl / total_pnl * AnalyticsConstants.PERCENT_SCALE

    return PositionAttribution(
        position_id=valuation.position.id,
        symbol=valuation.symbol,
        name=valuation.position.security.name,
        market_value=valuation.market_value,
        cost_basis=valuation.cost_basis,
        contribution=valuation.unrealized_pnl,
        contribution_percent=share,
        return_percent=valuation.unrealized_pnl_percent,
    )


def compute_attribution(
    valuations: Sequence[PositionValuation],
    *,
    top_n: int = AnalyticsConstants.DEFAULT_TOP_N,
) -> AttributionSummary:
    """Rank positions by their contribution to total unrealized P&L.

    Args:
        valuations: Output of ``value_positions``
        top_n: Maximum length of each ranking list

    Returns:
        AttributionSummary with up to ``top_n`` contributors (largest gain
        first) and detractors (largest loss first). Positions with exactly
        zero contribution appear in neither list.
    """
    if top_n < 1:
        raise ValueError(f"top_n must be at least 1, got {top_n}")

    total_pnl = math.fsum(v.unrealized_pnl for v in valuations)
    total_cost = math.fsum(v.cost_basis for v in valuations)

    gainers = sorted(
        (v for v in valuations if v.unrealized_pnl > 0),
        key=lambda v: (-v.unrealized_pnl, v.sort_key),
    )
    losers = sorted(
        (v for v in valuations if v.unrealized_pnl < 0),
        key=lambda v: (v.unrealized_pnl, v.sort_key),
    )

    return AttributionSummary(
        total_unrealized_pnl=total_pnl,
        total_unrealized_pnl_percent=pnl_percent(total_pnl, total_cost),
        top_contributors=[_attribute(v, total_pnl) for v in gainers[:top_n]],
        top_detractors=[_attribute(v, total_pnl) for v in losers[:top_n]],
    )
