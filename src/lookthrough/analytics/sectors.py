"""Sector allocation of portfolio market value."""

import math
from collections import defaultdict
from collections.abc import Sequence

from lookthrough.analytics.valuation import PositionValuation
from lookthrough.core.constants import AnalyticsConstants
from lookthrough.schemas.analytics import SectorAllocation
from lookthrough.schemas.portfolio import PortfolioSnapshot


def sector_of(valuation: PositionValuation) -> str:
    """Sector bucket for a position.

    Blank or missing sectors are Unclassified. Securities classified as
    cash (money-market funds, for example) share the Cash bucket with the
    cash balance, whatever the case of the label.
    """
    sector = valuation.position.security.sector
    if sector is None or not sector.strip():
        return AnalyticsConstants.UNCLASSIFIED_SECTOR
    sector = sector.strip()
    if sector.casefold() == AnalyticsConstants.CASH_SECTOR.casefold():
        return AnalyticsConstants.CASH_SECTOR
    return sector


def allocate_sectors(
    portfolio: PortfolioSnapshot,
    valuations: Sequence[PositionValuation],
    *,
    include_unclassified: bool = True,
) -> list[SectorAllocation]:
    """Group market value by sector, with cash as its own bucket.

    Buckets are ordered by market value descending, ties broken by sector
    name. Percentages are relative to the total portfolio market value
    (cash included) and are 0 when that total is 0. Sector names are
    unique: the Cash bucket holds the cash balance plus any cash-classified
    positions, and its ``position_count`` counts only those positions.
    """
    values: dict[str, list[float]] = defaultdict(list)
    for valuation in valuations:
        values[sector_of(valuation)].append(valuation.market_value)

    if not include_unclassified:
        values.pop(AnalyticsConstants.UNCLASSIFIED_SECTOR, None)
    cash_positions = values.pop(AnalyticsConstants.CASH_SECTOR, [])

    total_value = portfolio.total_market_value

    def bucket(sector: str, market_value: float, position_count: int) -> SectorAllocation:
        percentage = market_value / total_value * AnalyticsConstants.PERCENT_SCALE if total_value > 0 else 0.0
        return SectorAllocation(
            sector=sector,
            market_value=market_value,
            percentage=percentage,
            position_count=position_count,
        )

    buckets = [
        bucket(sector, math.fsum(sector_values), len(sector_values))
        for sector, sector_values in values.items()
    ]

    if portfolio.cash > 0 or cash_positions:
        buckets.append(
            bucket(
                AnalyticsConstants.CASH_SECTOR,
                math.fsum([portfolio.cash, *cash_positions]),
                len(cash_positions),
            )
        )

    buckets.sort(key=lambda b: (-b.market_value, b.sector))
    return buckets
