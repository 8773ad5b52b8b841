"""Per-position valuation primitives and snapshot validation.

Every calculator works from the ``PositionValuation`` list produced here, so
each position is validated and valued exactly once per computation.
"""

import math
from dataclasses import dataclass

from lookthrough.core.exceptions import ValidationError
from lookthrough.schemas.portfolio import PortfolioSnapshot, PositionSnapshot


@dataclass(frozen=True)
class PositionValuation:
    """Valuation of one position, tagged with its index in the snapshot."""

    index: int
    position: PositionSnapshot
    market_value: float
    cost_basis: float
    unrealized_pnl: float
    unrealized_pnl_percent: float

    @property
    def symbol(self) -> str:
        return self.position.symbol

    @property
    def sort_key(self) -> tuple[str, int]:
        """Deterministic tie-breaker: symbol, then snapshot order."""
        return (self.position.symbol, self.index)


def _require_non_negative(label: str, value: float, owner: str) -> None:
    if not math.isfinite(value):
        raise ValidationError(f"{owner}: {label} must be a finite number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{owner}: {label} must be non-negative, got {value!r}")


def validate_position(position: PositionSnapshot) -> None:
    """Fail fast on inputs that would produce meaningless valuations.

    Raises:
        ValidationError: Negative or non-finite quantity, average cost or
            current price; missing security; mismatched symbols.
    """
    owner = f"Position {position.symbol}"
    _require_non_negative("quantity", position.quantity, owner)
    _require_non_negative("average cost", position.average_cost, owner)
    _require_non_negative("current price", position.current_price, owner)

    security = position.security
    if security is None:
        raise ValidationError(f"{owner}: security is not loaded")
    if security.symbol != position.symbol:
        raise ValidationError(
            f"{owner}: linked security has symbol '{security.symbol}'"
        )

    fundamentals = security.fundamentals
    if fundamentals is not None and fundamentals.symbol not in (None, security.symbol):
        raise ValidationError(
            f"{owner}: fundamental data belongs to '{fundamentals.symbol}'"
        )


def validate_portfolio(portfolio: PortfolioSnapshot) -> None:
    """Validate the cash balance and every position of a snapshot."""
    _require_non_negative("cash balance", portfolio.cash, f"Portfolio '{portfolio.name}'")
    for position in portfolio.positions:
        validate_position(position)


def _valuation(position: PositionSnapshot, index: int) -> PositionValuation:
    return PositionValuation(
        index=index,
        position=position,
        market_value=position.market_value,
        cost_basis=position.cost_basis,
        unrealized_pnl=position.unrealized_pnl,
        unrealized_pnl_percent=position.unrealized_pnl_percent,
    )


def value_position(position: PositionSnapshot, index: int = 0) -> PositionValuation:
    """Validate a position and return its market value, cost basis and P&L.

    P&L percent is 0 when the cost basis is 0.
    """
    validate_position(position)
    return _valuation(position, index)


def value_positions(portfolio: PortfolioSnapshot) -> list[PositionValuation]:
    """Validate a snapshot once and value every position, in snapshot order.

    Raises:
        ValidationError: Negative or non-finite cash, or any invalid position
    """
    validate_portfolio(portfolio)
    return [_valuation(position, index) for index, position in enumerate(portfolio.positions)]
