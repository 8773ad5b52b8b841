"""Tests for per-position valuation and snapshot validation."""

import math

import pytest
from pydantic import ValidationError as PydanticValidationError

from lookthrough.analytics.valuation import (
    validate_portfolio,
    validate_position,
    value_position,
    value_positions,
)
from lookthrough.core.exceptions import ValidationError
from lookthrough.schemas.portfolio import PositionSnapshot, SecuritySnapshot


def test_value_position_gain(make_position):
    """Test market value, cost basis and P&L of a position in profit."""
    valuation = value_position(make_position(quantity=10, average_cost=100, current_price=150))

    assert valuation.market_value == 1500.0
    assert valuation.cost_basis == 1000.0
    assert valuation.unrealized_pnl == 500.0
    assert valuation.unrealized_pnl_percent == pytest.approx(50.0)


def test_value_position_loss(make_position):
    valuation = value_position(make_position(quantity=4, average_cost=50, current_price=40))

    assert valuation.unrealized_pnl == -40.0
    assert valuation.unrealized_pnl_percent == pytest.approx(-20.0)


def test_value_position_zero_quantity_and_price(make_position):
    """Test an empty position values to zero without dividing by zero."""
    valuation = value_position(make_position(quantity=0, average_cost=100, current_price=0))

    assert valuation.market_value == 0.0
    assert valuation.cost_basis == 0.0
    assert valuation.unrealized_pnl == 0.0
    assert valuation.unrealized_pnl_percent == 0.0


def test_value_position_zero_cost_basis(make_position):
    """Test a position acquired at zero cost has 0 P&L percent."""
    valuation = value_position(make_position(quantity=10, average_cost=0, current_price=5))

    assert valuation.unrealized_pnl == 50.0
    assert valuation.unrealized_pnl_percent == 0.0


@pytest.mark.parametrize(
    "field",
    ["quantity", "average_cost", "current_price"],
)
def test_negative_inputs_rejected(make_position, field):
    """Test negative quantity, cost or price raise ValidationError."""
    values = {"quantity": 10, "average_cost": 100, "current_price": 150, field: -1}
    position = make_position(**values)

    with pytest.raises(ValidationError) as exc_info:
        value_position(position)

    assert exc_info.value.status_code == 400
    assert "non-negative" in exc_info.value.detail


@pytest.mark.parametrize("value", [math.nan, math.inf])
def test_non_finite_inputs_rejected(make_position, value):
    with pytest.raises(ValidationError, match="finite"):
        validate_position(make_position(current_price=value))


def test_position_without_security_rejected():
    position = PositionSnapshot(symbol="AAPL", quantity=1, average_cost=1, current_price=1)

    with pytest.raises(ValidationError, match="security is not loaded"):
        validate_position(position)


def test_position_with_mismatched_security_rejected():
    position = PositionSnapshot(
        symbol="AAPL",
        quantity=1,
        average_cost=1,
        current_price=1,
        security=SecuritySnapshot(symbol="MSFT"),
    )

    with pytest.raises(ValidationError, match="MSFT"):
        validate_position(position)


def test_position_with_foreign_fundamentals_rejected(make_position):
    position = make_position(symbol="AAPL", fundamentals={"pe_ratio": 30})
    foreign = position.model_copy(
        update={
            "security": position.security.model_copy(
                update={"fundamentals": position.security.fundamentals.model_copy(update={"symbol": "MSFT"})}
            )
        }
    )

    with pytest.raises(ValidationError, match="fundamental data belongs to 'MSFT'"):
        validate_position(foreign)


def test_validate_portfolio_rejects_negative_cash(make_portfolio, make_position):
    portfolio = make_portfolio([make_position()], cash=-10)

    with pytest.raises(ValidationError, match="cash balance"):
        validate_portfolio(portfolio)


def test_value_positions_keeps_snapshot_order(make_portfolio, make_position):
    portfolio = make_portfolio(
        [make_position("MSFT"), make_position("AAPL"), make_position("MSFT")]
    )

    valuations = value_positions(portfolio)

    assert [v.symbol for v in valuations] == ["MSFT", "AAPL", "MSFT"]
    assert [v.index for v in valuations] == [0, 1, 2]
    assert valuations[0].sort_key == ("MSFT", 0)


def test_market_value_never_negative(make_position):
    """Test market value and cost basis stay non-negative for valid inputs."""
    for quantity in (0, 0.5, 3, 1_000_000):
        for price in (0, 0.01, 99.5):
            valuation = value_position(
                make_position(quantity=quantity, average_cost=price, current_price=price)
            )
            assert valuation.market_value >= 0
            assert valuation.cost_basis >= 0


def test_portfolio_totals_include_cash(make_portfolio, make_position):
    portfolio = make_portfolio(
        [
            make_position("AAPL", quantity=10, average_cost=100, current_price=150),
            make_position("KO", quantity=20, average_cost=60, current_price=50),
        ],
        cash=500,
    )

    assert portfolio.invested_value == 2500.0
    assert portfolio.total_market_value == 3000.0
    assert portfolio.total_cost_basis == 2200.0
    assert portfolio.total_unrealized_pnl == 300.0
    assert portfolio.total_unrealized_pnl_percent == pytest.approx(300 / 2200 * 100)


def test_snapshot_is_read_only(make_position):
    position = make_position()

    with pytest.raises(PydanticValidationError):
        position.quantity = 5


def test_derived_values_are_serialized(make_position):
    data = make_position(quantity=2, average_cost=10, current_price=15).model_dump()

    assert data["market_value"] == 30.0
    assert data["cost_basis"] == 20.0
    assert data["unrealized_pnl"] == 10.0
    assert data["unrealized_pnl_percent"] == pytest.approx(50.0)


def test_value_positions_rejects_negative_cash(make_portfolio, make_position):
    portfolio = make_portfolio([make_position()], cash=-1)

    with pytest.raises(ValidationError, match="cash balance"):
        value_positions(portfolio)
