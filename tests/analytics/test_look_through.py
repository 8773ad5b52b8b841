"""Tests for look-through aggregation of fundamentals."""

from itertools import permutations

import pytest

from lookthrough.analytics.look_through import (
    aggregate_look_through,
    missing_fundamentals,
    ownership_fraction,
)
from lookthrough.analytics.valuation import value_positions
from lookthrough.schemas.portfolio import FundamentalDataSnapshot

AAPL_FUNDAMENTALS = {
    "market_cap": 3_000_000,
    "revenue": 400_000,
    "free_cash_flow": 100_000,
    "pe_ratio": 30,
    "return_on_equity": 1.5,
}
MSFT_FUNDAMENTALS = {
    "market_cap": 1_000_000,
    "revenue": 200_000,
    "free_cash_flow": 80_000,
    "pe_ratio": 20,
    "return_on_equity": 0.5,
}


@pytest.fixture
def covered_positions(make_position):
    """AAPL worth 1500 and MSFT worth 500, both with fundamentals."""
    return [
        make_position("AAPL", quantity=10, average_cost=100, current_price=150, fundamentals=AAPL_FUNDAMENTALS),
        make_position("MSFT", quantity=5, average_cost=80, current_price=100, fundamentals=MSFT_FUNDAMENTALS),
    ]


def aggregate(portfolio):
    return aggregate_look_through(portfolio, value_positions(portfolio))


def test_weighted_ratios(make_portfolio, covered_positions):
    """Test ratio metrics are market-value weighted."""
    metrics = aggregate(make_portfolio(covered_positions))

    # Weights 0.75 / 0.25
    assert metrics.pe_ratio == pytest.approx(27.5)
    assert metrics.return_on_equity == pytest.approx(1.25)
    assert metrics.weighted_average_market_cap == pytest.approx(2_500_000)
    assert metrics.coverage_percent == pytest.approx(100.0)
    assert metrics.missing_symbols == []


def test_ownership_scaled_totals(make_portfolio, covered_positions):
    """Test revenue and free cash flow are scaled by the owned fraction."""
    metrics = aggregate(make_portfolio(covered_positions))

    # Each position owns 0.05% of its company
    assert metrics.revenue == pytest.approx(300.0)
    assert metrics.free_cash_flow == pytest.approx(90.0)
    assert metrics.free_cash_flow_yield == pytest.approx(4.5)


def test_market_cap_is_ownership_scaled_not_averaged(make_portfolio, covered_positions):
    """Test owned market cap is the ownership share of each company, summed."""
    metrics = aggregate(make_portfolio(covered_positions, cash=2000))

    # 0.0005 * 3,000,000 + 0.0005 * 1,000,000; cash does not dilute it
    assert metrics.market_cap == pytest.approx(2000.0)
    assert metrics.market_cap != pytest.approx(metrics.weighted_average_market_cap)


def test_cash_dilutes_weights(make_portfolio, covered_positions):
    """Test cash is part of the weight denominator but not of coverage."""
    metrics = aggregate(make_portfolio(covered_positions, cash=2000))

    assert metrics.pe_ratio == pytest.approx(13.75)
    assert metrics.revenue == pytest.approx(300.0)
    assert metrics.coverage_percent == pytest.approx(100.0)
    assert metrics.covered_market_value == pytest.approx(2000.0)


def test_missing_fundamentals_reduce_coverage(make_portfolio, make_position, covered_positions):
    uncovered = make_position("KO", quantity=10, average_cost=40, current_price=50)
    metrics = aggregate(make_portfolio([*covered_positions, uncovered]))

    assert metrics.missing_symbols == ["KO"]
    assert metrics.coverage_percent == pytest.approx(80.0)
    assert metrics.covered_market_value == pytest.approx(2000.0)
    # Weights 0.6 / 0.2, KO excluded
    assert metrics.pe_ratio == pytest.approx(22.0)


def test_missing_symbols_sorted_and_unique(make_portfolio, make_position):
    portfolio = make_portfolio(
        [make_position("ZTS"), make_position("KO"), make_position("ZTS")]
    )

    assert missing_fundamentals(value_positions(portfolio)) == ["KO", "ZTS"]


def test_missing_field_contributes_nothing(make_portfolio, make_position):
    portfolio = make_portfolio(
        [
            make_position("AAPL", quantity=10, current_price=150, fundamentals={"pe_ratio": 30}),
            make_position("MSFT", quantity=5, current_price=100, fundamentals={"pb_ratio": 4}),
        ]
    )

    metrics = aggregate(portfolio)

    assert metrics.pe_ratio == pytest.approx(22.5)
    assert metrics.pb_ratio == pytest.approx(1.0)
    assert metrics.coverage_percent == pytest.approx(100.0)


def test_position_without_market_cap_skips_extensive_metrics(make_portfolio, make_position):
    portfolio = make_portfolio(
        [
            make_position("AAPL", quantity=10, current_price=150, fundamentals=AAPL_FUNDAMENTALS),
            make_position(
                "MSFT",
                quantity=5,
                current_price=100,
                fundamentals={"revenue": 200_000, "free_cash_flow": 80_000, "pe_ratio": 20},
            ),
        ]
    )

    metrics = aggregate(portfolio)

    assert metrics.revenue == pytest.approx(200.0)
    assert metrics.free_cash_flow == pytest.approx(50.0)
    # Only AAPL's market value backs the FCF yield
    assert metrics.free_cash_flow_yield == pytest.approx(50 / 1500 * 100)
    assert metrics.pe_ratio == pytest.approx(27.5)


def test_ownership_fraction():
    assert ownership_fraction(500, FundamentalDataSnapshot(market_cap=1000)) == 0.5
    assert ownership_fraction(500, FundamentalDataSnapshot(market_cap=0)) is None
    assert ownership_fraction(500, FundamentalDataSnapshot()) is None


def test_zero_total_value_gives_zero_metrics(make_portfolio, make_position):
    """Test a worthless portfolio yields zeros instead of dividing by zero."""
    portfolio = make_portfolio(
        [
            make_position("AAPL", quantity=0, current_price=150, fundamentals=AAPL_FUNDAMENTALS),
            make_position("KO", quantity=10, current_price=0),
        ]
    )

    metrics = aggregate(portfolio)

    data = metrics.model_dump()
    assert data.pop("missing_symbols") == ["KO"]
    assert all(value == 0.0 for value in data.values())


def test_empty_portfolio(make_portfolio):
    metrics = aggregate(make_portfolio())

    assert metrics.coverage_percent == 0.0
    assert metrics.pe_ratio == 0.0
    assert metrics.missing_symbols == []


def test_split_lots_match_single_lot(make_portfolio, make_position):
    """Test two lots of one symbol aggregate like one combined lot."""
    single = make_portfolio(
        [make_position("AAPL", quantity=10, current_price=150, fundamentals=AAPL_FUNDAMENTALS)]
    )
    split = make_portfolio(
        [
            make_position("AAPL", quantity=4, current_price=150, fundamentals=AAPL_FUNDAMENTALS),
            make_position("AAPL", quantity=6, current_price=150, fundamentals=AAPL_FUNDAMENTALS),
        ]
    )

    single_metrics = aggregate(single)
    split_metrics = aggregate(split)

    assert split_metrics.revenue == pytest.approx(single_metrics.revenue)
    assert split_metrics.pe_ratio == pytest.approx(single_metrics.pe_ratio)


def test_order_independent(make_portfolio, make_position, covered_positions):
    """Test reordering positions does not change the result."""
    positions = [
        *covered_positions,
        make_position("KO", quantity=7, current_price=61.3, fundamentals={"pe_ratio": 24.1, "market_cap": 2.6e11}),
    ]
    expected = aggregate(make_portfolio(positions, cash=123.45))

    for ordering in permutations(positions):
        assert aggregate(make_portfolio(list(ordering), cash=123.45)) == expected
