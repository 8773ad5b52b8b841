"""Pytest fixtures for testing."""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lookthrough.db.base import Base
from lookthrough.db.session import get_db
from lookthrough.schemas.portfolio import (
    FundamentalDataSnapshot,
    PortfolioSnapshot,
    PositionSnapshot,
    SecuritySnapshot,
)
from main import app

# Test database URL (SQLite in-memory for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_db(test_engine) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(test_db: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database override."""

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_position() -> Callable[..., PositionSnapshot]:
    """Factory for position snapshots linked to a security.

    ``fundamentals`` is a dict of FundamentalDataSnapshot fields, or None
    for a security without fundamental data.
    """

    def _make(
        symbol: str = "AAPL",
        quantity: float = 10.0,
        average_cost: float = 100.0,
        current_price: float = 150.0,
        *,
        position_id: int | None = None,
        sector: str | None = "Technology",
        name: str | None = None,
        fundamentals: dict[str, Any] | None = None,
    ) -> PositionSnapshot:
        security = SecuritySnapshot(
            symbol=symbol,
            name=name or f"{symbol} Inc.",
            sector=sector,
            fundamentals=(
                FundamentalDataSnapshot(symbol=symbol, **fundamentals)
                if fundamentals is not None
                else None
            ),
        )
        return PositionSnapshot(
            id=position_id,
            symbol=symbol,
            quantity=quantity,
            average_cost=average_cost,
            current_price=current_price,
            security=security,
        )

    return _make


@pytest.fixture
def make_portfolio() -> Callable[..., PortfolioSnapshot]:
    """Factory for portfolio snapshots."""

    def _make(
        positions: list[PositionSnapshot] | None = None,
        cash: float = 0.0,
        name: str = "Test Portfolio",
    ) -> PortfolioSnapshot:
        return PortfolioSnapshot(name=name, cash=cash, positions=positions or [])

    return _make


@pytest.fixture
def portfolio_payload() -> dict[str, Any]:
    """Portfolio update body with one gaining and one losing position."""
    return {
        "name": "Long-term",
        "cash": 500.0,
        "positions": [
            {
                "symbol": "AAPL",
                "quantity": 10,
                "average_cost": 100,
                "current_price": 150,
                "security": {
                    "symbol": "AAPL",
                    "name": "Apple Inc.",
                    "sector": "Technology",
                    "fundamentals": {
                        "market_cap": 3_000_000,
                        "revenue": 400_000,
                        "free_cash_flow": 100_000,
                        "pe_ratio": 30,
                        "dividend_per_share": 1.0,
                    },
                },
            },
            {
                "symbol": "KO",
                "quantity": 20,
                "average_cost": 60,
                "current_price": 50,
                "security": {
                    "symbol": "KO",
                    "name": "Coca-Cola",
                    "sector": "Consumer Staples",
                },
            },
        ],
    }
