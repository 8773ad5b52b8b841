"""Service layer for the stored portfolio snapshot.

Supplies the analytics engine with fully hydrated snapshots and applies
wholesale portfolio updates. Uses the repository pattern for all database
operations and ``transactional`` for explicit commit/rollback.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lookthrough.core.config import settings
from lookthrough.core.exceptions import ConflictError, DataProviderError, NotFoundError
from lookthrough.db.base import utcnow
from lookthrough.db.session import transactional
from lookthrough.models.portfolio import Portfolio, Position
from lookthrough.models.security import Security
from lookthrough.repositories.portfolio import PortfolioRepository
from lookthrough.repositories.security import SecurityRepository
from lookthrough.schemas.portfolio import (
    PortfolioSnapshot,
    PortfolioUpdate,
    PositionCreate,
    SecurityCreate,
)
from lookthrough.services.csv_import import parse_positions_csv

logger = logging.getLogger(__name__)


async def create_default_portfolio(db: AsyncSession) -> Portfolio:
    """Create and commit an empty portfolio with zero cash.

    Returns:
        The new portfolio, hydrated (no positions)
    """
    repo = PortfolioRepository(Portfolio, db)
    async with transactional(db):
        portfolio = await repo.create(obj_in={"name": settings.DEFAULT_PORTFOLIO_NAME, "cash": 0.0})

    logger.info(f"Created default portfolio '{portfolio.name}' ({portfolio.id})")
    return await repo.get_with_positions(portfolio.id)


async def get_portfolio(db: AsyncSession) -> Portfolio:
    """Get the stored portfolio, creating a default one on first access.

    Raises:
        DataProviderError: If the portfolio cannot be read from storage
    """
    repo = PortfolioRepository(Portfolio, db)
    try:
        portfolio = await repo.get_first_with_positions()
        if portfolio is None:
            logger.info("No portfolio found, creating default portfolio")
            portfolio = await create_default_portfolio(db)
    except SQLAlchemyError as e:
        raise DataProviderError(f"Could not load portfolio: {e}") from e

    return portfolio


async def get_snapshot(db: AsyncSession) -> PortfolioSnapshot:
    """Get the stored portfolio as a read-only snapshot for the engine."""
    portfolio = await get_portfolio(db)
    return PortfolioSnapshot.model_validate(portfolio)


def merge_definitions(symbol: str, current: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    """Merge two partial security definitions field by field.

    A field missing or null on one side takes the other side's value;
    nested fundamentals are merged the same way.

    Raises:
        ConflictError: If both sides give different non-null values
    """
    merged = dict(current)
    for field, value in incoming.items():
        existing = merged.get(field)
        if value is None:
            merged.setdefault(field, None)
        elif existing is None:
            merged[field] = value
        elif isinstance(existing, dict) and isinstance(value, dict):
            merged[field] = merge_definitions(symbol, existing, value)
        elif existing != value:
            raise ConflictError(
                f"Conflicting security definitions for '{symbol}': "
                f"{field} is both {existing!r} and {value!r}"
            )
    return merged


def collect_securities(positions: list[PositionCreate]) -> dict[str, SecurityCreate]:
    """Security definitions carried by an update, keyed by symbol.

    Several lots of one symbol may each carry part of its definition (CSV
    rows with blank metadata cells, for example); they are merged.

    Raises:
        ConflictError: If two positions give the same field different values
    """
    definitions: dict[str, dict[str, Any]] = {}
    for position in positions:
        if position.security is None:
            continue
        incoming = position.security.model_dump(exclude_unset=True)
        current = definitions.get(position.symbol)
        definitions[position.symbol] = (
            incoming if current is None else merge_definitions(position.symbol, current, incoming)
        )
    return {symbol: SecurityCreate.model_validate(data) for symbol, data in definitions.items()}


async def update_portfolio(db: AsyncSession, portfolio_in: PortfolioUpdate) -> Portfolio:
    """Replace the stored portfolio wholesale.

    Name and cash are overwritten, every referenced security is created or
    refreshed (including its fundamentals), and all existing positions are
    replaced by the supplied ones.

    Args:
        db: Database session
        portfolio_in: Validated update

    Returns:
        The reloaded, fully hydrated portfolio

    Raises:
        ConflictError: Conflicting security definitions in the update
        NotFoundError: A position references an unknown security and does
            not carry its details
    """
    securities_in = collect_securities(portfolio_in.positions)
    portfolio = await get_portfolio(db)

    portfolio_repo = PortfolioRepository(Portfolio, db)
    security_repo = SecurityRepository(Security, db)

    async with transactional(db):
        resolved: dict[str, Security] = {}
        for symbol, security_in in securities_in.items():
            resolved[symbol] = await security_repo.upsert(security_in)

        for position_in in portfolio_in.positions:
            if position_in.symbol in resolved:
                continue
            security = await security_repo.get_by_symbol(position_in.symbol)
            if security is None:
                raise NotFoundError(
                    f"Security '{position_in.symbol}' not found; include its details in the update"
                )
            resolved[position_in.symbol] = security

        await portfolio_repo.update(
            db_obj=portfolio,
            obj_in={"name": portfolio_in.name, "cash": portfolio_in.cash, "last_updated": utcnow()},
        )

        now = utcnow()
        positions = [
            Position(
                symbol=position_in.symbol,
                quantity=position_in.quantity,
                average_cost=position_in.average_cost,
                current_price=position_in.current_price,
                purchase_date=position_in.purchase_date or now,
                last_updated=now,
                security=resolved[position_in.symbol],
            )
            for position_in in portfolio_in.positions
        ]
        await portfolio_repo.replace_positions(portfolio, positions)

    logger.info(
        f"Updated portfolio '{portfolio_in.name}' with {len(portfolio_in.positions)} positions "
        f"across {len(resolved)} securities"
    )
    return await portfolio_repo.get_with_positions(portfolio.id)


async def import_positions_csv(db: AsyncSession, csv_text: str) -> Portfolio:
    """Replace the stored positions with the rows of a CSV document.

    The portfolio name and cash balance are kept.

    Raises:
        ValidationError: If the CSV is malformed or a row is invalid
    """
    positions = parse_positions_csv(csv_text)
    portfolio = await get_portfolio(db)

    logger.info(f"Importing {len(positions)} positions from CSV")
    return await update_portfolio(
        db,
        PortfolioUpdate(name=portfolio.name, cash=portfolio.cash, positions=positions),
    )
