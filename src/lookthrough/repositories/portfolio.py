"""Portfolio repository for portfolio and position operations."""

import uuid

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from lookthrough.models.portfolio import Portfolio, Position
from lookthrough.models.security import Security
from lookthrough.repositories.base import BaseRepository


def _hydrated():
    """Loader options for a fully hydrated portfolio (positions, securities, fundamentals)."""
    return selectinload(Portfolio.positions).selectinload(Position.security).selectinload(
        Security.fundamentals
    )


class PortfolioRepository(BaseRepository[Portfolio]):
    """Repository for Portfolio model with position handling.

    Every read eagerly loads positions, their securities and the
    securities' fundamentals so the result can be turned into a snapshot
    without further queries.

    Example:
        >>> repo = PortfolioRepository(Portfolio, db)
        >>> portfolio = await repo.get_first_with_positions()
        >>> [p.symbol for p in portfolio.positions]
    """

    async def get_first_with_positions(self) -> Portfolio | None:
        """Get the stored portfolio, fully hydrated.

        Returns:
            Portfolio if any exists, None otherwise
        """
        result = await self.db.execute(
            select(Portfolio)
            .options(_hydrated())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_with_positions(self, portfolio_id: uuid.UUID) -> Portfolio | None:
        """Get a portfolio by ID, fully hydrated.

        Args:
            portfolio_id: The portfolio ID

        Returns:
            Portfolio if found, None otherwise
        """
        result = await self.db.execute(
            select(Portfolio)
            .options(_hydrated())
            .where(Portfolio.id == portfolio_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def replace_positions(
        self,
        portfolio: Portfolio,
        positions: list[Position],
    ) -> Portfolio:
        """Replace every position of a portfolio.

        Existing positions are deleted (delete-orphan cascade) and the new
        ones are attached. There is no incremental merge.

        Args:
            portfolio: Hydrated portfolio (positions loaded)
            positions: New, unsaved positions

        Returns:
            The portfolio (flushed, not yet committed)

        Note:
            Caller must commit the transaction.
        """
        portfolio.positions.clear()
        await self.db.flush()

        portfolio.positions.extend(positions)
        await self.db.flush()
        return portfolio
