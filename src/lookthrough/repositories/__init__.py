"""Repository layer for database operations.

Repositories:
    - BaseRepository: Generic lookups and create/update for any model
    - PortfolioRepository: Hydrated portfolio reads and position replacement
    - SecurityRepository: Security lookups and upserts with fundamentals

Usage:
    >>> from lookthrough.repositories import PortfolioRepository
    >>> from lookthrough.models.portfolio import Portfolio
    >>>
    >>> repo = PortfolioRepository(Portfolio, db)
    >>> portfolio = await repo.get_first_with_positions()
"""

from lookthrough.repositories.base import BaseRepository
from lookthrough.repositories.portfolio import PortfolioRepository
from lookthrough.repositories.security import SecurityRepository

__all__ = [
    "BaseRepository",
    "PortfolioRepository",
    "SecurityRepository",
]
