"""Security repository for security and fundamental data operations."""

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from lookthrough.core.config import settings
from lookthrough.db.base import utcnow
from lookthrough.models.security import FundamentalData, Security
from lookthrough.repositories.base import BaseRepository
from lookthrough.schemas.portfolio import FundamentalDataCreate, SecurityCreate


class SecurityRepository(BaseRepository[Security]):
    """Repository for Security model with fundamentals handling.

    Example:
        >>> repo = SecurityRepository(Security, db)
        >>> security = await repo.get_by_symbol("aapl")
        >>> security.fundamentals.pe_ratio if security.fundamentals else None
    """

    async def get_by_symbol(self, symbol: str) -> Security | None:
        """Get a security by symbol with its fundamentals eagerly loaded.

        Args:
            symbol: Ticker symbol (case-insensitive)

        Returns:
            Security if found, None otherwise
        """
        result = await self.db.execute(
            select(Security)
            .options(selectinload(Security.fundamentals))
            .where(Security.symbol == symbol.strip().upper())
        )
        return result.scalar_one_or_none()

    async def upsert(self, security_in: SecurityCreate) -> Security:
        """Create a security or refresh an existing one.

        Metadata fields set in ``security_in`` overwrite the stored values,
        and an explicit null clears an optional field (sector, ISIN, ...).
        Fields left unset keep their stored values. Name and currency cannot
        be cleared and fall back to the symbol and the default currency.
        Supplied fundamentals replace the stored figures and stamp
        ``last_updated``; omitted fundamentals leave stored ones untouched.

        Args:
            security_in: Validated security data

        Returns:
            The created or updated security (flushed, not yet committed)
        """
        security = await self.get_by_symbol(security_in.symbol)
        metadata = security_in.model_dump(exclude={"symbol", "fundamentals"}, exclude_unset=True)
        required = {"name": security_in.symbol, "currency": settings.DEFAULT_CURRENCY}

        if security is None:
            for field, fallback in required.items():
                if metadata.get(field) is None:
                    metadata[field] = fallback
            security = Security(symbol=security_in.symbol, **metadata)
            self.db.add(security)
        else:
            for field, value in metadata.items():
                if value is None and field in required:
                    continue
                setattr(security, field, value)

        if security_in.fundamentals is not None:
            self._apply_fundamentals(security, security_in.fundamentals)

        await self.db.flush()
        return security

    @staticmethod
    def _apply_fundamentals(security: Security, fundamentals_in: FundamentalDataCreate) -> None:
        values = fundamentals_in.model_dump()
        if security.fundamentals is None:
            security.fundamentals = FundamentalData(symbol=security.symbol, **values)
            return

        for field, value in values.items():
            setattr(security.fundamentals, field, value)
        security.fundamentals.last_updated = utcnow()
