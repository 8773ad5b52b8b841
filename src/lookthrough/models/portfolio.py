"""Portfolio and position models."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lookthrough.db.base import Base, LastUpdatedMixin, utcnow
from lookthrough.models.security import Security


class Portfolio(Base, LastUpdatedMixin):
    """Portfolio aggregate root: a cash balance plus its positions.

    Totals (market value, cost basis, P&L) are never stored; they are
    derived from the positions on the snapshot schema.
    """

    __tablename__ = "portfolios"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200))
    cash: Mapped[float] = mapped_column(Numeric(18, 2, asdecimal=False), default=0.0)

    positions: Mapped[list["Position"]] = relationship(
        "Position",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="Position.id",
    )


class Position(Base, LastUpdatedMixin):
    """Holding of one security inside one portfolio.

    Several positions may reference the same symbol (separate lots).
    """

    __tablename__ = "positions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    portfolio_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("portfolios.id", ondelete="CASCADE"), index=True
    )
    symbol: Mapped[str] = mapped_column(
        String(20), ForeignKey("securities.symbol", ondelete="RESTRICT"), index=True
    )
    quantity: Mapped[float] = mapped_column(Numeric(18, 8, asdecimal=False))  # Fractional
    average_cost: Mapped[float] = mapped_column(Numeric(18, 4, asdecimal=False))
    current_price: Mapped[float] = mapped_column(Numeric(18, 4, asdecimal=False))
    purchase_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    portfolio: Mapped[Portfolio] = relationship("Portfolio", back_populates="positions")
    security: Mapped[Security] = relationship("Security")
