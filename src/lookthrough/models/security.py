"""Security and fundamental data models."""

from typing import Optional

from sqlalchemy import Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lookthrough.db.base import Base, LastUpdatedMixin


class Security(Base):
    """Listed security, keyed by its ticker symbol."""

    __tablename__ = "securities"

    symbol: Mapped[str] = mapped_column(String(20), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    isin: Mapped[str | None] = mapped_column(String(12), nullable=True)
    sector: Mapped[str | None] = mapped_column(String(100), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    exchange: Mapped[str | None] = mapped_column(String(50), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD")

    # One-to-one; absent until fundamentals have been supplied for the symbol
    fundamentals: Mapped[Optional["FundamentalData"]] = relationship(
        "FundamentalData",
        back_populates="security",
        cascade="all, delete-orphan",
        uselist=False,
    )


class FundamentalData(Base, LastUpdatedMixin):
    """Per-company fundamentals. Every metric is optional."""

    __tablename__ = "fundamental_data"

    symbol: Mapped[str] = mapped_column(
        String(20), ForeignKey("securities.symbol", ondelete="CASCADE"), primary_key=True
    )
    market_cap: Mapped[float | None] = mapped_column(Float, nullable=True)
    revenue: Mapped[float | None] = mapped_column(Float, nullable=True)
    free_cash_flow: Mapped[float | None] = mapped_column(Float, nullable=True)
    revenue_growth: Mapped[float | None] = mapped_column(Float, nullable=True)
    earnings_growth: Mapped[float | None] = mapped_column(Float, nullable=True)
    dividend_yield: Mapped[float | None] = mapped_column(Float, nullable=True)
    dividend_per_share: Mapped[float | None] = mapped_column(Float, nullable=True)
    pe_ratio: Mapped[float | None] = mapped_column(Float, nullable=True)
    pb_ratio: Mapped[float | None] = mapped_column(Float, nullable=True)
    return_on_equity: Mapped[float | None] = mapped_column(Float, nullable=True)
    debt_to_equity: Mapped[float | None] = mapped_column(Float, nullable=True)

    security: Mapped[Security] = relationship("Security", back_populates="fundamentals")


__all__ = ["Security", "FundamentalData"]
