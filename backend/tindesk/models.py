# backend/tindesk/models.py
import enum
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    String,
    Date,
    DateTime,
    Enum,
    Integer,
    Numeric,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class TradeDirection(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


class Trade(Base):
    """
    An executed physical or futures tin trade.

    Written once by the trade capture process and never updated by the
    valuation engine. contract_month holds the raw token (e.g. "2026-M03");
    it is parsed into a ContractMonth at the repository boundary.
    """
    __tablename__ = "trades"
    __table_args__ = (
        CheckConstraint("quantity_mt > 0", name="ck_trade_quantity_positive"),
        CheckConstraint("price_usd > 0", name="ck_trade_price_positive"),
        # "All trades dated on or before V" is the only read the engine does
        Index("ix_trade_date_id", "trade_date", "id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    trade_date: Mapped[date] = mapped_column(Date)
    contract_month: Mapped[str] = mapped_column(String(8), index=True)
    buy_sell: Mapped[TradeDirection] = mapped_column(Enum(TradeDirection))

    # Metric tons and USD per ton
    quantity_mt: Mapped[Decimal] = mapped_column(Numeric(18, 4))
    price_usd: Mapped[Decimal] = mapped_column(Numeric(18, 4))

    counterparty: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )


class FuturesCurvePoint(Base):
    """
    Reference futures price for a tenor, as of a date.

    Written by the external price ingestion process. Tenor 0 is the spot /
    front month; tenor N is N whole calendar months after as_of_date.
    """
    __tablename__ = "futures_curve"
    __table_args__ = (
        UniqueConstraint("as_of_date", "tenor_months", name="uq_curve_date_tenor"),
        CheckConstraint("tenor_months >= 0", name="ck_curve_tenor_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    as_of_date: Mapped[date] = mapped_column(Date, index=True)
    tenor_months: Mapped[int] = mapped_column(Integer)
    futures_price_usd: Mapped[Decimal] = mapped_column(Numeric(18, 4))
    price_source: Mapped[str] = mapped_column(String(50), default="LME")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )


class MonthlyPnL(Base):
    """
    Immutable month-end valuation.

    One row per year_month. The unique constraint is what rejects a second
    run for the same month, including two runs racing each other.

    net_pnl = reversal_pnl + unrealized_pnl, where reversal_pnl is the
    negated net_pnl of the immediately preceding month (0 if none).
    """
    __tablename__ = "monthly_pnl"
    __table_args__ = (
        UniqueConstraint("year_month", name="uq_monthly_pnl_year_month"),
        Index("ix_monthly_pnl_year_month_date", "year_month", "valuation_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    valuation_date: Mapped[date] = mapped_column(Date)
    year_month: Mapped[str] = mapped_column(String(7))  # "2026-03"

    unrealized_pnl: Mapped[Decimal] = mapped_column(Numeric(18, 2))
    reversal_pnl: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    net_pnl: Mapped[Decimal] = mapped_column(Numeric(18, 2))
    position_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )


class DailyPnL(Base):
    """
    Immutable daily valuation, one row per valuation_date.

    realized_pnl is always 0 until delivery-settlement accounting exists.
    """
    __tablename__ = "daily_pnl"
    __table_args__ = (
        UniqueConstraint("valuation_date", name="uq_daily_pnl_valuation_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    valuation_date: Mapped[date] = mapped_column(Date, index=True)

    realized_pnl: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0"))
    unrealized_pnl: Mapped[Decimal] = mapped_column(Numeric(18, 2))
    total_pnl: Mapped[Decimal] = mapped_column(Numeric(18, 2))
    position_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
