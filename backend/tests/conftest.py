# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- TestClient with the database dependency overridden
- Sample data factories (trades, curve points, stored valuations)
"""

import os

# Must be set BEFORE importing tindesk modules: settings validate on import
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tindesk.database import get_db
from tindesk.middleware.rate_limit import limiter
from tindesk.models import (
    Base,
    Trade,
    TradeDirection,
    FuturesCurvePoint,
    MonthlyPnL,
    DailyPnL,
)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def session_factory(db_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Iterator[Session]:
    """Create a database session for testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate-limit counters are per process; start every test from zero."""
    limiter.reset()
    yield


@pytest.fixture(scope="function")
def client(db: Session) -> Iterator[TestClient]:
    """
    Create TestClient with database dependency override.

    This ensures all API calls use the test database.
    """
    from tindesk.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def create_trade(
        db: Session,
        trade_date: date,
        contract_month: str,
        buy_sell: TradeDirection | str = TradeDirection.BUY,
        quantity_mt: Decimal | str = "10",
        price_usd: Decimal | str = "25000",
        counterparty: str | None = None,
) -> Trade:
    """Create and commit a trade."""
    trade = Trade(
        trade_date=trade_date,
        contract_month=contract_month,
        buy_sell=TradeDirection(buy_sell),
        quantity_mt=Decimal(quantity_mt),
        price_usd=Decimal(price_usd),
        counterparty=counterparty,
    )
    db.add(trade)
    db.commit()
    db.refresh(trade)
    return trade


def create_curve(
        db: Session,
        as_of_date: date,
        prices: dict[int, Decimal | str],
        price_source: str = "LME",
) -> list[FuturesCurvePoint]:
    """Create and commit curve points, {tenor_months: price}."""
    points = [
        FuturesCurvePoint(
            as_of_date=as_of_date,
            tenor_months=tenor,
            futures_price_usd=Decimal(price),
            price_source=price_source,
        )
        for tenor, price in prices.items()
    ]
    db.add_all(points)
    db.commit()
    return points


def create_monthly(
        db: Session,
        year_month: str,
        net_pnl: Decimal | str,
        valuation_date: date | None = None,
        unrealized_pnl: Decimal | str | None = None,
        reversal_pnl: Decimal | str | None = "0",
        position_count: int = 1,
) -> MonthlyPnL:
    """Create and commit a stored monthly valuation."""
    if valuation_date is None:
        year, month = (int(part) for part in year_month.split("-"))
        valuation_date = date(year, month, 28)
    row = MonthlyPnL(
        valuation_date=valuation_date,
        year_month=year_month,
        unrealized_pnl=Decimal(unrealized_pnl if unrealized_pnl is not None else net_pnl),
        reversal_pnl=Decimal(reversal_pnl) if reversal_pnl is not None else None,
        net_pnl=Decimal(net_pnl),
        position_count=position_count,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def create_daily(
        db: Session,
        valuation_date: date,
        unrealized_pnl: Decimal | str = "0",
        position_count: int = 0,
) -> DailyPnL:
    """Create and commit a stored daily valuation."""
    row = DailyPnL(
        valuation_date=valuation_date,
        realized_pnl=Decimal("0"),
        unrealized_pnl=Decimal(unrealized_pnl),
        total_pnl=Decimal(unrealized_pnl),
        position_count=position_count,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
