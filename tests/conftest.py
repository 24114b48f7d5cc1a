"""Shared test fixtures for the invoice engine test suite."""

import asyncio
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from invoice_engine.domain.models.invoice import Customer, LineItem
from invoice_engine.infrastructure.db import models  # noqa: F401
from invoice_engine.infrastructure.db.base import Base


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def widget_item() -> LineItem:
    """2 x 100.00 mobile phone accessory, HSN 8517 (18%)."""
    return LineItem(description="Widget", hsn="8517", quantity=2, unit_price=100)


@pytest.fixture
def customer() -> Customer:
    return Customer(
        name="XYZ Enterprises",
        email="accounts@xyz.example",
        gst_number="27AADCB2230M1ZP",
        address={
            "street": "12 MG Road",
            "city": "Mumbai",
            "state": "Maharashtra",
            "pincode": "400001",
        },
    )


@pytest.fixture
def invoice_day() -> date:
    return date(2024, 7, 15)


@pytest.fixture
def session_factory(event_loop):
    """In-memory SQLite database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    event_loop.run_until_complete(_create())
    yield async_sessionmaker(engine, expire_on_commit=False)
    event_loop.run_until_complete(engine.dispose())
