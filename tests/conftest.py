"""Shared pytest fixtures."""

from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.config import settings
from academy.main import app
from academy.services.fee_ledger import compute_balance, compute_status
from academy.schemas.fees import FeeRecord
from academy.schemas.progression import BeltLevelRecord


@pytest.fixture
def api_base() -> str:
    """Base URL for API requests."""
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
def db() -> AsyncMock:
    """Mocked database session; services are patched or drive it directly."""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
async def async_client(api_base: str, db: AsyncMock):
    """Async HTTP client against the app with the session dependency swapped out."""
    async def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    client = AsyncClient(transport=ASGITransport(app=app), base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()
    app.dependency_overrides.clear()


@pytest.fixture
def student_id():
    return uuid4()


@pytest.fixture
def make_fee():
    """Build a FeeRecord with derived fields computed the way the service writes them."""
    def _make(student_id, year, month, monthly_fee=2000, paid_amount=0, **kwargs):
        return FeeRecord(
            id=kwargs.pop("id", uuid4()),
            student_id=student_id,
            year=year,
            month=month,
            monthly_fee=Decimal(monthly_fee),
            paid_amount=Decimal(paid_amount),
            balance_due=compute_balance(monthly_fee, paid_amount),
            status=compute_status(monthly_fee, paid_amount),
            **kwargs,
        )
    return _make


@pytest.fixture
def make_level():
    def _make(color, rank, discipline=None, **kwargs):
        return BeltLevelRecord(id=kwargs.pop("id", uuid4()), color=color, rank=rank, discipline=discipline, **kwargs)
    return _make
