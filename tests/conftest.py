import os

# Keep the application's module-level engine off the filesystem
os.environ.setdefault("SERVICEFRIOS_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from types import SimpleNamespace

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from servicefrios.database import Base, get_session_factory
from servicefrios.models import Client, Technician


@pytest.fixture
async def session_factory():
    """Session factory on a fresh in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def directory(session_factory):
    """One client and one technician to hang schedules on."""
    async with session_factory() as session:
        client = Client(first_name="Ana", last_name="Pérez", email="ana@example.com")
        technician = Technician(first_name="Luis", last_name="Gómez", specialty="Refrigeración")
        session.add_all([client, technician])
        await session.commit()
        return SimpleNamespace(client_id=client.id, technician_id=technician.id)


@pytest.fixture
async def api(session_factory):
    """HTTP client bound to the app with the test database injected."""
    from servicefrios.main import app

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
