"""
pytest configuration and fixtures for the quote lifecycle tests
"""

import os

# configuration is read at import time
os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["SQLITE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base, get_db, enable_sqlite_foreign_keys
from app.models.enums.quote_status import QuoteStatus
from app.models.quotes.quote_models import Quote
from app.utils.get_actor import Actor


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def manager():
    return Actor(id="user-manager-1", username="sindica@condominio.test", role="manager")


@pytest.fixture
def supplier():
    return Actor(id="user-supplier-1", username="fornecedor@empresa.test", role="supplier")


@pytest.fixture
def make_quote(session_factory):
    """Insert a quote directly in a given status, bypassing the lifecycle."""

    async def _make(
        status: QuoteStatus = QuoteStatus.draft,
        suppliers_sent_count: int = 0,
        responses_count: int = 0,
        visit_date: date | None = None,
        title: str = "Manutenção do elevador",
    ) -> Quote:
        async with session_factory() as session:
            q = Quote(
                quote_number=f"TMP-{uuid4().hex[:16]}",
                title=title,
                client_name="Condomínio Jardim das Flores",
                status=status,
                suppliers_sent_count=suppliers_sent_count,
                responses_count=responses_count,
                visit_date=visit_date,
                version=1,
            )
            session.add(q)
            await session.flush()
            q.quote_number = f"QT-{q.id:06d}"
            await session.commit()
            await session.refresh(q)
            return q

    return _make


@pytest_asyncio.fixture
async def client(session_factory):
    from main import app

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

