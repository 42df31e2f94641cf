"""
Shared fixtures: in-memory SQLite store, event bus with a capturing subscriber,
and repositories bound to both.
"""

import pytest
import pytest_asyncio
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from coedit.core import security
from coedit.core.db import init_models
from coedit.core.events import EventBus
from coedit.db.repositories import DocumentRepository, UserRepository


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Use the minimum bcrypt cost so tests stay quick."""
    monkeypatch.setattr(security, "pwd_context", CryptContext(schemes=["bcrypt"], bcrypt__rounds=4))


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def captured(events):
    """Every event delivered to subscribers, in order."""
    received = []
    events.subscribe(received.append)
    return received


@pytest.fixture
def users(session, events):
    return UserRepository(session, events)


@pytest.fixture
def documents(session, events):
    return DocumentRepository(session, events)


@pytest_asyncio.fixture
async def alice(users):
    return await users.create_user("alice", "alice@example.com", "Secret123")


@pytest_asyncio.fixture
async def bob(users):
    return await users.create_user("bob", "bob@example.com", "Secret456")
