"""
Pytest configuration and fixtures for Saratov Quest tests
"""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from src.database import crud
from src.database.engine import _configure_sqlite_connection
from src.database.models import Base, User
from src.database.seed import seed_database
from src.services.auth_service import create_access_token, hash_password


# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="session")
def password_hash() -> str:
    """bcrypt is slow on purpose: hash the shared test password once"""
    return hash_password(TEST_PASSWORD)


@pytest.fixture(scope="function")
async def test_db_engine():
    """
    Create test database engine
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _configure_sqlite_connection)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(test_db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """
    Create test database session
    """
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
async def seeded_session(db_session) -> AsyncSession:
    """Session over a database holding the seed catalog"""
    await seed_database(db_session)
    return db_session


@pytest.fixture
def make_user(db_session, password_hash):
    """
    Factory: await make_user("name", points=250)
    """
    async def _make_user(username: str, points: int = 0, level: int = 1, is_premium: bool = False) -> User:
        user = await crud.create_user(
            db_session,
            username=username,
            email=f"{username}@example.com",
            password_hash=password_hash,
            full_name=username.title(),
        )
        if points or level != 1 or is_premium:
            user.points = points
            user.level = level
            user.is_premium = is_premium
            await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    """Factory: client.get(url, headers=auth_headers(user))"""
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.username)}"}

    return _auth_headers


@pytest.fixture(scope="function")
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client against the app with get_session bound to the test database
    and the assistant forced onto the local responder
    """
    from api_server import app
    from src.database.engine import get_session
    from src.services.assistant_service import AssistantService, get_assistant_service

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    local_assistant = AssistantService(api_key="")

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_assistant_service] = lambda: local_assistant
    app.state.limiter.enabled = False

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
    app.state.limiter.enabled = True
