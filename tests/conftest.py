"""
Test infrastructure for the Blog API.

Strategy
--------
- JWT_SECRET has no default in Settings, so it is set in the environment
  before anything under ``blog_api`` is imported. BCRYPT_ROUNDS is lowered
  to bcrypt's minimum to keep registration fast.
- SQLite in-memory via aiosqlite removes the need for a running Postgres
  instance. StaticPool makes every session share the one connection that
  holds the in-memory database.
- The app's get_db dependency is overridden so every test-time request uses
  the test session factory rather than the production one.
- All tables are created fresh before each test and dropped after.
"""
import os

os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from blog_api.database import Base, get_db  # noqa: E402
from blog_api.main import app  # noqa: E402

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override: replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for tests that call service functions directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def sql_statements():
    """
    Record every SQL statement the test engine executes, including those
    issued by ``selectinload`` / ``joinedload``. Clear the list before the
    call under test.
    """
    statements: list[str] = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine_test.sync_engine, "before_cursor_execute", _record)
    yield statements
    event.remove(engine_test.sync_engine, "before_cursor_execute", _record)


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ---------------------------------------------------------------------------
# HTTP helpers shared by the endpoint suites
# ---------------------------------------------------------------------------

async def register_user(client: AsyncClient, name: str, password: str = "s3cret-pass") -> dict:
    """Register *name* and return the ``{user, token}`` response body."""
    resp = await client.post("/auth/register", json={
        "username": name,
        "email": f"{name}@example.com",
        "password": password,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def create_post(client: AsyncClient, token: str, title: str = "A post", content: str = "Body") -> dict:
    resp = await client.post(
        "/posts", json={"title": title, "content": content}, headers=auth_header(token)
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
