"""Shared test configuration and fixtures.

Each test gets a fresh in-memory SQLite database (via aiosqlite) and a
temporary Asset Store directory, so tests are fully isolated and need no
running PostgreSQL.
"""

import os

# Settings are read at import time; pin test values before importing flipdeck.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret"
os.environ["DEBUG_TOKEN"] = "debug-token-for-tests"
os.environ["ENFORCE_PLAN_LIMITS"] = "true"

import uuid
from collections.abc import AsyncGenerator

import fitz  # PyMuPDF
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from flipdeck.auth.jwt import create_token_pair
from flipdeck.auth.passwords import hash_password
from flipdeck.client.api import FlipdeckClient
from flipdeck.database import Base, enable_sqlite_foreign_keys, get_db
from flipdeck.main import app
from flipdeck.models.flipbook import Flipbook
from flipdeck.models.user import User
from flipdeck.rendering.worker import shutdown_render_worker
from flipdeck.services.role_service import set_user_role
from flipdeck.storage.asset_store import AssetStore, get_asset_store

TEST_BASE_URL = "http://testserver"


def make_pdf(page_count: int = 3, width: float = 595, height: float = 842) -> bytes:
    """Build a small PDF with one line of text per page."""
    document = fitz.open()
    for number in range(1, page_count + 1):
        page = document.new_page(width=width, height=height)
        page.insert_text((72, 72), f"Page {number}", fontsize=24)
    data = document.tobytes()
    document.close()
    return data


# ---------------------------------------------------------------------------
# Database: one in-memory SQLite database per test
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(test_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def asset_store(tmp_path) -> AssetStore:
    return AssetStore(tmp_path / "storage", f"{TEST_BASE_URL}/storage")


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, asset_store: AssetStore) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test DB session and store."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_asset_store] = lambda: asset_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=TEST_BASE_URL) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(scope="session", autouse=True)
def render_worker():
    yield
    shutdown_render_worker()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


async def create_user(db: AsyncSession, name: str = "Test User", role: str | None = None) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{name.split()[0].lower()}-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name=name,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    if role is not None:
        await set_user_role(db, user.id, role)
    return user


def headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


async def add_flipbooks(db: AsyncSession, user: User, count: int) -> list[Flipbook]:
    """Insert ready flipbook records without uploading anything."""
    flipbooks = []
    for index in range(count):
        flipbook = Flipbook(
            user_id=user.id,
            title=f"Existing {index + 1}",
            pdf_storage_path=f"{user.id}/existing-{index + 1}.pdf",
            status="ready",
        )
        db.add(flipbook)
        flipbooks.append(flipbook)
    await db.flush()
    for flipbook in flipbooks:
        await db.refresh(flipbook)
    return flipbooks


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A free-tier user (no role row)."""
    return await create_user(db_session)


@pytest_asyncio.fixture
async def pro_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, name="Pro User", role="pro")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, name="Other User")


@pytest.fixture
def auth_headers(test_user: User) -> dict[str, str]:
    return headers_for(test_user)


@pytest.fixture
def pro_headers(pro_user: User) -> dict[str, str]:
    return headers_for(pro_user)


@pytest.fixture
def other_headers(other_user: User) -> dict[str, str]:
    return headers_for(other_user)


# ---------------------------------------------------------------------------
# Client-side workflows: a FlipdeckClient talking to the ASGI app
# ---------------------------------------------------------------------------


@pytest.fixture
def api_client(client: AsyncClient, test_user: User) -> FlipdeckClient:
    token = create_token_pair(str(test_user.id))["access_token"]
    return FlipdeckClient(base_url=TEST_BASE_URL, access_token=token, http_client=client)


@pytest.fixture
def pro_api_client(client: AsyncClient, pro_user: User) -> FlipdeckClient:
    token = create_token_pair(str(pro_user.id))["access_token"]
    return FlipdeckClient(base_url=TEST_BASE_URL, access_token=token, http_client=client)


@pytest.fixture
def anonymous_client(client: AsyncClient) -> FlipdeckClient:
    return FlipdeckClient(base_url=TEST_BASE_URL, http_client=client)


@pytest.fixture
def sample_pdf() -> bytes:
    return make_pdf()


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def flipbook_factory(db_session: AsyncSession):
    async def _create(user: User, count: int = 1) -> list[Flipbook]:
        return await add_flipbooks(db_session, user, count)

    return _create
