import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from ujala_news.accounts.models import Account
from ujala_news.accounts.schemas import Principal
from ujala_news.app import create_app
from ujala_news.authorization.permissions import Role
from ujala_news.core.config import UjalaSettings
from ujala_news.db import db as db_module
from ujala_news.media.cleanup import MediaCleanupQueue
from ujala_news.media.storage import LocalFileStore
from ujala_news.news.workflow import NewsWorkflow

from .factories import SUPERADMIN_EMAIL, SUPERADMIN_PASSWORD, make_account


@pytest.fixture
def settings(tmp_path) -> UjalaSettings:
    """Isolated settings: temp database and media root, no live feed key."""
    return UjalaSettings(
        _env_file=None,
        DEBUG=True,
        SECRET_KEY="secret-key-for-testing",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'ujala.db'}",
        MEDIA_ROOT=str(tmp_path / "public"),
        SUPERADMIN_EMAIL=SUPERADMIN_EMAIL,
        SUPERADMIN_PASSWORD=SUPERADMIN_PASSWORD,
        NEWS_API_KEY=None,
        ENABLE_CORS=False,
    )


@pytest_asyncio.fixture(scope="function")
async def init_test_db(settings: UjalaSettings):
    """Initialize a fresh file-backed database for each test."""
    db_module.init_db(settings.DATABASE_URL, echo=False)
    await db_module.create_tables()

    yield

    await db_module.close_db()


@pytest_asyncio.fixture()
async def db_session(init_test_db):  # noqa: ARG001
    """Provide a database session for tests."""

    async for session in db_module.get_db():
        yield session


@pytest.fixture
def file_store(settings: UjalaSettings) -> LocalFileStore:
    return LocalFileStore(settings.MEDIA_ROOT, settings.UPLOAD_URL_PREFIX)


@pytest_asyncio.fixture
async def cleanup_queue(file_store: LocalFileStore):
    queue = MediaCleanupQueue(file_store)
    await queue.start()
    yield queue
    await queue.shutdown()


@pytest.fixture
def workflow(settings, cleanup_queue, file_store) -> NewsWorkflow:
    return NewsWorkflow(settings, cleanup_queue, file_store)


# --- Accounts ---


@pytest_asyncio.fixture
async def admin_account(db_session: AsyncSession) -> Account:
    return await make_account(
        db_session, email="desk@moradabadujala.in", name="News Desk"
    )


@pytest_asyncio.fixture
async def reporter_account(db_session: AsyncSession) -> Account:
    return await make_account(
        db_session,
        email="rakesh@moradabadujala.in",
        name="Rakesh Kumar",
        role=Role.REPORTER,
        is_approved=True,
        reporter_code="R1234567",
    )


@pytest_asyncio.fixture
async def pending_reporter(db_session: AsyncSession) -> Account:
    return await make_account(
        db_session,
        email="newbie@moradabadujala.in",
        name="New Reporter",
        role=Role.REPORTER,
        is_approved=False,
        reporter_code="R7654321",
    )


@pytest.fixture
def superadmin() -> Principal:
    return Principal.superadmin(SUPERADMIN_EMAIL)


# --- HTTP ---


@pytest_asyncio.fixture
async def app(settings: UjalaSettings, init_test_db):  # noqa: ARG001
    """
    The real application bound to the test database.

    ASGITransport does not run the lifespan, so the pieces it would start are
    started here.
    """
    application = create_app(settings)
    await application.state.cleanup_queue.start()
    yield application
    await application.state.cleanup_queue.shutdown()
    await application.state.feed.aclose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
