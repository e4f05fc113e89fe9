import os
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession
from typing import AsyncGenerator

# The module-level app reads settings on import; point it at sqlite so nothing
# tries to reach PostgreSQL. Each test still gets its own database below.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./tests/test.db")

from tokfox.core import config as _config  # noqa: E402
_config.get_settings.cache_clear()  # ensure new env vars are picked up # type: ignore[attr-defined]
_settings = _config.get_settings()

from tokfox.api.main import create_app  # noqa: E402
from tokfox.db.session import Database  # noqa: E402

MSISDN = "+14155552671"


@pytest.fixture(scope="session")
def settings():
    """Expose application settings to tests if needed."""
    return _settings


@pytest.fixture()
def alias():
    return {"type": "msisdn", "value": MSISDN}


@pytest.fixture()
def push_endpoint():
    return {"invitation": "https://a/i", "rejection": "https://a/r"}


@pytest_asyncio.fixture()
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """Fresh sqlite file per test, tables created on open."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'tokfox.db'}", create_all=True)
    await db.open()
    yield db
    await db.close()


@pytest_asyncio.fixture()
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture()
async def client(settings, database: Database):
    # ASGITransport does not run the lifespan; the database fixture is already open.
    app = create_app(settings, database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
