"""API conftest — app wired to an in-memory catalog, served over ASGITransport."""

import httpx
import pytest

from chartdb_sync.config import Settings
from chartdb_sync.infrastructure.database import DatabaseSessionManager
from chartdb_sync.infrastructure.local_catalog import SqlDiagramCatalog, get_catalog
from chartdb_sync.main import create_app


@pytest.fixture
async def db_manager():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.create_tables()
    yield manager
    await manager.dispose()


@pytest.fixture
def app(db_manager):
    settings = Settings(
        database_url="sqlite+aiosqlite:///:memory:", _env_file=None,
    )
    application = create_app(settings)
    application.dependency_overrides[get_catalog] = (
        lambda: SqlDiagramCatalog(db_manager)
    )
    return application


@pytest.fixture
async def api(app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test",
    ) as client:
        yield client
