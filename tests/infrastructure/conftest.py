"""Infrastructure conftest — in-memory catalog database."""

import pytest

from chartdb_sync.infrastructure.database import DatabaseSessionManager


@pytest.fixture
async def db_manager():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.create_tables()
    yield manager
    await manager.dispose()
