from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from app.core import dependencies
from app.database.supabase_client import get_service_supabase, get_supabase
from app.main import app
from app.modules.auth.service import clear_auth_cache
from app.modules.intents.storage import MemoryStorage, get_memory_storage
from app.modules.session import registry
from tests.utils.fake_supabase import FakeSupabase


@pytest.fixture(autouse=True)
def reset_process_state() -> None:
    # Observers, memory storage and caches are process-wide; isolate every test.
    registry.clear()
    get_memory_storage().clear()
    clear_auth_cache()
    dependencies.get_action_throttle().reset()
    yield
    registry.clear()
    get_memory_storage().clear()
    clear_auth_cache()
    app.dependency_overrides.clear()


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
async def client(fake_supabase: FakeSupabase) -> AsyncClient:
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_service_supabase] = lambda: fake_supabase
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
