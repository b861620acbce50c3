import pytest

from asset_vista.application.services.inventory_service import InventoryRecordService
from asset_vista.application.services.session_store import SessionStore
from asset_vista.config import Settings
from asset_vista.domain.models.user import Identity

from fakes import FakeAuthGateway, FakePhotoStorage, FakeRoleRepository, InMemoryInventoryRepository


@pytest.fixture
def settings():
    return Settings(_env_file=None, SUPABASE_URL="https://example.supabase.co", SUPABASE_ANON_KEY="anon-key")


@pytest.fixture
def gateway():
    return FakeAuthGateway(users={"admin@gmail.com": "admin1234", "user@gmail.com": "user1234"})


@pytest.fixture
def roles():
    return FakeRoleRepository()


@pytest.fixture
async def store(gateway, roles, settings):
    store = SessionStore(gateway, roles, settings)
    await store.init()
    yield store
    await store.shutdown()


@pytest.fixture
def repo():
    return InMemoryInventoryRepository()


@pytest.fixture
def storage():
    return FakePhotoStorage()


@pytest.fixture
def identity():
    return Identity(id="uid-user@gmail.com", email="user@gmail.com")


@pytest.fixture
def service(repo, storage, identity, settings):
    return InventoryRecordService(repo, storage, identity, settings=settings)
