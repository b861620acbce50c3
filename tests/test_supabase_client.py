from types import SimpleNamespace

import httpx
import pytest
from supabase import AuthApiError, PostgrestAPIError, StorageException

from asset_vista.core.exceptions import BackendException, EntityNotFoundException, PhotoUploadException
from asset_vista.domain.models.inventory_item import Viewpoint
from asset_vista.domain.models.user import Role
from asset_vista.domain.repositories.auth_gateway import AuthEvent
from asset_vista.infrastructure.repositories.inventory_repository import TABLE, SupabaseInventoryRepository
from asset_vista.infrastructure.repositories.photo_storage import SupabasePhotoStorage
from asset_vista.infrastructure.repositories.user_repository import ROLES_TABLE, SupabaseRoleRepository
from asset_vista.infrastructure.supabase.auth import SupabaseAdminGateway, SupabaseAuthGateway
from asset_vista.infrastructure.supabase.client import _options

USER = SimpleNamespace(id="u-1", email="user@gmail.com", user_metadata={})

ROW = {
    "id": 7,
    "asset_number": "A-7",
    "nama_asset_1": "Genset",
    "alamat": "Jl. X",
    "kota": "Palembang",
    "kondisi": "Rusak",
    "foto_depan": "",
    "created_at": "2024-03-01T10:00:00+00:00",
}


def sdk_session(token="jwt-abc"):
    return SimpleNamespace(
        access_token=token, refresh_token="refresh-abc", token_type="bearer",
        expires_in=3600, expires_at=None, user=USER,
    )


class Query:
    """Chainable stand-in for the SDK query builder. Records every call."""

    def __init__(self, rows=None, error=None):
        self.calls = []
        self.rows = rows if rows is not None else []
        self.error = error

    def __getattr__(self, name):
        def step(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return step

    async def execute(self):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=self.rows)


class Bucket:
    def __init__(self, name, error=None):
        self.name = name
        self.error = error
        self.uploads = []

    async def upload(self, path, content, file_options=None):
        if self.error is not None:
            raise self.error
        self.uploads.append((path, content, file_options))

    async def get_public_url(self, path):
        return f"https://example.supabase.co/storage/v1/object/public/{self.name}/{path}?"


class SdkAuth:
    """Notifies listeners synchronously, from inside its own calls."""

    def __init__(self):
        self.listeners = []
        self.admin = SimpleNamespace(create_user=self._create_user, created=[])
        self.error = None
        self.current = None

    def on_auth_state_change(self, callback):
        self.listeners.append(callback)
        return SimpleNamespace(unsubscribe=lambda: self.listeners.remove(callback))

    def _notify(self, event, session):
        for listener in list(self.listeners):
            listener(event, session)

    async def sign_in_with_password(self, credentials):
        if self.error is not None:
            raise self.error
        self.current = sdk_session()
        self._notify("SIGNED_IN", self.current)
        return SimpleNamespace(user=USER, session=self.current)

    async def sign_up(self, credentials):
        return SimpleNamespace(user=None, session=None)

    async def get_session(self):
        if self.current is not None:
            self.current = sdk_session("jwt-refreshed")
            self._notify("TOKEN_REFRESHED", self.current)
        return self.current

    async def sign_out(self):
        if self.error is not None:
            raise self.error
        self.current = None
        self._notify("SIGNED_OUT", None)

    async def _create_user(self, attributes):
        self.admin.created.append(attributes)
        return SimpleNamespace(user=SimpleNamespace(id="u-9", email=attributes["email"], user_metadata={}))


class SdkClient:
    def __init__(self):
        self.auth = SdkAuth()
        self.queries = {}
        self.buckets = {}

    def answer(self, table, rows=None, error=None):
        self.queries[table] = Query(rows, error)
        return self.queries[table]

    def table(self, name):
        return self.queries.setdefault(name, Query())

    @property
    def storage(self):
        return SimpleNamespace(from_=lambda name: self.buckets.setdefault(name, Bucket(name)))


@pytest.fixture
def sdk():
    return SdkClient()


@pytest.fixture
def auth(sdk):
    return SupabaseAuthGateway(sdk)


def recorder(events):
    async def listener(event, session):
        events.append((event, session.access_token if session else None))
    return listener


async def test_sign_in_delivers_the_event_after_the_call(auth, sdk):
    events = []
    auth.on_auth_state_change(recorder(events))

    session = await auth.sign_in_with_password("user@gmail.com", "user1234")

    assert session.user.id == "u-1"
    assert session.access_token == "jwt-abc"
    assert events == [(AuthEvent.SIGNED_IN, "jwt-abc")]


async def test_unknown_sdk_events_are_ignored(auth, sdk):
    events = []
    auth.on_auth_state_change(recorder(events))
    sdk.auth._notify("MFA_CHALLENGE_VERIFIED", None)

    await auth.sign_in_with_password("user@gmail.com", "user1234")

    assert events == [(AuthEvent.SIGNED_IN, "jwt-abc")]


async def test_bad_credentials_surface_the_provider_message(auth, sdk):
    sdk.auth.error = AuthApiError("Invalid login credentials", 400, "invalid_credentials")

    with pytest.raises(BackendException) as exc:
        await auth.sign_in_with_password("user@gmail.com", "nope")

    assert exc.value.message == "Invalid login credentials"
    assert exc.value.status_code == 400


async def test_sign_up_without_a_user_is_a_backend_failure(auth):
    with pytest.raises(BackendException, match="no user"):
        await auth.sign_up("new@example.com", "secret1")


async def test_get_session_reports_the_refreshed_token(auth, sdk):
    events = []
    await auth.sign_in_with_password("user@gmail.com", "user1234")
    auth.on_auth_state_change(recorder(events))

    session = await auth.get_session()

    assert session.access_token == "jwt-refreshed"
    assert events == [(AuthEvent.TOKEN_REFRESHED, "jwt-refreshed")]


async def test_failed_sign_out_still_announces_signed_out(auth, sdk):
    events = []
    await auth.sign_in_with_password("user@gmail.com", "user1234")
    auth.on_auth_state_change(recorder(events))
    sdk.auth.error = AuthApiError("boom", 500, None)

    with pytest.raises(BackendException) as exc:
        await auth.sign_out()

    assert exc.value.status_code == 502
    assert events == [(AuthEvent.SIGNED_OUT, None)]


async def test_unsubscribed_listener_hears_nothing(auth):
    events = []
    subscription = auth.on_auth_state_change(recorder(events))
    subscription.unsubscribe()

    await auth.sign_in_with_password("user@gmail.com", "user1234")

    assert events == []


async def test_recent_items_are_ordered_newest_first(sdk):
    query = sdk.answer(TABLE, rows=[ROW])

    items = await SupabaseInventoryRepository(sdk).list_recent()

    assert ("order", ("created_at",), {"desc": True}) in query.calls
    assert items[0].asset_number == "A-7"
    assert items[0].foto_depan is None


async def test_update_filters_by_id(sdk):
    query = sdk.answer(TABLE, rows=[{**ROW, "kota": "Medan"}])

    item = await SupabaseInventoryRepository(sdk).update(7, {"kota": "Medan"})

    assert ("update", ({"kota": "Medan"},), {}) in query.calls
    assert ("eq", ("id", 7), {}) in query.calls
    assert item.kota == "Medan"


async def test_update_hidden_by_row_security_is_not_found(sdk):
    sdk.answer(TABLE, rows=[])

    with pytest.raises(EntityNotFoundException):
        await SupabaseInventoryRepository(sdk).update(7, {"kota": "Medan"})


async def test_row_security_denial_keeps_its_status(sdk):
    sdk.answer(TABLE, error=PostgrestAPIError(
        {"code": "42501", "message": "new row violates row-level security policy"}
    ))

    with pytest.raises(BackendException) as exc:
        await SupabaseInventoryRepository(sdk).create(dict(ROW))

    assert exc.value.status_code == 403
    assert "row-level security" in exc.value.message


async def test_expired_jwt_is_unauthorized(sdk):
    sdk.answer(TABLE, error=PostgrestAPIError({"code": "PGRST301", "message": "JWT expired"}))

    with pytest.raises(BackendException) as exc:
        await SupabaseInventoryRepository(sdk).list_recent()

    assert exc.value.status_code == 401


async def test_network_failure_becomes_backend_error(sdk):
    sdk.answer(TABLE, error=httpx.ConnectError("connection refused"))

    with pytest.raises(BackendException, match="Network error") as exc:
        await SupabaseInventoryRepository(sdk).list_recent()

    assert exc.value.status_code == 502


async def test_role_lookup_filters_by_user(sdk):
    query = sdk.answer(ROLES_TABLE, rows=[{"user_id": "u-1", "role": "admin"}])

    rows = await SupabaseRoleRepository(sdk).roles_for("u-1")

    assert ("eq", ("user_id", "u-1"), {}) in query.calls
    assert rows[0].role is Role.ADMIN


async def test_photo_upload_returns_public_url(sdk, settings):
    storage = SupabasePhotoStorage(sdk, settings.STORAGE_BUCKET)

    url = await storage.upload(Viewpoint.LEFT, "png", b"\x89PNG", "image/png")

    path, content, options = sdk.buckets["inventory_images"].uploads[0]
    assert path.startswith("left/") and path.endswith(".png")
    assert len(path.split("/")[1]) == len("00000000-0000-0000-0000-000000000000.png")
    assert content == b"\x89PNG"
    assert options == {"content-type": "image/png"}
    assert url == f"https://example.supabase.co/storage/v1/object/public/inventory_images/{path}"


async def test_rejected_photo_upload_is_reported(sdk, settings):
    sdk.buckets["inventory_images"] = Bucket(
        "inventory_images",
        error=StorageException({"statusCode": 413, "error": "Payload too large", "message": "too big"}),
    )
    storage = SupabasePhotoStorage(sdk, settings.STORAGE_BUCKET)

    with pytest.raises(PhotoUploadException, match="File upload failed: too big"):
        await storage.upload(Viewpoint.FRONT, "jpg", b"x")


async def test_admin_creates_confirmed_users(sdk):
    identity = await SupabaseAdminGateway(sdk).create_user(
        "ani@example.com", "longenough", user_metadata={"full_name": "Ani"}
    )

    created = sdk.auth.admin.created[0]
    assert created["email_confirm"] is True
    assert created["user_metadata"] == {"full_name": "Ani"}
    assert identity.id == "u-9"


def test_clients_never_refresh_in_the_background(settings):
    options = _options(settings, persist_session=False)

    assert options.auto_refresh_token is False
    assert options.persist_session is False
