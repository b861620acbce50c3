"""In-memory stand-ins for the backend, with call logs."""

import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from asset_vista.core.exceptions import BackendException, EntityNotFoundException, PhotoUploadException
from asset_vista.domain.models.inventory_item import InventoryItem, Viewpoint
from asset_vista.domain.models.user import AuthSession, Identity, Profile, Role, RoleAssignment
from asset_vista.domain.repositories.auth_gateway import AuthEvent


class FakeSubscription:
    def __init__(self, gateway, callback):
        self.gateway = gateway
        self.callback = callback

    def unsubscribe(self):
        self.gateway.subscribers.remove(self)


class FakeAuthGateway:
    def __init__(self, users: Optional[Dict[str, str]] = None, autoconfirm: bool = False):
        self.passwords: Dict[str, str] = dict(users or {})
        self.identities: Dict[str, Identity] = {
            email: Identity(id=f"uid-{email}", email=email) for email in self.passwords
        }
        self.autoconfirm = autoconfirm
        self.session: Optional[AuthSession] = None
        self.subscribers: List[FakeSubscription] = []
        self.calls: List[str] = []
        self.fail_sign_out = False
        self.expired = False
        self.refresh_fails = False
        self.refreshes = 0

    def add_user(self, email: str, password: str) -> Identity:
        self.passwords[email] = password
        self.identities[email] = Identity(id=f"uid-{email}", email=email)
        return self.identities[email]

    def on_auth_state_change(self, callback):
        subscription = FakeSubscription(self, callback)
        self.subscribers.append(subscription)
        return subscription

    async def _emit(self, event, session):
        self.session = session
        for subscription in list(self.subscribers):
            await subscription.callback(event, session)

    def _session_for(self, identity: Identity) -> AuthSession:
        return AuthSession(access_token=f"token-{identity.id}", refresh_token="refresh", user=identity)

    async def sign_up(self, email, password):
        self.calls.append("sign_up")
        if email in self.passwords:
            raise BackendException("User already registered", status_code=400)
        identity = self.add_user(email, password)
        if self.autoconfirm:
            await self._emit(AuthEvent.SIGNED_IN, self._session_for(identity))
        return identity

    async def sign_in_with_password(self, email, password):
        self.calls.append("sign_in")
        if self.passwords.get(email) != password:
            raise BackendException("Invalid login credentials", status_code=400)
        session = self._session_for(self.identities[email])
        await self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_out(self):
        self.calls.append("sign_out")
        try:
            if self.fail_sign_out:
                raise BackendException("network down")
        finally:
            await self._emit(AuthEvent.SIGNED_OUT, None)

    async def get_session(self):
        """Refreshes an expired session first, like the SDK does."""
        self.calls.append("get_session")
        if self.session is not None and self.expired:
            self.expired = False
            if self.refresh_fails:
                await self._emit(AuthEvent.SIGNED_OUT, None)
                raise BackendException("Invalid Refresh Token: Refresh Token Not Found", status_code=400)
            return await self._refreshed()
        return self.session

    async def _refreshed(self):
        self.refreshes += 1
        session = AuthSession(
            access_token=f"token-{self.session.user.id}-{self.refreshes}", refresh_token="refresh", user=self.session.user
        )
        await self._emit(AuthEvent.TOKEN_REFRESHED, session)
        return session

    async def refresh_session(self):
        self.calls.append("refresh")
        if self.session is None:
            raise BackendException("Auth session missing!", status_code=401)
        return await self._refreshed()


class FakeAdminGateway:
    def __init__(self, auth: Optional[FakeAuthGateway] = None):
        self.auth = auth
        self.created: List[Dict[str, Any]] = []
        self.fail = False

    async def create_user(self, email, password, email_confirm=True, user_metadata=None):
        if self.fail:
            raise BackendException("A user with this email address has already been registered", status_code=422)
        self.created.append(
            {"email": email, "password": password, "email_confirm": email_confirm, "user_metadata": user_metadata}
        )
        if self.auth is not None:
            return self.auth.add_user(email, password)
        return Identity(id=f"uid-{email}", email=email)


class FakeRoleRepository:
    def __init__(self, rows: Optional[List[RoleAssignment]] = None):
        self.rows: List[RoleAssignment] = list(rows or [])
        self.calls: List[str] = []
        self.fail_reads = False
        self.fail_writes = False

    def grant(self, user_id: str, role: Role) -> None:
        self.rows.append(RoleAssignment(user_id=user_id, role=role))

    async def roles_for(self, user_id):
        self.calls.append("roles_for")
        if self.fail_reads:
            raise BackendException("permission denied for table user_roles", status_code=403)
        return [row for row in self.rows if row.user_id == user_id]

    async def list_all(self):
        self.calls.append("list_all")
        return list(self.rows)

    async def any_with_role(self, role):
        return any(row.role == role for row in self.rows)

    async def assign(self, user_id, role):
        self.calls.append("assign")
        if self.fail_writes:
            raise BackendException("new row violates row-level security policy", status_code=403)
        row = RoleAssignment(user_id=user_id, role=role)
        self.rows.append(row)
        return row

    async def set_role(self, user_id, role):
        self.calls.append("set_role")
        self.rows = [
            RoleAssignment(user_id=row.user_id, role=role) if row.user_id == user_id else row for row in self.rows
        ]

    async def delete_for(self, user_id):
        self.calls.append("delete_for")
        self.rows = [row for row in self.rows if row.user_id != user_id]


class FakeProfileRepository:
    def __init__(self, profiles: Optional[List[Profile]] = None):
        self.profiles: Dict[str, Profile] = {p.id: p for p in profiles or []}
        self.fail_writes = False

    async def list_all(self):
        return list(self.profiles.values())

    async def create(self, id, username):
        if self.fail_writes:
            raise BackendException("duplicate key value violates unique constraint", status_code=409)
        profile = Profile(id=id, username=username, created_at=datetime.now(timezone.utc))
        self.profiles[id] = profile
        return profile

    async def delete(self, id):
        self.profiles.pop(id, None)


class InMemoryInventoryRepository:
    """Assigns ids and timestamps the way the table does."""

    def __init__(self):
        self.rows: Dict[int, InventoryItem] = {}
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.calls: List[str] = []
        self.fail: set = set()

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail:
            raise BackendException(f"{operation} failed: permission denied", status_code=403)

    def seed(self, **values) -> InventoryItem:
        item_id = next(self._ids)
        item = InventoryItem.model_validate(
            {"id": item_id, "created_at": self._tick(), "created_by": "uid-seed", **values}
        )
        self.rows[item_id] = item
        return item

    async def list_recent(self):
        self._check("list_recent")
        return sorted(self.rows.values(), key=lambda item: item.created_at, reverse=True)

    async def get_by_id(self, id):
        return self.rows.get(id)

    async def list(self):
        return list(self.rows.values())

    async def create(self, values):
        self._check("create")
        item_id = next(self._ids)
        now = self._tick()
        item = InventoryItem.model_validate({**values, "id": item_id, "created_at": now, "updated_at": now})
        self.rows[item_id] = item
        return item

    async def update(self, id, values):
        self._check("update")
        if id not in self.rows:
            raise EntityNotFoundException(f"inventory_items {id} not found")
        item = InventoryItem.model_validate({**self.rows[id].model_dump(), **values})
        self.rows[id] = item
        return item

    async def delete(self, id):
        self._check("delete")
        self.rows.pop(id, None)


class FakePhotoStorage:
    def __init__(self):
        self.uploads: List[Dict[str, Any]] = []
        self.fail_on: Optional[Viewpoint] = None

    async def upload(self, viewpoint, extension, content, content_type=None):
        if viewpoint == self.fail_on:
            raise PhotoUploadException("File upload failed: The object exceeded the maximum allowed size")
        name = f"{viewpoint.value}/photo-{len(self.uploads) + 1}.{extension}"
        self.uploads.append({"viewpoint": viewpoint, "path": name, "size": len(content)})
        return f"https://example.supabase.co/storage/v1/object/public/inventory_images/{name}"
