"""
Supabase implementations of the Role and Profile repositories.
"""

from typing import List, Optional

from supabase import AsyncClient

from asset_vista.domain.models.user import Profile, Role, RoleAssignment
from asset_vista.infrastructure.repositories.base_repository import SupabaseRepository
from asset_vista.infrastructure.supabase.errors import backend_call

ROLES_TABLE = "user_roles"
PROFILES_TABLE = "profiles"


class SupabaseRoleRepository:
    """user_roles has no surrogate key worth exposing; rows are addressed by user_id."""

    def __init__(self, client: AsyncClient):
        self.client = client

    def query(self):
        return self.client.table(ROLES_TABLE)

    async def roles_for(self, user_id: str) -> List[RoleAssignment]:
        with backend_call("select", table=ROLES_TABLE, user_id=user_id):
            response = await self.query().select("user_id, role").eq("user_id", user_id).execute()
        return [RoleAssignment.model_validate(row) for row in response.data]

    async def list_all(self) -> List[RoleAssignment]:
        with backend_call("select", table=ROLES_TABLE):
            response = await self.query().select("user_id, role").execute()
        return [RoleAssignment.model_validate(row) for row in response.data]

    async def any_with_role(self, role: Role) -> bool:
        with backend_call("select", table=ROLES_TABLE, role=role.value):
            response = await self.query().select("user_id").eq("role", role.value).limit(1).execute()
        return bool(response.data)

    async def assign(self, user_id: str, role: Role) -> RoleAssignment:
        with backend_call("insert", table=ROLES_TABLE, user_id=user_id):
            response = await self.query().insert({"user_id": user_id, "role": role.value}).execute()
        return RoleAssignment.model_validate(response.data[0]) if response.data else RoleAssignment(user_id=user_id, role=role)

    async def set_role(self, user_id: str, role: Role) -> None:
        with backend_call("update", table=ROLES_TABLE, user_id=user_id):
            await self.query().update({"role": role.value}).eq("user_id", user_id).execute()

    async def delete_for(self, user_id: str) -> None:
        with backend_call("delete", table=ROLES_TABLE, user_id=user_id):
            await self.query().delete().eq("user_id", user_id).execute()


class SupabaseProfileRepository(SupabaseRepository[Profile]):
    table_name = PROFILES_TABLE

    def __init__(self, client: AsyncClient):
        super().__init__(client, Profile)

    async def list_all(self) -> List[Profile]:
        with backend_call("select", table=PROFILES_TABLE):
            response = await self.query().select("id, username, created_at").execute()
        return [Profile.model_validate(row) for row in response.data]

    async def create(self, id: str, username: Optional[str]) -> Profile:
        return await super().create({"id": id, "username": username})
