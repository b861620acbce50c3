"""
Role and Profile Repository Interfaces.
"""

from typing import List, Protocol

from asset_vista.domain.models.user import Profile, Role, RoleAssignment


class RoleRepository(Protocol):
    """Interface for user_roles operations."""

    async def roles_for(self, user_id: str) -> List[RoleAssignment]:
        """Every role row of one identity. Zero rows is a valid answer."""
        ...

    async def list_all(self) -> List[RoleAssignment]:
        ...

    async def any_with_role(self, role: Role) -> bool:
        """Whether at least one identity holds the role."""
        ...

    async def assign(self, user_id: str, role: Role) -> RoleAssignment:
        ...

    async def set_role(self, user_id: str, role: Role) -> None:
        """Rewrite every role row of the identity."""
        ...

    async def delete_for(self, user_id: str) -> None:
        ...


class ProfileRepository(Protocol):
    """Interface for profiles operations."""

    async def list_all(self) -> List[Profile]:
        ...

    async def create(self, id: str, username: str | None) -> Profile:
        ...

    async def delete(self, id: str) -> None:
        ...
