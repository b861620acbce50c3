"""User management API routes — admins only."""

from typing import List

from fastapi import APIRouter, Depends, status

from asset_vista.application.services import user_service
from asset_vista.application.session_registry import TrustedRepositories
from asset_vista.config import Settings, get_settings
from asset_vista.domain.schemas.auth import RegisterUserRequest, UserWithRole
from asset_vista.interfaces.api.deps import get_trusted, require_admin

router = APIRouter(prefix="/api/users", tags=["Users"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[UserWithRole])
async def list_users(trusted: TrustedRepositories = Depends(get_trusted)):
    return await user_service.list_users(trusted.roles, trusted.profiles)


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_user(
    body: RegisterUserRequest,
    trusted: TrustedRepositories = Depends(get_trusted),
    settings: Settings = Depends(get_settings),
):
    result = await user_service.register_user(
        trusted.auth_admin, trusted.roles, trusted.profiles, body, settings
    )
    return {
        "message": f"User {body.email} registered successfully as {result.role.value}",
        "id": result.identity.id,
        "role": result.role.value,
        "warnings": result.warnings,
    }


@router.post("/{user_id}/role-toggle")
async def toggle_role(user_id: str, trusted: TrustedRepositories = Depends(get_trusted)):
    new_role = await user_service.toggle_role(trusted.roles, user_id)
    return {"message": f"User role updated to {new_role.value}", "role": new_role.value}


@router.delete("/{user_id}")
async def delete_user(user_id: str, trusted: TrustedRepositories = Depends(get_trusted)):
    await user_service.delete_user(trusted.roles, trusted.profiles, user_id)
    return {"message": "User deleted successfully"}
