"""User service — admin-side listing, role toggling, removal and registration."""

from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from asset_vista.application.services.session_store import grants_admin, is_valid_email
from asset_vista.config import Settings, get_settings
from asset_vista.core.exceptions import BackendException, EntityNotFoundException, ValidationFailedException
from asset_vista.domain.models.user import Identity, Role
from asset_vista.domain.repositories.auth_gateway import AdminAuthGateway
from asset_vista.domain.repositories.user_repository import ProfileRepository, RoleRepository
from asset_vista.domain.schemas.auth import RegisterUserRequest, UserWithRole

logger = structlog.get_logger(__name__)


@dataclass
class RegistrationResult:
    identity: Identity
    role: Role
    warnings: List[str] = field(default_factory=list)


async def list_users(roles: RoleRepository, profiles: ProfileRepository) -> List[UserWithRole]:
    """Profiles joined with their role. Profiles without a role row are left out."""
    assignments = await roles.list_all()
    by_user = {}
    for assignment in assignments:
        by_user.setdefault(assignment.user_id, []).append(assignment)

    users = []
    for profile in await profiles.list_all():
        rows = by_user.get(profile.id)
        if not rows:
            continue
        users.append(
            UserWithRole(
                id=profile.id,
                email=profile.username or "No email",
                created_at=profile.created_at,
                role=Role.ADMIN if grants_admin(rows) else Role.USER,
                username=profile.username,
            )
        )
    return users


async def toggle_role(roles: RoleRepository, user_id: str) -> Role:
    rows = await roles.roles_for(user_id)
    if not rows:
        raise EntityNotFoundException(f"User {user_id} has no role assignment")

    new_role = Role.USER if grants_admin(rows) else Role.ADMIN
    await roles.set_role(user_id, new_role)
    logger.info("User role updated", user_id=user_id, role=new_role.value)
    return new_role


async def delete_user(roles: RoleRepository, profiles: ProfileRepository, user_id: str) -> None:
    """Remove the role rows and the profile. The auth account itself stays."""
    await roles.delete_for(user_id)
    await profiles.delete(user_id)
    logger.info("User deleted", user_id=user_id)


async def register_user(
    auth_admin: AdminAuthGateway,
    roles: RoleRepository,
    profiles: ProfileRepository,
    request: RegisterUserRequest,
    settings: Optional[Settings] = None,
) -> RegistrationResult:
    settings = settings or get_settings()

    if not request.email or not request.password:
        raise ValidationFailedException("Please fill in all required fields")
    if not is_valid_email(request.email):
        raise ValidationFailedException("Please enter a valid email address")
    if len(request.password) < settings.ADMIN_MIN_PASSWORD_LENGTH:
        raise ValidationFailedException(
            f"Password must be at least {settings.ADMIN_MIN_PASSWORD_LENGTH} characters long"
        )

    identity = await auth_admin.create_user(
        request.email,
        request.password,
        email_confirm=True,
        user_metadata={"full_name": request.full_name or ""},
    )
    result = RegistrationResult(identity=identity, role=request.role)

    try:
        await roles.assign(identity.id, request.role)
    except BackendException as e:
        logger.warning("Error setting user role", user_id=identity.id, error=e.message)
        result.warnings.append(f"User created but there was an issue setting the role: {e.message}")

    if request.full_name:
        try:
            await profiles.create(identity.id, request.full_name)
        except BackendException as e:
            logger.error("Error creating profile", user_id=identity.id, error=e.message)

    logger.info("User registered", user_id=identity.id, role=request.role.value)
    return result
