"""Account service — self sign-up with a server-assigned role.

The browser never writes its own role row: after the credentials exist the
service inserts the baseline `user` role and the profile with the trusted
(service-role) repositories.
"""

import structlog

from asset_vista.application.services.session_store import AuthResult, SessionStore
from asset_vista.core.exceptions import BackendException
from asset_vista.domain.models.user import Role
from asset_vista.domain.repositories.user_repository import ProfileRepository, RoleRepository
from asset_vista.domain.schemas.auth import SignUpRequest

logger = structlog.get_logger(__name__)


async def sign_up(
    store: SessionStore,
    roles: RoleRepository,
    profiles: ProfileRepository,
    request: SignUpRequest,
) -> AuthResult:
    result = await store.sign_up(request.email, request.password, request.confirm_password)
    if not result.ok or result.identity is None:
        return result

    user_id = result.identity.id

    # The account already exists; failures below are reported, not rolled back.
    try:
        await roles.assign(user_id, Role.USER)
    except BackendException as e:
        logger.warning("Error setting user role", user_id=user_id, error=e.message)
        result.warnings.append(f"Error setting user role: {e.message}")

    try:
        await profiles.create(user_id, request.full_name or request.email.split("@")[0])
    except BackendException as e:
        logger.warning("Error creating profile", user_id=user_id, error=e.message)
        result.warnings.append(f"Error creating profile: {e.message}")

    return result
