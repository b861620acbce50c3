"""Demo accounts for local development."""

import structlog

from asset_vista.config import Settings
from asset_vista.core.exceptions import BackendException
from asset_vista.domain.models.user import Role
from asset_vista.domain.repositories.auth_gateway import AdminAuthGateway, AuthGateway
from asset_vista.domain.repositories.user_repository import RoleRepository

logger = structlog.get_logger(__name__)


async def seed_demo_accounts(
    auth_admin: AdminAuthGateway,
    demo_login: AuthGateway,
    roles: RoleRepository,
    settings: Settings,
) -> None:
    """Create the demo admin and user when missing. Failures never stop startup."""
    try:
        if await roles.any_with_role(Role.ADMIN):
            logger.info("Admin account already exists")
        else:
            admin = await auth_admin.create_user(settings.DEMO_ADMIN_EMAIL, settings.DEMO_ADMIN_PASSWORD)
            await roles.assign(admin.id, Role.ADMIN)
            logger.info("Admin account created", email=settings.DEMO_ADMIN_EMAIL)
    except BackendException as e:
        logger.error("Error creating admin account", error=e.message)

    try:
        await demo_login.sign_in_with_password(settings.DEMO_USER_EMAIL, settings.DEMO_USER_PASSWORD)
    except BackendException:
        try:
            user = await auth_admin.create_user(settings.DEMO_USER_EMAIL, settings.DEMO_USER_PASSWORD)
            await roles.assign(user.id, Role.USER)
            logger.info("User account created", email=settings.DEMO_USER_EMAIL)
        except BackendException as e:
            logger.error("Error creating user account", error=e.message)
    else:
        logger.info("User account already exists")
        try:
            await demo_login.sign_out()
        except BackendException as e:
            logger.warning("Could not close the demo sign-in session", error=e.message)
