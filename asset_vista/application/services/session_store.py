"""Session/role store — who is signed in, and whether they hold admin.

One store exists per browser session. It subscribes to the auth gateway's
state changes on init() and unsubscribes on shutdown(); every protected
endpoint reads it synchronously.

Two authorization policies apply and they deliberately disagree on missing
data:

- base access fails open: a signed-in identity with zero role rows is a
  regular user;
- admin privilege fails closed: it is granted only by an explicit admin
  row, and stays False while the lookup is pending or after it failed.
"""

import enum
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import structlog

from asset_vista.config import Settings, get_settings
from asset_vista.core.exceptions import BackendException
from asset_vista.domain.models.user import AuthSession, Identity, Role, RoleAssignment
from asset_vista.domain.repositories.auth_gateway import AuthEvent, AuthGateway, Subscription
from asset_vista.domain.repositories.user_repository import RoleRepository

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class SessionState(str, enum.Enum):
    UNRESOLVED = "unresolved"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class Destination(str, enum.Enum):
    """Where the browser goes after an auth transition."""
    AUTH = "/auth"
    DEFAULT = "/"
    ADMIN_DASHBOARD = "/dashboard-admin"


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def has_base_access(identity: Optional[Identity], roles: Iterable[RoleAssignment] = ()) -> bool:
    """Fail open: any signed-in identity may use the app, role rows or not."""
    return identity is not None


def grants_admin(roles: Iterable[RoleAssignment]) -> bool:
    """Fail closed: only an explicit admin row grants admin, whatever else exists."""
    return any(assignment.role == Role.ADMIN for assignment in roles)


@dataclass
class AuthResult:
    identity: Optional[Identity] = None
    error: Optional[str] = None
    destination: Optional[Destination] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class SessionStore:
    def __init__(
        self,
        gateway: AuthGateway,
        roles: RoleRepository,
        settings: Optional[Settings] = None,
    ):
        self.gateway = gateway
        self.roles = roles
        self.settings = settings or get_settings()
        self._session: Optional[AuthSession] = None
        self._state = SessionState.UNRESOLVED
        self._is_admin = False
        self._pending = 0
        self._subscription: Optional[Subscription] = None

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._session.user if self._session else None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state is SessionState.UNRESOLVED or self._pending > 0

    @property
    def is_admin(self) -> bool:
        return self._is_admin

    async def init(self) -> None:
        """Subscribe to auth changes, then resolve the current session once."""
        if self._subscription is None:
            self._subscription = self.gateway.on_auth_state_change(self._on_auth_state_change)

        try:
            session = await self.gateway.get_session()
        except BackendException as e:
            logger.error("Could not resolve session", error=e.message)
            session = None
        await self._apply(session)

    async def shutdown(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def _on_auth_state_change(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        logger.debug("Auth state changed", auth_event=event.value)
        await self._apply(session)

    async def _apply(self, session: Optional[AuthSession]) -> None:
        self._session = session
        if session is None:
            self._state = SessionState.ANONYMOUS
            self._is_admin = False
            return

        self._state = SessionState.AUTHENTICATED
        self._is_admin = False
        user_id = session.user.id
        is_admin = await self._lookup_admin(user_id)

        # a sign-out or another sign-in may have landed while the lookup was in flight
        if self.current_identity is not None and self.current_identity.id == user_id:
            self._is_admin = is_admin

    async def _lookup_admin(self, user_id: str) -> bool:
        try:
            roles = await self.roles.roles_for(user_id)
        except BackendException as e:
            logger.error("Error checking admin status", user_id=user_id, error=e.message)
            return False

        is_admin = grants_admin(roles)
        logger.info("Admin check", user_id=user_id, is_admin=is_admin, role_rows=len(roles))
        return is_admin

    def _holds(self, session: AuthSession) -> bool:
        return self._session is not None and self._session.access_token == session.access_token

    @asynccontextmanager
    async def _busy(self):
        self._pending += 1
        try:
            yield
        finally:
            self._pending -= 1

    async def sign_up(self, email: str, password: str, confirm_password: Optional[str] = None) -> AuthResult:
        """Create credentials. Role and profile rows are the caller's job."""
        if not is_valid_email(email):
            return AuthResult(error="Please enter a valid email address")
        minimum = self.settings.MIN_PASSWORD_LENGTH
        if len(password) < minimum:
            return AuthResult(error=f"Password must be at least {minimum} characters long")
        if confirm_password is not None and confirm_password != password:
            return AuthResult(error="Passwords do not match")

        async with self._busy():
            try:
                identity = await self.gateway.sign_up(email, password)
            except BackendException as e:
                logger.warning("Sign-up failed", email=email, error=e.message)
                return AuthResult(error=e.message)

        logger.info("Account created", user_id=identity.id)
        return AuthResult(identity=identity)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        async with self._busy():
            try:
                session = await self.gateway.sign_in_with_password(email, password)
            except BackendException as e:
                logger.warning("Sign-in failed", email=email, error=e.message)
                return AuthResult(error=e.message)

            # without init() nobody heard the SIGNED_IN event
            if not self._holds(session):
                await self._apply(session)

        destination = Destination.ADMIN_DASHBOARD if self._is_admin else Destination.DEFAULT
        return AuthResult(identity=session.user, destination=destination)

    async def sign_out(self) -> Destination:
        async with self._busy():
            try:
                await self.gateway.sign_out()
            except BackendException as e:
                logger.warning("Sign-out call failed", error=e.message)
        await self._apply(None)
        return Destination.AUTH

    async def refresh(self) -> AuthResult:
        async with self._busy():
            try:
                session = await self.gateway.refresh_session()
            except BackendException as e:
                return AuthResult(error=e.message)
            if not self._holds(session):
                await self._apply(session)
        return AuthResult(identity=session.user)

    async def revalidate(self) -> SessionState:
        """Give the provider a chance to refresh an expiring token before the session is used.

        A refresh the provider refuses ends the session: the store goes
        anonymous rather than keep a token every backend call would reject.
        """
        if self._session is None:
            return self._state

        try:
            session = await self.gateway.get_session()
        except BackendException as e:
            logger.warning("Session refresh failed", user_id=self._session.user.id, error=e.message)
            session = None

        if session is None:
            await self._apply(None)
        elif not self._holds(session):
            await self._apply(session)
        return self._state

    def guard(self, require_admin: bool = False) -> Optional[Destination]:
        """None when the current identity may proceed, else where to send it."""
        if not has_base_access(self.current_identity):
            return Destination.AUTH
        if require_admin and not self._is_admin:
            return Destination.DEFAULT
        return None
