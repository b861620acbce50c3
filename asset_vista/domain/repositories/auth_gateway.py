"""
Auth provider and object store interfaces.
"""

import enum
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from asset_vista.domain.models.inventory_item import Viewpoint
from asset_vista.domain.models.user import AuthSession, Identity


class AuthEvent(str, enum.Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


AuthStateCallback = Callable[[AuthEvent, Optional[AuthSession]], Awaitable[None]]


class Subscription(Protocol):
    def unsubscribe(self) -> None:
        ...


class AuthGateway(Protocol):
    """Session-holding client of the auth provider. Raises BackendException on failure."""

    async def sign_up(self, email: str, password: str) -> Identity:
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        ...

    async def sign_out(self) -> None:
        ...

    async def get_session(self) -> Optional[AuthSession]:
        ...

    async def refresh_session(self) -> AuthSession:
        ...

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        ...


class AdminAuthGateway(Protocol):
    """Privileged auth calls made with the service-role key."""

    async def create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = True,
        user_metadata: Optional[Dict[str, Any]] = None,
    ) -> Identity:
        ...


class PhotoStorage(Protocol):
    """Object store bucket holding inventory photos."""

    async def upload(self, viewpoint: Viewpoint, extension: str, content: bytes, content_type: Optional[str] = None) -> str:
        """Store the photo under a fresh unique name and return its public URL."""
        ...
