"""Supabase Auth adapters over the supabase SDK.

One SupabaseAuthGateway wraps the AsyncClient of one browser session. The
SDK notifies its listeners synchronously from inside its own calls; the
gateway queues those notifications and delivers them to its async
subscribers once the SDK call that raised them has returned.
"""

from typing import Any, Dict, List, Optional, Tuple

import structlog
from supabase import AsyncClient

from asset_vista.core.exceptions import BackendException
from asset_vista.domain.models.user import AuthSession, Identity
from asset_vista.domain.repositories.auth_gateway import AuthEvent, AuthStateCallback
from asset_vista.infrastructure.supabase.errors import backend_call

logger = structlog.get_logger(__name__)


def to_session(session: Any) -> Optional[AuthSession]:
    return AuthSession.model_validate(session, from_attributes=True) if session is not None else None


def to_identity(user: Any) -> Identity:
    return Identity.model_validate(user, from_attributes=True)


class AuthSubscription:
    def __init__(self, gateway: "SupabaseAuthGateway", callback: AuthStateCallback):
        self._gateway = gateway
        self.callback = callback

    def unsubscribe(self) -> None:
        self._gateway._remove_subscriber(self)


class SupabaseAuthGateway:
    """Session-holding auth client of one browser session."""

    def __init__(self, client: AsyncClient):
        self.client = client
        self._subscribers: List[AuthSubscription] = []
        self._pending: List[Tuple[AuthEvent, Optional[AuthSession]]] = []
        self._sdk_subscription = client.auth.on_auth_state_change(self._queue)

    def _queue(self, event: str, session: Any) -> None:
        try:
            auth_event = AuthEvent(event)
        except ValueError:
            logger.debug("Auth event ignored", auth_event=event)
            return
        self._pending.append((auth_event, to_session(session)))

    def on_auth_state_change(self, callback: AuthStateCallback) -> AuthSubscription:
        subscription = AuthSubscription(self, callback)
        self._subscribers.append(subscription)
        return subscription

    def _remove_subscriber(self, subscription: AuthSubscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)

    async def _deliver(self) -> None:
        while self._pending:
            event, session = self._pending.pop(0)
            for subscription in list(self._subscribers):
                try:
                    await subscription.callback(event, session)
                except Exception:
                    logger.exception("Auth state subscriber failed", auth_event=event.value)

    async def sign_up(self, email: str, password: str) -> Identity:
        try:
            with backend_call("sign_up", email=email):
                response = await self.client.auth.sign_up({"email": email, "password": password})
        finally:
            await self._deliver()
        if response.user is None:
            raise BackendException("Sign-up returned no user", details={"email": email})
        return to_identity(response.user)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            with backend_call("sign_in", email=email):
                response = await self.client.auth.sign_in_with_password({"email": email, "password": password})
        finally:
            await self._deliver()
        return to_session(response.session)

    async def refresh_session(self) -> AuthSession:
        try:
            with backend_call("refresh_session"):
                response = await self.client.auth.refresh_session()
        finally:
            await self._deliver()
        return to_session(response.session)

    async def get_session(self) -> Optional[AuthSession]:
        """The current session. The SDK refreshes it first when the access token is about to expire."""
        try:
            with backend_call("get_session"):
                session = await self.client.auth.get_session()
        finally:
            await self._deliver()
        return to_session(session)

    async def sign_out(self) -> None:
        try:
            with backend_call("sign_out"):
                await self.client.auth.sign_out()
        except BackendException:
            # the provider call failed before the SDK dropped the session
            self._pending.append((AuthEvent.SIGNED_OUT, None))
            raise
        finally:
            await self._deliver()


class SupabaseAdminGateway:
    """Privileged auth calls. Needs a client built with the service-role key."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = True,
        user_metadata: Optional[Dict[str, Any]] = None,
    ) -> Identity:
        with backend_call("admin.create_user", email=email):
            response = await self.client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": email_confirm,
                    "user_metadata": user_metadata or {},
                }
            )
        return to_identity(response.user)
