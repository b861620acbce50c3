"""Browser sessions held by the service.

The browser only keeps an opaque cookie; everything a single-page app would
keep in memory (auth tokens, the session store, a staged deletion, the
in-flight save flag) lives in a BrowserSession here. Sessions idle for
longer than the configured TTL are evicted.
"""

import asyncio
import secrets
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

import structlog

from asset_vista.application.services.inventory_service import DeletionStage, SaveGuard
from asset_vista.application.services.session_store import SessionStore
from asset_vista.domain.repositories.auth_gateway import AdminAuthGateway, PhotoStorage
from asset_vista.domain.repositories.inventory_repository import InventoryRepository
from asset_vista.domain.repositories.user_repository import ProfileRepository, RoleRepository

logger = structlog.get_logger(__name__)


@dataclass
class BrowserSession:
    id: str
    store: SessionStore
    inventory: InventoryRepository
    photos: PhotoStorage
    deletion: DeletionStage = field(default_factory=DeletionStage)
    save_guard: SaveGuard = field(default_factory=SaveGuard)
    last_seen: float = 0.0


@dataclass
class TrustedRepositories:
    """Service-role access, used for role assignment and user administration."""
    auth_admin: AdminAuthGateway
    roles: RoleRepository
    profiles: ProfileRepository


SessionFactory = Callable[[str], Awaitable[BrowserSession]]


class SessionRegistry:
    def __init__(
        self,
        factory: SessionFactory,
        idle_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._idle_ttl = idle_ttl
        self._clock = clock
        self._sessions: Dict[str, BrowserSession] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def _expired(self, now: float) -> List[BrowserSession]:
        """Pop every idle session. Caller holds the lock."""
        if self._idle_ttl is None:
            return []
        stale = [s for s in self._sessions.values() if now - s.last_seen > self._idle_ttl]
        for session in stale:
            del self._sessions[session.id]
        return stale

    async def _close(self, sessions: List[BrowserSession]) -> None:
        for session in sessions:
            await session.store.shutdown()
        if sessions:
            logger.info("Idle browser sessions evicted", count=len(sessions))

    async def get(self, session_id: Optional[str]) -> Optional[BrowserSession]:
        if not session_id:
            return None
        now = self._clock()
        async with self._lock:
            stale = self._expired(now)
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_seen = now
        await self._close(stale)
        return session

    async def create(self) -> BrowserSession:
        session = await self._factory(secrets.token_urlsafe(32))
        await session.store.init()
        now = self._clock()
        session.last_seen = now
        async with self._lock:
            stale = self._expired(now)
            self._sessions[session.id] = session
        await self._close(stale)
        return session

    async def discard(self, session_id: str) -> None:
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            await session.store.shutdown()

    async def shutdown(self) -> None:
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.store.shutdown()
        logger.info("Browser sessions closed", count=len(sessions))
