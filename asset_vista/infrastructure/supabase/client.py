"""Supabase client factories.

Every browser session gets its own AsyncClient: the SDK keeps one auth
session per client and sends that session's access token with table and
storage calls, so the backend's row-level security applies to them. The
service client uses the service-role key and never holds a user session.
"""

from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from asset_vista.config import Settings


def _options(settings: Settings, persist_session: bool) -> AsyncClientOptions:
    # tokens are refreshed on demand by get_session(), not by background timers
    return AsyncClientOptions(
        auto_refresh_token=False,
        persist_session=persist_session,
        postgrest_client_timeout=settings.HTTP_TIMEOUT_SECONDS,
        storage_client_timeout=int(settings.HTTP_TIMEOUT_SECONDS),
    )


async def create_session_client(settings: Settings) -> AsyncClient:
    """Client acting as one signed-in (or anonymous) browser session."""
    return await acreate_client(
        settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, options=_options(settings, persist_session=True)
    )


async def create_service_client(settings: Settings) -> AsyncClient:
    """Trusted client using the service-role key. Never handed to a browser session."""
    return await acreate_client(
        settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY, options=_options(settings, persist_session=False)
    )
