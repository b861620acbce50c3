"""FastAPI application — main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from asset_vista.application.services.seed_service import seed_demo_accounts
from asset_vista.application.services.session_store import SessionStore
from asset_vista.application.session_registry import BrowserSession, SessionRegistry, TrustedRepositories
from asset_vista.config import get_settings
from asset_vista.core.exceptions import AppError, app_error_handler, global_exception_handler
from asset_vista.core.logging import configure_logging
from asset_vista.core.middleware import setup_middleware
from asset_vista.infrastructure.repositories.inventory_repository import SupabaseInventoryRepository
from asset_vista.infrastructure.repositories.photo_storage import SupabasePhotoStorage
from asset_vista.infrastructure.repositories.user_repository import SupabaseProfileRepository, SupabaseRoleRepository
from asset_vista.infrastructure.supabase.auth import SupabaseAdminGateway, SupabaseAuthGateway
from asset_vista.infrastructure.supabase.client import create_service_client, create_session_client
from asset_vista.interfaces.api.auth import router as auth_router
from asset_vista.interfaces.api.dashboard import router as dashboard_router
from asset_vista.interfaces.api.inventory import router as inventory_router
from asset_vista.interfaces.api.users import router as users_router

settings = get_settings()

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — backend clients, browser sessions, demo data."""
    logger.info("Starting Asset Vista...", env=settings.ENVIRONMENT, supabase_url=settings.SUPABASE_URL)

    async def new_browser_session(session_id: str) -> BrowserSession:
        client = await create_session_client(settings)
        return BrowserSession(
            id=session_id,
            store=SessionStore(SupabaseAuthGateway(client), SupabaseRoleRepository(client), settings),
            inventory=SupabaseInventoryRepository(client),
            photos=SupabasePhotoStorage(client, settings.STORAGE_BUCKET),
        )

    service = await create_service_client(settings)
    app.state.registry = SessionRegistry(new_browser_session, idle_ttl=settings.SESSION_IDLE_TTL_SECONDS)
    app.state.trusted = TrustedRepositories(
        auth_admin=SupabaseAdminGateway(service),
        roles=SupabaseRoleRepository(service),
        profiles=SupabaseProfileRepository(service),
    )

    if settings.SEED_DEMO_ACCOUNTS:
        demo_client = await create_session_client(settings)
        await seed_demo_accounts(
            app.state.trusted.auth_admin, SupabaseAuthGateway(demo_client), app.state.trusted.roles, settings
        )

    yield

    await app.state.registry.shutdown()
    logger.info("Asset Vista stopped")


app = FastAPI(
    title="Asset Vista — Inventory Management",
    description="Physical asset inventory backed by Supabase auth, tables and storage",
    version="1.0.0",
    lifespan=lifespan,
)

setup_middleware(app)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(inventory_router)
app.include_router(dashboard_router)
app.include_router(users_router)


@app.get("/")
def root():
    return {
        "name": "Asset Vista",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
