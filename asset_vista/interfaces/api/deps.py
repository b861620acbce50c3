"""FastAPI dependencies — browser session lookup and role guards."""

from typing import Optional

from fastapi import Depends, Request

from asset_vista.application.services.inventory_service import InventoryRecordService
from asset_vista.application.session_registry import BrowserSession, SessionRegistry, TrustedRepositories
from asset_vista.config import Settings, get_settings
from asset_vista.core.exceptions import ForbiddenException, UnauthorizedException


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_trusted(request: Request) -> TrustedRepositories:
    return request.app.state.trusted


async def get_browser_session(
    request: Request,
    registry: SessionRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
) -> Optional[BrowserSession]:
    return await registry.get(request.cookies.get(settings.SESSION_COOKIE_NAME))


async def require_user(browser: Optional[BrowserSession] = Depends(get_browser_session)) -> BrowserSession:
    """Any signed-in identity, with or without a role row. Expiring tokens are refreshed first."""
    if browser is not None:
        await browser.store.revalidate()
    if browser is None or browser.store.guard() is not None:
        raise UnauthorizedException("Sign in required", details={"redirect": "/auth"})
    return browser


def require_admin(browser: BrowserSession = Depends(require_user)) -> BrowserSession:
    redirect = browser.store.guard(require_admin=True)
    if redirect is not None:
        raise ForbiddenException("Only admins can access this resource", details={"redirect": redirect.value})
    return browser


def get_inventory_service(
    browser: BrowserSession = Depends(require_user),
    settings: Settings = Depends(get_settings),
) -> InventoryRecordService:
    return InventoryRecordService(
        browser.inventory,
        browser.photos,
        browser.store.current_identity,
        settings=settings,
        deletion=browser.deletion,
        save_guard=browser.save_guard,
    )
