"""Auth API routes — sign-up, sign-in, sign-out, me."""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from asset_vista.application.services import account_service
from asset_vista.application.services.session_store import AuthResult, SessionStore
from asset_vista.application.session_registry import BrowserSession, SessionRegistry, TrustedRepositories
from asset_vista.config import Settings, get_settings
from asset_vista.domain.schemas.auth import AuthResponse, IdentityRead, SessionRead, SignInRequest, SignUpRequest
from asset_vista.interfaces.api.deps import get_browser_session, get_registry, get_trusted

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _to_response(result: AuthResult, store: SessionStore) -> AuthResponse:
    return AuthResponse(
        identity=IdentityRead.model_validate(result.identity) if result.identity else None,
        is_admin=store.is_admin if result.ok else False,
        destination=result.destination.value if result.destination else None,
        error=result.error,
        warnings=result.warnings,
    )


def _set_cookie(response: Response, browser: BrowserSession, settings: Settings) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        browser.id,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


@router.post("/sign-up", response_model=AuthResponse)
async def sign_up(
    body: SignUpRequest,
    response: Response,
    browser: Optional[BrowserSession] = Depends(get_browser_session),
    registry: SessionRegistry = Depends(get_registry),
    trusted: TrustedRepositories = Depends(get_trusted),
    settings: Settings = Depends(get_settings),
):
    created = browser is None
    if browser is None:
        browser = await registry.create()

    result = await account_service.sign_up(browser.store, trusted.roles, trusted.profiles, body)
    if not result.ok:
        response.status_code = status.HTTP_400_BAD_REQUEST

    # providers without email confirmation sign the new account in right away
    if browser.store.current_identity is not None:
        _set_cookie(response, browser, settings)
    elif created:
        await registry.discard(browser.id)
    return _to_response(result, browser.store)


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in(
    body: SignInRequest,
    response: Response,
    browser: Optional[BrowserSession] = Depends(get_browser_session),
    registry: SessionRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    created = browser is None
    if browser is None:
        browser = await registry.create()

    result = await browser.store.sign_in(body.email, body.password)
    if result.ok:
        _set_cookie(response, browser, settings)
    else:
        response.status_code = status.HTTP_401_UNAUTHORIZED
        if created:
            await registry.discard(browser.id)
    return _to_response(result, browser.store)


@router.post("/sign-out")
async def sign_out(
    response: Response,
    browser: Optional[BrowserSession] = Depends(get_browser_session),
    registry: SessionRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    destination = "/auth"
    if browser is not None:
        destination = (await browser.store.sign_out()).value
        await registry.discard(browser.id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"destination": destination}


@router.get("/me", response_model=SessionRead)
async def me(browser: Optional[BrowserSession] = Depends(get_browser_session)):
    if browser is None:
        return SessionRead(identity=None, state="anonymous", is_loading=False, is_admin=False)

    store = browser.store
    await store.revalidate()
    identity = store.current_identity
    return SessionRead(
        identity=IdentityRead.model_validate(identity) if identity else None,
        state=store.state.value,
        is_loading=store.is_loading,
        is_admin=store.is_admin,
    )
