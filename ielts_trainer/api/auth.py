"""
Sign-in, sign-in callback and sign-out endpoints
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from ielts_trainer.config import settings
from ielts_trainer.exceptions import AuthenticationError, AuthProviderError, RateLimitExceeded
from ielts_trainer.schemas.auth import LoginRequest, LoginResponse
from ielts_trainer.services.auth_service import AuthProvider, get_auth_provider
from ielts_trainer.utils.rate_limiter import rate_limiter
from ielts_trainer.utils.round_store import RoundStore, get_round_store
from ielts_trainer.utils.route_guard import (
    ACCESS_COOKIE, HOME_PATH, LOGIN_PATH, VERIFIER_COOKIE,
    clear_session_cookies, set_session_cookies,
)

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


def site_url(request: Request) -> str:
    return (settings.SITE_URL or str(request.base_url)).rstrip("/")


@router.get("/login")
async def login_page():
    """Login page: a single email field"""
    return {
        "page": "login",
        "message": "Enter your email address and we will send you a sign-in link.",
        "note": "Addresses that are not registered get an account automatically.",
    }


@router.post("/login", response_model=LoginResponse)
async def request_login_link(
    payload: LoginRequest,
    request: Request,
    response: Response,
    auth: Optional[AuthProvider] = Depends(get_auth_provider)
):
    """
    Email a passwordless sign-in link

    - Rate limited per client address and per email
    - Keeps the PKCE verifier in a short-lived cookie for the callback
    """
    if auth is None:
        raise HTTPException(status_code=503, detail="Sign-in is not available right now")

    client_host = request.client.host if request.client else "unknown"
    try:
        rate_limiter.check(f"ip:{client_host}", f"email:{payload.email.lower()}")
    except RateLimitExceeded as e:
        raise HTTPException(
            status_code=429,
            detail={
                "error": "rate_limit_exceeded",
                "message": str(e),
                "retry_after": e.retry_after
            }
        )

    try:
        verifier = await run_in_threadpool(
            auth.send_magic_link, payload.email, f"{site_url(request)}/auth/callback"
        )
    except AuthenticationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthProviderError as e:
        logger.error(f"Failed to send sign-in link: {str(e)}")
        raise HTTPException(status_code=502, detail="Could not send the sign-in link, please try again")

    response.set_cookie(
        VERIFIER_COOKIE,
        verifier,
        max_age=3600,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return LoginResponse(message="Sign-in link sent! Check your inbox.", email=payload.email)


@router.get("/auth/callback")
async def auth_callback(
    request: Request,
    code: Optional[str] = None,
    auth: Optional[AuthProvider] = Depends(get_auth_provider)
):
    """Exchange the link's one-time code for a session"""
    verifier = request.cookies.get(VERIFIER_COOKIE)
    if not code or not verifier or auth is None:
        return RedirectResponse(LOGIN_PATH, status_code=303)

    try:
        session = await run_in_threadpool(auth.exchange_code_for_session, code, verifier)
    except (AuthenticationError, AuthProviderError) as e:
        logger.warning(f"Code exchange failed: {str(e)}")
        response = RedirectResponse(LOGIN_PATH, status_code=303)
        response.delete_cookie(VERIFIER_COOKIE)
        return response

    logger.info(f"User signed in: {session.user.id}")
    response = RedirectResponse(HOME_PATH, status_code=303)
    set_session_cookies(response, session)
    response.delete_cookie(VERIFIER_COOKIE)
    return response


@router.post("/logout")
async def logout(
    request: Request,
    auth: Optional[AuthProvider] = Depends(get_auth_provider),
    store: RoundStore = Depends(get_round_store)
):
    """Sign out at the provider, drop the practice round and clear cookies"""
    token = request.cookies.get(ACCESS_COOKIE)
    user = getattr(request.state, "user", None)
    if user is not None:
        store.clear(user.id)

    if auth is not None and token:
        try:
            await run_in_threadpool(auth.sign_out, token)
        except (AuthenticationError, AuthProviderError) as e:
            logger.warning(f"Sign-out at provider failed: {str(e)}")

    response = RedirectResponse(LOGIN_PATH, status_code=303)
    clear_session_cookies(response)
    return response
