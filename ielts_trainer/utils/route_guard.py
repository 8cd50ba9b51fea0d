"""
Route guard: who may reach which page
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from starlette.responses import Response

from ielts_trainer.config import settings
from ielts_trainer.exceptions import AuthenticationError, AuthProviderError
from ielts_trainer.schemas.auth import AuthSession, AuthUser
from ielts_trainer.services.auth_service import AuthProvider

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "sb-access-token"
REFRESH_COOKIE = "sb-refresh-token"
VERIFIER_COOKIE = "sb-code-verifier"

LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"
AUTH_ENTRY_PATHS = {"/login", "/signup"}
PROTECTED_PREFIXES = ("/dashboard", "/practice", "/favorites", "/wrong-book", "/logout")


class GuardDecision(str, Enum):
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_HOME = "redirect_home"


@dataclass
class ResolvedSession:
    user: Optional[AuthUser] = None
    refreshed: Optional[AuthSession] = None  # New tokens to send back, if refreshed


def normalize_path(path: str) -> str:
    """Ignore trailing slashes so /dashboard/ and /dashboard match"""
    return path.rstrip("/") or "/"


def is_protected(path: str) -> bool:
    if path == "/":
        return True
    return any(path == prefix or path.startswith(prefix + "/") for prefix in PROTECTED_PREFIXES)


def decide(path: str, has_session: bool) -> GuardDecision:
    path = normalize_path(path)
    if has_session and path in AUTH_ENTRY_PATHS:
        return GuardDecision.REDIRECT_HOME
    if not has_session and is_protected(path):
        return GuardDecision.REDIRECT_LOGIN
    if has_session and path == "/":
        return GuardDecision.REDIRECT_HOME
    return GuardDecision.ALLOW


class RouteGuard:
    """
    Resolves the request's session and decides allow / redirect

    Absent or rejected sessions are redirected (fail closed). A missing auth
    configuration or an auth provider outage lets the request through
    (fail open); pages that need a user still send it to the login page.
    """

    def __init__(self, auth: Optional[AuthProvider]):
        self.auth = auth

    def resolve(self, access_token: Optional[str], refresh_token: Optional[str]) -> ResolvedSession:
        """
        Raises:
            AuthProviderError: the provider could not be asked
        """
        if access_token:
            try:
                return ResolvedSession(user=self.auth.get_user(access_token))
            except AuthenticationError:
                logger.info("Access token rejected")

        if refresh_token:
            try:
                session = self.auth.refresh_session(refresh_token)
                logger.info(f"Session refreshed for user {session.user.id}")
                return ResolvedSession(user=session.user, refreshed=session)
            except AuthenticationError:
                logger.info("Refresh token rejected")

        return ResolvedSession()

    def check(
        self,
        path: str,
        access_token: Optional[str],
        refresh_token: Optional[str],
    ) -> Tuple[GuardDecision, ResolvedSession]:
        if self.auth is None:
            logger.warning(f"Auth not configured; allowing {path}")
            return GuardDecision.ALLOW, ResolvedSession()

        try:
            session = self.resolve(access_token, refresh_token)
        except AuthProviderError as e:
            logger.error(f"Session check failed, allowing {path}: {str(e)}")
            return GuardDecision.ALLOW, ResolvedSession()

        return decide(path, session.user is not None), session


def set_session_cookies(response: Response, session: AuthSession) -> None:
    response.set_cookie(
        ACCESS_COOKIE,
        session.access_token,
        max_age=session.expires_in,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    response.set_cookie(
        REFRESH_COOKIE,
        session.refresh_token,
        max_age=60 * 60 * 24 * 30,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_COOKIE)
    response.delete_cookie(REFRESH_COOKIE)
