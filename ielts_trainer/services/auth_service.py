"""
Passwordless email-link authentication against the backend's auth REST API

Sign-in uses the PKCE flow: a code verifier is generated when the link is
requested, and the code from the link is exchanged together with it.
"""
import base64
import hashlib
import logging
import secrets
from typing import Any, Dict, Optional, Tuple

import requests

from ielts_trainer.config import settings
from ielts_trainer.exceptions import AuthenticationError, AuthProviderError
from ielts_trainer.schemas.auth import AuthSession, AuthUser

logger = logging.getLogger(__name__)


def generate_pkce_pair() -> Tuple[str, str]:
    """Return (code_verifier, code_challenge) using the S256 method"""
    verifier = secrets.token_urlsafe(48)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge


class AuthProvider:
    """Thin client for the auth endpoints used by the app"""

    def __init__(self, base_url: str, anon_key: str, timeout: int = 10, http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.http = http or requests.Session()

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Content-Type": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        access_token: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/auth/v1/{path}"
        try:
            response = self.http.request(
                method,
                url,
                headers=self._headers(access_token),
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Auth request failed: {method} {path}: {str(e)}")
            raise AuthProviderError(f"Auth provider unreachable: {e}") from e

        if response.status_code in (400, 401, 403, 422):
            raise AuthenticationError(self._error_message(response))
        if response.status_code == 429:
            raise AuthenticationError("Too many requests to the auth provider, try again later")
        if response.status_code >= 500:
            raise AuthProviderError(f"Auth provider error {response.status_code} on {path}")
        if response.status_code >= 300:
            raise AuthProviderError(f"Unexpected auth response {response.status_code} on {path}")

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise AuthProviderError(f"Auth provider returned invalid JSON on {path}") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"Authentication failed ({response.status_code})"
        return (
            body.get("msg")
            or body.get("error_description")
            or body.get("message")
            or f"Authentication failed ({response.status_code})"
        )

    def send_magic_link(self, email: str, redirect_to: str) -> str:
        """
        Email a one-time sign-in link

        New addresses get an account automatically.

        Returns:
            The PKCE code verifier to keep until the callback
        """
        verifier, challenge = generate_pkce_pair()
        self._request(
            "POST",
            "otp",
            params={"redirect_to": redirect_to},
            json={
                "email": email,
                "create_user": True,
                "code_challenge": challenge,
                "code_challenge_method": "s256",
            },
        )
        logger.info(f"Sign-in link requested for {email}")
        return verifier

    def exchange_code_for_session(self, code: str, code_verifier: str) -> AuthSession:
        body = self._request(
            "POST",
            "token",
            params={"grant_type": "pkce"},
            json={"auth_code": code, "code_verifier": code_verifier},
        )
        return self._parse_session(body)

    def refresh_session(self, refresh_token: str) -> AuthSession:
        body = self._request(
            "POST",
            "token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return self._parse_session(body)

    def get_user(self, access_token: str) -> AuthUser:
        body = self._request("GET", "user", access_token=access_token)
        try:
            return AuthUser(id=body["id"], email=body.get("email"))
        except (KeyError, ValueError) as e:
            raise AuthProviderError("Malformed user payload from auth provider") from e

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "logout", access_token=access_token)

    @staticmethod
    def _parse_session(body: Dict[str, Any]) -> AuthSession:
        try:
            return AuthSession(
                access_token=body["access_token"],
                refresh_token=body["refresh_token"],
                expires_in=body.get("expires_in", 3600),
                user=AuthUser(id=body["user"]["id"], email=body["user"].get("email")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise AuthProviderError("Malformed session payload from auth provider") from e


def build_auth_provider() -> Optional[AuthProvider]:
    """Auth provider from settings, or None when not configured"""
    if not settings.auth_configured:
        logger.warning("Auth provider URL/key not configured; sessions cannot be checked")
        return None
    return AuthProvider(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        timeout=settings.AUTH_TIMEOUT_SECONDS,
    )


# Global instance (None when unconfigured)
auth_provider = build_auth_provider()


def get_auth_provider() -> Optional[AuthProvider]:
    return auth_provider
