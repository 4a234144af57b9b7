"""Identity provider adapters.

The ledger only needs a handful of calls from the identity provider: password
sign-in, one-time-code verification, token resolution, sign-out and, on the
backend, account creation. ``IdentityProvider`` and ``IdentityAdmin`` describe
those calls; ``SupabaseAuth`` and ``SupabaseAdmin`` implement them over the
provider's REST API with ``requests``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from ledger.errors import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    name: str = ""


@dataclass(frozen=True)
class AuthSession:
    identity: Identity
    access_token: str


class IdentityProvider(Protocol):
    def sign_in(self, email: str, password: str) -> AuthSession: ...

    def verify_otp(self, email: str, code: str) -> AuthSession: ...

    def get_user(self, access_token: str) -> Identity: ...

    def sign_out(self, access_token: str) -> None: ...


class IdentityAdmin(Protocol):
    def create_user(self, email: str, password: str, name: str) -> Identity: ...

    def resolve(self, access_token: str) -> Optional[Identity]: ...


def identity_from_user(user: dict) -> Identity:
    meta = user.get("user_metadata") or {}
    return Identity(id=str(user["id"]), email=user.get("email", ""), name=meta.get("name", ""))


def _error_message(resp: requests.Response, default: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return default
    if not isinstance(body, dict):
        return default
    return body.get("error_description") or body.get("msg") or body.get("message") or default


class _SupabaseClient:

    def __init__(self, base_url: str, api_key: str, http: requests.Session | None = None,
                 timeout: float | None = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.http = http or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/auth/v1/{path}"

    def _headers(self, bearer: str | None = None) -> dict:
        headers = {"apikey": self.api_key}
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return headers

    def _request(self, method: str, path: str, default_error: str, bearer: str | None = None,
                 **kwargs) -> dict:
        try:
            resp = self.http.request(
                method, self._url(path), headers=self._headers(bearer), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise AuthError(f"{default_error}: {e}") from e
        if not resp.ok:
            raise AuthError(_error_message(resp, default_error))
        return resp.json() if resp.content else {}


class SupabaseAuth(_SupabaseClient):
    """Client-side calls, authenticated with the project's anonymous key."""

    def _session(self, body: dict) -> AuthSession:
        token = body.get("access_token")
        if not token:
            raise AuthError("No session returned")
        return AuthSession(identity=identity_from_user(body["user"]), access_token=token)

    def sign_in(self, email: str, password: str) -> AuthSession:
        body = self._request(
            "POST", "token?grant_type=password", "Sign in failed",
            json={"email": email, "password": password},
        )
        return self._session(body)

    def verify_otp(self, email: str, code: str) -> AuthSession:
        body = self._request(
            "POST", "verify", "Verification failed",
            json={"type": "email", "email": email, "token": code},
        )
        return self._session(body)

    def get_user(self, access_token: str) -> Identity:
        return identity_from_user(self._request("GET", "user", "Session expired", bearer=access_token))

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "logout", "Sign out failed", bearer=access_token)


class SupabaseAdmin(_SupabaseClient):
    """Backend calls, authenticated with the service role key."""

    def create_user(self, email: str, password: str, name: str) -> Identity:
        body = self._request(
            "POST", "admin/users", "Failed to create user", bearer=self.api_key,
            json={
                "email": email,
                "password": password,
                "user_metadata": {"name": name or ""},
                # no mail server is configured for confirmation links
                "email_confirm": True,
            },
        )
        return identity_from_user(body)

    def resolve(self, access_token: str) -> Optional[Identity]:
        if not access_token:
            return None
        try:
            return identity_from_user(self._request("GET", "user", "Unauthorized", bearer=access_token))
        except AuthError as e:
            logger.debug("Token rejected: %s", e)
            return None
