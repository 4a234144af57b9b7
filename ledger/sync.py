"""Sync gateway between the entity store and the backend API.

While signed in, every store mutation pushes the whole collection of the
mutated kind (full replace, last write wins). Push failures are logged and
dropped; the in-memory store stays authoritative for the session. Sign-in,
sign-up and fetch failures are raised to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import requests

from ledger.domain import (
    Category,
    Expense,
    DEFAULT_CATEGORIES,
    category_from_dict,
    category_to_dict,
    expense_from_dict,
    expense_to_dict,
)
from ledger.errors import AuthError, SyncError, ValidationError
from ledger.events import CATEGORIES_CHANGED, EXPENSES_CHANGED, Event
from ledger.identity import AuthSession, Identity, IdentityProvider
from ledger.store import EntityStore
from ledger.validation import check_signup

logger = logging.getLogger(__name__)

CATEGORIES = "categories"
EXPENSES = "expenses"


class SessionContext:
    """Signed-in identity and bearer token; both None while signed out."""

    def __init__(self):
        self.identity: Optional[Identity] = None
        self.access_token: Optional[str] = None

    @property
    def signed_in(self) -> bool:
        return self.identity is not None and bool(self.access_token)

    def open(self, session: AuthSession) -> None:
        self.identity = session.identity
        self.access_token = session.access_token

    def close(self) -> None:
        self.identity = None
        self.access_token = None


@dataclass(frozen=True)
class PendingSignup:
    """Account created; the one-time code still has to be verified."""
    user_id: str
    email: str
    message: str


def _body(resp: requests.Response) -> dict:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class SyncGateway:

    def __init__(
        self,
        store: EntityStore,
        provider: IdentityProvider,
        api_url: str,
        anon_key: str = "",
        http: requests.Session | None = None,
        timeout: float | None = None,
        context: SessionContext | None = None,
    ):
        self.store = store
        self.provider = provider
        self.api_url = api_url.rstrip("/")
        self.anon_key = anon_key
        self.http = http or requests.Session()
        self.timeout = timeout
        self.context = context or SessionContext()

        store.subscribe(CATEGORIES_CHANGED, self._on_change)
        store.subscribe(EXPENSES_CHANGED, self._on_change)

    @property
    def signed_in(self) -> bool:
        return self.context.signed_in

    @property
    def identity(self) -> Optional[Identity]:
        return self.context.identity

    # session lifecycle

    def sign_in(self, email: str, password: str) -> Identity:
        try:
            session = self.provider.sign_in(email, password)
        except AuthError:
            logger.info("Sign in rejected for %s", email)
            raise
        return self._open(session)

    def verify_otp(self, email: str, code: str) -> Identity:
        return self._open(self.provider.verify_otp(email, code))

    def resume(self, access_token: str) -> Identity:
        identity = self.provider.get_user(access_token)
        return self._open(AuthSession(identity=identity, access_token=access_token))

    def sign_up(self, email: str, password: str, name: str = "") -> PendingSignup:
        checked = check_signup(email, password)
        if checked.is_left():
            raise ValidationError(checked.get_error())

        try:
            resp = self.http.post(
                self._url("signup"),
                json={"email": email, "password": password, "name": name},
                headers={"Authorization": f"Bearer {self.anon_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(f"Failed to create account: {e}") from e

        body = _body(resp)
        if resp.status_code == 400:
            raise ValidationError(body.get("error") or "Failed to create account")
        if not resp.ok:
            raise AuthError(body.get("error") or "Failed to create account")

        user = body.get("user") or {}
        logger.info("Account created for %s, awaiting verification", email)
        return PendingSignup(
            user_id=str(user.get("id", "")),
            email=user.get("email", email),
            message=body.get("message", ""),
        )

    def sign_out(self) -> None:
        token = self.context.access_token
        email = self.context.identity.email if self.context.identity else None
        self.context.close()
        if token:
            try:
                self.provider.sign_out(token)
            except AuthError as e:
                logger.warning("Token revocation failed: %s", e)
        self.store.reset()
        logger.info("Signed out %s", email or "")

    def _open(self, session: AuthSession) -> Identity:
        categories, expenses = self.fetch(session.access_token)
        # replacing must not push into a previous account
        self.context.close()
        # first run: nothing stored remotely yet, keep the template
        self.store.replace(categories or DEFAULT_CATEGORIES, expenses)
        self.context.open(session)
        logger.info(
            "Signed in as %s (%d categories, %d expenses)",
            session.identity.email, len(self.store.categories), len(self.store.expenses),
        )
        return session.identity

    # transport

    def fetch(self, access_token: str | None = None) -> Tuple[List[Category], List[Expense]]:
        token = access_token or self.context.access_token
        if not token:
            raise AuthError("Not signed in")
        categories = [category_from_dict(d) for d in self._get(CATEGORIES, token)]
        expenses = [expense_from_dict(d) for d in self._get(EXPENSES, token)]
        return categories, expenses

    def push(self, kind: str) -> bool:
        """Send the whole collection of ``kind``; False when skipped or failed."""
        if not self.signed_in:
            return False
        if kind == CATEGORIES:
            payload = [category_to_dict(c) for c in self.store.categories]
        elif kind == EXPENSES:
            payload = [expense_to_dict(e) for e in self.store.expenses]
        else:
            raise ValueError(f"Unknown collection {kind!r}")

        try:
            self._post(kind, payload)
        except SyncError as e:
            logger.warning("Push of %s failed: %s", kind, e)
            return False
        logger.debug("Pushed %d %s", len(payload), kind)
        return True

    def _on_change(self, event: Event, payload: dict) -> dict:
        kind = CATEGORIES if event.name == CATEGORIES_CHANGED else EXPENSES
        return {"pushed": self.push(kind)}

    def _url(self, path: str) -> str:
        return f"{self.api_url}/{path}"

    def _auth(self, token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    def _get(self, kind: str, token: str) -> list:
        try:
            resp = self.http.get(self._url(kind), headers=self._auth(token), timeout=self.timeout)
        except requests.RequestException as e:
            raise SyncError(f"Failed to fetch {kind}: {e}", kind=kind) from e
        if resp.status_code == 401:
            raise AuthError("Unauthorized")
        if not resp.ok:
            raise SyncError(f"Failed to fetch {kind}", kind=kind, status=resp.status_code)
        return _body(resp).get(kind) or []

    def _post(self, kind: str, payload: list) -> None:
        try:
            resp = self.http.post(
                self._url(kind),
                json={kind: payload},
                headers=self._auth(self.context.access_token),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise SyncError(str(e), kind=kind) from e
        if not resp.ok:
            raise SyncError(
                _body(resp).get("error") or f"HTTP {resp.status_code}",
                kind=kind, status=resp.status_code,
            )
