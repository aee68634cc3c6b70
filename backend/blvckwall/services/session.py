"""Session and identity handling.

State machine::

    unauthenticated -> authenticating -> authenticated
    authenticated -> refreshing -> authenticated | expired -> unauthenticated
"""

import logging
import math
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from uuid import NAMESPACE_URL, uuid5

import httpx
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from supabase import AuthError, AuthRetryableError, Client

from ..errors import BlvckwallError, RateLimited, StoreUnavailable, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SESSION_TIMEOUT_SECONDS = 24 * 60 * 60
MAX_LOGIN_ATTEMPTS = 5
ATTEMPT_WINDOW_SECONDS = 60.0


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Owner:
    id: str
    email: Optional[str] = None
    is_demo: bool = False


DEMO_OWNER = Owner(id="demo-user-id", email="demo@blvckwall.ai", is_demo=True)


@dataclass
class AuthResult:
    user_id: str
    email: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    # Absolute epoch seconds, when the backend dictates it
    expires_at: Optional[float] = None


@dataclass
class Session:
    owner: Owner
    expires_at: float
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


def validate_credentials(email: str, password: str) -> List[str]:
    errors = []
    if not email or not EMAIL_RE.match(email):
        errors.append("Invalid email format")
    password = password or ""
    if len(password) < 8:
        errors.append("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain an uppercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain a number")
    return errors


class LoginRateLimiter:
    """At most ``max_attempts`` per email inside any moving ``window`` seconds."""

    def __init__(self, max_attempts: int = MAX_LOGIN_ATTEMPTS, window: float = ATTEMPT_WINDOW_SECONDS) -> None:
        self.item = RateLimitItemPerSecond(max_attempts, max(1, math.ceil(window)))
        self.limiter = MovingWindowRateLimiter(MemoryStorage())

    def check(self, email: str) -> None:
        """Record an attempt, or raise RateLimited without recording it."""
        key = email.strip().lower()
        if self.limiter.hit(self.item, "login", key):
            return
        stats = self.limiter.get_window_stats(self.item, "login", key)
        retry_after = max(0.0, stats.reset_time - time.time())
        logger.warning(f"Rate limit exceeded for {key}")
        raise RateLimited("Too many login attempts. Please try again later.", retry_after=retry_after)


class DemoAuthBackend:
    """Accepts any well-formed credentials.

    The owner id is derived from the email so signing in again on the same
    device maps to the same local data.
    """

    def sign_in(self, email: str, password: str) -> AuthResult:
        user_id = str(uuid5(NAMESPACE_URL, f"blvckwall:{email.strip().lower()}"))
        return AuthResult(user_id=user_id, email=email)

    def refresh(self, session: Session) -> AuthResult:
        return AuthResult(user_id=session.owner.id, email=session.owner.email or "")

    def sign_out(self, session: Session) -> None:
        pass


class SupabaseAuthBackend:
    def __init__(self, client: Client) -> None:
        self.client = client

    @staticmethod
    def _result(res) -> AuthResult:
        if not res.user or not res.session:
            raise Unauthorized("Authentication backend returned no session")
        return AuthResult(
            user_id=res.user.id,
            email=res.user.email or "",
            access_token=res.session.access_token,
            refresh_token=res.session.refresh_token,
            expires_at=float(res.session.expires_at) if res.session.expires_at else None,
        )

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            res = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthRetryableError as e:
            raise StoreUnavailable(f"Authentication backend unreachable: {e.message}") from e
        except AuthError as e:
            raise Unauthorized(e.message or "Invalid login credentials") from e
        except httpx.HTTPError as e:
            raise StoreUnavailable(f"Authentication backend unreachable: {str(e)}") from e
        return self._result(res)

    def refresh(self, session: Session) -> AuthResult:
        if not session.refresh_token:
            raise Unauthorized("Session has no refresh token")
        try:
            res = self.client.auth.refresh_session(session.refresh_token)
        except AuthRetryableError as e:
            raise StoreUnavailable(f"Authentication backend unreachable: {e.message}") from e
        except AuthError as e:
            raise Unauthorized(e.message or "Session refresh rejected") from e
        except httpx.HTTPError as e:
            raise StoreUnavailable(f"Authentication backend unreachable: {str(e)}") from e
        return self._result(res)

    def sign_out(self, session: Session) -> None:
        try:
            self.client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            raise StoreUnavailable(f"Sign-out not confirmed by backend: {str(e)}") from e


class SessionProvider:
    def __init__(self, auth_backend, local_store, rate_limiter: Optional[LoginRateLimiter] = None,
                 session_timeout: float = SESSION_TIMEOUT_SECONDS, clock: Callable[[], float] = time.time) -> None:
        self.auth_backend = auth_backend
        self.local_store = local_store
        self.clock = clock
        self.rate_limiter = rate_limiter or LoginRateLimiter()
        self.session_timeout = session_timeout
        self.session: Optional[Session] = None
        self.state = SessionState.UNAUTHENTICATED

    def _transition(self, state: SessionState) -> None:
        if state != self.state:
            logger.info(f"Session {self.state.value} -> {state.value}")
        self.state = state

    def _expiry(self, result: AuthResult) -> float:
        return result.expires_at or (self.clock() + self.session_timeout)

    def login(self, email: str, password: str) -> Owner:
        violations = validate_credentials(email, password)
        if violations:
            raise ValidationError(violations)
        self.rate_limiter.check(email)

        if self.session is not None:
            self.logout()
        self._transition(SessionState.AUTHENTICATING)
        try:
            result = self.auth_backend.sign_in(email, password)
        except BlvckwallError:
            self._transition(SessionState.UNAUTHENTICATED)
            raise
        owner = Owner(id=result.user_id, email=result.email or email)
        self.session = Session(
            owner=owner,
            expires_at=self._expiry(result),
            access_token=result.access_token,
            refresh_token=result.refresh_token,
        )
        self._transition(SessionState.AUTHENTICATED)
        logger.info(f"Login successful for {email}")
        return owner

    def logout(self, clear_local: bool = False) -> None:
        """End the session and drop this owner's key material from memory.

        With ``clear_local`` the owner's whole local store is wiped as well.
        Other owners on the same device are never touched.
        """
        session = self.session
        self.session = None
        self._transition(SessionState.UNAUTHENTICATED)
        if session is None:
            return
        try:
            self.auth_backend.sign_out(session)
        except StoreUnavailable as e:
            logger.warning(f"Logged out locally, backend sign-out failed: {e.message}")
        if clear_local:
            self.local_store.clear(session.owner.id)
        else:
            self.local_store.codec.forget(session.owner.id)
        logger.info(f"Logged out owner {session.owner.id}")

    def is_session_expired(self) -> bool:
        if self.session is None:
            return True
        return self.clock() > self.session.expires_at

    def current_owner(self) -> Optional[Owner]:
        if self.session is None:
            return None
        if self.is_session_expired():
            self._transition(SessionState.EXPIRED)
            return None
        return self.session.owner

    def refresh(self) -> Owner:
        """Attempt exactly one refresh; on failure the session is logged out."""
        if self.session is None:
            raise Unauthorized("No session to refresh")
        self._transition(SessionState.REFRESHING)
        try:
            result = self.auth_backend.refresh(self.session)
        except BlvckwallError as e:
            logger.warning(f"Session refresh failed, forcing logout: {e.message}")
            self._transition(SessionState.EXPIRED)
            self.logout()
            raise Unauthorized("Session expired, please sign in again") from e
        self.session.expires_at = self._expiry(result)
        self.session.access_token = result.access_token or self.session.access_token
        self.session.refresh_token = result.refresh_token or self.session.refresh_token
        self._transition(SessionState.AUTHENTICATED)
        return self.session.owner

    def refresh_session_if_needed(self) -> Optional[Owner]:
        if self.session is None:
            return None
        if not self.is_session_expired():
            return self.session.owner
        logger.info("Session expired, attempting refresh")
        return self.refresh()

    def resolve_owner_or_demo(self) -> Owner:
        if self.session is not None and self.is_session_expired():
            try:
                self.refresh_session_if_needed()
            except Unauthorized:
                logger.warning("Session could not be refreshed, continuing as demo owner")
        return self.current_owner() or DEMO_OWNER

    def to_dict(self) -> Dict[str, Any]:
        owner = self.current_owner()
        return {
            "state": self.state.value,
            "authenticated": owner is not None,
            "user": {"id": owner.id, "email": owner.email} if owner else None,
            "expires_at": self.session.expires_at if self.session else None,
        }
