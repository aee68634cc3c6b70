import logging
import secrets
import threading
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request

from ..config import Settings, get_settings
from ..db import create_auth_client, get_remote_store
from ..services.data_access import DataAccessFacade
from ..services.local_backends import get_kv_backend
from ..services.local_store import LocalDurableStore, LocalRecordStore
from ..services.providers import Providers, build_providers
from ..services.session import (
    DemoAuthBackend,
    LoginRateLimiter,
    SessionProvider,
    SupabaseAuthBackend,
)

logger = logging.getLogger(__name__)

SESSION_COOKIE = "blvckwall_session"


class Runtime:
    """Process-wide collaborators shared by every request.

    Sessions are tracked per ``blvckwall_session`` cookie; the login rate
    limiter and the local store are shared by all of them.
    """

    def __init__(self, settings: Settings, remote, local_store: LocalDurableStore, providers: Providers,
                 auth_factory: Callable[[], Any], clock: Callable[[], float] = time.time) -> None:
        self.settings = settings
        self.remote = remote
        self.local_store = local_store
        self.records = LocalRecordStore(local_store)
        self.providers = providers
        self.auth_factory = auth_factory
        self.clock = clock
        self.rate_limiter = LoginRateLimiter(
            max_attempts=settings.login_max_attempts,
            window=settings.login_window_seconds,
        )
        # Only signed-in sessions are kept; anonymous requests get a throwaway provider
        self.sessions: Dict[str, SessionProvider] = {}
        self._lock = threading.Lock()

    def new_session(self) -> SessionProvider:
        return SessionProvider(
            self.auth_factory(),
            self.local_store,
            rate_limiter=self.rate_limiter,
            session_timeout=self.settings.session_timeout_seconds,
            clock=self.clock,
        )

    def _is_stale(self, provider: SessionProvider) -> bool:
        session = provider.session
        # An expired session may still be refreshed for one more timeout period
        return session is None or self.clock() > session.expires_at + provider.session_timeout

    def session_for(self, session_id: Optional[str]) -> Optional[SessionProvider]:
        """Return the signed-in provider behind ``session_id``, if any."""
        with self._lock:
            provider = self.sessions.get(session_id) if session_id else None
            if provider is not None and self._is_stale(provider):
                del self.sessions[session_id]
                return None
            return provider

    def register(self, session_id: Optional[str], provider: SessionProvider) -> str:
        """Keep ``provider`` after a login and return the id of its cookie."""
        with self._lock:
            if session_id and self.sessions.get(session_id) is provider:
                return session_id
            for sid in [sid for sid, p in self.sessions.items() if self._is_stale(p)]:
                del self.sessions[sid]
            session_id = secrets.token_urlsafe(24)
            self.sessions[session_id] = provider
            return session_id

    def evict(self, session_id: Optional[str]) -> None:
        with self._lock:
            if session_id:
                self.sessions.pop(session_id, None)


def build_runtime(settings: Optional[Settings] = None, remote=None, kv_backend=None,
                  providers: Optional[Providers] = None, clock: Callable[[], float] = time.time) -> Runtime:
    settings = settings or get_settings()
    if remote is None:
        remote = get_remote_store(settings)
    if kv_backend is None:
        kv_backend = get_kv_backend(settings.local_store_path)
    if providers is None:
        providers = build_providers(settings)

    if settings.remote_configured:
        def auth_factory():
            return SupabaseAuthBackend(create_auth_client(settings))
    else:
        logger.warning("Supabase auth not configured, sign-in accepts any well-formed credentials")
        auth_factory = DemoAuthBackend

    return Runtime(settings, remote, LocalDurableStore(kv_backend), providers, auth_factory, clock=clock)


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


def get_session(request: Request, runtime: Runtime = Depends(get_runtime)) -> SessionProvider:
    return runtime.session_for(request.cookies.get(SESSION_COOKIE)) or runtime.new_session()


def get_facade(session: SessionProvider = Depends(get_session),
               runtime: Runtime = Depends(get_runtime)) -> DataAccessFacade:
    return DataAccessFacade(session, runtime.remote, runtime.records)


def get_providers(runtime: Runtime = Depends(get_runtime)) -> Providers:
    return runtime.providers


def record_action(facade: DataAccessFacade, providers: Providers, entry_type: str, action: str,
                  title: str, resource_id: Optional[str] = None,
                  details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Log a provider action to the activity feed and the audit ledger."""
    owner = facade.sessions.resolve_owner_or_demo()
    facade.log_activity(action, title, metadata={"resource_id": resource_id, **(details or {})})
    return providers.ledger.record(entry_type, action, owner.id, resource_id=resource_id, details=details)

