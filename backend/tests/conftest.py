"""Pytest configuration and fixtures."""

import os

import pytest

# Unit tests never talk to Supabase or the live providers
os.environ.setdefault("SUPABASE_URL", "")
os.environ.setdefault("PROVIDER_MODE", "demo")
os.environ.setdefault("LOCAL_STORE_PATH", "")

from fastapi.testclient import TestClient  # noqa: E402

from blvckwall.api.deps import build_runtime  # noqa: E402
from blvckwall.config import ProviderMode, Settings  # noqa: E402
from blvckwall.db import InMemoryRecordStore  # noqa: E402
from blvckwall.main import create_app  # noqa: E402
from blvckwall.services.crypto import EncryptionCodec  # noqa: E402
from blvckwall.services.data_access import DataAccessFacade  # noqa: E402
from blvckwall.services.local_backends import InMemoryKeyValueBackend  # noqa: E402
from blvckwall.services.local_store import LocalDurableStore, LocalRecordStore  # noqa: E402
from blvckwall.services.session import DemoAuthBackend, LoginRateLimiter, SessionProvider  # noqa: E402

PASSWORD = "Secret123"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv_backend():
    return InMemoryKeyValueBackend()


@pytest.fixture
def codec(kv_backend):
    return EncryptionCodec(kv_backend)


@pytest.fixture
def local_store(kv_backend, codec):
    return LocalDurableStore(kv_backend, codec)


@pytest.fixture
def records(local_store):
    return LocalRecordStore(local_store)


@pytest.fixture
def remote():
    return InMemoryRecordStore()


@pytest.fixture
def sessions(local_store, clock):
    return SessionProvider(DemoAuthBackend(), local_store, rate_limiter=LoginRateLimiter(), clock=clock)


@pytest.fixture
def facade(sessions, remote, records):
    return DataAccessFacade(sessions, remote, records)


@pytest.fixture
def settings():
    return Settings(_env_file=None, supabase_url=None, provider_mode=ProviderMode.DEMO)


@pytest.fixture
def runtime(settings, remote, kv_backend, clock):
    return build_runtime(settings, remote=remote, kv_backend=kv_backend, clock=clock)


@pytest.fixture
def client(runtime):
    """Create a test client."""
    return TestClient(create_app(runtime))
