import os
from datetime import datetime, timedelta

import pytest

os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from relaydrop.infra.kv_store import KeyValueStore
from relaydrop.services.relay_service import RelayService
from relaydrop.services.relay_store import RelayStore
from relaydrop.services.session_registry import SessionRegistry


class FakeClock:
    def __init__(self, start=datetime(2026, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv(tmp_path, clock):
    store = KeyValueStore.from_url(f"sqlite:///{tmp_path / 'relay.db'}", clock=clock)
    yield store
    store.engine.dispose()


@pytest.fixture
def relay_store(kv):
    return RelayStore(kv)


@pytest.fixture
def registry(kv):
    return SessionRegistry(kv, session_ttl_seconds=1800)


@pytest.fixture
def service(registry, relay_store):
    return RelayService(registry, relay_store, message_ttl_seconds=600)


@pytest.fixture
def client(service):
    from fastapi.testclient import TestClient

    from relaydrop.api.deps import get_relay_service
    from relaydrop.main import app

    app.dependency_overrides[get_relay_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def plain(text="hello"):
    return {"version": 1, "encrypted": False, "text": text}


def encrypted(**overrides):
    message = {
        "version": 1,
        "encrypted": True,
        "kdf": "PBKDF2",
        "hash": "SHA-256",
        "iterations": 200000,
        "salt_b64": "c2FsdHNhbHRzYWx0c2FsdA==",
        "iv_b64": "aXZpdml2aXZpdml2",
        "ciphertext_b64": "Y2lwaGVydGV4dA==",
    }
    message.update(overrides)
    return message
