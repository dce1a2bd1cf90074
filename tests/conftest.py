from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from idempotency_token.api.app import create_app
from idempotency_token.config.settings import get_settings


class FakeClock:
    """Relógio controlável para testar expiração sem sleep."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("BUSINESS_DELAY_SECONDS", "0")
    monkeypatch.setenv("TOKEN_STORE_BACKEND", "memory")
    get_settings.cache_clear()
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()
