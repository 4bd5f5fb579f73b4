from __future__ import annotations

from typing import Any

import httpx
import pytest
from django.core.cache import cache
from django.test import Client


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def api_client() -> Client:
    return Client()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def json_response():
    def build(payload: Any, status_code: int = 200, url: str = "https://example.test") -> httpx.Response:
        return httpx.Response(status_code, json=payload, request=httpx.Request("GET", url))

    return build


@pytest.fixture(autouse=True)
def _isolate_state():
    from fuel_tracker import views
    from fuel_tracker.services import pricing

    cache.clear()
    views._trip_calculator = None
    pricing._shared_resolver = None
    yield
    cache.clear()
    views._trip_calculator = None
    pricing._shared_resolver = None
