from __future__ import annotations

from pathlib import Path

import pytest

from shipment_tracker.config import BringSettings, TrackerSettings
from shipment_tracker.data_providers import TransportError

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


class FakeProvider:
    """Returns a canned body and remembers what it was asked for."""

    def __init__(self, body: str = "", error: Exception | None = None) -> None:
        self.body = body
        self.error = error
        self.calls = []

    def fetch(self, url, options):
        self.calls.append((url, options))
        if self.error is not None:
            raise self.error
        return self.body


class FakeAsyncProvider(FakeProvider):
    async def fetch(self, url, options):
        return super().fetch(url, options)


@pytest.fixture
def settings():
    return TrackerSettings(bring=BringSettings(api_uid="shop@example.com", api_key="secret-key"))


@pytest.fixture
def failing_provider():
    return FakeProvider(error=TransportError("connection refused by 10.0.0.1:443"))
